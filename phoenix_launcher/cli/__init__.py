"""Command-line helpers: output formatting and the argparse ``config`` command."""
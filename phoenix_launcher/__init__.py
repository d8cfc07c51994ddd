"""Launcher tools for Cataclysm: Dark Days Ahead: settings, application data and save backups."""

__version__ = "0.7.2"
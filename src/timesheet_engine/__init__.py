"""Fortnightly attendance, timesheet and invoicing engine."""

__version__ = "0.1.0"

"""Docent - project health checks and documentation reconciliation."""

__version__ = "0.1.0"

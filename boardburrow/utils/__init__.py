"""Shared utilities: logging setup, error types, calendar arithmetic and timers."""

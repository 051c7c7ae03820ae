"""
Configuration package for the BoardBurrow rental engine.

This package contains modules for managing application settings,
environment variables, and logging configuration.
"""

from boardburrow.config.settings import Settings

# Export settings singleton for app-wide use
settings = Settings()

__all__ = ["settings", "Settings"]

"""
Application settings and configuration.

This module provides a centralized configuration management system using Pydantic.
It loads settings from environment variables, .env files, or falls back to defaults.
"""

import os
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()

# Longest rental the booking model accepts
RENTAL_DAYS_LIMIT = 14

# Base directories
ROOT_DIR = Path(__file__).parent.parent.parent
LOG_DIR = Path(os.environ.get("BOARDBURROW_LOG_DIR", ROOT_DIR / "logs"))
DATA_DIR = Path(os.environ.get("BOARDBURROW_DATA_DIR", ROOT_DIR / "data"))


class StorageSettings(BaseModel):
    """Persistence backend configuration."""

    backend: str = Field(
        default="memory",
        description="Key-value backend: 'memory' or 'json'"
    )

    file_name: str = Field(
        default="boardburrow_state.json",
        description="File name of the JSON store inside the data directory"
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v):
        """Validate that the storage backend is known."""
        valid_backends = ["memory", "json"]
        if v.lower() not in valid_backends:
            raise ValueError(f"Storage backend must be one of {valid_backends}")
        return v.lower()


class RentalSettings(BaseModel):
    """Rental lifecycle configuration."""

    min_days: int = Field(default=1, description="Shortest rental in days")
    max_days: int = Field(default=14, description="Longest rental in days")

    confirmation_prefix: str = Field(
        default="BB",
        description="Two-letter prefix of confirmation codes"
    )

    pickup_reminder_lead_hours: int = Field(
        default=1,
        description="Hours before pickup at which the pickup reminder fires"
    )

    return_reminder_hour: int = Field(
        default=18,
        description="Local hour on the return day at which the return reminder fires"
    )

    pickup_address: str = Field(
        default="6386 Vineland Road, Orlando, Florida",
        description="Fixed pickup location shown on every rental"
    )

    default_pickup_offset_hours: int = Field(
        default=2,
        description="Default pickup time offered by the rental form, hours from now"
    )

    default_days: int = Field(default=2, description="Default rental length in the rental form")

    @field_validator("confirmation_prefix")
    @classmethod
    def validate_prefix(cls, v):
        """Validate that the prefix is two letters."""
        if len(v) != 2 or not v.isalpha():
            raise ValueError("Confirmation prefix must be exactly two letters")
        return v.upper()

    @field_validator("return_reminder_hour")
    @classmethod
    def validate_hour(cls, v):
        """Validate that the reminder hour is a clock hour."""
        if not 0 <= v <= 23:
            raise ValueError("Return reminder hour must be between 0 and 23")
        return v

    @model_validator(mode="after")
    def validate_day_range(self):
        """Validate that the day range fits inside what a rental can hold."""
        if not 1 <= self.min_days <= self.max_days <= RENTAL_DAYS_LIMIT:
            raise ValueError(
                f"Rental days must satisfy 1 <= min_days <= max_days <= {RENTAL_DAYS_LIMIT}, "
                f"got {self.min_days}..{self.max_days}"
            )
        if not self.min_days <= self.default_days <= self.max_days:
            raise ValueError(f"Default rental length {self.default_days} is outside the day range")
        return self


class PricingSettings(BaseModel):
    """Pricing configuration."""

    bundle_size: int = Field(default=3, description="Number of games in a bundle")
    bundle_daily_discount: Decimal = Field(
        default=Decimal("0.15"),
        description="Discount applied to the bundle's daily subtotal"
    )
    bundle_deposit_discount: Decimal = Field(
        default=Decimal("0.10"),
        description="Discount applied to the bundle's deposit sum"
    )
    subscription_monthly_price: Decimal = Field(
        default=Decimal("29.99"),
        description="Monthly unlimited plan price"
    )
    currency: str = Field(default="USD", description="ISO currency code for display")


class OnboardingSettings(BaseModel):
    """Onboarding flow configuration."""

    supported_location: str = Field(
        default="Orlando",
        description="Location text that marks the user as inside the service area"
    )

    celebration_delay_seconds: float = Field(
        default=5.0,
        description="Seconds the celebration screen stays before entering the app"
    )


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )

    file_enabled: bool = Field(
        default=True,
        description="Whether to write logs to a file"
    )

    console_enabled: bool = Field(
        default=True,
        description="Whether to write logs to console"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate that log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class Settings(BaseModel):
    """Main application settings."""

    # Application info
    app_name: str = Field(
        default="BoardBurrow",
        description="Application name"
    )

    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )

    # Sub-configurations
    storage: StorageSettings = Field(default_factory=lambda: StorageSettings(
        backend=os.environ.get("STORAGE_BACKEND", "memory"),
        file_name=os.environ.get("STORAGE_FILE", "boardburrow_state.json")
    ))

    rentals: RentalSettings = Field(default_factory=lambda: RentalSettings(
        max_days=int(os.environ.get("MAX_RENTAL_DAYS", "14")),
        confirmation_prefix=os.environ.get("CONFIRMATION_PREFIX", "BB"),
        return_reminder_hour=int(os.environ.get("RETURN_REMINDER_HOUR", "18"))
    ))

    pricing: PricingSettings = Field(default_factory=lambda: PricingSettings(
        subscription_monthly_price=Decimal(os.environ.get("SUBSCRIPTION_MONTHLY_PRICE", "29.99")),
        currency=os.environ.get("CURRENCY", "USD")
    ))

    onboarding: OnboardingSettings = Field(default_factory=lambda: OnboardingSettings(
        supported_location=os.environ.get("SUPPORTED_LOCATION", "Orlando"),
        celebration_delay_seconds=float(os.environ.get("CELEBRATION_DELAY_SECONDS", "5"))
    ))

    logging: LoggingSettings = Field(default_factory=lambda: LoggingSettings(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format=os.environ.get("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        file_enabled=_parse_bool(os.environ.get("LOG_FILE_ENABLED", "True")),
        console_enabled=_parse_bool(os.environ.get("LOG_CONSOLE_ENABLED", "True"))
    ))

    # Paths
    root_dir: Path = ROOT_DIR
    logs_dir: Path = LOG_DIR
    data_dir: Path = DATA_DIR

    # Runtime configs
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    def __init__(self, **data: Any):
        """Initialize settings, applying the debug mode override from the environment."""
        super().__init__(**data)

        # Allow debug mode override from environment
        self.debug_mode = _parse_bool(os.environ.get("DEBUG_MODE", str(self.debug_mode)))

    def ensure_directories(self) -> None:
        """Create the log and data directories if they are missing."""
        for directory in [self.logs_dir, self.data_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            if not os.access(directory, os.W_OK):
                logging.warning(f"Directory {directory} is not writable")

    @property
    def storage_path(self) -> Path:
        """Path of the JSON store file."""
        return self.data_dir / self.storage.file_name


def _parse_bool(value: str) -> bool:
    """Parse string to boolean."""
    return value.lower() in ("true", "1", "t", "yes", "y")

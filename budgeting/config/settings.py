"""
Configuration Management for Budgeting

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here so the external dependencies
(the spreadsheet backend) and the app-wide defaults are visible in one place.
"""

import warnings
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from budgeting.models.recurring import TimePeriod


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    budgets_sheet_name: str = Field(
        default="Budgets",
        description="Name of the sheet for budgets"
    )
    recurring_sheet_name: str = Field(
        default="Recurring",
        description="Name of the sheet for subscriptions and payments"
    )
    credentials_sheet_name: str = Field(
        default="Credentials",
        description="Name of the sheet holding the passcode hash"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """A missing file only warns; it may be mounted after startup."""
        if not Path(v).is_file():
            warnings.warn(
                f"Google credentials file not found at {v}; "
                "Sheets storage will fail to connect until it exists."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Recurring projection
    default_time_period: TimePeriod = Field(
        default=TimePeriod.MONTH,
        description="Time period shown when none is selected"
    )
    week_start_day: int = Field(
        default=0,
        ge=0,
        le=6,
        description="First day of the week (0 = Monday, 6 = Sunday)"
    )

    # Login
    passcode_length: int = Field(
        default=4,
        ge=4,
        le=8,
        description="Number of digits in the passcode"
    )

    # Budgets
    max_favorite_budgets: int = Field(
        default=5,
        ge=1,
        le=20,
        description="How many favorite budgets are surfaced"
    )
    max_amount: Decimal = Field(
        default=Decimal("10000000"),
        gt=0,
        description="Largest amount accepted for a budget, expense or recurring item"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Sub-settings are built on access, so the app can start with Sheets
    unconfigured and run on in-memory storage.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


SETTINGS_SECTIONS = ("google_sheets", "app")


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Check which settings sections load from the environment.

    Returns {section: loaded}, plus a "<section>_error" message for each
    section that failed.
    """
    settings = get_settings()
    results = {}

    for section in SETTINGS_SECTIONS:
        try:
            getattr(settings, section)
            results[section] = True
        except Exception as e:
            results[section] = False
            results[f"{section}_error"] = str(e)

    return results

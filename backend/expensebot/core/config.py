"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "ExpenseTracker Bot"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Google Sheets
    GOOGLE_SHEET_ID: str = ""
    GOOGLE_APPLICATION_CREDENTIALS: str = ""  # service account key file
    SHEETS_ACCESS_TOKEN: str = ""  # static bearer token; overrides the service account
    SHEETS_API_URL: str = "https://sheets.googleapis.com/v4/spreadsheets"
    SHEETS_TIMEOUT: float = 30.0
    EXPENSE_WORKSHEET: str = "ExpenseData"
    BUDGET_WORKSHEET: str = "Budgets"

    # Bot behaviour
    DEFAULT_CURRENCY: str = "$"
    EXPENSE_CATEGORIES: Union[List[str], str] = [
        "Food", "Rent", "Utilities", "Entertainment",
        "Transportation", "Shopping", "Health", "Other"
    ]
    ENABLE_BUDGET_ALERTS: bool = True
    DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    WEEK_START: str = "sunday"  # "sunday" or "monday"

    @field_validator("EXPENSE_CATEGORIES", mode="before")
    @classmethod
    def parse_categories(cls, v):
        """Parse EXPENSE_CATEGORIES from comma-separated string or list."""
        if isinstance(v, str):
            return [category.strip() for category in v.split(",") if category.strip()]
        return v

    @field_validator("WEEK_START")
    @classmethod
    def check_week_start(cls, v):
        """Only Sunday-first and Monday-first weeks are supported."""
        value = v.strip().lower()
        if value not in ("sunday", "monday"):
            raise ValueError("WEEK_START must be 'sunday' or 'monday'")
        return value

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Discord
    DISCORD_APPLICATION_ID: str = ""
    DISCORD_BOT_TOKEN: str = ""
    DISCORD_PUBLIC_KEY: str = ""  # hex Ed25519 key used to verify interactions
    DISCORD_API_URL: str = "https://discord.com/api/v10"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

"""
Configuration Management for the Gift Calculator

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
File locations and display defaults are validated once, at startup,
instead of being rediscovered by every command.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the ledger and the JSON stores live."""
    
    model_config = SettingsConfigDict(
        env_prefix="GIFTCALC_",
        extra="ignore"
    )
    
    config_dir: Path = Field(
        default=Path.home() / ".config" / "gift-calc",
        description="Directory holding the ledger and the JSON stores"
    )
    ledger_filename: str = Field(
        default="gift-calc.log",
        min_length=1,
        description="Append-only gift log"
    )
    budgets_filename: str = Field(
        default="budgets.json",
        min_length=1,
        description="Budget store file"
    )
    persons_filename: str = Field(
        default="persons.json",
        min_length=1,
        description="Person registry file"
    )
    
    @field_validator('config_dir')
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        """Allow ~ in the configured directory."""
        return v.expanduser()
    
    @property
    def ledger_path(self) -> Path:
        return self.config_dir / self.ledger_filename
    
    @property
    def budgets_path(self) -> Path:
        return self.config_dir / self.budgets_filename
    
    @property
    def persons_path(self) -> Path:
        return self.config_dir / self.persons_filename


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="GIFTCALC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    default_currency: str = Field(
        default="SEK",
        min_length=3,
        max_length=3,
        description="Currency budgets are tracked in"
    )
    toplist_length: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Default number of persons in a toplist"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON instead of console lines"
    )
    
    @field_validator('default_currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()
    
    @field_validator('log_level')
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()

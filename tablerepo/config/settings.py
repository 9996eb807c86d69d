"""
Application settings and configuration management.
"""

import os
import sys
from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_testing() -> bool:
    """Check if we're running in a test environment."""
    return (
        "pytest" in os.environ.get("_", "") or
        "PYTEST_CURRENT_TEST" in os.environ or
        os.environ.get("TESTING", "").lower() == "true" or
        "test" in sys.argv[0].lower() if len(sys.argv) > 0 else False
    )


class Settings(BaseSettings):
    """Application settings."""

    log_level: str = Field(default="INFO")

    # Database Configuration
    database_url: str = Field(
        default="",
        description="Database connection string used by the repository driver"
    )

    @field_validator('database_url', mode='after')
    @classmethod
    def strip_database_url(cls, v: str) -> str:
        """Strip whitespace from database URL to avoid common configuration errors."""
        return v.strip() if v else v

    database_host: str = Field(
        default="localhost",
        description="Database host"
    )
    database_port: int = Field(
        default=5432,
        description="Database port"
    )
    database_user: str = Field(
        default="tablerepo",
        description="Database username"
    )
    database_password: str = Field(
        default="",
        description="Database password"
    )
    database_name: str = Field(
        default="tablerepo",
        description="Database name"
    )
    echo_sql: bool = Field(
        default=False,
        description="Log every statement emitted by the SQLAlchemy engine"
    )

    # Connection Pool Configuration (PostgreSQL / MySQL only)
    pool_size: int = Field(
        default=5,
        description="Connection pool size"
    )
    pool_max_overflow: int = Field(
        default=10,
        description="Connection pool max overflow"
    )
    pool_timeout: int = Field(
        default=30,
        description="Connection pool timeout in seconds"
    )
    pool_recycle: int = Field(
        default=3600,
        description="Connection pool recycle time in seconds"
    )
    pool_pre_ping: bool = Field(
        default=True,
        description="Validate pooled connections before handing them out"
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Set default database URL based on environment if not explicitly provided
        if not self.database_url:
            if is_testing():
                self.database_url = "sqlite:///:memory:"
            elif self.database_password:
                # quote_plus handles special characters like @ # $ % in credentials
                self.database_url = (
                    f"postgresql://{quote_plus(self.database_user)}:{quote_plus(self.database_password)}"
                    f"@{self.database_host}:{self.database_port}/{self.database_name}"
                )
            else:
                self.database_url = "sqlite:///tablerepo.db"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()

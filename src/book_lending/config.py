"""Configuration management for the Book Lending Tracker.

Settings are read from ``BOOK_LENDING_*`` environment variables and an
optional ``.env`` file, validated with Pydantic v2.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LendingConfig(BaseSettings):
    """Book lending configuration.

    Covers storage location, paging defaults, search collation and logging.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOK_LENDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Database Configuration ===

    database_path: Path = Field(
        default=Path("data/book_lending.db"),
        description="SQLite database file path",
    )

    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL; overrides database_path when set",
    )

    echo_sql: bool = Field(
        default=False,
        description="Echo emitted SQL through the sqlalchemy.engine logger",
    )

    # === Query Configuration ===

    default_page_size: int = Field(
        default=10,
        description="Number of books returned when no limit is given",
        ge=1,
    )

    search_case_sensitive: bool = Field(
        default=False,
        description="Match search strings case-sensitively",
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper() if isinstance(v, str) else v

    @property
    def is_development(self) -> bool:
        return self.debug or self.log_level == "DEBUG"

    def get_database_url(self) -> str:
        """Get SQLAlchemy database URL."""
        if self.database_url:
            return self.database_url
        # Relative paths resolve against the working directory
        return f"sqlite:///{self.database_path.absolute()}"


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: LendingConfig | None = None


def get_config() -> LendingConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = LendingConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def set_config(config: LendingConfig) -> None:
    """Install an explicit configuration (used by scripts and tests)."""
    _ConfigStore._instance = config  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]

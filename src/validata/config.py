"""Configuration for validata, resolved from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from validata.messages import DEFAULT_LOCALE


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class DatabaseConfig:
    """Database connection configuration for the uniqueness lookup.

    Supports any SQLAlchemy URL; sqlite:/// and postgresql:// are the
    common cases.
    """

    url: str

    @classmethod
    def from_env(cls) -> DatabaseConfig | None:
        """Create config from DATABASE_URL, or None when it is unset."""
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)
        return None

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


@dataclass
class Settings:
    """Process-wide validata settings.

    Attributes:
        default_locale: Locale used when a call names none or an unknown one
        strict_rules: Reject unknown rules and malformed bounds when parsing
        log_level: Level applied by configure_logging (CLI only)
        locale_dir: Directory of locale tables (bundled tables if None)
        database: Connection for the ``unique`` rule, if any
    """

    default_locale: str = DEFAULT_LOCALE
    strict_rules: bool = False
    log_level: str = "WARNING"
    locale_dir: Path | None = None
    database: DatabaseConfig | None = field(default=None)

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from environment variables.

        Variables:
        - VALIDATA_LOCALE: default locale tag (default: en)
        - VALIDATA_STRICT_RULES: 1/true/yes/on enables strict parsing
        - VALIDATA_LOG_LEVEL: logging level name (default: WARNING)
        - VALIDATA_LOCALE_DIR: directory of <tag>.yaml locale tables
        - DATABASE_URL: database for the unique rule
        """
        locale_dir = os.environ.get("VALIDATA_LOCALE_DIR")
        return cls(
            default_locale=os.environ.get("VALIDATA_LOCALE", DEFAULT_LOCALE),
            strict_rules=os.environ.get("VALIDATA_STRICT_RULES", "").strip().lower() in _TRUTHY,
            log_level=os.environ.get("VALIDATA_LOG_LEVEL", "WARNING").upper(),
            locale_dir=Path(locale_dir) if locale_dir else None,
            database=DatabaseConfig.from_env(),
        )


def configure_logging(level: str = "WARNING") -> None:
    """Route validata logs to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

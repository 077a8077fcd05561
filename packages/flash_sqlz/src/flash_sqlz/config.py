"""
Settings for flash_sqlz clients.
"""

from typing import Any, Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SQLZSettings(BaseSettings):
    """
    Connection and rendering settings, read from ``SQLZ_*`` environment
    variables or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SQLZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Connection ---
    DATABASE_URL: str | None = None
    DEFAULT_CHARSET: str = "utf8"
    DB_ECHO: bool = False
    DB_PING: bool = True

    # --- Pool ---
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    # Maximum lifetime of a pooled connection, in seconds. -1 disables recycling.
    DB_POOL_RECYCLE: int = -1
    DB_POOL_TIMEOUT: float = 30.0

    # --- Rendering ---
    # "," reproduces the historical WHERE output; "AND" produces valid
    # multi-filter SQL.
    WHERE_CONNECTIVE: Literal[",", "AND"] = ","

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    @model_validator(mode="after")
    def validate_pool(self) -> "SQLZSettings":
        """Reject pool sizes that SQLAlchemy would refuse later on."""
        if self.DB_POOL_SIZE < 0 or self.DB_MAX_OVERFLOW < 0:
            raise ValueError("DB_POOL_SIZE and DB_MAX_OVERFLOW must not be negative.")
        if self.DB_POOL_TIMEOUT < 0:
            raise ValueError("DB_POOL_TIMEOUT must not be negative.")
        return self

    def engine_options(self) -> dict[str, Any]:
        """Keyword arguments for ``sqlalchemy.create_engine``."""
        return {
            "echo": self.DB_ECHO,
            "pool_size": self.DB_POOL_SIZE,
            "max_overflow": self.DB_MAX_OVERFLOW,
            "pool_recycle": self.DB_POOL_RECYCLE,
            "pool_timeout": self.DB_POOL_TIMEOUT,
        }

    def where_joiner(self) -> str:
        return "," if self.WHERE_CONNECTIVE == "," else " AND "


sqlz_settings = SQLZSettings()

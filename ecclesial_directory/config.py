"""
Runtime configuration for the directory data layer.

Configuration is read from environment variables:

- DATABASE_URL: SQLAlchemy URL of the directory database. Unset means no database backend.
- DIRECTORY_API_URL: base URL of the directory REST API (without `/api`). Unset means no REST backend.
- DIRECTORY_PREFER_DATABASE: "false"/"0"/"no" to start on the REST API. Defaults to true.
- DIRECTORY_LOG_LEVEL: logging level name. Defaults to INFO.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class DirectoryConfig:
    """
    Settings passed to `DataService` on construction.

    Attributes:

        database_url: Database connection URL, None to run without a database
        api_url: REST API base URL, None to run without the REST API
        prefer_database: Start with the database as the preferred backend
        log_level: Logging level name
    """

    database_url: Optional[str] = None
    api_url: Optional[str] = None
    prefer_database: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "DirectoryConfig":
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            api_url=os.getenv("DIRECTORY_API_URL") or None,
            prefer_database=os.getenv("DIRECTORY_PREFER_DATABASE", "true").strip().lower() not in _FALSE_VALUES,
            log_level=os.getenv("DIRECTORY_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(config: Optional[DirectoryConfig] = None) -> None:
    """Configure the root logger with the configured level."""
    config = config or DirectoryConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

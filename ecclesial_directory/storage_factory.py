"""
Factory for creating the database engine and a wired `DataService`.
"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from ecclesial_directory.config import DirectoryConfig
from ecclesial_directory.rest.client import DirectoryApiClient
from ecclesial_directory.service import DataService
from ecclesial_directory.storage.backends.database import SQLModelDirectoryStorage

# Singleton engine
_engine: Optional[Engine] = None


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Returns a singleton instance of the SQLAlchemy engine.
    """
    global _engine
    if _engine is None:
        db_url = database_url or DirectoryConfig.from_env().database_url
        if not db_url:
            raise ValueError("DATABASE_URL environment variable is not set.")
        _engine = create_engine(db_url, pool_pre_ping=True)
    return _engine


def build_data_service(config: Optional[DirectoryConfig] = None) -> DataService:
    """
    Build a `DataService` from configuration.

    The database backend is wired only when `database_url` is set, and the REST
    backend only when `api_url` is set.
    """
    config = config or DirectoryConfig.from_env()
    storage = SQLModelDirectoryStorage(get_engine(config.database_url)) if config.database_url else None
    api = DirectoryApiClient(config.api_url) if config.api_url else None
    return DataService(config=config, storage=storage, api=api)


def close_engine():
    """
    Closes the engine connection.
    """
    global _engine
    if _engine:
        _engine.dispose()
        _engine = None

"""
Storage backend implementations.

This package contains concrete implementations of the storage interface.

Available Backends:

- **database**: SQLModel implementation, used with PostgreSQL in production
  and SQLite for testing and development

Example:

    >>> from sqlmodel import create_engine
    >>> from ecclesial_directory.storage.backends.database import SQLModelDirectoryStorage
    >>> storage = SQLModelDirectoryStorage(create_engine("sqlite:///directory.db"))
"""

__all__ = [
    "database",
]

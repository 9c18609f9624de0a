"""
Storage layer for the ecclesial directory.

This package provides a clean abstraction for data persistence, separating
infrastructure concerns from domain logic.

Key Components:

- **interfaces**: Abstract base class defining the storage contract
- **backends**: Concrete implementation (SQLModel over SQLAlchemy)
- **models**: SQLModel schemas for database persistence

Example:

    >>> from sqlmodel import SQLModel, create_engine
    >>> from ecclesial_directory.storage.backends.database import SQLModelDirectoryStorage
    >>>
    >>> engine = create_engine("sqlite:///directory.db")
    >>> SQLModel.metadata.create_all(engine)
    >>> storage = SQLModelDirectoryStorage(engine)
    >>> storage.list_dioceses()
"""

__all__ = [
    "interfaces",
    "backends",
    "models",
]

"""
SQLModel persistence models for database storage.

This package contains the database schema definitions using SQLModel,
which map directory rows to database tables.

Available Models:

- **entity**: `entidadeeclesiastica` table (EntityRecord)
- **diocese**: `diocese` table (DioceseRecord)
- **clergy**: `clero` table (ClergyRecord)
- **photo**: `fotosentidade` table (PhotoRecord)

Importing this package registers every table with `SQLModel.metadata` and lets
SQLAlchemy resolve the string references used by the relationships.

Example:

    >>> from ecclesial_directory.storage.models import EntityRecord
    >>>
    >>> # These are persistence models, typically used via mapper functions
    >>> # See mapper.py for persistence -> domain conversion
"""

from .clergy import ClergyRecord
from .diocese import DioceseRecord
from .entity import EntityRecord
from .photo import PhotoRecord

__all__ = [
    "ClergyRecord",
    "DioceseRecord",
    "EntityRecord",
    "PhotoRecord",
]

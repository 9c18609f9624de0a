from .base import EntityKind, Jurisdiction
from .config import DirectoryConfig
from .entity import (
    Clergy,
    ClergyCreate,
    ClergyUpdate,
    Diocese,
    DioceseCreate,
    DioceseFilters,
    DioceseUpdate,
    DirectoryStats,
    EcclesiasticalEntity,
    EntityCreate,
    EntityFilters,
    EntityUpdate,
    Photo,
    PhotoCreate,
    PhotoUpdate,
)
from .errors import (
    BackendError,
    BackendUnavailableError,
    DatabaseError,
    DirectoryError,
    EnvelopeError,
    NotFoundError,
    TransportError,
)
from .service import BackendPreference, DataService
from .storage_factory import build_data_service

__all__ = [
    "BackendError",
    "BackendPreference",
    "BackendUnavailableError",
    "Clergy",
    "ClergyCreate",
    "ClergyUpdate",
    "DataService",
    "DatabaseError",
    "Diocese",
    "DioceseCreate",
    "DioceseFilters",
    "DioceseUpdate",
    "DirectoryConfig",
    "DirectoryError",
    "DirectoryStats",
    "EcclesiasticalEntity",
    "EntityCreate",
    "EntityFilters",
    "EntityKind",
    "EntityUpdate",
    "EnvelopeError",
    "Jurisdiction",
    "NotFoundError",
    "Photo",
    "PhotoCreate",
    "PhotoUpdate",
    "TransportError",
    "build_data_service",
]

"""
Storage interface for the database side of the directory.

The data service talks to the database only through this ABC, so a test double
or a different engine can stand in for the SQLModel implementation in
`backends/database.py`.

Implementations return persistence records (see `storage/models/`) with their
relations loaded; `mapper.py` turns them into domain models. They raise
`DatabaseError` for driver failures and `NotFoundError` when an update targets
a missing row. Single-row reads return None for a miss instead of raising.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ecclesial_directory.storage.models import ClergyRecord, DioceseRecord, EntityRecord, PhotoRecord


class DirectoryStorageInterface(ABC):
    """Abstract interface for the directory database."""

    # Entities

    @abstractmethod
    def list_entities(self, limit: int = 1000) -> list["EntityRecord"]:
        """List entities with diocese, rector and photos loaded."""
        pass

    @abstractmethod
    def get_entity_by_id(self, entity_id: int) -> Optional["EntityRecord"]:
        """Get an entity by ID, or None when it does not exist."""
        pass

    @abstractmethod
    def list_entities_by_diocese(self, diocese_id: int) -> list["EntityRecord"]:
        pass

    @abstractmethod
    def list_entities_by_state(self, estado: str) -> list["EntityRecord"]:
        pass

    @abstractmethod
    def search_entities(self, term: str, limit: int = 20) -> list["EntityRecord"]:
        """Case-insensitive search on name, city and address."""
        pass

    @abstractmethod
    def create_entity(self, values: dict) -> "EntityRecord":
        pass

    @abstractmethod
    def update_entity(self, entity_id: int, values: dict) -> "EntityRecord":
        pass

    @abstractmethod
    def delete_entity(self, entity_id: int) -> None:
        """Delete an entity and its photos. Deleting a missing ID is a no-op."""
        pass

    # Dioceses

    @abstractmethod
    def list_dioceses(self) -> list["DioceseRecord"]:
        """List dioceses ordered by name."""
        pass

    @abstractmethod
    def get_diocese_by_id(self, diocese_id: int) -> Optional["DioceseRecord"]:
        pass

    @abstractmethod
    def create_diocese(self, values: dict) -> "DioceseRecord":
        pass

    @abstractmethod
    def update_diocese(self, diocese_id: int, values: dict) -> "DioceseRecord":
        pass

    @abstractmethod
    def delete_diocese(self, diocese_id: int) -> None:
        pass

    # Clergy

    @abstractmethod
    def list_clergy(self) -> list["ClergyRecord"]:
        """List clergy ordered by full name."""
        pass

    @abstractmethod
    def get_clergy_by_id(self, clergy_id: int) -> Optional["ClergyRecord"]:
        pass

    @abstractmethod
    def create_clergy(self, values: dict) -> "ClergyRecord":
        pass

    @abstractmethod
    def update_clergy(self, clergy_id: int, values: dict) -> "ClergyRecord":
        pass

    @abstractmethod
    def delete_clergy(self, clergy_id: int) -> None:
        pass

    # Photos

    @abstractmethod
    def list_photos(self, entity_id: int) -> list["PhotoRecord"]:
        """Photos of an entity ordered by `ordem`."""
        pass

    @abstractmethod
    def get_main_photo(self, entity_id: int) -> Optional["PhotoRecord"]:
        """The photo with the lowest `ordem`, or None."""
        pass

    @abstractmethod
    def create_photo(self, values: dict) -> "PhotoRecord":
        pass

    @abstractmethod
    def update_photo(self, photo_id: int, values: dict) -> "PhotoRecord":
        pass

    @abstractmethod
    def delete_photo(self, photo_id: int) -> None:
        pass

    # Reference lists and stats

    @abstractmethod
    def list_states(self) -> list[str]:
        pass

    @abstractmethod
    def list_cities(self, estado: Optional[str] = None) -> list[str]:
        pass

    @abstractmethod
    def list_kinds(self) -> list[str]:
        pass

    @abstractmethod
    def list_jurisdictions(self) -> list[str]:
        pass

    @abstractmethod
    def count_all(self) -> dict[str, int]:
        """Row totals keyed by "entidades", "dioceses" and "clero"."""
        pass

    @abstractmethod
    def health_check(self) -> tuple[bool, str]:
        """(success, message) for a trivial query."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close connections and clean up resources."""
        pass

"""
## Overview

`DataService` is the single entry point for reading and writing the directory.
It answers from the database when it can and from the REST API otherwise, and
always returns the canonical models of `entity.py`, so callers never see which
backend answered.

## Backend selection

The service holds a `BackendPreference` that starts at `DATABASE` (when a
database is configured and preferred) and can move to `REST_API` once, never
back:

- **Reads**: a database failure is logged and *this call* is served by the
  REST API. The preference does not change.
- **Writes** to dioceses and clergy, and every delete: a database failure moves
  the preference to `REST_API` for the rest of the service's lifetime and the
  write is retried through the REST API.
- **Entity create/update**: a database failure propagates. The REST API has no
  photo relation fields, so these writes are never proxied after a failure.
- **Photo writes**: database only. With preference `REST_API` they raise
  `BackendUnavailableError`.

`NotFoundError` is an answer, not a failure: it never triggers a fallback or a
transition. Single-item reads return None instead of raising it.

When the REST API is needed but is not configured, has been marked unavailable,
or fails too, `BackendUnavailableError` is raised naming the missing layer.

## Filtering

Filters are ANDed. The database path lists everything and filters locally; the
REST path sends the filters as query parameters and applies the same predicate
to the response, so both paths return the same result set.

## Request-scoped clients

Every operation accepts `client`, an `httpx.Client` used for the REST call of
that operation only. It is ignored when the database answers.

Example:

    >>> service = build_data_service()
    >>> catedrais = service.list_entities(EntityFilters(estado="SP", tipo="Catedral"))
    >>> entity = service.get_entity(42)
    >>> entity is None  # not found on whichever backend answered
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional, TypeVar

import httpx
from pydantic import BaseModel

from .base import normalize_jurisdiction
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
from .errors import BackendError, BackendUnavailableError, NotFoundError
from .mapper import (
    api_clergy_to_domain,
    api_diocese_to_domain,
    api_entities_to_domain,
    api_entity_to_domain,
    clergy_record_to_domain,
    diocese_payload_to_api,
    diocese_record_to_domain,
    entity_record_to_domain,
    entity_records_to_domain,
    payload_to_values,
    photo_record_to_domain,
)
from .rest.client import DirectoryApiClient
from .storage.interfaces import DirectoryStorageInterface

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P", bound=BaseModel)


class BackendPreference(str, Enum):
    """Which backend the service tries first."""

    DATABASE = "database"
    REST_API = "rest_api"


def _coerce(model: type[P], payload: P | dict) -> P:
    """Validate a plain dict into its payload model; models pass through."""
    if isinstance(payload, model):
        return payload
    return model.model_validate(payload)


def _matches_term(entity: EcclesiasticalEntity, term: str) -> bool:
    needle = term.casefold()
    return any(needle in value.casefold() for value in (entity.nome, entity.cidade, entity.endereco))


class DataService:
    """
    Directory data access over a database and a REST API.

    Args:

        config: Runtime settings; `prefer_database` picks the initial preference
        storage: Database backend, None to run on the REST API only
        api: REST API client, None to run on the database only
    """

    def __init__(
        self,
        config: Optional[DirectoryConfig] = None,
        storage: Optional[DirectoryStorageInterface] = None,
        api: Optional[DirectoryApiClient] = None,
    ):
        self.config = config or DirectoryConfig()
        self.storage = storage
        self.api = api
        self.api_available = api is not None
        self._lock = threading.Lock()
        if storage is not None and self.config.prefer_database:
            self._preference = BackendPreference.DATABASE
        else:
            self._preference = BackendPreference.REST_API

    @property
    def preference(self) -> BackendPreference:
        return self._preference

    @property
    def _database_first(self) -> bool:
        return self.storage is not None and self._preference is BackendPreference.DATABASE

    def _switch_to_api(self, operation: str, error: Exception) -> None:
        with self._lock:
            if self._preference is BackendPreference.REST_API:
                return
            logger.warning("%s failed on the database (%s); switching to the REST API", operation, error)
            self._preference = BackendPreference.REST_API

    def _require_api(self, operation: str) -> DirectoryApiClient:
        if self.api is None:
            raise BackendUnavailableError(f"{operation}: database unavailable and no REST API client is configured")
        if not self.api_available:
            raise BackendUnavailableError(f"{operation}: database unavailable and the REST API is marked unavailable")
        return self.api

    def _via_api(self, operation: str, call: Callable[[DirectoryApiClient], T]) -> T:
        api = self._require_api(operation)
        try:
            return call(api)
        except BackendError as e:
            logger.error("%s failed on the REST API: %s", operation, e)
            raise BackendUnavailableError(f"{operation}: no backend could serve the request ({e})") from e

    def _read(
        self,
        operation: str,
        from_database: Callable[[DirectoryStorageInterface], T],
        from_api: Callable[[DirectoryApiClient], T],
    ) -> T:
        if self._database_first:
            try:
                return from_database(self.storage)
            except BackendError as e:
                logger.warning("%s failed on the database, serving from the REST API: %s", operation, e)
        return self._via_api(operation, from_api)

    def _write(
        self,
        operation: str,
        to_database: Callable[[DirectoryStorageInterface], T],
        to_api: Callable[[DirectoryApiClient], T],
        retry_on_api: bool = True,
    ) -> T:
        if self._database_first:
            try:
                return to_database(self.storage)
            except BackendError as e:
                if not retry_on_api:
                    logger.error("%s failed on the database: %s", operation, e)
                    raise
                self._switch_to_api(operation, e)
        return self._via_api(operation, to_api)

    def _database_only(self, operation: str) -> DirectoryStorageInterface:
        if not self._database_first:
            raise BackendUnavailableError(f"{operation}: photos are only available through the database")
        return self.storage

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def is_using_database(self) -> bool:
        """
        Check the database connection.

        A failed check moves the preference to the REST API for good.
        """
        if not self._database_first:
            return False
        ok, message = self.storage.health_check()
        if not ok:
            self._switch_to_api("health_check", message)
            return False
        return True

    def is_using_api(self, client: Optional[httpx.Client] = None) -> bool:
        """Ping the REST API and record the result in `api_available`."""
        if self.api is None:
            return False
        try:
            self.api.health(client=client)
            self.api_available = True
        except (BackendError, NotFoundError) as e:
            logger.warning("REST API health check failed: %s", e)
            self.api_available = False
        return self.api_available

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def list_entities(
        self, filters: Optional[EntityFilters] = None, client: Optional[httpx.Client] = None
    ) -> list[EcclesiasticalEntity]:
        filters = filters or EntityFilters()
        entities = self._read(
            "list_entities",
            lambda storage: entity_records_to_domain(storage.list_entities()),
            lambda api: api_entities_to_domain(api.list_entities(filters, client=client).entidades),
        )
        return [entity for entity in entities if filters.matches(entity)]

    def get_entity(self, entity_id: int, client: Optional[httpx.Client] = None) -> Optional[EcclesiasticalEntity]:
        """
        Fetch one entity, or None when it does not exist.

        When the REST API fails with anything but a 404, the full REST entity
        list is scanned for the id before giving up.
        """
        operation = f"get_entity({entity_id})"
        if self._database_first:
            try:
                record = self.storage.get_entity_by_id(entity_id)
                return entity_record_to_domain(record) if record else None
            except BackendError as e:
                logger.warning("%s failed on the database, serving from the REST API: %s", operation, e)

        api = self._require_api(operation)
        try:
            return api_entity_to_domain(api.get_entity(entity_id, client=client))
        except NotFoundError:
            return None
        except BackendError as e:
            logger.warning("%s failed on the REST API, scanning the entity list: %s", operation, e)

        try:
            listing = api.list_entities(client=client)
        except BackendError as e:
            logger.error("%s: entity list scan failed: %s", operation, e)
            raise BackendUnavailableError(f"{operation}: no backend could serve the request ({e})") from e
        for entity in listing.entidades:
            if entity.id == entity_id:
                return api_entity_to_domain(entity)
        return None

    def list_entities_by_diocese(self, diocese_id: int, client: Optional[httpx.Client] = None) -> list[EcclesiasticalEntity]:
        filters = EntityFilters(diocese_id=diocese_id)
        entities = self._read(
            f"list_entities_by_diocese({diocese_id})",
            lambda storage: entity_records_to_domain(storage.list_entities_by_diocese(diocese_id)),
            lambda api: api_entities_to_domain(api.list_entities(filters, client=client).entidades),
        )
        return [entity for entity in entities if filters.matches(entity)]

    def list_entities_by_state(self, estado: str, client: Optional[httpx.Client] = None) -> list[EcclesiasticalEntity]:
        filters = EntityFilters(estado=estado)
        entities = self._read(
            f"list_entities_by_state({estado})",
            lambda storage: entity_records_to_domain(storage.list_entities_by_state(estado)),
            lambda api: api_entities_to_domain(api.list_entities(filters, client=client).entidades),
        )
        return [entity for entity in entities if filters.matches(entity)]

    def search_entities(self, term: str, limit: int = 20, client: Optional[httpx.Client] = None) -> list[EcclesiasticalEntity]:
        """Case-insensitive search on name, city and address."""

        def from_api(api: DirectoryApiClient) -> list[EcclesiasticalEntity]:
            entities = api_entities_to_domain(api.list_entities(client=client).entidades)
            return [entity for entity in entities if _matches_term(entity, term)][:limit]

        return self._read(
            f"search_entities({term!r})",
            lambda storage: entity_records_to_domain(storage.search_entities(term, limit)),
            from_api,
        )

    def create_entity(self, payload: EntityCreate | dict, client: Optional[httpx.Client] = None) -> EcclesiasticalEntity:
        payload = _coerce(EntityCreate, payload)
        return self._write(
            "create_entity",
            lambda storage: entity_record_to_domain(storage.create_entity(payload_to_values(payload))),
            lambda api: api_entity_to_domain(api.create_entity(payload.changes(), client=client)),
            retry_on_api=False,
        )

    def update_entity(
        self, entity_id: int, payload: EntityUpdate | dict, client: Optional[httpx.Client] = None
    ) -> EcclesiasticalEntity:
        payload = _coerce(EntityUpdate, payload)
        return self._write(
            f"update_entity({entity_id})",
            lambda storage: entity_record_to_domain(storage.update_entity(entity_id, payload_to_values(payload))),
            lambda api: api_entity_to_domain(api.update_entity(entity_id, payload.changes(), client=client)),
            retry_on_api=False,
        )

    def delete_entity(self, entity_id: int, client: Optional[httpx.Client] = None) -> None:
        self._write(
            f"delete_entity({entity_id})",
            lambda storage: storage.delete_entity(entity_id),
            lambda api: api.delete_entity(entity_id, client=client),
        )

    # ------------------------------------------------------------------
    # Dioceses
    # ------------------------------------------------------------------

    def list_dioceses(self, filters: Optional[DioceseFilters] = None, client: Optional[httpx.Client] = None) -> list[Diocese]:
        filters = filters or DioceseFilters()
        dioceses = self._read(
            "list_dioceses",
            lambda storage: [diocese_record_to_domain(record) for record in storage.list_dioceses()],
            lambda api: [api_diocese_to_domain(diocese) for diocese in api.list_dioceses(filters, client=client).dioceses],
        )
        return [diocese for diocese in dioceses if filters.matches(diocese)]

    def get_diocese(self, diocese_id: int, client: Optional[httpx.Client] = None) -> Optional[Diocese]:
        def from_database(storage: DirectoryStorageInterface) -> Optional[Diocese]:
            record = storage.get_diocese_by_id(diocese_id)
            return diocese_record_to_domain(record) if record else None

        def from_api(api: DirectoryApiClient) -> Optional[Diocese]:
            try:
                return api_diocese_to_domain(api.get_diocese(diocese_id, client=client))
            except NotFoundError:
                return None

        return self._read(f"get_diocese({diocese_id})", from_database, from_api)

    def create_diocese(self, payload: DioceseCreate | dict, client: Optional[httpx.Client] = None) -> Diocese:
        payload = _coerce(DioceseCreate, payload)
        return self._write(
            "create_diocese",
            lambda storage: diocese_record_to_domain(storage.create_diocese(payload_to_values(payload))),
            lambda api: api_diocese_to_domain(api.create_diocese(diocese_payload_to_api(payload), client=client)),
        )

    def update_diocese(self, diocese_id: int, payload: DioceseUpdate | dict, client: Optional[httpx.Client] = None) -> Diocese:
        payload = _coerce(DioceseUpdate, payload)
        return self._write(
            f"update_diocese({diocese_id})",
            lambda storage: diocese_record_to_domain(storage.update_diocese(diocese_id, payload_to_values(payload))),
            lambda api: api_diocese_to_domain(api.update_diocese(diocese_id, diocese_payload_to_api(payload), client=client)),
        )

    def delete_diocese(self, diocese_id: int, client: Optional[httpx.Client] = None) -> None:
        self._write(
            f"delete_diocese({diocese_id})",
            lambda storage: storage.delete_diocese(diocese_id),
            lambda api: api.delete_diocese(diocese_id, client=client),
        )

    # ------------------------------------------------------------------
    # Clergy
    # ------------------------------------------------------------------

    def list_clergy(self, client: Optional[httpx.Client] = None) -> list[Clergy]:
        return self._read(
            "list_clergy",
            lambda storage: [clergy_record_to_domain(record) for record in storage.list_clergy()],
            lambda api: [api_clergy_to_domain(clergy) for clergy in api.list_clergy(client=client).clero],
        )

    def get_clergy(self, clergy_id: int, client: Optional[httpx.Client] = None) -> Optional[Clergy]:
        def from_database(storage: DirectoryStorageInterface) -> Optional[Clergy]:
            record = storage.get_clergy_by_id(clergy_id)
            return clergy_record_to_domain(record) if record else None

        def from_api(api: DirectoryApiClient) -> Optional[Clergy]:
            try:
                return api_clergy_to_domain(api.get_clergy(clergy_id, client=client))
            except NotFoundError:
                return None

        return self._read(f"get_clergy({clergy_id})", from_database, from_api)

    def create_clergy(self, payload: ClergyCreate | dict, client: Optional[httpx.Client] = None) -> Clergy:
        payload = _coerce(ClergyCreate, payload)
        return self._write(
            "create_clergy",
            lambda storage: clergy_record_to_domain(storage.create_clergy(payload_to_values(payload))),
            lambda api: api_clergy_to_domain(api.create_clergy(payload.changes(), client=client)),
        )

    def update_clergy(self, clergy_id: int, payload: ClergyUpdate | dict, client: Optional[httpx.Client] = None) -> Clergy:
        payload = _coerce(ClergyUpdate, payload)
        return self._write(
            f"update_clergy({clergy_id})",
            lambda storage: clergy_record_to_domain(storage.update_clergy(clergy_id, payload_to_values(payload))),
            lambda api: api_clergy_to_domain(api.update_clergy(clergy_id, payload.changes(), client=client)),
        )

    def delete_clergy(self, clergy_id: int, client: Optional[httpx.Client] = None) -> None:
        self._write(
            f"delete_clergy({clergy_id})",
            lambda storage: storage.delete_clergy(clergy_id),
            lambda api: api.delete_clergy(clergy_id, client=client),
        )

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    def list_photos(self, entity_id: int, client: Optional[httpx.Client] = None) -> list[Photo]:
        """Photos of an entity sorted by `ordem`; empty when the entity does not exist."""

        def from_api(api: DirectoryApiClient) -> list[Photo]:
            try:
                return list(api_entity_to_domain(api.get_entity(entity_id, client=client)).fotos)
            except NotFoundError:
                return []

        return self._read(
            f"list_photos({entity_id})",
            lambda storage: [photo_record_to_domain(record) for record in storage.list_photos(entity_id)],
            from_api,
        )

    def get_main_photo(self, entity_id: int, client: Optional[httpx.Client] = None) -> Optional[Photo]:
        """The cover photo (lowest `ordem`) of an entity, or None."""

        def from_database(storage: DirectoryStorageInterface) -> Optional[Photo]:
            record = storage.get_main_photo(entity_id)
            return photo_record_to_domain(record) if record else None

        def from_api(api: DirectoryApiClient) -> Optional[Photo]:
            try:
                fotos = api_entity_to_domain(api.get_entity(entity_id, client=client)).fotos
            except NotFoundError:
                return None
            return fotos[0] if fotos else None

        return self._read(f"get_main_photo({entity_id})", from_database, from_api)

    def create_photo(self, payload: PhotoCreate | dict) -> Photo:
        payload = _coerce(PhotoCreate, payload)
        storage = self._database_only("create_photo")
        return photo_record_to_domain(storage.create_photo(payload_to_values(payload)))

    def update_photo(self, photo_id: int, payload: PhotoUpdate | dict) -> Photo:
        payload = _coerce(PhotoUpdate, payload)
        storage = self._database_only(f"update_photo({photo_id})")
        return photo_record_to_domain(storage.update_photo(photo_id, payload_to_values(payload)))

    def delete_photo(self, photo_id: int) -> None:
        self._database_only(f"delete_photo({photo_id})").delete_photo(photo_id)

    # ------------------------------------------------------------------
    # Reference lists and stats
    # ------------------------------------------------------------------

    def list_states(self, client: Optional[httpx.Client] = None) -> list[str]:
        return self._read(
            "list_states",
            lambda storage: storage.list_states(),
            lambda api: api.list_states(client=client),
        )

    def list_cities(self, estado: Optional[str] = None, client: Optional[httpx.Client] = None) -> list[str]:
        """Distinct non-empty cities, optionally within one state, sorted ascending."""

        def from_api(api: DirectoryApiClient) -> list[str]:
            filters = EntityFilters(estado=estado)
            entities = api.list_entities(filters, client=client).entidades
            return sorted({entity.cidade for entity in entities if entity.cidade and (not estado or entity.estado == estado)})

        return self._read(f"list_cities({estado})", lambda storage: storage.list_cities(estado), from_api)

    def list_kinds(self, client: Optional[httpx.Client] = None) -> list[str]:
        return self._read(
            "list_kinds",
            lambda storage: storage.list_kinds(),
            lambda api: api.list_kinds(client=client),
        )

    def list_jurisdictions(self, client: Optional[httpx.Client] = None) -> list[str]:
        """Jurisdiction tokens. Labels returned by the REST API are mapped back to tokens."""

        def from_api(api: DirectoryApiClient) -> list[str]:
            tokens = [normalize_jurisdiction(value).value for value in api.list_jurisdictions(client=client)]
            return list(dict.fromkeys(tokens))

        return self._read("list_jurisdictions", lambda storage: storage.list_jurisdictions(), from_api)

    def get_stats(self, client: Optional[httpx.Client] = None) -> DirectoryStats:
        def from_api(api: DirectoryApiClient) -> DirectoryStats:
            return DirectoryStats(
                entidades=api.list_entities(client=client).total,
                dioceses=api.list_dioceses(client=client).total,
                clero=api.list_clergy(client=client).total,
            )

        return self._read("get_stats", lambda storage: DirectoryStats(**storage.count_all()), from_api)

    def close(self) -> None:
        if self.storage is not None:
            self.storage.close()
        if self.api is not None:
            self.api.close()

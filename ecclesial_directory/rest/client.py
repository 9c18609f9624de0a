"""
HTTP client for the directory REST API.

Every call goes through `DirectoryApiClient._request`, which unwraps the
API's response envelope:

- HTTP 404 raises `NotFoundError`
- any other non-2xx status raises `TransportError` carrying the server's
  message, or "HTTP <status>" when the body has none
- HTTP 204 yields None
- a 2xx envelope whose `status` is "error" raises `EnvelopeError` with the
  envelope message
- envelope data that does not fit the expected response model raises
  `EnvelopeError`
- network failures raise `TransportError`

Each public method accepts an optional `client`: an `httpx.Client` to use for
that call only (for example one carrying request-scoped credentials). Without
it the client's own connection pool is used.

Example:

    >>> api = DirectoryApiClient("http://localhost:8000")
    >>> response = api.list_entities(EntityFilters(estado="SP", tipo="Catedral"))
    >>> [e.nome for e in response.entidades]
"""

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ecclesial_directory.entity import DioceseFilters, EntityFilters
from ecclesial_directory.errors import EnvelopeError, NotFoundError, TransportError
from ecclesial_directory.rest.models import (
    ApiClergy,
    ApiClergyList,
    ApiDiocese,
    ApiDioceseList,
    ApiEntity,
    ApiEntityList,
    ApiEnvelope,
    ApiHealth,
)

logger = logging.getLogger(__name__)

API_BASE = "/api"

T = TypeVar("T")


class DirectoryApiClient:
    """
    Typed client over the directory REST API.

    Args:

        base_url: Scheme and host of the API server; `/api` is appended
        client: Optional `httpx.Client` to use by default. When omitted the
            instance creates and owns one.
    """

    def __init__(self, base_url: str = "http://localhost:8000", client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client()
        self._owns_client = client is None

    def _request(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        params: Optional[dict[str, str]] = None,
        json: Optional[dict] = None,
        client: Optional[httpx.Client] = None,
    ) -> Any:
        http = client or self._client
        url = f"{self.base_url}{API_BASE}{endpoint}"

        try:
            response = http.request(method, url, params=params or None, json=json, headers={"Content-Type": "application/json"})
        except httpx.HTTPError as e:
            logger.error("API request %s %s failed: %s", method, endpoint, e)
            raise TransportError(f"Request to {endpoint} failed: {e}") from e

        if response.status_code == 404:
            logger.debug("API request %s %s: not found", method, endpoint)
            raise NotFoundError("Resource not found")

        if not response.is_success:
            message = _error_message(response)
            logger.error("API request %s %s failed: %s", method, endpoint, message)
            raise TransportError(message, status_code=response.status_code)

        if response.status_code == 204:
            return None

        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except ValueError as e:
            logger.error("API request %s %s returned an invalid body: %s", method, endpoint, e)
            raise EnvelopeError(f"Invalid response body from {endpoint}") from e

        if envelope.status == "error":
            logger.error("API request %s %s returned an error envelope: %s", method, endpoint, envelope.message)
            raise EnvelopeError(envelope.message)

        return envelope.data

    # Health check

    def health(self, client: Optional[httpx.Client] = None) -> ApiHealth:
        return _parse(ApiHealth, self._request("/health", client=client) or {}, "/health")

    # Ecclesiastical entities

    def list_entities(self, filters: Optional[EntityFilters] = None, client: Optional[httpx.Client] = None) -> ApiEntityList:
        params = filters.to_query_params() if filters else None
        return _parse(ApiEntityList, self._request("/entidades", params=params, client=client), "/entidades")

    def get_entity(self, entity_id: int, client: Optional[httpx.Client] = None) -> ApiEntity:
        return _parse(ApiEntity, self._request(f"/entidades/{entity_id}", client=client), f"/entidades/{entity_id}")

    def create_entity(self, payload: dict, client: Optional[httpx.Client] = None) -> ApiEntity:
        return _parse(ApiEntity, self._request("/entidades", "POST", json=payload, client=client), "/entidades")

    def update_entity(self, entity_id: int, payload: dict, client: Optional[httpx.Client] = None) -> ApiEntity:
        return _parse(ApiEntity, self._request(f"/entidades/{entity_id}", "PUT", json=payload, client=client), f"/entidades/{entity_id}")

    def delete_entity(self, entity_id: int, client: Optional[httpx.Client] = None) -> None:
        self._request(f"/entidades/{entity_id}", "DELETE", client=client)

    # Dioceses

    def list_dioceses(self, filters: Optional[DioceseFilters] = None, client: Optional[httpx.Client] = None) -> ApiDioceseList:
        params = filters.to_query_params() if filters else None
        return _parse(ApiDioceseList, self._request("/dioceses", params=params, client=client), "/dioceses")

    def get_diocese(self, diocese_id: int, client: Optional[httpx.Client] = None) -> ApiDiocese:
        return _parse(ApiDiocese, self._request(f"/dioceses/{diocese_id}", client=client), f"/dioceses/{diocese_id}")

    def create_diocese(self, payload: dict, client: Optional[httpx.Client] = None) -> ApiDiocese:
        return _parse(ApiDiocese, self._request("/dioceses", "POST", json=payload, client=client), "/dioceses")

    def update_diocese(self, diocese_id: int, payload: dict, client: Optional[httpx.Client] = None) -> ApiDiocese:
        return _parse(ApiDiocese, self._request(f"/dioceses/{diocese_id}", "PUT", json=payload, client=client), f"/dioceses/{diocese_id}")

    def delete_diocese(self, diocese_id: int, client: Optional[httpx.Client] = None) -> None:
        self._request(f"/dioceses/{diocese_id}", "DELETE", client=client)

    # Clergy

    def list_clergy(self, client: Optional[httpx.Client] = None) -> ApiClergyList:
        return _parse(ApiClergyList, self._request("/clero", client=client), "/clero")

    def get_clergy(self, clergy_id: int, client: Optional[httpx.Client] = None) -> ApiClergy:
        return _parse(ApiClergy, self._request(f"/clero/{clergy_id}", client=client), f"/clero/{clergy_id}")

    def create_clergy(self, payload: dict, client: Optional[httpx.Client] = None) -> ApiClergy:
        return _parse(ApiClergy, self._request("/clero", "POST", json=payload, client=client), "/clero")

    def update_clergy(self, clergy_id: int, payload: dict, client: Optional[httpx.Client] = None) -> ApiClergy:
        return _parse(ApiClergy, self._request(f"/clero/{clergy_id}", "PUT", json=payload, client=client), f"/clero/{clergy_id}")

    def delete_clergy(self, clergy_id: int, client: Optional[httpx.Client] = None) -> None:
        self._request(f"/clero/{clergy_id}", "DELETE", client=client)

    # Reference lists

    def list_jurisdictions(self, client: Optional[httpx.Client] = None) -> list[str]:
        return _parse(list[str], self._request("/jurisdicoes", client=client) or [], "/jurisdicoes")

    def list_kinds(self, client: Optional[httpx.Client] = None) -> list[str]:
        return _parse(list[str], self._request("/tipos", client=client) or [], "/tipos")

    def list_states(self, client: Optional[httpx.Client] = None) -> list[str]:
        return _parse(list[str], self._request("/estados", client=client) or [], "/estados")

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "DirectoryApiClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _error_message(response: httpx.Response) -> str:
    """Server-supplied message of an error response, or "HTTP <status>"."""
    fallback = f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


def _parse(shape: type[T], data: Any, endpoint: str) -> T:
    """Validate envelope `data` into `shape`; a payload of the wrong shape raises `EnvelopeError`."""
    try:
        return TypeAdapter(shape).validate_python(data)
    except ValidationError as e:
        logger.error("API response from %s has an unexpected shape: %s", endpoint, e)
        raise EnvelopeError(f"Unexpected response data from {endpoint}") from e

"""
REST API access for the ecclesial directory.

- **models**: Pydantic models of the API's JSON payloads
- **client**: `DirectoryApiClient`, an httpx client that unwraps the API envelope
"""

__all__ = [
    "client",
    "models",
]

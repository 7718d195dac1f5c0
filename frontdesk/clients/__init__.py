"""Backend clients package."""

from frontdesk.clients.auth_client import (
    AuthClient,
    AuthClientError,
    InvalidCredentialsError,
)
from frontdesk.clients.data_store_client import (
    DataStoreAuthenticationError,
    DataStoreClient,
    DataStoreClientError,
    DataStoreConflictError,
    DataStoreNotFoundError,
    DataStoreServerError,
)
from frontdesk.clients.redis_session_cache import RedisSessionCache

__all__ = [
    "AuthClient",
    "AuthClientError",
    "InvalidCredentialsError",
    "DataStoreClient",
    "DataStoreClientError",
    "DataStoreAuthenticationError",
    "DataStoreConflictError",
    "DataStoreNotFoundError",
    "DataStoreServerError",
    "RedisSessionCache",
]

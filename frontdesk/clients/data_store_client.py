"""REST data store client for the hosted backend."""

import asyncio
from typing import Any, Optional, Sequence

import httpx
from structlog import get_logger

from frontdesk.clients.query import AnyOf, Filter, Order
from frontdesk.config import Settings, settings as default_settings

logger = get_logger(__name__)


class DataStoreClientError(Exception):
    """Base exception for data store client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class DataStoreAuthenticationError(DataStoreClientError):
    """Raised when the data store rejects the credentials."""

    pass


class DataStoreNotFoundError(DataStoreClientError):
    """Raised when a table or resource does not exist."""

    pass


class DataStoreConflictError(DataStoreClientError):
    """Raised when a write violates a constraint (e.g. duplicate key)."""

    pass


class DataStoreServerError(DataStoreClientError):
    """Raised when the data store returns a server error."""

    pass


def extract_error_message(response: httpx.Response) -> str:
    """Extract the backend's human readable message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        message = body.get("message") or body.get("error_description") or body.get("error")
        details = body.get("details")
        if message and details:
            return f"{message} ({details})"
        if message:
            return str(message)
    return response.text[:200]


def can_resend(method: str, error: httpx.RequestError) -> bool:
    """Whether a request that failed in transport is safe to send again."""
    return method == "GET" or isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout))


class DataStoreClient:
    """Async client for the backend's REST data store.

    The client is constructed explicitly and handed to the services that
    need it; ``close()`` releases the underlying connection pool.
    """

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the data store client with settings.

        Args:
            app_settings: Settings to use, defaults to the global settings
            transport: Optional httpx transport (used by tests)
        """
        cfg = app_settings or default_settings
        self.base_url = cfg.rest_url.rstrip("/")
        self.anon_key = cfg.backend.anon_key
        self.timeout = cfg.backend.request_timeout
        self.max_retries = max(1, cfg.backend.max_retries)
        self.retry_backoff_base = 2  # Exponential backoff base
        self._transport = transport
        self._access_token: Optional[str] = None
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "DataStoreClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def open(self) -> None:
        """Create the HTTP connection pool."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
            logger.debug("Opened data store client", base_url=self.base_url)

    async def close(self) -> None:
        """Close the HTTP connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed data store client")

    def set_access_token(self, token: Optional[str]) -> None:
        """Use a signed-in user's token for requests, or the anon key when None."""
        self._access_token = token

    def _get_headers(self, prefer: Optional[str] = None) -> dict[str, str]:
        """Get default headers for data store requests.

        Returns:
            Dictionary of HTTP headers including the api key and bearer token.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self._access_token or self.anon_key}",
            "User-Agent": "FrontDesk/1.0",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _make_request(
        self,
        method: str,
        table: str,
        params: Optional[list[tuple[str, str]]] = None,
        data: Optional[Any] = None,
        prefer: Optional[str] = None,
    ) -> Any:
        """Make an HTTP request to the data store with retry logic.

        Reads are retried with exponential backoff on server errors,
        timeouts and transport errors. Writes are retried only when the
        connection was never established. Client errors are raised
        immediately.

        Args:
            method: HTTP method (GET, POST, PATCH)
            table: Table name
            params: Query parameters
            data: Request body
            prefer: Value of the Prefer header

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            DataStoreAuthenticationError: If authentication fails
            DataStoreNotFoundError: If the table is unknown
            DataStoreConflictError: If a constraint is violated
            DataStoreServerError: If a server error persists after retries
            DataStoreClientError: For other errors
        """
        await self.open()
        url = f"{self.base_url}/{table}"
        headers = self._get_headers(prefer)

        for attempt in range(self.max_retries):
            try:
                response = await self._client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    params=params,
                    json=data,
                )
            except httpx.TimeoutException as e:
                if attempt < self.max_retries - 1 and can_resend(method, e):
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Data store request timeout, retrying",
                        table=table,
                        method=method,
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(
                    "Data store request timeout, giving up",
                    table=table,
                    method=method,
                    attempts=attempt + 1,
                )
                raise DataStoreClientError(f"Request timeout for {table}") from e
            except httpx.RequestError as e:
                if attempt < self.max_retries - 1 and can_resend(method, e):
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Data store request error, retrying",
                        table=table,
                        method=method,
                        error=str(e),
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(
                    "Data store request error, giving up",
                    table=table,
                    method=method,
                    attempts=attempt + 1,
                    error=str(e),
                )
                raise DataStoreClientError(f"Request failed for {table}: {str(e)}") from e

            status = response.status_code

            if status in (401, 403):
                logger.error("Data store authentication failed", table=table, status_code=status)
                raise DataStoreAuthenticationError(extract_error_message(response), status)

            if status == 404:
                logger.warning("Data store resource not found", table=table, status_code=status)
                raise DataStoreNotFoundError(extract_error_message(response), status)

            if status == 409:
                logger.error(
                    "Data store conflict",
                    table=table,
                    status_code=status,
                    response_text=response.text[:200],
                )
                raise DataStoreConflictError(extract_error_message(response), status)

            if status >= 500:
                if attempt < self.max_retries - 1 and method == "GET":
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        "Data store server error, retrying",
                        table=table,
                        status_code=status,
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(
                    "Data store server error, giving up",
                    table=table,
                    method=method,
                    status_code=status,
                )
                raise DataStoreServerError(extract_error_message(response), status)

            if 400 <= status < 500:
                logger.error(
                    "Data store client error",
                    table=table,
                    status_code=status,
                    response_text=response.text[:200],
                )
                raise DataStoreClientError(extract_error_message(response), status)

            if status in (200, 201, 204, 206):
                logger.debug(
                    "Data store request successful",
                    table=table,
                    method=method,
                    status_code=status,
                )
                if response.text:
                    return response.json()
                return None

            logger.error("Unexpected data store response status", table=table, status_code=status)
            raise DataStoreClientError(f"Unexpected response from {table}: {status}", status)

        raise DataStoreClientError(f"Failed to complete request to {table}")

    @staticmethod
    def _build_params(
        columns: Optional[str] = None,
        filters: Optional[Sequence[Filter | AnyOf]] = None,
        order: Optional[Sequence[Order]] = None,
        limit: Optional[int] = None,
    ) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if columns:
            params.append(("select", "".join(columns.split())))
        for condition in filters or []:
            params.append(condition.to_param())
        if order:
            params.append(("order", ",".join(o.to_param()[1] for o in order)))
        if limit is not None:
            params.append(("limit", str(limit)))
        return params

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Sequence[Filter | AnyOf]] = None,
        order: Optional[Sequence[Order]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Fetch rows from a table.

        Args:
            table: Table name
            columns: Column list; foreign tables are embedded with
                ``alias:fk_column(col, ...)``
            filters: Conditions combined with AND
            order: Ordering, applied in sequence
            limit: Maximum number of rows

        Returns:
            List of rows
        """
        params = self._build_params(columns, filters, order, limit)
        rows = await self._make_request("GET", table, params=params)
        return rows or []

    async def select_one(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Sequence[Filter | AnyOf]] = None,
    ) -> Optional[dict[str, Any]]:
        """Fetch the first matching row, or None."""
        rows = await self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored, including its generated id.

        Raises:
            DataStoreClientError: If the insert is rejected
        """
        rows = await self._make_request(
            "POST", table, data=row, prefer="return=representation"
        )
        if not rows:
            raise DataStoreClientError(f"Insert into {table} returned no row")
        created = rows[0] if isinstance(rows, list) else rows
        logger.info("Inserted row", table=table, row_id=created.get("id"))
        return created

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: Sequence[Filter | AnyOf],
    ) -> list[dict[str, Any]]:
        """Update the rows matching all filters and return them.

        An empty result means no row matched, which callers use to detect
        concurrent changes on conditional updates.
        """
        if not filters:
            raise DataStoreClientError(f"Refusing to update {table} without filters")
        params = self._build_params(filters=filters)
        rows = await self._make_request(
            "PATCH", table, params=params, data=values, prefer="return=representation"
        )
        rows = rows or []
        logger.info(
            "Updated rows",
            table=table,
            fields=sorted(values.keys()),
            row_count=len(rows),
        )
        return rows

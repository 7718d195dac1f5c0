"""Authentication service client (password sign-in, sign-out, user lookup)."""

from typing import Any, Optional

import httpx
from structlog import get_logger

from frontdesk.clients.data_store_client import extract_error_message
from frontdesk.config import Settings, settings as default_settings
from frontdesk.models.user import AuthUser, Session

logger = get_logger(__name__)


class AuthClientError(Exception):
    """Base exception for authentication client errors."""

    pass


class InvalidCredentialsError(AuthClientError):
    """Raised when email/password sign-in is rejected."""

    pass


class AuthClient:
    """Client for the backend's authentication endpoints.

    Credential storage and token refresh are the backend's concern; this
    client only exchanges credentials for a session and revokes it.
    """

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        cfg = app_settings or default_settings
        self.base_url = cfg.auth_url.rstrip("/")
        self.anon_key = cfg.backend.anon_key
        self.timeout = cfg.backend.request_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_headers(self, access_token: Optional[str] = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "apikey": self.anon_key,
            "User-Agent": "FrontDesk/1.0",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
        access_token: Optional[str] = None,
    ) -> httpx.Response:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        try:
            return await self._client.request(
                method=method,
                url=f"{self.base_url}{endpoint}",
                headers=self._get_headers(access_token),
                json=data,
                params=params,
            )
        except httpx.RequestError as e:
            logger.error("Auth request failed", endpoint=endpoint, error=str(e))
            raise AuthClientError(f"Auth request failed for {endpoint}: {str(e)}") from e

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Exchange email and password for a session.

        Raises:
            InvalidCredentialsError: If the credentials are rejected
            AuthClientError: For any other failure
        """
        response = await self._request(
            "POST",
            "/token",
            data={"email": email, "password": password},
            params={"grant_type": "password"},
        )
        if response.status_code in (400, 401):
            message = extract_error_message(response)
            logger.warning("Sign-in rejected", email=email, status_code=response.status_code)
            raise InvalidCredentialsError(message or "Invalid login credentials")
        if response.status_code != 200:
            logger.error("Sign-in failed", email=email, status_code=response.status_code)
            raise AuthClientError(f"Sign-in failed: {extract_error_message(response)}")

        session = Session.model_validate(response.json())
        logger.info("Signed in", email=session.user.email, expires_in=session.expires_in)
        return session

    async def sign_out(self, access_token: str) -> None:
        """Revoke a session on the backend."""
        response = await self._request("POST", "/logout", access_token=access_token)
        if response.status_code not in (200, 204, 401):
            logger.error("Sign-out failed", status_code=response.status_code)
            raise AuthClientError(f"Sign-out failed: {extract_error_message(response)}")
        logger.info("Signed out")

    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        """Return the identity behind a token, or None when the token is no longer valid."""
        response = await self._request("GET", "/user", access_token=access_token)
        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            raise AuthClientError(f"User lookup failed: {extract_error_message(response)}")
        return AuthUser.model_validate(response.json())

"""Holds the signed-in session and the matching application user."""

import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from structlog import get_logger

from frontdesk.clients import query as q
from frontdesk.clients.auth_client import AuthClient
from frontdesk.clients.data_store_client import DataStoreClient, DataStoreClientError
from frontdesk.clients.redis_session_cache import RedisSessionCache
from frontdesk.errors import FrontDeskError
from frontdesk.models.user import AppUser, AuthUser, Session, UserRole

logger = get_logger(__name__)

USERS_TABLE = "users"

SessionListener = Callable[[Optional[Session]], Union[None, Awaitable[None]]]


class SessionManager:
    """Tracks the current session and notifies listeners when it changes.

    On every change the data store client is switched to the session's
    token (or back to the anon key) and the session cache is updated.
    """

    def __init__(
        self,
        auth_client: AuthClient,
        store: DataStoreClient,
        cache: Optional[RedisSessionCache] = None,
    ):
        self.auth_client = auth_client
        self.store = store
        self.cache = cache
        self.session: Optional[Session] = None
        self.current_user: Optional[AppUser] = None
        self._listeners: list[SessionListener] = []

    @property
    def role(self) -> Optional[UserRole]:
        return self.current_user.role if self.current_user else None

    @property
    def is_signed_in(self) -> bool:
        return self.session is not None

    def on_change(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener called with the new session (or None on sign-out).

        Returns:
            Function that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _set_session(self, session: Optional[Session]) -> None:
        self.session = session
        self.store.set_access_token(session.access_token if session else None)
        if session is None:
            structlog.contextvars.unbind_contextvars("operator")
        else:
            structlog.contextvars.bind_contextvars(operator=session.user.email)

        if self.cache is not None:
            if session is None:
                await self.cache.clear()
            else:
                await self.cache.store_session(session)

        self.current_user = await self.fetch_or_create_user(session.user) if session else None

        for listener in list(self._listeners):
            result = listener(session)
            if inspect.isawaitable(result):
                await result

    async def restore(self) -> Optional[Session]:
        """Restore a cached session if it is still valid on the backend."""
        if self.cache is None:
            return None
        session = await self.cache.get_session()
        if session is None:
            return None
        user = await self.auth_client.get_user(session.access_token)
        if user is None:
            logger.info("Cached session rejected by backend, discarding")
            await self.cache.clear()
            return None
        await self._set_session(session)
        logger.info("Session restored", email=session.user.email)
        return session

    async def sign_in(self, email: str, password: str) -> Session:
        """Sign in with email and password.

        Raises:
            InvalidCredentialsError: If the credentials are rejected
        """
        session = await self.auth_client.sign_in_with_password(email, password)
        await self._set_session(session)
        return session

    async def sign_out(self) -> None:
        """Revoke the current session and clear local state.

        Local state is cleared even when the backend call fails; the
        failure is re-raised afterwards.
        """
        try:
            if self.session is not None:
                await self.auth_client.sign_out(self.session.access_token)
        finally:
            await self._set_session(None)

    async def fetch_or_create_user(self, auth_user: AuthUser) -> Optional[AppUser]:
        """Find the application user for an identity, creating it on first sign-in.

        Failures are logged and return None: the session stays valid without
        a role.
        """
        try:
            row = await self.store.select_one(
                USERS_TABLE,
                filters=[q.eq("auth_user_id", auth_user.id)],
            )
            if row is None:
                new_user: dict[str, Any] = {
                    "auth_user_id": auth_user.id,
                    "email": auth_user.email,
                }
                row = await self.store.insert(USERS_TABLE, new_user)
                logger.info("Created application user", auth_user_id=auth_user.id)
            return AppUser.from_row(row)
        except (DataStoreClientError, FrontDeskError) as e:
            logger.error(
                "Failed to load application user",
                auth_user_id=auth_user.id,
                error=str(e),
            )
            return None

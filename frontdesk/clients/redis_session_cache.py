"""Redis-backed cache for the signed-in session."""

from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError
from structlog import get_logger

from frontdesk.config import Settings, settings as default_settings
from frontdesk.models.user import Session

logger = get_logger(__name__)


class RedisSessionCache:
    """Keeps the current session in Redis so a restarted process can restore it.

    Cache failures never break sign-in: reads fall back to "no session" and
    writes are logged and skipped.
    """

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        redis_client: Optional[redis.Redis] = None,
    ):
        """Initialize Redis client for session caching."""
        cfg = app_settings or default_settings
        self.key = cfg.session.cache_key
        self.redis_client = redis_client or redis.Redis(
            host=cfg.redis.host,
            port=cfg.redis.port,
            db=cfg.redis.db,
            password=cfg.redis.password,
            ssl=cfg.redis.ssl,
            decode_responses=True,
            socket_timeout=cfg.redis.socket_timeout,
            socket_connect_timeout=cfg.redis.socket_connect_timeout,
        )

    async def get_session(self) -> Optional[Session]:
        """Get the cached session.

        Returns:
            Cached session if present and not expired, None otherwise
        """
        try:
            raw = await self.redis_client.get(self.key)
        except Exception as e:
            logger.warning("Redis get operation failed", error=str(e))
            return None
        if not raw:
            return None
        try:
            session = Session.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable cached session", error=str(e))
            return None
        if session.is_expired():
            logger.debug("Cached session expired")
            return None
        return session

    async def store_session(self, session: Session) -> None:
        """Store the session with a TTL matching its remaining lifetime."""
        ttl = max(1, session.seconds_left())
        try:
            await self.redis_client.setex(self.key, ttl, session.model_dump_json())
            logger.info("Stored session in Redis", ttl_seconds=ttl)
        except Exception as e:
            logger.warning(
                "Failed to store session in Redis (session still active)",
                error=str(e),
            )

    async def clear(self) -> None:
        try:
            await self.redis_client.delete(self.key)
        except Exception as e:
            logger.warning("Failed to clear cached session", error=str(e))

    async def close(self) -> None:
        """Close Redis connection."""
        try:
            await self.redis_client.close()
            logger.debug("Closed Redis connection")
        except Exception as e:
            logger.warning("Error closing Redis connection", error=str(e))

"""Helpers shared by the front desk services."""

from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Iterator, Optional
from zoneinfo import ZoneInfo

from structlog import get_logger

from frontdesk.clients.data_store_client import DataStoreClientError
from frontdesk.errors import PersistenceError

logger = get_logger(__name__)

TodayProvider = Callable[[], date]


def local_today(timezone: Optional[str] = None) -> date:
    """Current calendar date in the hotel's time zone, or the host's when unset."""
    if timezone:
        return datetime.now(ZoneInfo(timezone)).date()
    return datetime.now().astimezone().date()


def today_provider(timezone: Optional[str] = None) -> TodayProvider:
    return lambda: local_today(timezone)


@contextmanager
def store_errors(context: str, **log_context) -> Iterator[None]:
    """Re-raise data store failures as PersistenceError prefixed with context.

    Usage:
        with store_errors("Failed to load rooms"):
            rows = await store.select("rooms")
    """
    try:
        yield
    except DataStoreClientError as e:
        logger.error(context, error=str(e), status_code=e.status_code, **log_context)
        raise PersistenceError(f"{context}: {e}") from e

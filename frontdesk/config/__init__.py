"""Configuration package."""

from frontdesk.config.logging import configure_logging, get_logger
from frontdesk.config.settings import Settings, settings

__all__ = ["settings", "Settings", "configure_logging", "get_logger"]

"""Debug logging for the Laundry Drying integration."""

from __future__ import annotations

import logging
from typing import Any

from ..const import CONF_ENABLE_DEBUG

_LOGGER = logging.getLogger(__name__)


class DryingLogger:
    """Category-tagged debug logger gated by the entry's debug flag."""

    CATEGORIES = (
        "weather",
        "session",
        "calibration",
        "coordinator",
    )

    def __init__(self, context: Any) -> None:
        """Initialize the logger context."""
        self.context = context
        # context can be a coordinator or a dict

    def debug(self, category: str, message: str, *args: Any) -> None:
        """Log a debug message if debugging is enabled for this entry."""
        if not self._is_enabled(category):
            return

        # Prefix with category for easier filtering
        prefix = f"[{category.upper()}] "

        name = None
        if isinstance(self.context, dict):
            name = self.context.get("name")
        else:
            name = getattr(self.context, "name", None)

        if name:
            prefix += f"({name}) "

        _LOGGER.debug(prefix + message, *args)

    @property
    def enabled(self) -> bool:
        """Return True if the entry's debug flag is on."""
        config = self._get_config()
        return bool(config and config.get(CONF_ENABLE_DEBUG, False))

    def _is_enabled(self, category: str) -> bool:
        """Check if a debug category is enabled."""
        if category.lower() not in self.CATEGORIES:
            return False
        return self.enabled

    def _get_config(self) -> dict | None:
        """Get the config dictionary from context."""
        if isinstance(self.context, dict):
            return self.context

        config = getattr(self.context, "config", None)
        if not isinstance(config, dict):
            return None

        return config

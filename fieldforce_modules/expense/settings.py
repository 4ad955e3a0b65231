"""
Expense Settings Provider (``fieldforce_modules.expense.settings``).

Holds the active ``AppSettings`` rate table.  Admin screens update it
through ``update`` / ``reset``; everything else only reads it via ``get``
and passes the result explicitly into the engines.  There is no
module-level settings singleton.
"""

from __future__ import annotations

import dataclasses
import threading
from pathlib import Path
from typing import Any, Self

from fieldforce_config.loader import (
    compute_checksum,
    load_app_settings,
    parse_settings_fields,
)
from fieldforce_kernel.logging_config import get_logger
from fieldforce_modules.expense.models import AppSettings

logger = get_logger("modules.expense.settings")


class SettingsProvider:
    """Read/update access to the allowance rate table."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        defaults: AppSettings | None = None,
    ):
        self._defaults = defaults or AppSettings()
        self._settings = settings or self._defaults
        self._lock = threading.Lock()

    @classmethod
    def from_yaml(cls, path: Path) -> Self:
        """Create a provider whose active and reset-to settings come from YAML."""
        settings = load_app_settings(path)
        return cls(settings=settings, defaults=settings)

    def get(self) -> AppSettings:
        """Return the active settings snapshot."""
        return self._settings

    def update(self, **changes: Any) -> AppSettings:
        """Apply a partial update and return the new settings.

        Raises:
            InvalidSettingsError: on unknown fields or malformed values.
        """
        parsed = parse_settings_fields(changes)
        with self._lock:
            self._settings = dataclasses.replace(self._settings, **parsed)
            new = self._settings
        logger.info(
            "app_settings_updated",
            extra={
                "fields": sorted(parsed),
                "checksum": compute_checksum(new),
            },
        )
        return new

    def reset(self) -> AppSettings:
        """Restore the default settings."""
        with self._lock:
            self._settings = self._defaults
        logger.info("app_settings_reset")
        return self._settings

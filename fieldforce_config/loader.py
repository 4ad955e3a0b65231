"""
Configuration Loader (``fieldforce_config.loader``).

Responsibility
--------------
Loads expense settings YAML files and parses them into the frozen
``AppSettings`` dataclass.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Consumed by
``SettingsProvider.from_yaml``.  Depends only on module DTOs.

Invariants enforced
-------------------
* Parse errors raise ``InvalidSettingsError`` naming the offending field;
  no silent defaults for malformed values.
* Unknown keys are rejected (a typo must not silently fall back to a
  default rate).
* Numeric rates are parsed via ``str`` into ``Decimal`` -- never through
  float arithmetic.
* Rates are NOT range-checked: negative or zero rates are the admin's
  decision.  Only ``expense_entry_start_hour`` must be an hour of day.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid field (including NaN or infinite rates)  -> ``InvalidSettingsError``.

Document shape::

    expense_settings:
      mr_da_local: 100
      ta_per_km: 2.5
      expense_entry_start_hour: 20
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from fieldforce_kernel.exceptions import InvalidSettingsError
from fieldforce_kernel.logging_config import get_logger
from fieldforce_modules.expense.models import AppSettings

logger = get_logger("config.loader")

SETTINGS_KEY = "expense_settings"

_DECIMAL_FIELDS = frozenset(
    f.name for f in dataclasses.fields(AppSettings)
    if f.name not in ("expense_entry_start_hour", "company_logo")
)
_KNOWN_FIELDS = frozenset(f.name for f in dataclasses.fields(AppSettings))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(field: str, value: Any) -> Decimal:
    """Parse a YAML scalar into Decimal without going through float math."""
    if isinstance(value, bool):
        raise InvalidSettingsError(field, f"expected a number, got {value!r}")
    try:
        parsed = Decimal(str(value))
    except InvalidOperation:
        raise InvalidSettingsError(field, f"expected a number, got {value!r}")
    if not parsed.is_finite():
        raise InvalidSettingsError(field, f"expected a finite number, got {value!r}")
    return parsed


def parse_hour(field: str, value: Any) -> int:
    """Parse an hour-of-day (0-23)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSettingsError(field, f"expected an integer hour, got {value!r}")
    if not 0 <= value <= 23:
        raise InvalidSettingsError(field, f"hour must be between 0 and 23, got {value}")
    return value


def parse_settings_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Validate and coerce a partial mapping of ``AppSettings`` fields.

    Used both for whole documents and for admin partial updates.

    Raises:
        InvalidSettingsError: on unknown keys or malformed values.
    """
    parsed: dict[str, Any] = {}
    for key, value in data.items():
        if key not in _KNOWN_FIELDS:
            raise InvalidSettingsError(key, "unknown setting")
        if key in _DECIMAL_FIELDS:
            parsed[key] = parse_decimal(key, value)
        elif key == "expense_entry_start_hour":
            parsed[key] = parse_hour(key, value)
        else:
            parsed[key] = None if value is None else str(value)
    return parsed


def parse_app_settings(
    data: dict[str, Any],
    base: AppSettings | None = None,
) -> AppSettings:
    """
    Parse an ``AppSettings`` from a settings document.

    Fields missing from the document keep the value from ``base``
    (defaults when ``base`` is None).

    Raises:
        InvalidSettingsError: if the document shape or a value is invalid.
    """
    section = data.get(SETTINGS_KEY, data)
    if not isinstance(section, dict):
        raise InvalidSettingsError(SETTINGS_KEY, "expected a mapping of settings")
    return dataclasses.replace(base or AppSettings(), **parse_settings_fields(section))


def compute_checksum(settings: AppSettings) -> str:
    """Deterministic SHA-256 of the settings, for change detection."""
    payload = {
        name: str(value) if value is not None else None
        for name, value in dataclasses.asdict(settings).items()
    }
    canonical = json.dumps(payload, sort_keys=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_app_settings(path: Path) -> AppSettings:
    """Load and parse a settings YAML file."""
    settings = parse_app_settings(load_yaml_file(path))
    logger.info(
        "app_settings_loaded",
        extra={
            "path": str(path),
            "checksum": compute_checksum(settings),
        },
    )
    return settings

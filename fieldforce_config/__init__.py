"""
Configuration layer (``fieldforce_config``).

Loads the admin-curated allowance rate table from YAML.

Usage:
    from fieldforce_config import load_app_settings
    settings = load_app_settings(Path("config/expense_settings.yaml"))
"""

from fieldforce_config.loader import (
    compute_checksum,
    load_app_settings,
    load_yaml_file,
    parse_app_settings,
    parse_settings_fields,
)

__all__ = [
    "compute_checksum",
    "load_app_settings",
    "load_yaml_file",
    "parse_app_settings",
    "parse_settings_fields",
]

"""
ROS Core Config — Public API
===============================
Admin-configurable rules (record types, override allow-list, timezone).
Doctrine: No hardcoded record types in engine logic.
"""

from core.config.rules import (
    DEFAULT_OVERRIDE_FIELDS,
    DEFAULT_RECORD_TYPES,
    SUB_KIND_AGENTS,
    SUB_KIND_PAYMENTS,
    SUB_KIND_WORKERS,
    SUB_KINDS,
    ConfigStore,
    InMemoryConfigStore,
    RecordTypeRule,
    load_config_from_settings,
)

__all__ = [
    "DEFAULT_OVERRIDE_FIELDS",
    "DEFAULT_RECORD_TYPES",
    "SUB_KIND_AGENTS",
    "SUB_KIND_PAYMENTS",
    "SUB_KIND_WORKERS",
    "SUB_KINDS",
    "ConfigStore",
    "InMemoryConfigStore",
    "RecordTypeRule",
    "load_config_from_settings",
]

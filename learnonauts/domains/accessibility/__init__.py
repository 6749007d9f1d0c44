"""
Accessibility Domain - Per-user preference storage and reconciliation.

This domain handles:
- The preference schema, defaults and wire names
- Alias translation and value coercion for client updates
- Reads that tolerate a store missing newer columns
"""

from .contracts import SettingsStore
from .models import (
    ALIASES,
    ALL_COLUMNS,
    DEFAULTS,
    EXTENDED_COLUMNS,
    FIELDS,
    LEGACY_COLUMNS,
    SettingField,
    SettingsSnapshot,
    SettingsUpdateResult,
)
from .reconciler import SettingsReconciler, translate

__all__ = [
    # Contracts
    "SettingsStore",
    # Models
    "SettingField",
    "SettingsSnapshot",
    "SettingsUpdateResult",
    "FIELDS",
    "ALIASES",
    "ALL_COLUMNS",
    "LEGACY_COLUMNS",
    "EXTENDED_COLUMNS",
    "DEFAULTS",
    # Implementations
    "SettingsReconciler",
    "translate",
]

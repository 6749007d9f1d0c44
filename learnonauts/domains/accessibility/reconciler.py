"""
Settings Reconciler - Map loose client input onto the stored preference schema.

Clients send a mix of camelCase, snake_case and older spellings. Only keys
found in the alias table are kept; everything else is ignored. Reads and
writes tolerate a store that only has the legacy columns.
"""

from __future__ import annotations

import logging
from typing import Any

from learnonauts.config import InvalidInputError, SchemaOutdatedError

from .contracts import SettingsStore
from .models import (
    ALIASES,
    ALL_COLUMNS,
    DEFAULTS,
    FIELDS_BY_COLUMN,
    LEGACY_COLUMNS,
    SettingsSnapshot,
    SettingsUpdateResult,
)

logger = logging.getLogger(__name__)

__all__ = ["SettingsReconciler", "translate"]

_TEXT_NUMERIC = frozenset({"speech_speed", "speech_volume"})
_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


def _number_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _coerce(column: str, key: str, value: Any) -> Any:
    if column == "cognitive_load" and isinstance(value, bool):
        return "full" if value else "minimal"

    if column in _TEXT_NUMERIC:
        if isinstance(value, (int, float, str)) and not isinstance(value, bool):
            return _number_text(value)
        raise InvalidInputError(f"{key} must be a number", {"field": key})

    if FIELDS_BY_COLUMN[column].is_flag:
        if isinstance(value, (bool, int)):
            return bool(value)
        if isinstance(value, str) and value.lower() in _TRUE_STRINGS | _FALSE_STRINGS:
            return value.lower() in _TRUE_STRINGS
        raise InvalidInputError(f"{key} must be a boolean", {"field": key})

    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _number_text(value)
    raise InvalidInputError(f"{key} must be a string", {"field": key})


def translate(update: dict[str, Any]) -> dict[str, Any]:
    """
    Translate a client update into ``{column: value}``.

    Unknown keys and null values are dropped. When several spellings of the
    same column are present, the last one wins.

    Raises:
        InvalidInputError: a recognised key carries an unusable value
    """
    translated: dict[str, Any] = {}
    for key, value in update.items():
        column = ALIASES.get(key)
        if column is None or value is None:
            continue
        translated[column] = _coerce(column, key, value)
    return translated


def _resolve(row: dict[str, Any] | None) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for column in ALL_COLUMNS:
        value = row.get(column) if row else None
        if value is None or value == "":
            value = DEFAULTS[column]
        elif FIELDS_BY_COLUMN[column].is_flag:
            value = bool(value)
        values[column] = value
    return values


class SettingsReconciler:
    """
    Read and write a user's accessibility settings.

    Example:
        >>> reconciler = SettingsReconciler(repo)
        >>> result = await reconciler.apply("ada@example.com", {"darkMode": True})
        >>> result.snapshot.to_wire()["darkMode"]
        True
    """

    def __init__(self, store: SettingsStore) -> None:
        self._store = store

    async def load(self, email: str) -> SettingsSnapshot:
        """
        Load settings, filling every missing field with its default.

        Falls back to the legacy columns when the store lacks newer ones, and
        to plain defaults when even those are missing.
        """
        degraded = False
        try:
            row = await self._store.get_settings(email, ALL_COLUMNS)
        except SchemaOutdatedError as e:
            logger.warning(
                "Settings store is missing columns (%s), reading legacy columns only",
                e.details.get("column"),
            )
            degraded = True
            try:
                row = await self._store.get_settings(email, LEGACY_COLUMNS)
            except SchemaOutdatedError as legacy_error:
                logger.error(
                    "Settings store is missing legacy column %s, returning defaults",
                    legacy_error.details.get("column"),
                )
                row = None

        return SettingsSnapshot(
            email=email,
            values=_resolve(row),
            degraded=degraded,
            stored=row is not None,
        )

    async def _write(
        self, email: str, values: dict[str, Any], exists: bool, columns: tuple[str, ...]
    ) -> None:
        if exists:
            await self._store.update_settings(email, values)
        else:
            defaults = {c: DEFAULTS[c] for c in columns}
            await self._store.insert_settings(email, {**defaults, **values})

    async def apply(self, email: str, update: Any) -> SettingsUpdateResult:
        """
        Apply a client update.

        Nothing is written when no key is recognised. A first save inserts
        a full row of defaults overlaid with the update; later saves only
        touch the translated columns.

        Raises:
            InvalidInputError: body is not an object, or a value is unusable
        """
        if not isinstance(update, dict):
            raise InvalidInputError("Settings object is required")

        translated = translate(update)
        if not translated:
            logger.info("Settings update for %s had no recognised keys", email)
            return SettingsUpdateResult(snapshot=await self.load(email))

        exists = await self._store.settings_exist(email)
        written = list(translated)
        skipped: list[str] = []
        try:
            await self._write(email, translated, exists, ALL_COLUMNS)
        except SchemaOutdatedError:
            narrowed = {c: v for c, v in translated.items() if c in LEGACY_COLUMNS}
            written = list(narrowed)
            skipped = [c for c in translated if c not in narrowed]
            logger.warning(
                "Settings store needs migration; not saving %s", ", ".join(skipped)
            )
            if narrowed or not exists:
                await self._write(email, narrowed, exists, LEGACY_COLUMNS)

        logger.debug("Saved settings for %s: %s", email, ", ".join(written))
        return SettingsUpdateResult(
            snapshot=await self.load(email),
            written=written,
            skipped=skipped,
        )

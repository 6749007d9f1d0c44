"""
Accessibility Models - The preference schema and its wire representation.

Columns are split into the legacy set (present since settings were first
stored) and the extended set added later. Stores that have not been
migrated only hold the legacy set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class SettingField:
    """One stored preference."""

    column: str
    wire: str
    default: bool | str
    extended: bool = False

    @property
    def is_flag(self) -> bool:
        return isinstance(self.default, bool)


FIELDS: tuple[SettingField, ...] = (
    # Display
    SettingField("font_size", "fontSize", "medium"),
    SettingField("color_theme", "colorTheme", "default"),
    SettingField("dark_mode", "darkMode", False),
    SettingField("reduced_motion", "reducedMotion", False),
    # Speech
    SettingField("speech_enabled", "speechEnabled", False),
    SettingField("speech_speed", "speechSpeed", "1"),
    SettingField("speech_volume", "speechVolume", "0.8"),
    SettingField("speech_instructions", "speechInstructions", False),
    # Reading
    SettingField("reading_guide", "readingGuide", False),
    SettingField("text_spacing", "textSpacing", "normal"),
    SettingField("color_overlay", "colorOverlay", "none"),
    # Focus
    SettingField("break_reminders", "breakReminders", False),
    SettingField("sensory_breaks", "sensoryBreaks", False),
    SettingField("simplified_ui", "simplifiedUi", False),
    SettingField("minimal_mode", "minimalMode", False),
    SettingField("visible_timers", "visibleTimers", False),
    SettingField("cognitive_load", "cognitiveLoad", "full"),
    # Feedback
    SettingField("error_handling_style", "errorHandlingStyle", "standard"),
    SettingField("learning_style", "learningStyle", "visual"),
    # Added by the extend_settings migration
    SettingField("focus_outlines", "focusOutlines", False, extended=True),
    SettingField("audio_feedback", "audioFeedback", False, extended=True),
    SettingField("sound_effects", "soundEffects", False, extended=True),
    SettingField("line_height", "lineHeight", "normal", extended=True),
    SettingField("word_spacing", "wordSpacing", "normal", extended=True),
    SettingField("focus_sessions", "focusSessions", False, extended=True),
    SettingField("distraction_reduction", "distractionReduction", False, extended=True),
    SettingField("feedback_style", "feedbackStyle", "mixed", extended=True),
)

FIELDS_BY_COLUMN: dict[str, SettingField] = {f.column: f for f in FIELDS}
ALL_COLUMNS: tuple[str, ...] = tuple(f.column for f in FIELDS)
LEGACY_COLUMNS: tuple[str, ...] = tuple(f.column for f in FIELDS if not f.extended)
EXTENDED_COLUMNS: tuple[str, ...] = tuple(f.column for f in FIELDS if f.extended)
DEFAULTS: dict[str, bool | str] = {f.column: f.default for f in FIELDS}

# Spellings older frontends still send
_LEGACY_ALIASES = {
    "speechSynthesis": "speech_enabled",
    "instructionsAloud": "speech_instructions",
    "letterSpacing": "text_spacing",
    "simplifiedUI": "simplified_ui",
    "errorStyle": "error_handling_style",
}

ALIASES: dict[str, str] = {
    **{f.wire: f.column for f in FIELDS},
    **{f.column: f.column for f in FIELDS},
    **_LEGACY_ALIASES,
}


class SettingsSnapshot(BaseModel):
    """
    A complete set of preferences for one user.

    ``values`` always holds every column. ``degraded`` is set when the store
    could only supply legacy columns and the rest were filled with defaults.
    ``stored`` is False when the user has never saved settings.
    """

    model_config = ConfigDict(frozen=True)

    email: str
    values: dict[str, Any]
    degraded: bool = False
    stored: bool = True

    def to_wire(self) -> dict[str, Any]:
        """camelCase representation returned to clients."""
        wire: dict[str, Any] = {"userEmail": self.email}
        for field in FIELDS:
            wire[field.wire] = self.values[field.column]
        # Older frontends read soundEnabled
        wire["soundEnabled"] = self.values["audio_feedback"]
        return wire


class SettingsUpdateResult(BaseModel):
    """Outcome of applying a client update."""

    model_config = ConfigDict(frozen=True)

    snapshot: SettingsSnapshot
    written: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

    @property
    def needs_migration(self) -> bool:
        return bool(self.skipped)

"""Timer configuration and its persistence."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from focusguard.errors import PersistenceError
from focusguard.models.session import SessionKind
from focusguard.storage.kv_store import KeyValueStore
from focusguard.utils.logger import get_logger

SETTINGS_KEY = "userSettings"

logger = get_logger(__name__)


class BlockingMode(str, Enum):
    """Which apps stay usable during a focus session."""

    STRICT = "strict"
    WHITELIST = "whitelist"
    RELAXED = "relaxed"

    @classmethod
    def _missing_(cls, value: object) -> "BlockingMode | None":
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "relax":
                return cls.RELAXED
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def display_name(self) -> str:
        return self.value.title()

    @property
    def description(self) -> str:
        return {
            BlockingMode.STRICT: "Block all apps during focus time",
            BlockingMode.WHITELIST: "Only use selected apps during focus time",
            BlockingMode.RELAXED: "No app blocking (honor system)",
        }[self]


class TimerConfiguration(BaseModel):
    """User-configurable timer settings. Durations are in seconds."""

    focus_duration: int = Field(default=25 * 60, gt=0)
    short_break_duration: int = Field(default=5 * 60, gt=0)
    long_break_duration: int = Field(default=15 * 60, gt=0)
    sessions_before_long_break: int = Field(default=4, gt=0)
    blocking_mode: BlockingMode = Field(default=BlockingMode.STRICT)
    allow_list: list[str] = Field(
        default_factory=list, description="Apps still usable in whitelist mode"
    )

    @field_validator("allow_list")
    @classmethod
    def _dedupe_allow_list(cls, v: list[str]) -> list[str]:
        seen: list[str] = []
        for app in v:
            app = app.strip()
            if app and app not in seen:
                seen.append(app)
        return seen

    def duration_for(self, kind: SessionKind) -> int:
        """Get duration in seconds for a session kind."""
        if kind is SessionKind.FOCUS:
            return self.focus_duration
        if kind is SessionKind.SHORT_BREAK:
            return self.short_break_duration
        return self.long_break_duration


class SettingsManager:
    """Loads and saves the TimerConfiguration under ``userSettings``."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._config: TimerConfiguration | None = None

    @property
    def config(self) -> TimerConfiguration:
        """Get the current configuration, loading it on first access."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> TimerConfiguration:
        """Load settings; any failure falls back to defaults."""
        try:
            raw = self.store.get(SETTINGS_KEY)
        except PersistenceError as e:
            logger.warning("Could not read settings, using defaults: %s", e)
            return TimerConfiguration()
        if raw is None:
            return TimerConfiguration()
        try:
            return TimerConfiguration.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Invalid stored settings, using defaults: %s", e)
            return TimerConfiguration()

    def save_config(self, config: TimerConfiguration | None = None) -> None:
        """Persist the configuration.

        Raises:
            PersistenceError: If the store cannot be written.
        """
        if config is not None:
            self._config = config
        self.store.set(SETTINGS_KEY, self.config.model_dump_json())

    def update(self, **changes: Any) -> TimerConfiguration:
        """Validate *changes* against the current settings and persist them."""
        data = self.config.model_dump()
        data.update(changes)
        config = TimerConfiguration.model_validate(data)
        self.save_config(config)
        logger.info("Settings updated: %s", ", ".join(sorted(changes)))
        return config

    def get(self, key: str) -> Any:
        """Get a single setting by name."""
        if key not in TimerConfiguration.model_fields:
            raise KeyError(key)
        return getattr(self.config, key)

    def set(self, key: str, value: Any) -> TimerConfiguration:
        """Set a single setting by name."""
        if key not in TimerConfiguration.model_fields:
            raise KeyError(key)
        return self.update(**{key: value})

    def reset(self) -> TimerConfiguration:
        """Reset configuration to defaults."""
        self.save_config(TimerConfiguration())
        return self.config

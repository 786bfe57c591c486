"""
Domain models for taskcal.

This module contains the raw records produced by the EventKit gateways,
the unified display item they are normalized into, and the application
configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4
import os
import json
import logging

from .exceptions import ConfigurationError
from .paths import get_path_manager


logger = logging.getLogger(__name__)


def _normalize_path(path: str) -> str:
    """Expand user and convert to absolute path."""
    return os.path.abspath(os.path.expanduser(path))


class ItemKind(Enum):
    """Kind of record a unified item was built from."""

    TASK = "task"
    EVENT = "event"


@dataclass
class ReminderRecord:
    """A reminder as read from the store.

    ``due`` is naive local time; date-only reminders land on midnight with
    ``has_time`` False.
    """

    identifier: str
    title: Optional[str]
    completed: bool
    due: Optional[datetime] = None
    has_time: bool = False
    list_name: Optional[str] = None
    native: Any = field(default=None, repr=False, compare=False)


@dataclass
class EventRecord:
    """A calendar event as read from the store."""

    identifier: Optional[str]
    title: Optional[str]
    start: Optional[datetime]
    end: Optional[datetime] = None
    is_all_day: bool = False
    calendar_name: Optional[str] = None
    native: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class AccessGrant:
    """Result of asking the store for reminders and calendar access."""

    tasks_granted: bool
    events_granted: bool

    @property
    def granted(self) -> bool:
        return self.tasks_granted and self.events_granted


@dataclass(frozen=True)
class UnifiedItem:
    """One row of the merged agenda, built from a reminder or an event."""

    stable_id: str
    title: str
    occurs_at: Optional[datetime]
    kind: ItemKind
    is_completed: bool = False
    list_name: Optional[str] = None
    is_all_day: bool = False
    has_explicit_time: bool = True
    source_ref: Any = field(default=None, repr=False, compare=False)
    id: str = field(default_factory=lambda: str(uuid4()), compare=False)

    @property
    def is_task(self) -> bool:
        return self.kind is ItemKind.TASK

    @property
    def is_event(self) -> bool:
        return self.kind is ItemKind.EVENT

    def time_label(self) -> Optional[str]:
        """Short time description shown next to the title."""
        if self.is_event and self.is_all_day:
            return "All Day Event"
        if self.is_task and not self.has_explicit_time:
            return "Anytime task"
        if self.occurs_at is None:
            return None
        return self.occurs_at.strftime("%H:%M")


@dataclass
class AppConfig:
    """Configuration for loading and displaying the agenda."""

    reminder_list_ids: List[str] = field(default_factory=list)
    calendar_ids: List[str] = field(default_factory=list)
    # Load windows
    task_window_past_days: int = 7
    task_window_future_days: int = 14
    event_window_days: int = 21
    # Timing (seconds)
    reload_delay: float = 0.1
    access_timeout: float = 30.0
    fetch_timeout: float = 30.0
    state_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.state_path is None:
            self.state_path = str(get_path_manager().state_path)
        else:
            self.state_path = _normalize_path(self.state_path)

        if self.task_window_past_days < 0 or self.task_window_future_days < 0:
            raise ConfigurationError("Task window offsets must not be negative")
        if self.event_window_days <= 0:
            raise ConfigurationError("Event window must span at least one day")

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    @classmethod
    def load_from_file(cls, config_path: str) -> AppConfig:
        config_path = _normalize_path(config_path)
        if not os.path.exists(config_path):
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable config {config_path}: {e}")
            return cls()

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config {config_path}: expected a JSON object")
            return cls()

        windows = data.get("windows", {})
        timing = data.get("timing", {})
        paths = data.get("paths", {})

        try:
            return cls(
                reminder_list_ids=list(data.get("reminder_list_ids", [])),
                calendar_ids=list(data.get("calendar_ids", [])),
                task_window_past_days=int(windows.get("task_past_days", 7)),
                task_window_future_days=int(windows.get("task_future_days", 14)),
                event_window_days=int(windows.get("event_days", 21)),
                reload_delay=float(timing.get("reload_delay", 0.1)),
                access_timeout=float(timing.get("access_timeout", 30.0)),
                fetch_timeout=float(timing.get("fetch_timeout", 30.0)),
                state_path=paths.get("state"),
            )
        except (TypeError, ValueError, ConfigurationError) as e:
            logger.warning(f"Invalid values in config {config_path}, using defaults: {e}")
            return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reminder_list_ids": self.reminder_list_ids,
            "calendar_ids": self.calendar_ids,
            "windows": {
                "task_past_days": self.task_window_past_days,
                "task_future_days": self.task_window_future_days,
                "event_days": self.event_window_days,
            },
            "timing": {
                "reload_delay": self.reload_delay,
                "access_timeout": self.access_timeout,
                "fetch_timeout": self.fetch_timeout,
            },
            "paths": {
                "state": self.state_path,
            },
        }

    def save_to_file(self, config_path: str) -> None:
        config_path = _normalize_path(config_path)
        os.makedirs(os.path.dirname(config_path), exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as handle:
            json.dump(self.to_dict(), handle, indent=2, ensure_ascii=False)

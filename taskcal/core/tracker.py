"""Persisted completion marks for calendar events."""

import threading
from pathlib import Path
from typing import FrozenSet, Optional, Set
import logging

from .models import UnifiedItem
from .paths import get_path_manager
from ..utils.io import safe_read_json, safe_write_json


class CompletionTracker:
    """Tracks events the user marked complete.

    EventKit has no completion flag for events, so marks are kept locally,
    keyed by stable id. Loads never touch them and they do not expire.
    """

    STATE_KEY = "marked_event_ids"

    def __init__(self, state_path: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        if state_path is None:
            state_path = str(get_path_manager().state_path)
        self.state_file = Path(state_path).expanduser()
        self._lock = threading.Lock()
        self._marked: Set[str] = self._load_marks()

    def _load_marks(self) -> Set[str]:
        data = safe_read_json(str(self.state_file), default={})
        raw = data.get(self.STATE_KEY, [])
        if not isinstance(raw, list):
            self.logger.warning(f"Ignoring malformed {self.STATE_KEY} in {self.state_file}")
            return set()
        marks = {str(value) for value in raw}
        self.logger.debug(f"Loaded {len(marks)} event marks from {self.state_file}")
        return marks

    def _save_marks(self) -> None:
        # Keep any other keys stored alongside the marks
        data = safe_read_json(str(self.state_file), default={})
        data[self.STATE_KEY] = sorted(self._marked)
        if not safe_write_json(str(self.state_file), data):
            self.logger.error(f"Event marks not persisted to {self.state_file}")

    @property
    def marked_ids(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._marked)

    def is_marked(self, stable_id: str) -> bool:
        with self._lock:
            return stable_id in self._marked

    def toggle(self, stable_id: str) -> bool:
        """Flip the mark for stable_id, persist, and return the new state."""
        with self._lock:
            if stable_id in self._marked:
                self._marked.discard(stable_id)
                marked = False
            else:
                self._marked.add(stable_id)
                marked = True
            self._save_marks()

        self.logger.info(f"Event {stable_id} marked {'complete' if marked else 'incomplete'}")
        return marked

    def display_completed(self, item: UnifiedItem) -> bool:
        """Completion state to render: native flag for tasks, mark for events."""
        if item.is_event:
            return self.is_marked(item.stable_id)
        return item.is_completed

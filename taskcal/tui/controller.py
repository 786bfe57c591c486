"""
TUI Controller Module - Handles key input and day navigation.

This module maps key presses onto AppController actions and keeps the
view-only state (selected day, highlighted row, status message).
"""

from __future__ import annotations

import curses
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from taskcal.core.models import UnifiedItem
from taskcal.utils.date import day_title


KEYS_PREV_DAY = (curses.KEY_LEFT, ord('h'))
KEYS_NEXT_DAY = (curses.KEY_RIGHT, ord('l'))
KEYS_TODAY = (ord('t'), ord('0'))
KEYS_UP = (curses.KEY_UP, ord('k'))
KEYS_DOWN = (curses.KEY_DOWN, ord('j'))
KEYS_TOGGLE = (ord(' '), ord('\n'), ord('\r'), curses.KEY_ENTER)
KEYS_MARK = (ord('m'),)
KEYS_REFRESH = (ord('r'),)
KEYS_GRANT = (ord('g'),)
KEYS_QUIT = (ord('q'), 27)


class DayViewController:
    """Handles input processing and view state for the day agenda."""

    POLL_MS = 250

    def __init__(self, view, app, day_offset: int = 0,
                 clock: Optional[Callable[[], datetime]] = None,
                 logger: Optional[logging.Logger] = None):
        self.view = view
        self.app = app
        self.day_offset = day_offset
        self.selected = 0
        self.status = "Ready"
        self.is_running = True
        self._pending: Optional[Any] = None
        self._clock = clock or datetime.now
        self.logger = logger or logging.getLogger(__name__)

    def visible_items(self) -> List[UnifiedItem]:
        return self.app.items_for_day(self.day_offset, self._clock())

    def selected_item(self) -> Optional[UnifiedItem]:
        items = self.visible_items()
        if not items:
            return None
        self.selected = min(max(0, self.selected), len(items) - 1)
        return items[self.selected]

    def build_state(self) -> Dict[str, Any]:
        self._settle_pending()
        snapshot = self.app.snapshot()
        items = self.visible_items()
        if items:
            self.selected = min(max(0, self.selected), len(items) - 1)
        else:
            self.selected = 0
        return {
            'title': day_title(self.day_offset, self._clock()),
            'items': items,
            'selected': self.selected,
            'is_completed': self.app.display_completed,
            'is_loading': snapshot.is_loading,
            'needs_permission': snapshot.needs_permission,
            'error': snapshot.last_error,
            'status': self.status,
        }

    def _settle_pending(self) -> None:
        """Replace the in-progress status once the background load finishes."""
        future = self._pending
        if future is None or not future.done():
            return
        self._pending = None
        if not future.cancelled() and future.exception() is not None:
            self.status = "Refresh failed"
        else:
            self.status = "Ready"

    def change_day(self, delta: Optional[int]) -> None:
        """Move by delta days, or back to today when delta is None."""
        self.day_offset = 0 if delta is None else self.day_offset + delta
        self.selected = 0

    def handle_key(self, ch: int) -> None:
        """Dispatch one key press."""
        if ch in KEYS_QUIT:
            self.is_running = False
            return

        if self.app.needs_permission:
            if ch in KEYS_GRANT:
                self.status = "Requesting access..."
                self._pending = self.app.request_permissions()
            return

        if ch in KEYS_PREV_DAY:
            self.change_day(-1)
        elif ch in KEYS_NEXT_DAY:
            self.change_day(1)
        elif ch in KEYS_TODAY:
            self.change_day(None)
        elif ch in KEYS_UP:
            self.selected = max(0, self.selected - 1)
        elif ch in KEYS_DOWN:
            self.selected += 1
            self.selected_item()
        elif ch in KEYS_REFRESH:
            self.status = "Refreshing..."
            self._pending = self.app.refresh()
        elif ch in KEYS_TOGGLE:
            self._toggle_selected()
        elif ch in KEYS_MARK:
            self._mark_selected()

    def _toggle_selected(self) -> None:
        item = self.selected_item()
        if item is None:
            return
        if not item.is_task:
            self.status = "Events have no completion flag; press 'm' to mark"
            return
        if self.app.toggle_completion(item):
            self.status = f"Updated '{item.title}'"
        else:
            self.status = f"Could not update '{item.title}'"

    def _mark_selected(self) -> None:
        item = self.selected_item()
        if item is None or not item.is_event:
            return
        marked = self.app.toggle_event_mark(item)
        self.status = f"'{item.title}' marked {'complete' if marked else 'incomplete'}"

    def run(self) -> None:
        """Main loop: draw, wait briefly for a key, handle it."""
        self.app.request_permissions()
        self.view.set_poll_timeout(self.POLL_MS)
        while self.is_running:
            self.view.draw(self.build_state())
            ch = self.view.get_user_input()
            if ch == -1:
                continue
            self.handle_key(ch)

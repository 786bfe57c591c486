"""
Application controller - owns the agenda state and the user actions.

The view reads state only through ``snapshot()`` / ``items_for_day()`` and
changes it only through the named action methods below.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, List, Optional
import logging

from .aggregator import DayAggregator
from .exceptions import StoreError
from .models import AppConfig, UnifiedItem
from .normalizer import ItemNormalizer
from .tracker import CompletionTracker


Scheduler = Callable[[float, Callable[[], Any]], Any]


def timer_scheduler(delay: float, callback: Callable[[], Any]) -> threading.Timer:
    """Run callback once after delay seconds on a daemon timer thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


@dataclass
class AppState:
    """Everything the view renders, published as one unit."""

    items: List[UnifiedItem] = field(default_factory=list)
    is_loading: bool = False
    needs_permission: bool = True
    last_error: Optional[str] = None
    loaded_at: Optional[datetime] = None


class AppController:
    """Coordinates the store, normalizer, aggregator and completion tracker."""

    def __init__(self, store, tracker: Optional[CompletionTracker] = None,
                 config: Optional[AppConfig] = None,
                 normalizer: Optional[ItemNormalizer] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 scheduler: Optional[Scheduler] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or AppConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.store = store
        self.tracker = tracker or CompletionTracker(self.config.state_path)
        self.normalizer = normalizer or ItemNormalizer(self.config)
        self._clock = clock or datetime.now
        self._schedule = scheduler or timer_scheduler

        self._lock = threading.Lock()
        self._state = AppState()
        self._aggregator = DayAggregator(clock=self._clock)
        # One worker: loads run one at a time, in the order requested
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="taskcal-load")
        self._pending_reloads: List[Any] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    def snapshot(self) -> AppState:
        """Consistent copy of the published state."""
        with self._lock:
            return replace(self._state, items=list(self._state.items))

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._state.is_loading

    @property
    def needs_permission(self) -> bool:
        with self._lock:
            return self._state.needs_permission

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._state.last_error

    def items_for_day(self, offset: int, now: Optional[datetime] = None) -> List[UnifiedItem]:
        with self._lock:
            return self._aggregator.items_for_day(offset, now)

    def display_completed(self, item: UnifiedItem) -> bool:
        return self.tracker.display_completed(item)

    def _update(self, **changes) -> None:
        with self._lock:
            for name, value in changes.items():
                setattr(self._state, name, value)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def request_permissions(self) -> Future:
        """Ask for store access in the background, loading data if granted."""
        return self._executor.submit(self._request_permissions)

    def refresh(self) -> Future:
        """Reload everything from the store in the background."""
        return self._executor.submit(self._load)

    def _request_permissions(self) -> bool:
        self._update(is_loading=True)
        try:
            grant = self.store.request_access()
        except StoreError as e:
            self.logger.error(f"Could not request store access: {e}")
            self._update(needs_permission=True, is_loading=False, last_error=str(e))
            return False

        if not grant.granted:
            missing = []
            if not grant.tasks_granted:
                missing.append("Reminders")
            if not grant.events_granted:
                missing.append("Calendar")
            message = f"Access to {' and '.join(missing)} was not granted"
            self.logger.warning(message)
            self._update(needs_permission=True, is_loading=False, last_error=message)
            return False

        self._update(needs_permission=False, last_error=None)
        self._load()
        return True

    def _load(self) -> List[UnifiedItem]:
        self._update(is_loading=True)
        try:
            items = self.normalizer.load(self.store, now=self._clock())
        except Exception as e:
            self.logger.exception("Load failed")
            self._update(is_loading=False, last_error=f"Load failed: {e}")
            raise

        with self._lock:
            self._aggregator.replace(items)
            self._state.items = list(items)
            self._state.is_loading = False
            self._state.loaded_at = self._clock()
        return items

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def toggle_completion(self, item: UnifiedItem) -> bool:
        """
        Flip a task's completion in the store, then reload.

        The record is reverted when the save fails. A reload is scheduled
        either way so the list always reflects the store.

        Returns:
            True if the store accepted the change
        """
        record = item.source_ref
        if not item.is_task or record is None:
            self.logger.debug(f"Ignoring completion toggle for non-task item '{item.title}'")
            return False

        record.completed = not record.completed
        saved = False
        try:
            saved = bool(self.store.save_task_completion(record))
        except Exception as e:
            self.logger.error(f"Saving completion for '{item.title}' raised: {e}")
        finally:
            if not saved:
                self.logger.warning(f"Could not save completion for '{item.title}', reverting")
                record.completed = not record.completed
            self._pending_reloads = [
                h for h in self._pending_reloads if getattr(h, "is_alive", lambda: True)()
            ]
            self._pending_reloads.append(
                self._schedule(self.config.reload_delay, self._scheduled_reload)
            )
        return saved

    def _scheduled_reload(self) -> Optional[Future]:
        with self._lock:
            if self._closed:
                return None
            return self._executor.submit(self._load)

    def toggle_event_mark(self, item: UnifiedItem) -> bool:
        """Mark or unmark an event as complete. Returns the new mark."""
        if not item.is_event:
            self.logger.debug(f"Ignoring event mark for task '{item.title}'")
            return False
        return self.tracker.toggle(item.stable_id)

    def shutdown(self) -> None:
        """Cancel pending reloads and stop the load worker."""
        with self._lock:
            self._closed = True
            pending, self._pending_reloads = self._pending_reloads, []
        for handle in pending:
            cancel = getattr(handle, "cancel", None)
            if cancel is not None:
                cancel()
        self._executor.shutdown(wait=False)

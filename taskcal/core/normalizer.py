"""Conversion of raw store records into the unified agenda list."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar
from uuid import uuid4
import logging

from .models import AppConfig, EventRecord, ItemKind, ReminderRecord, UnifiedItem
from ..utils.date import in_window, start_of_day


UNTITLED_TASK = "Untitled"
UNTITLED_EVENT = "Untitled Event"

T = TypeVar("T")


def _sort_key(item: UnifiedItem) -> datetime:
    return item.occurs_at or datetime.min


class ItemNormalizer:
    """Turns reminders and events into one date-sorted list of UnifiedItem."""

    def __init__(self, config: Optional[AppConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or AppConfig()
        self.logger = logger or logging.getLogger(__name__)

    def task_window(self, now: datetime) -> Tuple[datetime, datetime]:
        """Reminders are kept when due in [now - past, now + future)."""
        return (
            now - timedelta(days=self.config.task_window_past_days),
            now + timedelta(days=self.config.task_window_future_days),
        )

    def event_window(self, now: datetime) -> Tuple[datetime, datetime]:
        """Events are loaded from midnight a week back, spanning event_window_days."""
        start = start_of_day(now - timedelta(days=self.config.task_window_past_days))
        return start, start + timedelta(days=self.config.event_window_days)

    def normalize_reminder(self, record: ReminderRecord, now: datetime) -> Optional[UnifiedItem]:
        if record.due is None:
            return None
        if not in_window(record.due, *self.task_window(now)):
            return None

        return UnifiedItem(
            stable_id=record.identifier,
            title=record.title or UNTITLED_TASK,
            occurs_at=record.due,
            kind=ItemKind.TASK,
            is_completed=record.completed,
            list_name=record.list_name,
            is_all_day=False,
            has_explicit_time=record.has_time,
            source_ref=record,
        )

    def normalize_event(self, record: EventRecord, now: datetime) -> Optional[UnifiedItem]:
        if record.start is None:
            return None
        if not in_window(record.start, *self.event_window(now)):
            return None

        return UnifiedItem(
            stable_id=record.identifier or str(uuid4()),
            title=record.title or UNTITLED_EVENT,
            occurs_at=record.start,
            kind=ItemKind.EVENT,
            is_completed=False,
            list_name=record.calendar_name,
            is_all_day=record.is_all_day,
            has_explicit_time=not record.is_all_day,
            source_ref=record,
        )

    def normalize(self, reminders: Iterable[ReminderRecord], events: Iterable[EventRecord],
                  now: Optional[datetime] = None) -> List[UnifiedItem]:
        """Convert, drop out-of-window records and sort ascending by date."""
        if now is None:
            now = datetime.now()

        items: List[UnifiedItem] = []
        for record in reminders:
            item = self.normalize_reminder(record, now)
            if item is not None:
                items.append(item)
        for record in events:
            item = self.normalize_event(record, now)
            if item is not None:
                items.append(item)

        items.sort(key=_sort_key)
        return items

    def _collect(self, name: str, fetch: Callable[[], List[T]]) -> List[T]:
        try:
            return list(fetch())
        except Exception as e:
            self.logger.warning(f"Failed to load {name}, showing none: {e}")
            return []

    def load(self, store, now: Optional[datetime] = None) -> List[UnifiedItem]:
        """
        Fetch reminders and events concurrently and normalize them.

        Both fetches must finish before the list is built. A failing source
        contributes no records; the other source is still shown.

        Args:
            store: StoreAdapter (or anything with list_tasks/list_events)
            now: Reference instant for the load windows

        Returns:
            Date-sorted list of UnifiedItem
        """
        if now is None:
            now = datetime.now()
        start, end = self.event_window(now)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="taskcal-fetch") as pool:
            tasks_future = pool.submit(self._collect, "reminders", store.list_tasks)
            events_future = pool.submit(self._collect, "events",
                                        lambda: store.list_events(start, end))
            reminders = tasks_future.result()
            events = events_future.result()

        items = self.normalize(reminders, events, now)
        self.logger.info(
            f"Loaded {len(items)} items ({len(reminders)} reminders, {len(events)} events fetched)"
        )
        return items

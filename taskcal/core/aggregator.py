"""Day filtering over the loaded agenda."""

from datetime import datetime
from typing import Callable, Iterable, List, Optional

from .models import UnifiedItem
from ..utils.date import day_bounds, in_window


def items_between(items: Iterable[UnifiedItem], start: datetime, end: datetime) -> List[UnifiedItem]:
    """Items whose occurs_at lies in [start, end), order preserved."""
    return [item for item in items if in_window(item.occurs_at, start, end)]


class DayAggregator:
    """Holds the last full load and answers per-day queries against it."""

    def __init__(self, items: Iterable[UnifiedItem] = (),
                 clock: Optional[Callable[[], datetime]] = None):
        self._items: List[UnifiedItem] = list(items)
        self._clock = clock or datetime.now

    @property
    def items(self) -> List[UnifiedItem]:
        return list(self._items)

    def replace(self, items: Iterable[UnifiedItem]) -> None:
        """Discard the held list and keep a new one."""
        self._items = list(items)

    def items_for_day(self, offset: int, now: Optional[datetime] = None) -> List[UnifiedItem]:
        """Items on the day ``offset`` days from today (0 today, -1 yesterday)."""
        if now is None:
            now = self._clock()
        start, end = day_bounds(offset, now)
        return items_between(self._items, start, end)

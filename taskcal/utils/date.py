"""
Day-boundary arithmetic and date formatting.

All values are naive local datetimes; adding ``timedelta(days=n)`` to them
moves by calendar days regardless of DST transitions.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple


def start_of_day(moment: datetime) -> datetime:
    """Midnight at the beginning of moment's day."""
    return datetime.combine(moment.date(), time.min)


def day_bounds(offset: int, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Half-open interval covering the day ``offset`` days from now.

    Args:
        offset: Signed day count (0 = today, -1 = yesterday)
        now: Reference instant, defaults to the current local time

    Returns:
        (start, end) where end is the start of the following day
    """
    if now is None:
        now = datetime.now()
    start = start_of_day(now + timedelta(days=offset))
    return start, start + timedelta(days=1)


def in_window(moment: Optional[datetime], start: datetime, end: datetime) -> bool:
    """True if moment lies in [start, end)."""
    if moment is None:
        return False
    return start <= moment < end


def day_title(offset: int, now: Optional[datetime] = None) -> str:
    """Header title for a day offset: Today/Tomorrow/Yesterday or 'Monday, Oct 19'."""
    if offset == 0:
        return "Today"
    if offset == 1:
        return "Tomorrow"
    if offset == -1:
        return "Yesterday"

    if now is None:
        now = datetime.now()
    target: date = (now + timedelta(days=offset)).date()
    return f"{target:%A}, {target:%b} {target.day}"

"""Apple Reminders gateway using EventKit."""

import threading
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from taskcal.core.exceptions import StoreError, FetchError
from taskcal.core.models import ReminderRecord
from taskcal.utils.eventkit import EventKitGateway, date_component


def due_from_components(components) -> Tuple[Optional[datetime], bool]:
    """
    Build a naive local due datetime from NSDateComponents.

    Returns:
        (due, has_time); due is None when year/month/day are incomplete,
        has_time is True only when both hour and minute are set.
    """
    if components is None:
        return None, False

    year = date_component(components.year())
    month = date_component(components.month())
    day = date_component(components.day())
    if not (year and month and day):
        return None, False

    hour = date_component(components.hour())
    minute = date_component(components.minute())
    has_time = hour is not None and minute is not None

    try:
        due = datetime(year, month, day, hour or 0, minute or 0)
    except ValueError:
        return None, False
    return due, has_time


class RemindersGateway(EventKitGateway):
    """Gateway for Apple Reminders via EventKit."""

    ENTITY_NAME = "Reminders"
    ENTITY_TYPE_NAME = "EKEntityTypeReminder"
    DEFAULT_ENTITY_TYPE = 1
    FULL_ACCESS_METHOD = "requestFullAccessToRemindersWithCompletion_"

    def __init__(self, logger: Optional[logging.Logger] = None, **kwargs):
        super().__init__(logger=logger or logging.getLogger(__name__), **kwargs)

    def _calendars(self, store, list_ids: Optional[List[str]]):
        all_cals = store.calendarsForEntityType_(self._entity_type) or []
        if list_ids:
            return [c for c in all_cals if str(c.calendarIdentifier()) in list_ids]
        return list(all_cals)

    def get_reminders(self, list_ids: Optional[List[str]] = None) -> List[ReminderRecord]:
        """Get reminders from the given lists (all lists when none given)."""
        store = self._get_store()

        try:
            calendars = self._calendars(store, list_ids)
            if list_ids and not calendars:
                self.logger.warning(f"No reminder lists found for list_ids: {list_ids}")
                return []
            predicate = store.predicateForRemindersInCalendars_(calendars or None)
        except Exception as e:
            self.logger.error(f"Failed to create reminders predicate: {e}")
            raise FetchError(f"Failed to prepare reminder fetch: {e}")

        fetched = []
        done = threading.Event()

        def completion(reminders):
            if reminders:
                fetched.extend(list(reminders))
            done.set()

        try:
            store.fetchRemindersMatchingPredicate_completion_(predicate, completion)
        except Exception as e:
            self.logger.error(f"Failed to fetch reminders: {e}")
            raise FetchError(f"Failed to fetch reminders: {e}")

        self._wait_for(done, self.fetch_timeout, FetchError, "Reminder fetch")

        result = []
        for rem in fetched:
            try:
                result.append(self._to_record(rem))
            except Exception as e:
                self.logger.warning(f"Failed to process reminder: {e}")
                continue

        self.logger.debug(f"Fetched {len(result)} reminders")
        return result

    def _to_record(self, rem) -> ReminderRecord:
        title = rem.title()
        due, has_time = due_from_components(rem.dueDateComponents())

        list_name = None
        cal = rem.calendar()
        if cal is not None and cal.title():
            list_name = str(cal.title())

        return ReminderRecord(
            identifier=str(rem.calendarItemIdentifier()),
            title=str(title) if title else None,
            completed=bool(rem.isCompleted()),
            due=due,
            has_time=has_time,
            list_name=list_name,
            native=rem,
        )

    def save_completion(self, record: ReminderRecord) -> bool:
        """Write record.completed back to the store.

        The native reminder is restored to its previous flag when the save
        fails, so it never disagrees with the store.
        """
        try:
            store = self._get_store()
        except StoreError as e:
            self.logger.error(f"Cannot save reminder '{record.identifier}': {e}")
            return False

        reminder = record.native
        try:
            if reminder is None:
                reminder = store.calendarItemWithIdentifier_(record.identifier)
            previous = bool(reminder.isCompleted()) if reminder is not None else None
        except Exception as e:
            self.logger.error(f"Failed to read reminder '{record.identifier}': {e}")
            return False
        if reminder is None:
            self.logger.error(f"Reminder '{record.identifier}' not found in store")
            return False
        record.native = reminder

        try:
            reminder.setCompleted_(bool(record.completed))
            success, error = store.saveReminder_commit_error_(reminder, True, None)
        except Exception as e:
            self.logger.error(f"Failed to save reminder '{record.identifier}': {e}")
            reminder.setCompleted_(previous)
            return False

        if not success:
            self.logger.error(f"Failed to save reminder '{record.identifier}': error={error}")
            reminder.setCompleted_(previous)
            return False

        self.logger.debug(f"Saved reminder '{record.identifier}' completed={record.completed}")
        return True

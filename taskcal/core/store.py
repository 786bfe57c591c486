"""Store adapter combining the Reminders and Calendar gateways."""

from datetime import datetime
from typing import List, Optional
import logging

from .models import AccessGrant, AppConfig, EventRecord, ReminderRecord


class StoreAdapter:
    """The four store operations the agenda needs, over EventKit."""

    def __init__(self, reminders=None, calendar=None,
                 config: Optional[AppConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or AppConfig()
        self.logger = logger or logging.getLogger(__name__)

        if reminders is None:
            from ..reminders.gateway import RemindersGateway
            reminders = RemindersGateway(
                access_timeout=self.config.access_timeout,
                fetch_timeout=self.config.fetch_timeout,
            )
        if calendar is None:
            from ..calendar.gateway import CalendarGateway
            calendar = CalendarGateway(
                access_timeout=self.config.access_timeout,
                fetch_timeout=self.config.fetch_timeout,
            )
        self.reminders = reminders
        self.calendar = calendar

    def request_access(self) -> AccessGrant:
        """Ask for reminders and calendar access.

        Raises EventKitImportError when EventKit cannot be loaded at all.
        """
        grant = AccessGrant(
            tasks_granted=self.reminders.request_access(),
            events_granted=self.calendar.request_access(),
        )
        self.logger.info(
            f"Store access: reminders={grant.tasks_granted} calendar={grant.events_granted}"
        )
        return grant

    def list_tasks(self) -> List[ReminderRecord]:
        return self.reminders.get_reminders(self.config.reminder_list_ids or None)

    def list_events(self, start: datetime, end: datetime) -> List[EventRecord]:
        return self.calendar.get_events(start, end, self.config.calendar_ids or None)

    def save_task_completion(self, record: ReminderRecord) -> bool:
        return self.reminders.save_completion(record)

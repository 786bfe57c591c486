"""Apple Calendar gateway using EventKit."""

from datetime import datetime
from typing import List, Optional
import logging

from taskcal.core.exceptions import FetchError
from taskcal.core.models import EventRecord
from taskcal.utils.eventkit import EventKitGateway, nsdate_to_datetime


class CalendarGateway(EventKitGateway):
    """Gateway for Apple Calendar via EventKit."""

    ENTITY_NAME = "Calendar"
    ENTITY_TYPE_NAME = "EKEntityTypeEvent"
    DEFAULT_ENTITY_TYPE = 0
    FULL_ACCESS_METHOD = "requestFullAccessToEventsWithCompletion_"

    def __init__(self, logger: Optional[logging.Logger] = None, **kwargs):
        super().__init__(logger=logger or logging.getLogger(__name__), **kwargs)

    def get_events(self, start: datetime, end: datetime,
                   calendar_ids: Optional[List[str]] = None) -> List[EventRecord]:
        """Get calendar events starting in [start, end)."""
        store = self._get_store()

        try:
            all_cals = store.calendarsForEntityType_(self._entity_type) or []
            if calendar_ids:
                calendars = [c for c in all_cals
                             if str(c.calendarIdentifier()) in calendar_ids]
                if not calendars:
                    self.logger.warning(f"No calendars found for calendar_ids: {calendar_ids}")
                    return []
            else:
                calendars = None

            predicate = store.predicateForEventsWithStartDate_endDate_calendars_(
                self._to_nsdate(start), self._to_nsdate(end), calendars
            )
            events = store.eventsMatchingPredicate_(predicate) or []
        except Exception as e:
            self.logger.error(f"Failed to fetch calendar events: {e}")
            raise FetchError(f"Failed to fetch calendar events: {e}")

        result = []
        for event in events:
            try:
                result.append(self._to_record(event))
            except Exception as e:
                self.logger.warning(f"Failed to process event: {e}")
                continue

        self.logger.debug(f"Fetched {len(result)} events between {start} and {end}")
        return result

    def _to_record(self, event) -> EventRecord:
        event_id = event.eventIdentifier()
        title = event.title()

        cal = event.calendar()
        calendar_name = str(cal.title()) if cal is not None and cal.title() else None

        return EventRecord(
            identifier=str(event_id) if event_id else None,
            title=str(title) if title else None,
            start=nsdate_to_datetime(event.startDate()),
            end=nsdate_to_datetime(event.endDate()),
            is_all_day=bool(event.isAllDay()),
            calendar_name=calendar_name,
            native=event,
        )

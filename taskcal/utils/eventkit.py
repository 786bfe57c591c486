"""Shared EventKit plumbing for the reminders and calendar gateways."""

import threading
import time
from datetime import datetime
from typing import Any, Optional, Type
import logging

from taskcal.core.exceptions import (
    StoreError,
    AuthorizationError,
    EventKitImportError
)


# EKAuthorizationStatus values
STATUS_NOT_DETERMINED = 0
STATUS_RESTRICTED = 1
STATUS_DENIED = 2
STATUS_AUTHORIZED = 3  # also EKAuthorizationStatusFullAccess on macOS 14+
STATUS_WRITE_ONLY = 4

# NSDateComponentUndefined (NSIntegerMax)
UNDEFINED_COMPONENT = 0x7FFFFFFFFFFFFFFF

RUN_LOOP_SLICE = 0.1  # seconds


def nsdate_to_datetime(value: Any) -> Optional[datetime]:
    """Convert an NSDate to a naive local datetime."""
    if value is None:
        return None
    return datetime.fromtimestamp(value.timeIntervalSince1970())


def date_component(value: Any) -> Optional[int]:
    """Read one NSDateComponents field, mapping 'undefined' to None."""
    if value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    if number == UNDEFINED_COMPONENT:
        return None
    return number


class EventKitGateway:
    """Base gateway owning an EKEventStore for one entity type.

    Subclasses set ENTITY_NAME, ENTITY_TYPE_NAME, DEFAULT_ENTITY_TYPE and
    FULL_ACCESS_METHOD.
    """

    ENTITY_NAME = "Calendar"
    ENTITY_TYPE_NAME = "EKEntityTypeEvent"
    DEFAULT_ENTITY_TYPE = 0
    FULL_ACCESS_METHOD = "requestFullAccessToEventsWithCompletion_"

    def __init__(self, logger: Optional[logging.Logger] = None,
                 access_timeout: float = 30.0, fetch_timeout: float = 30.0):
        self.logger = logger or logging.getLogger(__name__)
        self.access_timeout = access_timeout
        self.fetch_timeout = fetch_timeout
        self._store = None
        self._authorized = False
        self._entity_type = self.DEFAULT_ENTITY_TYPE
        self._EKEventStore = None
        self._NSRunLoop = None
        self._NSDate = None

    def _ensure_eventkit(self):
        """Import EventKit and Foundation through PyObjC."""
        try:
            import objc  # noqa: F401
            import EventKit
            from Foundation import NSRunLoop, NSDate

            self._EKEventStore = EventKit.EKEventStore
            self._entity_type = getattr(EventKit, self.ENTITY_TYPE_NAME)
            self._NSRunLoop = NSRunLoop
            self._NSDate = NSDate

        except ImportError as e:
            self.logger.error(f"EventKit import failed: {e}")
            raise EventKitImportError(
                "EventKit not available. Please install PyObjC framework:\n"
                "  pip install pyobjc-core pyobjc-framework-EventKit\n"
                f"Import error details: {e}"
            )

    def _wait_for(self, done: threading.Event, timeout: float,
                  error_cls: Type[StoreError], what: str) -> None:
        """Block until done is set, pumping the run loop so callbacks fire."""
        start_time = time.monotonic()
        while not done.is_set():
            if time.monotonic() - start_time > timeout:
                raise error_cls(f"{what} timed out after {timeout:g} seconds.")
            if self._NSRunLoop is not None:
                self._NSRunLoop.currentRunLoop().runUntilDate_(
                    self._NSDate.dateWithTimeIntervalSinceNow_(RUN_LOOP_SLICE)
                )
            else:
                done.wait(RUN_LOOP_SLICE)

    def _authorization_status(self) -> int:
        return int(self._EKEventStore.authorizationStatusForEntityType_(self._entity_type))

    def _get_store(self):
        """Get or create the EventKit store, requesting authorization if needed."""
        if self._store is not None and self._authorized:
            return self._store

        if self._EKEventStore is None:
            self._ensure_eventkit()

        if self._store is None:
            try:
                self._store = self._EKEventStore.alloc().init()
                self.logger.debug("EventKit store created successfully")
            except Exception as e:
                self.logger.error(f"Failed to create EventKit store: {e}")
                raise StoreError(f"Failed to initialize EventKit store: {e}")

        status = self._authorization_status()
        if status == STATUS_AUTHORIZED:
            self.logger.debug(f"EventKit already authorized for {self.ENTITY_NAME}")
            self._authorized = True
            return self._store

        if status == STATUS_RESTRICTED:
            raise AuthorizationError(
                f"Access to {self.ENTITY_NAME} is restricted by system policy.\n"
                "This may be due to parental controls or device management profiles."
            )
        if status == STATUS_DENIED:
            raise AuthorizationError(
                f"Access to {self.ENTITY_NAME} was previously denied.\n"
                "To fix this:\n"
                "  1. Open System Settings > Privacy & Security\n"
                f"  2. Select '{self.ENTITY_NAME}'\n"
                "  3. Enable access for this application\n"
                "  4. Restart the application"
            )

        self._request_authorization()
        self._authorized = True
        return self._store

    def _request_authorization(self) -> None:
        self.logger.info(f"Requesting EventKit authorization for {self.ENTITY_NAME}...")
        done = threading.Event()
        result = {'granted': False, 'error': None}

        def completion(granted, error):
            result['granted'] = bool(granted)
            result['error'] = error
            done.set()

        try:
            # macOS 14+ replaced requestAccessToEntityType with full-access calls
            if hasattr(self._store, self.FULL_ACCESS_METHOD):
                getattr(self._store, self.FULL_ACCESS_METHOD)(completion)
            else:
                self._store.requestAccessToEntityType_completion_(
                    self._entity_type, completion
                )
        except Exception as e:
            self.logger.error(f"Unexpected error during authorization: {e}")
            raise AuthorizationError(f"Failed to request EventKit authorization: {e}")

        self._wait_for(done, self.access_timeout, AuthorizationError,
                       f"{self.ENTITY_NAME} authorization request")

        if not result['granted']:
            detail = ""
            if result['error'] is not None:
                error = result['error']
                if hasattr(error, 'localizedDescription'):
                    detail = f": {error.localizedDescription()}"
                else:
                    detail = f": {error}"
            raise AuthorizationError(f"User denied access to {self.ENTITY_NAME}{detail}")

        self.logger.info(f"EventKit authorization for {self.ENTITY_NAME} granted")

    def request_access(self) -> bool:
        """Ask for access; False when the user or system denies it."""
        try:
            self._get_store()
        except AuthorizationError as e:
            self.logger.warning(f"{self.ENTITY_NAME} access not granted: {e}")
            return False
        return True

    def _to_nsdate(self, value: datetime):
        if self._NSDate is None:
            from Foundation import NSDate
            self._NSDate = NSDate
        return self._NSDate.dateWithTimeIntervalSince1970_(value.timestamp())

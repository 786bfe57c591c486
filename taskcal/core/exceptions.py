"""
Exception classes for taskcal.
"""


class TaskCalError(Exception):
    """Base exception for all taskcal errors."""
    pass


class ConfigurationError(TaskCalError):
    """Raised when configuration is invalid or missing."""
    pass


class StoreError(TaskCalError):
    """Base exception for calendar/reminders store errors."""
    pass


class AuthorizationError(StoreError):
    """Raised when EventKit authorization fails."""
    pass


class EventKitImportError(StoreError):
    """Raised when EventKit/PyObjC dependencies are not available."""
    pass


class FetchError(StoreError):
    """Raised when a store query fails or times out."""
    pass

"""
Core module for taskcal - contains domain models, configuration, and exceptions.
"""

from .models import (
    ItemKind,
    UnifiedItem,
    ReminderRecord,
    EventRecord,
    AccessGrant,
    AppConfig
)

from .exceptions import (
    TaskCalError,
    ConfigurationError,
    StoreError,
    AuthorizationError,
    EventKitImportError,
    FetchError
)

__all__ = [
    # Models
    'ItemKind',
    'UnifiedItem',
    'ReminderRecord',
    'EventRecord',
    'AccessGrant',
    'AppConfig',
    # Exceptions
    'TaskCalError',
    'ConfigurationError',
    'StoreError',
    'AuthorizationError',
    'EventKitImportError',
    'FetchError'
]

"""Calendar module for Apple Calendar integration."""

from .gateway import CalendarGateway

__all__ = ['CalendarGateway']

"""Reminders module for Apple Reminders integration."""

from .gateway import RemindersGateway, due_from_components

__all__ = ['RemindersGateway', 'due_from_components']

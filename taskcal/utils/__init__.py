"""
Utility functions for taskcal.
"""

from .io import safe_read_json, safe_write_json
from .date import start_of_day, day_bounds, in_window, day_title

__all__ = [
    # I/O utilities
    'safe_read_json',
    'safe_write_json',
    # Date utilities
    'start_of_day',
    'day_bounds',
    'in_window',
    'day_title',
]

"""taskcal - Apple Reminders and Calendar merged into one daily agenda."""

__version__ = "0.1.0"

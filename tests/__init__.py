"""
Test suite for taskcal.

This package contains:
- Unit tests for normalizing, day filtering and completion tracking
- Gateway tests against fake EventKit objects
- Controller and TUI tests that work without EventKit
"""

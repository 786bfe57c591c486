"""
Tests for the curses day agenda (taskcal.tui).

The controller runs against a real AppController over FakeStore; the view
is exercised with a mocked curses window.
"""

import curses
import os
from concurrent.futures import Future
from datetime import datetime
from unittest.mock import Mock

import pytest

from taskcal.core.controller import AppController
from taskcal.core.models import AccessGrant, ItemKind, UnifiedItem
from taskcal.core.tracker import CompletionTracker
from taskcal.tui.controller import DayViewController
from taskcal.tui.view import KEY_HELP, PERMISSION_HELP, DayView
from tests.fakes import FakeStore, make_event, make_reminder


@pytest.fixture
def store():
    return FakeStore(
        tasks=[
            make_reminder("rem-1", "Write report", due=datetime(2025, 10, 20, 9, 0)),
            make_reminder("rem-2", "Pay rent", due=datetime(2025, 10, 21), has_time=False),
        ],
        events=[make_event("evt-1", "Team sync", start=datetime(2025, 10, 20, 14, 0))],
    )


@pytest.fixture
def app(store, temp_dir, now):
    controller = AppController(
        store,
        tracker=CompletionTracker(os.path.join(temp_dir, "state.json")),
        clock=lambda: now,
        scheduler=lambda delay, callback: None,
    )
    yield controller
    controller.shutdown()


@pytest.fixture
def loaded_app(app):
    app.request_permissions().result(timeout=5)
    return app


@pytest.fixture
def view():
    return Mock()


def _controller(view, app, now):
    return DayViewController(view, app, clock=lambda: now)


class TestPermissionMode:

    def test_only_grant_and_quit_work(self, view, app, store, now):
        store.grant = AccessGrant(False, False)
        app.request_permissions().result(timeout=5)
        controller = _controller(view, app, now)

        controller.handle_key(curses.KEY_RIGHT)
        assert controller.day_offset == 0

        state = controller.build_state()
        assert state['needs_permission'] is True
        assert state['error'] == "Access to Reminders and Calendar was not granted"

        store.grant = AccessGrant(True, True)
        controller.handle_key(ord('g'))
        assert controller.status == "Requesting access..."
        app.refresh().result(timeout=5)
        assert app.needs_permission is False

        controller.handle_key(ord('q'))
        assert controller.is_running is False


class TestNavigation:

    def test_day_keys(self, view, loaded_app, now):
        controller = _controller(view, loaded_app, now)

        controller.handle_key(curses.KEY_RIGHT)
        assert controller.day_offset == 1
        assert controller.build_state()['title'] == "Tomorrow"

        controller.handle_key(ord('h'))
        controller.handle_key(ord('h'))
        assert controller.day_offset == -1

        controller.handle_key(ord('t'))
        assert controller.day_offset == 0
        assert controller.build_state()['title'] == "Today"

    def test_items_follow_selected_day(self, view, loaded_app, now):
        controller = _controller(view, loaded_app, now)
        assert [i.title for i in controller.build_state()['items']] == [
            "Write report", "Team sync"]

        controller.handle_key(ord('l'))
        assert [i.title for i in controller.build_state()['items']] == ["Pay rent"]

    def test_selection_is_clamped(self, view, loaded_app, now):
        controller = _controller(view, loaded_app, now)
        for _ in range(5):
            controller.handle_key(curses.KEY_DOWN)
        assert controller.selected == 1

        controller.handle_key(ord('k'))
        controller.handle_key(ord('k'))
        assert controller.selected == 0

    def test_changing_day_resets_selection(self, view, loaded_app, now):
        controller = _controller(view, loaded_app, now)
        controller.handle_key(ord('j'))
        controller.handle_key(ord('l'))
        assert controller.selected == 0

    def test_refresh_key(self, view, now):
        app = Mock()
        app.needs_permission = False
        controller = _controller(view, app, now)

        controller.handle_key(ord('r'))
        app.refresh.assert_called_once()
        assert controller.status == "Refreshing..."

    def test_status_clears_after_refresh(self, view, loaded_app, now):
        controller = _controller(view, loaded_app, now)

        controller.handle_key(ord('r'))
        assert controller.status == "Refreshing..."
        # the single load worker finishes the first refresh before this one
        loaded_app.refresh().result(timeout=5)

        assert controller.build_state()['status'] == "Ready"

    def test_status_reports_failed_refresh(self, view, now):
        pending = Future()
        app = Mock()
        app.needs_permission = False
        app.items_for_day.return_value = []
        app.refresh.return_value = pending
        controller = _controller(view, app, now)

        controller.handle_key(ord('r'))
        assert controller.build_state()['status'] == "Refreshing..."

        pending.set_exception(RuntimeError("store offline"))
        assert controller.build_state()['status'] == "Refresh failed"


class TestActions:

    def test_toggle_task(self, view, loaded_app, store, now):
        controller = _controller(view, loaded_app, now)
        controller.handle_key(ord(' '))

        assert store.saved == [True]
        assert controller.status == "Updated 'Write report'"

    def test_failed_toggle_reports(self, view, loaded_app, store, now):
        store.save_succeeds = False
        controller = _controller(view, loaded_app, now)
        controller.handle_key(ord('\n'))
        assert controller.status == "Could not update 'Write report'"

    def test_toggle_on_event_points_to_mark(self, view, loaded_app, store, now):
        controller = _controller(view, loaded_app, now)
        controller.handle_key(ord('j'))
        controller.handle_key(ord(' '))

        assert store.saved == []
        assert "press 'm'" in controller.status

    def test_mark_event(self, view, loaded_app, now):
        controller = _controller(view, loaded_app, now)
        controller.handle_key(ord('j'))
        controller.handle_key(ord('m'))

        event = controller.selected_item()
        assert controller.status == "'Team sync' marked complete"
        assert loaded_app.display_completed(event) is True

    def test_mark_ignored_on_task(self, view, loaded_app, now):
        controller = _controller(view, loaded_app, now)
        controller.handle_key(ord('m'))
        assert controller.status == "Ready"

    def test_actions_on_empty_day(self, view, loaded_app, store, now):
        controller = _controller(view, loaded_app, now)
        controller.change_day(5)
        controller.handle_key(ord(' '))
        controller.handle_key(ord('m'))
        assert store.saved == []
        assert controller.selected_item() is None


class TestRunLoop:

    def test_run_draws_until_quit(self, now):
        app = Mock()
        app.needs_permission = False
        app.items_for_day.return_value = []
        view = Mock()
        view.get_user_input.side_effect = [-1, ord('l'), ord('q')]
        controller = _controller(view, app, now)

        controller.run()

        view.set_poll_timeout.assert_called_once_with(DayViewController.POLL_MS)
        assert view.draw.call_count == 3
        assert controller.day_offset == 1


def _item(kind, title="Thing", **kwargs):
    return UnifiedItem(stable_id=title, title=title,
                       occurs_at=datetime(2025, 10, 20, 9, 5), kind=kind, **kwargs)


class TestFormatRow:

    def test_task_row(self):
        row = DayView.format_row(_item(ItemKind.TASK, "Write report", list_name="Work"), False)
        assert row == "[ ] 09:05         Write report  · Work"

    def test_completed_task(self):
        assert DayView.format_row(_item(ItemKind.TASK), True).startswith("[x] ")

    def test_event_rows(self):
        assert DayView.format_row(_item(ItemKind.EVENT), False).startswith("(E)  09:05")
        assert DayView.format_row(_item(ItemKind.EVENT), True).startswith("(E)✓ 09:05")

    def test_anytime_and_all_day_labels(self):
        task = _item(ItemKind.TASK, has_explicit_time=False)
        event = _item(ItemKind.EVENT, is_all_day=True, has_explicit_time=False)
        assert "Anytime task" in DayView.format_row(task, False)
        assert "All Day Event" in DayView.format_row(event, False)


class TestDayViewDraw:

    @pytest.fixture
    def screen(self):
        stdscr = Mock()
        stdscr.getmaxyx.return_value = (24, 80)
        return stdscr

    def _texts(self, screen):
        return [c.args[2] for c in screen.addstr.call_args_list]

    def _state(self, **overrides):
        state = {
            'title': "Today",
            'items': [],
            'selected': 0,
            'is_completed': lambda item: False,
            'is_loading': False,
            'needs_permission': False,
            'error': None,
            'status': "Ready",
        }
        state.update(overrides)
        return state

    def test_header_and_empty_day(self, screen):
        DayView(screen).draw(self._state())
        texts = self._texts(screen)
        assert "<   Today   >" in texts
        assert "No tasks or events" in texts
        assert any(t.startswith("Ready  |  ") and KEY_HELP.startswith(t[10:]) for t in texts)

    def test_loading(self, screen):
        DayView(screen).draw(self._state(is_loading=True))
        assert "Loading..." in self._texts(screen)

    def test_permission_screen(self, screen):
        DayView(screen).draw(self._state(needs_permission=True,
                                         error="Access denied\nDetails follow"))
        texts = self._texts(screen)
        assert "Permission Required" in texts
        assert "Access denied" in texts
        assert any(PERMISSION_HELP in t for t in texts)

    def test_rows_highlight_selection(self, screen):
        items = [_item(ItemKind.TASK, "One"), _item(ItemKind.EVENT, "Two")]
        DayView(screen).draw(self._state(items=items, selected=1))

        rows = {c.args[2]: c.args[3] for c in screen.addstr.call_args_list}
        selected_row = DayView.format_row(items[1], False)
        assert rows[selected_row] & curses.A_REVERSE
        assert not rows[DayView.format_row(items[0], False)] & curses.A_REVERSE

    def test_too_small(self, screen):
        screen.getmaxyx.return_value = (5, 20)
        DayView(screen).draw(self._state())
        assert self._texts(screen)[0].startswith("Terminal too small")

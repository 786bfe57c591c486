"""
TUI View Module - Handles all curses drawing for the day agenda.
"""

from __future__ import annotations

import curses
import signal
from typing import Any, Callable, Dict, List

from taskcal.core.models import UnifiedItem


KEY_HELP = "←/→ day  t today  ↑/↓ select  space toggle  m mark event  r refresh  q quit"
PERMISSION_HELP = "Press 'g' to grant access, 'q' to quit"


class DayView:
    """Renders one day of the merged agenda with curses."""

    MIN_HEIGHT = 8
    MIN_WIDTH = 40

    def __init__(self, stdscr):
        self.stdscr = stdscr
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        self.height, self.width = self.stdscr.getmaxyx()
        self._resize_flag = False

        def handle_resize(signum, frame):
            self._resize_flag = True

        if hasattr(signal, "SIGWINCH"):
            signal.signal(signal.SIGWINCH, handle_resize)

    def handle_resize(self):
        """Pick up terminal size changes."""
        if self._resize_flag:
            try:
                curses.endwin()
                self.stdscr.refresh()
            except curses.error:
                pass
            self._resize_flag = False
        self.height, self.width = self.stdscr.getmaxyx()

    def set_poll_timeout(self, milliseconds: int) -> None:
        self.stdscr.timeout(milliseconds)

    def get_user_input(self) -> int:
        return self.stdscr.getch()

    def _put(self, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
        """addstr that clips to the screen and ignores off-screen writes."""
        if y < 0 or y >= self.height or x >= self.width:
            return
        try:
            self.stdscr.addstr(y, x, text[:max(0, self.width - x - 1)], attr)
        except curses.error:
            pass

    def draw(self, state: Dict[str, Any]):
        """
        Draw the whole screen.

        Args:
            state: Rendering data:
                - title: header title for the selected day
                - items: UnifiedItems for the selected day
                - selected: index of the highlighted row
                - is_completed: callable giving display completion for an item
                - is_loading / needs_permission: screen mode flags
                - error: last error message, if any
                - status: status bar message
        """
        self.handle_resize()
        self.stdscr.erase()

        if self.height < self.MIN_HEIGHT or self.width < self.MIN_WIDTH:
            self._put(0, 0, f"Terminal too small (need {self.MIN_WIDTH}x{self.MIN_HEIGHT} min)")
            self.stdscr.refresh()
            return

        self._draw_header(state['title'])

        if state.get('is_loading'):
            self._draw_centered("Loading...", curses.A_DIM)
        elif state.get('needs_permission'):
            self._draw_permission(state.get('error'))
        elif not state['items']:
            self._draw_centered("No tasks or events", curses.A_DIM)
        else:
            self._draw_items(state['items'], state.get('selected', 0), state['is_completed'])

        self._draw_status_bar(state.get('status') or "",
                              PERMISSION_HELP if state.get('needs_permission') else KEY_HELP)
        self.stdscr.refresh()

    def _draw_header(self, title: str):
        header = f"<   {title}   >"
        self._put(0, max(0, (self.width - len(header)) // 2), header, curses.A_BOLD)
        try:
            self.stdscr.hline(1, 0, ord("-"), self.width)
        except curses.error:
            pass

    def _draw_centered(self, text: str, attr: int = curses.A_NORMAL, row_offset: int = 0):
        y = self.height // 2 + row_offset
        self._put(y, max(0, (self.width - len(text)) // 2), text, attr)

    def _draw_permission(self, error):
        self._draw_centered("Permission Required", curses.A_BOLD, -2)
        self._draw_centered("This app needs access to your Calendar and Reminders", row_offset=0)
        if error:
            first_line = str(error).splitlines()[0]
            self._draw_centered(first_line, curses.A_DIM, 2)

    @staticmethod
    def format_row(item: UnifiedItem, completed: bool) -> str:
        """Text for one agenda row."""
        if item.is_task:
            marker = "[x]" if completed else "[ ]"
        else:
            marker = "(E)✓" if completed else "(E) "
        time_text = item.time_label() or ""
        row = f"{marker} {time_text:<13} {item.title}"
        if item.list_name:
            row += f"  · {item.list_name}"
        return row

    def _draw_items(self, items: List[UnifiedItem], selected: int,
                    is_completed: Callable[[UnifiedItem], bool]):
        first_row = 3
        visible = max(1, self.height - first_row - 2)
        # Keep the selection on screen
        top = max(0, selected - visible + 1)
        for i, item in enumerate(items[top:top + visible]):
            index = top + i
            completed = is_completed(item)
            attr = curses.A_DIM if completed else curses.A_NORMAL
            if index == selected:
                attr |= curses.A_REVERSE
            self._put(first_row + i, 2, self.format_row(item, completed), attr)

    def _draw_status_bar(self, status: str, help_text: str):
        sep_y = self.height - 2
        try:
            self.stdscr.hline(sep_y, 0, ord("-"), self.width)
        except curses.error:
            pass
        text = f"{status}  |  {help_text}" if status else help_text
        self._put(self.height - 1, 0, text, curses.A_REVERSE if status else curses.A_NORMAL)

"""Terminal UI for the taskcal day agenda."""

import curses

from .view import DayView
from .controller import DayViewController


def run_tui(app, day_offset: int = 0) -> None:
    """Run the curses agenda until the user quits."""

    def _main(stdscr):
        controller = DayViewController(DayView(stdscr), app, day_offset=day_offset)
        controller.run()

    curses.wrapper(_main)


__all__ = ['DayView', 'DayViewController', 'run_tui']

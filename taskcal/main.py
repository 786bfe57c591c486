#!/usr/bin/env python3
"""
taskcal - Apple Reminders and Calendar in one day-by-day agenda.
"""

import argparse
import logging
import sys

from taskcal.core.config import load_config, get_default_config_path, get_log_path
from taskcal.core.controller import AppController
from taskcal.core.store import StoreAdapter
from taskcal.tui import DayView, run_tui
from taskcal.utils.date import day_title


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(verbose: bool, to_file: bool) -> None:
    """Log to a file while curses owns the terminal, else to stderr when verbose."""
    if to_file:
        log_path = get_log_path()
        logging.basicConfig(
            filename=str(log_path),
            level=logging.DEBUG if verbose else logging.INFO,
            format=LOG_FORMAT
        )
    elif verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


def print_agenda(app: AppController, day_offset: int) -> int:
    """Print one day's items to stdout. Returns the exit code."""
    granted = app.request_permissions().result()
    if not granted:
        print(f"Permission required: {app.last_error}")
        return 1

    print(day_title(day_offset))
    items = app.items_for_day(day_offset)
    if not items:
        print("  No tasks or events")
    for item in items:
        print(f"  {DayView.format_row(item, app.display_completed(item))}")
    return 0


def main(argv=None):
    """Main entry point for taskcal."""
    parser = argparse.ArgumentParser(
        description="Reminders and calendar events merged into one daily agenda",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  taskcal                  # Open the agenda for today
  taskcal --day 1          # Open the agenda on tomorrow
  taskcal --print          # Print today's agenda and exit
  taskcal --print --day -1 # Print yesterday's agenda
        """
    )

    parser.add_argument(
        '--config',
        help=f'Path to configuration file (default: {get_default_config_path()})',
        default=None
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )
    parser.add_argument(
        '--day',
        type=int,
        default=0,
        help='Day offset from today to show first (default: 0)'
    )
    parser.add_argument(
        '--print',
        dest='print_only',
        action='store_true',
        help='Print the agenda for the selected day instead of opening the UI'
    )

    args = parser.parse_args(argv)

    configure_logging(args.verbose, to_file=not args.print_only)

    config = load_config(args.config)
    if args.verbose and args.print_only:
        actual_config_path = args.config if args.config else get_default_config_path()
        print(f"Using config: {actual_config_path}")

    app = AppController(StoreAdapter(config=config), config=config)
    try:
        if args.print_only:
            return print_agenda(app, args.day)
        run_tui(app, day_offset=args.day)
        return 0

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130
    except Exception as e:
        print(f"Error: {e}")
        if not args.verbose:
            print("Re-run with --verbose for more detail.")
        else:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        app.shutdown()


if __name__ == '__main__':
    sys.exit(main())

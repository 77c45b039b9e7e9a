"""
Main entry point for the ScheduleCal command line app.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from schedcal.calendar_connector import build_calendar_url, open_calendar_url
from schedcal.event_extractor import extract_events
from schedcal.event_models import StructuredEvent
from schedcal.exceptions import ScheduleCalError
from schedcal.history_store import HistoryStore
from schedcal.ics_generator import write_ics
from schedcal.logging_helper import Log
from schedcal.reminders import (
    DesktopNotificationBackend,
    NotificationBackend,
    StubNotificationBackend,
    set_reminder,
)
from schedcal.scheduler import Scheduler
from schedcal.settings_manager import (
    get_calendar_base_url,
    get_gemini_model,
    get_history_path,
    get_settings_file,
    set_calendar_base_url,
)
from schedcal.text_llm_client import StubTextLLMClient, get_llm_client


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="schedcal", description="ScheduleCal schedule assistant")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="Generate or update a schedule")
    generate_parser.add_argument("tasks", help="Tasks, updates or a new schedule request")
    generate_parser.add_argument(
        "--current-schedule",
        type=Path,
        default=None,
        help="File holding the existing schedule (optional)",
    )
    generate_parser.add_argument("--stub", action="store_true", help="Use the offline stub model")
    generate_parser.add_argument("--open", action="store_true", help="Open each event in the calendar")

    parse_parser = subparsers.add_parser("parse", help="Extract events from a schedule markdown file")
    parse_parser.add_argument("file", type=Path)
    parse_parser.add_argument("--ics", type=Path, default=None, help="Also export the events to this .ics file")
    parse_parser.add_argument("--open", action="store_true", help="Open each event in the calendar")

    history_parser = subparsers.add_parser("history", help="List or delete saved schedules")
    history_parser.add_argument("--delete", metavar="ID", default=None, help="Delete the entry with this id")

    remind_parser = subparsers.add_parser("remind", help="Set a reminder for one event of a schedule file")
    remind_parser.add_argument("file", type=Path)
    remind_parser.add_argument("index", type=int, help="1-based position of the event in the file")
    remind_parser.add_argument("--dry-run", action="store_true", help="Record the reminder without waiting")

    config_parser = subparsers.add_parser("config", help="Show or change settings")
    config_parser.add_argument(
        "--calendar-base-url",
        metavar="URL",
        default=None,
        help="Calendar endpoint used for event links (http or https)",
    )

    return parser


def _print_events(events: List[StructuredEvent]) -> None:
    if not events:
        print("No events identified.")
        return
    print("Identified Events:")
    for position, event in enumerate(events, start=1):
        print(f"  {position}. {event.title} - {event.start_datetime:%b %d, %Y at %I:%M %p}")
        print(f"     {build_calendar_url(event)}")


def _open_events(events: List[StructuredEvent], opener) -> None:
    for event in events:
        if event.has_valid_start():
            opener(event, wait=True)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ScheduleCalError(f"Cannot read {path}: {e}") from e


def _cmd_generate(args, scheduler: Scheduler) -> int:
    current_schedule = _read_text(args.current_schedule) if args.current_schedule else ""
    result = scheduler.generate_schedule(args.tasks, current_schedule)
    print(result.text)
    if result.error:
        return 1
    print()
    _print_events(result.events)
    for source in result.sources:
        print(f"  Source: {source.title} <{source.uri}>")
    if args.open:
        _open_events(result.events, scheduler.open_in_calendar)
    return 0


def _cmd_parse(args) -> int:
    events = extract_events(_read_text(args.file))
    _print_events(events)
    if args.open:
        _open_events(events, open_calendar_url)
    if args.ics is not None and write_ics(events, args.ics) is None:
        return 1
    return 0


def _cmd_history(args, scheduler: Scheduler) -> int:
    if args.delete:
        scheduler.delete_history_item(args.delete)
    history = scheduler.history()
    if not history:
        print("No schedules generated yet.")
        return 0
    for item in history:
        print(f"{item.id}  {item.timestamp}  {item.preview()}  ({len(item.parsed_events)} events)")
    return 0


def _cmd_remind(args, backend: NotificationBackend) -> int:
    events = extract_events(_read_text(args.file))
    if not 1 <= args.index <= len(events):
        raise ScheduleCalError(f"Event {args.index} not found; the file has {len(events)} events.")
    reminder = set_reminder(events[args.index - 1], backend)
    print(f'Reminder set for "{events[args.index - 1].title}" at {reminder.fire_at:%I:%M %p}.')
    if not args.dry_run:
        # Timer threads are daemons, so stay alive until the reminder fires
        time.sleep(reminder.delay_seconds + 1)
    return 0


def _cmd_config(args) -> int:
    if args.calendar_base_url is not None:
        try:
            set_calendar_base_url(args.calendar_base_url)
        except ValueError as e:
            raise ScheduleCalError(str(e)) from e
    print(f"Settings file: {get_settings_file()}")
    print(f"gemini_model: {get_gemini_model()}")
    print(f"calendar_base_url: {get_calendar_base_url()}")
    print(f"history: {get_history_path()}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the app."""
    args = _build_parser().parse_args(argv)

    Log.section("ScheduleCal")
    Log.info(f"Log file: {Log.get_log_path()}")

    dry_run = getattr(args, "dry_run", False)
    backend: NotificationBackend = StubNotificationBackend() if dry_run else DesktopNotificationBackend()
    llm_client = StubTextLLMClient() if getattr(args, "stub", False) else get_llm_client()
    scheduler = Scheduler(llm_client, HistoryStore(get_history_path()), backend)

    try:
        if args.command == "generate":
            return _cmd_generate(args, scheduler)
        if args.command == "parse":
            return _cmd_parse(args)
        if args.command == "history":
            return _cmd_history(args, scheduler)
        if args.command == "config":
            return _cmd_config(args)
        return _cmd_remind(args, backend)
    except ScheduleCalError as e:
        Log.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

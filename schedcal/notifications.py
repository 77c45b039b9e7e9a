"""
Notification helper for showing desktop notifications to the user.
Uses osascript on macOS and notify-send on Linux; other platforms only log.
"""

import shutil
import subprocess
import sys
from typing import List, Optional

from schedcal.logging_helper import Log

APP_NAME = "ScheduleCal"


def _escape_applescript(text: str) -> str:
    """Escape text for an AppleScript string literal."""
    return (text
            .replace('\\', '\\\\')
            .replace('"', '\\"')
            .replace('\n', ' ')
            .replace('\r', ''))


def notifier_command(title: str, message: str) -> Optional[List[str]]:
    """
    Command line that displays a notification on this platform, or None if
    there is no supported notifier.
    """
    if sys.platform == "darwin":
        script = (
            f'display notification "{_escape_applescript(message)}" '
            f'with title "{_escape_applescript(title)}"'
        )
        return ['osascript', '-e', script]
    if shutil.which('notify-send'):
        # '--' keeps a title starting with '-' from being read as an option
        return ['notify-send', '--app-name', APP_NAME, '--', title, message]
    return None


def show_notification(title: str, message: str) -> bool:
    """
    Show a desktop notification.

    Args:
        title: Notification title
        message: Notification body

    Returns:
        True if the notifier ran successfully, False otherwise
    """
    command = notifier_command(title, message)
    if command is None:
        Log.warn(f"No desktop notifier available - notification not shown: {title}: {message}")
        Log.kv({"stage": "notification", "result": "unsupported"})
        return False

    try:
        subprocess.run(command, check=True, capture_output=True, timeout=10)
    except (OSError, subprocess.SubprocessError) as e:
        Log.warn(f"Failed to show notification: {e}")
        Log.kv({"stage": "notification", "result": "failed", "error": str(e)})
        return False

    Log.info(f"Notification shown: {title}: {message}")
    Log.kv({"stage": "notification", "result": "shown", "notifier": command[0]})
    return True

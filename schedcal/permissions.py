"""
Permissions module for notification permission checks.
Implements one-shot permission checking with caching.
"""

import subprocess
import sys
from typing import Optional

from schedcal.logging_helper import Log
from schedcal.notifications import notifier_command

# Module-level cache for permission status
_notification_permission_cache: Optional[bool] = None


def reset_permission_cache():
    """Forget the cached result so the next call checks again."""
    global _notification_permission_cache
    _notification_permission_cache = None


def ensure_notification_permission() -> bool:
    """
    Ensures desktop notifications can be shown.
    Checks ONCE and caches the result.

    On macOS this verifies that osascript runs; elsewhere it requires
    notify-send on PATH. Unsupported platforms are reported as denied.

    Returns:
        bool: True if notifications can be sent, False otherwise
    """
    global _notification_permission_cache

    if _notification_permission_cache is not None:
        Log.info(f"Notification permission cache hit: {_notification_permission_cache}")
        return _notification_permission_cache

    Log.section("Notification Permissions")
    Log.info("Checking notification permission (one-time check)")

    if notifier_command("", "") is None:
        _notification_permission_cache = False
        Log.warn(f"No desktop notifier available on platform {sys.platform}")
        Log.kv({"stage": "notification_permissions", "result": "unsupported"})
        return _notification_permission_cache

    if sys.platform != "darwin":
        _notification_permission_cache = True
        Log.kv({"stage": "notification_permissions", "result": "notify_send_available"})
        return _notification_permission_cache

    # Verify osascript runs without displaying anything
    try:
        process = subprocess.run(
            ['osascript', '-e', 'return "ready"'],
            capture_output=True,
            timeout=10,
        )
        ready = process.returncode == 0 and process.stdout.strip() == b"ready"
    except (OSError, subprocess.SubprocessError) as e:
        Log.warn(f"Notification permission check failed: {e}")
        ready = False

    _notification_permission_cache = ready
    if ready:
        Log.info("osascript available; assuming notification permission ready")
        Log.kv({"stage": "notification_permissions", "result": "osascript_available"})
    else:
        Log.warn("osascript unavailable; notifications disabled")
        Log.kv({"stage": "notification_permissions", "result": "denied"})
    return _notification_permission_cache

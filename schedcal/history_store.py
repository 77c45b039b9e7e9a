"""
Key-value history store backed by a single JSON file.

Each feature keeps an ordered list of records under its own namespace key,
newest first, capped at MAX_HISTORY_ITEMS. Read/write failures are logged
and degrade to empty results rather than raising.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from schedcal.logging_helper import Log

KEY_PREFIX = "scheduleCal_"
MAX_HISTORY_ITEMS = 50


class HistoryStore:
    """JSON-file key-value store with per-namespace history lists."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as err:
            Log.warn(f"Failed to read history file ({self.path}): {err}")
            return {}
        if not isinstance(data, dict):
            Log.warn(f"History file is not a JSON object, ignoring: {self.path}")
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except (OSError, TypeError) as err:
            Log.warn(f"Failed to write history file ({self.path}): {err}")

    def get_item(self, key: str) -> Optional[Any]:
        return self._read_all().get(KEY_PREFIX + key)

    def set_item(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read_all()
            data[KEY_PREFIX + key] = value
            self._write_all(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if data.pop(KEY_PREFIX + key, None) is not None:
                self._write_all(data)

    def get_history(self, key: str) -> List[Dict[str, Any]]:
        history = self.get_item(key)
        if not isinstance(history, list):
            return []
        return [item for item in history if isinstance(item, dict)]

    def add_history_item(self, key: str, item: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Prepend item to the namespace's history, keeping the newest
        MAX_HISTORY_ITEMS entries.

        Returns:
            The updated history, newest first
        """
        with self._lock:
            data = self._read_all()
            history = data.get(KEY_PREFIX + key)
            if not isinstance(history, list):
                history = []
            updated = [item] + history
            evicted = len(updated) - MAX_HISTORY_ITEMS
            updated = updated[:MAX_HISTORY_ITEMS]
            data[KEY_PREFIX + key] = updated
            self._write_all(data)

        Log.kv({
            "stage": "history",
            "action": "add",
            "namespace": key,
            "size": len(updated),
            "evicted": max(evicted, 0),
        })
        return updated

    def remove_history_item(self, key: str, item_id: str) -> List[Dict[str, Any]]:
        """
        Remove the entry with the given id.

        Returns:
            The updated history, newest first
        """
        with self._lock:
            data = self._read_all()
            history = data.get(KEY_PREFIX + key)
            if not isinstance(history, list):
                history = []
            updated = [
                item for item in history
                if not (isinstance(item, dict) and item.get("id") == item_id)
            ]
            data[KEY_PREFIX + key] = updated
            self._write_all(data)

        Log.kv({
            "stage": "history",
            "action": "remove",
            "namespace": key,
            "removed": len(history) - len(updated),
        })
        return updated

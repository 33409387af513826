#!/usr/bin/env python3
"""
Ideation Workshop - Key-Value Storage

Synchronous string key-value stores used to persist top-level
collections. Each key holds one JSON document.

Layout of JsonFileStorage:
    <state_dir>/workshops.json
    <state_dir>/ideas.json
    <state_dir>/evaluations.json
    <state_dir>/selected_criteria.json
"""

import re
from pathlib import Path
from typing import Dict, Optional

# Fixed keys for the persisted collections
WORKSHOPS_KEY = "workshops"
IDEAS_KEY = "ideas"
EVALUATIONS_KEY = "evaluations"
SELECTED_CRITERIA_KEY = "selected_criteria"
CUSTOM_CRITERIA_KEY = "custom_criteria"

_VALID_KEY = re.compile(r"^[A-Za-z0-9_\-]+$")


class JsonFileStorage:
    """One file per key under a state directory, written atomically."""

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.state_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        """
        Return the stored string, or None if the key was never written.

        Raises OSError if the file exists but cannot be read.
        """
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Store value under key. Raises OSError if the write fails."""
        path = self._path(key)
        # Write to temp file first, then replace (atomic on POSIX, works on Windows)
        temp_file = path.with_suffix(".tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            f.write(value)
        temp_file.replace(path)

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


class MemoryStorage:
    """In-process storage, for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

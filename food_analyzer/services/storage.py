"""
Key/value storage backends for client state.

Values are JSON strings stored under string keys. Every backend failure
surfaces as PersistenceFailure so callers can fall back to memory.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from food_analyzer.core.errors import PersistenceFailure


class MemoryStorage:
    """
    Process-local storage.

    Used in tests and when durable storage is disabled. Data is lost when
    the application stops.
    """

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Durable storage in a single JSON object file.

    Writes go to a temporary file in the same directory that then
    replaces the original, so a crash never leaves a half-written file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceFailure(f"{self.path} does not contain a JSON object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as e:
            raise PersistenceFailure(f"Cannot write {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise PersistenceFailure(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except PersistenceFailure:
            # Unreadable file: start over rather than refuse every write
            data = {}
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

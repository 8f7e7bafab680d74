"""
Atomic JSON files for storescm state.

A job's history file is rewritten in full on every change: the new content
goes to a temporary file beside it, which then replaces the original, so
an interrupted write leaves the previous history intact.
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union


class FileStore:
    """
    One JSON object persisted to one file, with an in-memory copy.

    Example:
        store = FileStore(history_dir / "nightly.json")
        store.set("builds", history.to_list())
        builds = store.get("builds", [])
    """

    def __init__(self, path: Union[str, Path], auto_create: bool = True):
        """
        Initialize FileStore.

        Args:
            path: Path to the JSON file
            auto_create: Write an empty object if the file does not exist yet
        """
        self.path = Path(path).expanduser().resolve()
        self._lock = threading.RLock()
        self._cache: Optional[Dict[str, Any]] = None

        if auto_create and not self.path.exists():
            self.write({})

    def _load(self) -> Dict[str, Any]:
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def read(self) -> Dict[str, Any]:
        """
        Return a copy of the stored object ({} if the file is missing).

        Raises:
            ValueError: If the file is not a JSON object (including
                json.JSONDecodeError for malformed JSON)
        """
        with self._lock:
            if self._cache is None:
                self._cache = self._load()
            return dict(self._cache)

    def write(self, data: Dict[str, Any]) -> None:
        """Replace the whole file atomically."""
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, 'w') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                    f.write('\n')
                os.replace(temp_path, self.path)
            except Exception:
                Path(temp_path).unlink(missing_ok=True)
                raise
            self._cache = dict(data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store one top-level value and rewrite the file."""
        self.update(key, lambda _: value)

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """
        Replace one top-level value with fn(current value) and rewrite the file.

        The file is re-read first, so keys written by another process since
        the last read are carried over rather than overwritten with a stale
        copy.

        Returns:
            The new value
        """
        with self._lock:
            self._cache = self._load()
            data = dict(self._cache)
            data[key] = fn(data.get(key, default))
            self.write(data)
            return data[key]

    def invalidate_cache(self) -> None:
        """Forget the in-memory copy; the next read goes to disk."""
        with self._lock:
            self._cache = None

    def __contains__(self, key: str) -> bool:
        return key in self.read()

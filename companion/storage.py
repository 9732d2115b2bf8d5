"""JSON file storage used by the memory stores."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A memory file could not be read or written."""


class JsonStorage:
    """Whole-file JSON documents plus an append-only text sink, keyed by path."""

    def path_exists(self, path: str | Path) -> bool:
        return Path(path).exists()

    def ensure_dir(self, path: str | Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def read_json(self, path: str | Path) -> Any:
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as stream:
                return json.load(stream)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def write_json(self, path: str | Path, payload: Any) -> None:
        """Overwrite path with payload, creating parent directories."""
        path = Path(path)
        try:
            self.ensure_dir(path.parent)
            with path.open("w", encoding="utf-8") as stream:
                json.dump(payload, stream, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.debug("Wrote %s", path)

    def append_file(self, path: str | Path, text: str) -> None:
        path = Path(path)
        try:
            self.ensure_dir(path.parent)
            with path.open("a", encoding="utf-8") as stream:
                stream.write(text)
        except OSError as e:
            raise StorageError(f"Failed to append to {path}: {e}") from e

    def read_text(self, path: str | Path) -> str:
        path = Path(path)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

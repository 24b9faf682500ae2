"""JSON-file-backed key/value store standing in for per-browser local storage."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    """String key/value storage scoped to one profile directory.

    Values are stored as strings, exactly like the browser API; callers do
    their own JSON encoding. Every write rewrites the whole file.
    """

    FILE_NAME = "local_storage.json"

    def __init__(self, base_dir: str | Path = "data/profile") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.base_dir / self.FILE_NAME

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as exc:
            logger.warning("Local storage unreadable, starting empty", extra={"path": str(self.path), "error": str(exc)})
            return {}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _save(self, payload: Dict[str, str]) -> None:
        self.path.write_text(json.dumps(payload, indent=2))

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        payload = self._load()
        payload[key] = str(value)
        self._save(payload)

    def remove_item(self, key: str) -> None:
        payload = self._load()
        if payload.pop(key, None) is not None:
            self._save(payload)

    def clear(self) -> None:
        self._save({})

    def keys(self) -> list[str]:
        return list(self._load())

    def get_json(self, key: str) -> Any:
        """Decode a stored JSON value, returning ``None`` for missing or corrupt entries."""

        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))


__all__ = ["LocalStorage"]

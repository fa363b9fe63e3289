"""
Key-value storage for the widgets.

Widgets persist whole collections under one string key, exactly like
browser localStorage: values are JSON text and every mutation rewrites the
whole value. The store is injected so widgets run against memory in tests
and against a JSON file on disk elsewhere.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Interface for string key-value storage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStore:
    """In-memory store, scoped to the instance."""

    def __init__(self, items: Optional[dict[str, str]] = None):
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStore:
    """
    Store backed by a single JSON object file.

    The file is rewritten on every mutation (write to a temp file, then
    replace). A missing or corrupt file reads as an empty store.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(json.dumps(items, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = str(value)
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)


def read_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Read a JSON value; missing or unparseable values return ``default``."""
    raw = store.get_item(key)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        return default


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    """Serialize ``value`` as JSON and store it under ``key``."""
    store.set_item(key, json.dumps(value, ensure_ascii=False))

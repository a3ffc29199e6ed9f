from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlmodel import select

from ..db import get_session
from ..models import StoreEntry


STORAGE_KEYS = {
    "categories": "workout_categories",
    "workouts": "workout_workouts",
    "sessions": "workout_sessions",
    "settings": "workout_settings",
}


class KeyValueMedium(Protocol):
    """Synchronous string-keyed storage the JSON store sits on."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def set_items(self, items: Mapping[str, str]) -> None:
        """Write several keys as one unit."""
        ...

    def keys(self) -> List[str]:
        ...


class MemoryMedium:
    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def set_items(self, items: Mapping[str, str]) -> None:
        self._items.update(items)

    def keys(self) -> List[str]:
        return sorted(self._items)


class SQLMedium:
    """One row per key in the ``storeentry`` table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def get_item(self, key: str) -> Optional[str]:
        with get_session(self.engine) as session:
            entry = session.get(StoreEntry, key)
            return entry.value if entry is not None else None

    def set_item(self, key: str, value: str) -> None:
        self.set_items({key: value})

    def set_items(self, items: Mapping[str, str]) -> None:
        with get_session(self.engine) as session:
            for key, value in items.items():
                entry = session.get(StoreEntry, key)
                if entry is None:
                    session.add(StoreEntry(key=key, value=value))
                else:
                    entry.value = value
                    session.add(entry)
            session.commit()

    def keys(self) -> List[str]:
        with get_session(self.engine) as session:
            result = session.exec(select(StoreEntry.key).order_by(StoreEntry.key))
            return list(result.all())


class JsonStore:
    """JSON documents on top of a key-value medium.

    Reads never raise: a missing key, an empty value or a payload that does
    not parse all yield the caller's default. Writes serialize the whole value
    and let medium errors propagate.
    """

    def __init__(self, medium: KeyValueMedium) -> None:
        self.medium = medium
        self._lock = threading.RLock()

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold across a read-modify-write so concurrent callers cannot interleave."""
        with self._lock:
            yield

    def read(self, key: str, default: Any) -> Any:
        try:
            raw = self.medium.get_item(key)
        except Exception as e:
            print(f"[liftlog] store: read of {key} failed, using default ({e})")
            return default
        if not raw:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            print(f"[liftlog] store: {key} holds malformed JSON, using default")
            return default

    def write(self, key: str, value: Any) -> None:
        self.medium.set_item(key, json.dumps(value, ensure_ascii=False))

    def write_many(self, values: Mapping[str, Any]) -> None:
        self.medium.set_items({key: json.dumps(value, ensure_ascii=False) for key, value in values.items()})

    def keys(self) -> List[str]:
        return self.medium.keys()

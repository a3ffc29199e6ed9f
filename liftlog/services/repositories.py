from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Generic, Iterable, List, Mapping, Optional, Set, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..models import (
    Category,
    Record,
    UserSettings,
    Workout,
    WorkoutSession,
    default_categories,
    parse_timestamp,
    utc_now_iso,
)
from .storage import STORAGE_KEYS, JsonStore

if TYPE_CHECKING:
    from .cascade import CascadeCoordinator


RecordT = TypeVar("RecordT", bound=Record)
Changes = Union[BaseModel, Mapping[str, Any]]

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def sort_newest_first(sessions: Iterable[WorkoutSession]) -> List[WorkoutSession]:
    """Sessions by date, newest first. Unparsable dates go last."""
    def _key(session: WorkoutSession) -> Tuple[bool, datetime]:
        ts = parse_timestamp(session.date)
        return (ts is not None, ts or _OLDEST)

    return sorted(sessions, key=_key, reverse=True)


class CollectionRepository(Generic[RecordT]):
    """Full-collection read-modify-write over one store key.

    Stored items that do not validate are kept as they are and written back
    untouched; they are just not visible through ``list()``.
    """

    key: str
    model: Type[RecordT]
    frozen_fields: Tuple[str, ...] = ("id",)

    def __init__(self, store: JsonStore) -> None:
        self._store = store

    def _entries(self) -> List[Any]:
        raw = self._store.read(self.key, [])
        if not isinstance(raw, list):
            print(f"[liftlog] store: {self.key} is not a list, using default")
            return []
        entries: List[Any] = []
        for item in raw:
            try:
                entries.append(self.model.model_validate(item))
            except ValidationError as e:
                print(f"[liftlog] store: keeping unreadable record in {self.key} as-is ({e.error_count()} errors)")
                entries.append(item)
        return entries

    def _records(self, entries: Iterable[Any]) -> List[RecordT]:
        return [e for e in entries if isinstance(e, self.model)]

    def _save(self, entries: Iterable[Any]) -> None:
        self._store.write(self.key, [e.to_json() if isinstance(e, Record) else e for e in entries])

    def _as_payload(self, changes: Changes) -> Dict[str, Any]:
        # Accept models or plain dicts keyed by field name or by stored (camelCase) name
        if isinstance(changes, BaseModel):
            return changes.model_dump(mode="json", by_alias=True, exclude_unset=True)
        aliases = {name: field.alias or name for name, field in self.model.model_fields.items()}
        return {aliases.get(k, k): v for k, v in changes.items()}

    def _nullable_fields(self) -> Set[str]:
        return {
            field.alias or name
            for name, field in self.model.model_fields.items()
            if not field.is_required() and field.default is None
        }

    def _append(self, data: Changes, **assigned: Any) -> RecordT:
        payload = self._as_payload(data)
        payload.update(assigned)
        with self._store.lock():
            entries = self._entries()
            record = self.model.model_validate(payload)
            self._save(entries + [record])
        return record

    def list(self) -> List[RecordT]:
        return self._records(self._entries())

    def get_by_id(self, record_id: str) -> Optional[RecordT]:
        return next((r for r in self.list() if r.id == record_id), None)

    def save_all(self, records: Iterable[RecordT]) -> None:
        """Replace the whole collection. Last write wins."""
        with self._store.lock():
            self._save(list(records))

    def update(self, record_id: str, changes: Changes) -> Optional[RecordT]:
        nullable = self._nullable_fields()
        # A null for a required field means "leave it", not "clear it"
        patch = {
            k: v for k, v in self._as_payload(changes).items()
            if k not in self.frozen_fields and (v is not None or k in nullable)
        }
        with self._store.lock():
            entries = self._entries()
            for i, entry in enumerate(entries):
                if isinstance(entry, self.model) and entry.id == record_id:
                    merged = entry.to_json()
                    merged.update(patch)
                    entries[i] = self.model.model_validate(merged)
                    self._save(entries)
                    return entries[i]
        return None


class CategoryRepository(CollectionRepository[Category]):
    key = STORAGE_KEYS["categories"]
    model = Category
    frozen_fields = ("id", "createdAt")

    def __init__(self, store: JsonStore, cascade: "CascadeCoordinator") -> None:
        super().__init__(store)
        self._cascade = cascade

    def _entries(self) -> List[Any]:
        # Seed only a collection that holds nothing at all
        with self._store.lock():
            entries = super()._entries()
            if not entries:
                entries = default_categories()
                self._save(entries)
                print(f"[liftlog] categories: seeded {len(entries)} defaults")
            return entries

    def add(self, data: Changes) -> Category:
        return self._append(data, id=new_id(), createdAt=utc_now_iso())

    def delete(self, category_id: str) -> None:
        self._cascade.delete_category(category_id)


class WorkoutRepository(CollectionRepository[Workout]):
    key = STORAGE_KEYS["workouts"]
    model = Workout
    frozen_fields = ("id", "createdAt")

    def __init__(self, store: JsonStore, cascade: "CascadeCoordinator") -> None:
        super().__init__(store)
        self._cascade = cascade

    def list_by_category(self, category_id: str) -> List[Workout]:
        return [w for w in self.list() if w.category_id == category_id]

    def add(self, data: Changes) -> Workout:
        return self._append(data, id=new_id(), createdAt=utc_now_iso())

    def toggle_favorite(self, workout_id: str) -> Optional[Workout]:
        with self._store.lock():
            workout = self.get_by_id(workout_id)
            if workout is None:
                return None
            return self.update(workout_id, {"favorite": not workout.favorite})

    def delete(self, workout_id: str) -> None:
        self._cascade.delete_workout(workout_id)


class SessionRepository(CollectionRepository[WorkoutSession]):
    key = STORAGE_KEYS["sessions"]
    model = WorkoutSession

    def list_by_workout(self, workout_id: str) -> List[WorkoutSession]:
        return sort_newest_first(s for s in self.list() if s.workout_id == workout_id)

    def add(self, data: Changes) -> WorkoutSession:
        payload = self._as_payload(data)
        if not payload.get("date"):
            payload["date"] = utc_now_iso()
        return self._append(payload, id=new_id())

    def delete(self, session_id: str) -> None:
        with self._store.lock():
            entries = self._entries()
            remaining = [e for e in entries if not (isinstance(e, WorkoutSession) and e.id == session_id)]
            if len(remaining) != len(entries):
                self._save(remaining)


class SettingsRepository:
    key = STORAGE_KEYS["settings"]

    def __init__(self, store: JsonStore) -> None:
        self._store = store

    def get(self) -> UserSettings:
        raw = self._store.read(self.key, None)
        if not isinstance(raw, dict):
            return UserSettings()
        try:
            return UserSettings.model_validate(raw)
        except ValidationError:
            print(f"[liftlog] store: {self.key} is malformed, using default")
            return UserSettings()

    def set(self, settings: UserSettings) -> None:
        self._store.write(self.key, settings.to_json())

    def toggle_unit(self) -> UserSettings:
        with self._store.lock():
            current = self.get()
            unit = "lbs" if current.preferred_unit == "kg" else "kg"
            updated = UserSettings.model_validate({**current.to_json(), "preferredUnit": unit})
            self.set(updated)
        return updated

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel, Field


class StoreEntry(SQLModel, table=True):
    key: str = Field(primary_key=True)
    value: str


def utc_now_iso() -> str:
    """Current UTC time in the same shape as JavaScript's toISOString()."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # Normalize ISO 8601 with possible trailing Z
    v = value.replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Record(BaseModel):
    # Stored JSON keeps camelCase keys; unknown keys survive a round-trip
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Category(Record):
    id: str
    title: str
    icon: str = "💪"
    created_at: str = ""


class Workout(Record):
    id: str
    category_id: str
    title: str
    notes: Optional[str] = None
    favorite: bool = False
    created_at: str = ""


class WorkoutSet(Record):
    reps: int = 0
    weight: float = 0


class WorkoutSession(Record):
    id: str
    workout_id: str
    name: str = ""
    date: str = ""
    sets: List[WorkoutSet] = []
    notes: Optional[str] = None


class UserSettings(Record):
    preferred_unit: Literal["kg", "lbs"] = "kg"


# Request payloads

def _not_null(value):
    # Optional only so a PATCH may leave the field out; an explicit null is refused
    if value is None:
        raise ValueError("may not be null")
    return value


class CategoryCreate(Record):
    title: str
    icon: str = "💪"


class CategoryUpdate(Record):
    title: Optional[str] = None
    icon: Optional[str] = None

    @field_validator("title", "icon")
    @classmethod
    def reject_null(cls, value):
        return _not_null(value)


class WorkoutCreate(Record):
    category_id: str
    title: str
    notes: Optional[str] = None
    favorite: bool = False


class WorkoutUpdate(Record):
    category_id: Optional[str] = None
    title: Optional[str] = None
    notes: Optional[str] = None
    favorite: Optional[bool] = None

    @field_validator("category_id", "title", "favorite")
    @classmethod
    def reject_null(cls, value):
        return _not_null(value)


class SessionCreate(Record):
    workout_id: str
    name: str
    date: Optional[str] = None
    sets: List[WorkoutSet] = []
    notes: Optional[str] = None


class SessionUpdate(Record):
    workout_id: Optional[str] = None
    name: Optional[str] = None
    date: Optional[str] = None
    sets: Optional[List[WorkoutSet]] = None
    notes: Optional[str] = None

    @field_validator("workout_id", "name", "date", "sets")
    @classmethod
    def reject_null(cls, value):
        return _not_null(value)


DEFAULT_CATEGORIES = [
    ("1", "Chest", "💪"),
    ("2", "Back", "🦾"),
    ("3", "Legs", "🦵"),
    ("4", "Shoulders", "🏋️"),
    ("5", "Arms", "💪"),
    ("6", "Abs", "🔥"),
]


def default_categories() -> List[Category]:
    created_at = utc_now_iso()
    return [Category(id=cid, title=title, icon=icon, created_at=created_at) for cid, title, icon in DEFAULT_CATEGORIES]

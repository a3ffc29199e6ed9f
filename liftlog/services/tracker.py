from __future__ import annotations

from functools import lru_cache
from typing import Optional

from ..db import get_engine, init_db
from ..settings import Settings, get_settings
from .cascade import CascadeCoordinator
from .repositories import CategoryRepository, SessionRepository, SettingsRepository, WorkoutRepository
from .storage import JsonStore, KeyValueMedium, MemoryMedium, SQLMedium


class Tracker:
    """The repositories for one store, wired together once and passed around."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store
        self.cascade = CascadeCoordinator(store)
        self.categories = CategoryRepository(store, self.cascade)
        self.workouts = WorkoutRepository(store, self.cascade)
        self.sessions = SessionRepository(store)
        self.settings = SettingsRepository(store)


def build_tracker(settings: Optional[Settings] = None, medium: Optional[KeyValueMedium] = None) -> Tracker:
    settings = settings or get_settings()
    if medium is None:
        if settings.store_backend == "memory":
            medium = MemoryMedium()
        elif settings.store_backend == "sql":
            engine = get_engine()
            init_db(engine)
            medium = SQLMedium(engine)
        else:
            raise ValueError(f"unknown store backend: {settings.store_backend!r}")
    print(f"[liftlog] store: using {type(medium).__name__}")
    return Tracker(JsonStore(medium))


@lru_cache
def get_tracker() -> Tracker:
    return build_tracker()

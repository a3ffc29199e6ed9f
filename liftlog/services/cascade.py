from __future__ import annotations

from typing import Any, Dict, List

from ..models import default_categories
from .storage import STORAGE_KEYS, JsonStore


def _field(item: Any, name: str) -> Any:
    return item.get(name) if isinstance(item, dict) else None


class CascadeCoordinator:
    """Removes a parent together with everything that references it.

    All affected collections go out in a single ``write_many`` so a failing
    medium cannot leave sessions pointing at a workout that is gone. When
    nothing matches, nothing is written.
    """

    def __init__(self, store: JsonStore) -> None:
        self._store = store

    def _collection(self, name: str) -> List[Any]:
        raw = self._store.read(STORAGE_KEYS[name], [])
        if not isinstance(raw, list):
            return []
        return raw

    def delete_category(self, category_id: str) -> Dict[str, int]:
        with self._store.lock():
            categories = self._collection("categories")
            if not categories:
                # Same view the category repository would have served
                categories = [c.to_json() for c in default_categories()]
            workouts = self._collection("workouts")
            sessions = self._collection("sessions")

            workout_ids = {_field(w, "id") for w in workouts if _field(w, "categoryId") == category_id}
            workout_ids.discard(None)
            kept_sessions = [s for s in sessions if _field(s, "workoutId") not in workout_ids]
            kept_workouts = [w for w in workouts if _field(w, "categoryId") != category_id]
            kept_categories = [c for c in categories if _field(c, "id") != category_id]

            removed = {
                "categories": len(categories) - len(kept_categories),
                "workouts": len(workouts) - len(kept_workouts),
                "sessions": len(sessions) - len(kept_sessions),
            }
            if not any(removed.values()):
                return removed
            self._store.write_many({
                STORAGE_KEYS["sessions"]: kept_sessions,
                STORAGE_KEYS["workouts"]: kept_workouts,
                STORAGE_KEYS["categories"]: kept_categories,
            })
        print(f"[liftlog] cascade: category {category_id} removed {removed['workouts']} workouts, {removed['sessions']} sessions")
        return removed

    def delete_workout(self, workout_id: str) -> Dict[str, int]:
        with self._store.lock():
            workouts = self._collection("workouts")
            sessions = self._collection("sessions")

            kept_sessions = [s for s in sessions if _field(s, "workoutId") != workout_id]
            kept_workouts = [w for w in workouts if _field(w, "id") != workout_id]

            removed = {
                "workouts": len(workouts) - len(kept_workouts),
                "sessions": len(sessions) - len(kept_sessions),
            }
            if not any(removed.values()):
                return removed
            self._store.write_many({
                STORAGE_KEYS["sessions"]: kept_sessions,
                STORAGE_KEYS["workouts"]: kept_workouts,
            })
        print(f"[liftlog] cascade: workout {workout_id} removed {removed['sessions']} sessions")
        return removed

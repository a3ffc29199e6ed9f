from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ..models import WorkoutSession, parse_timestamp
from .repositories import CategoryRepository, SessionRepository, WorkoutRepository, sort_newest_first
from .tracker import Tracker, get_tracker

router = APIRouter()

RECENT_WINDOW = timedelta(days=7)
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _totals(sessions: List[WorkoutSession]) -> Dict[str, int]:
    total_sets = sum(len(s.sets) for s in sessions)
    total_reps = sum(st.reps for s in sessions for st in s.sets)
    return {"sets": total_sets, "reps": total_reps}


class StatsAggregator:
    """Derived numbers for the dashboard. Nothing is cached; every call rescans."""

    def __init__(self, categories: CategoryRepository, workouts: WorkoutRepository, sessions: SessionRepository) -> None:
        self.categories = categories
        self.workouts = workouts
        self.sessions = sessions

    def global_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or datetime.now(timezone.utc)
        sessions = self.sessions.list()
        workouts = self.workouts.list()

        totals = _totals(sessions)
        avg_reps = _round_half_up(totals["reps"] / totals["sets"]) if totals["sets"] > 0 else 0

        cutoff = now - RECENT_WINDOW
        recent = 0
        for s in sessions:
            ts = parse_timestamp(s.date)
            if ts is not None and ts >= cutoff:
                recent += 1

        return {
            # Counts sessions, not workouts
            "totalWorkouts": len(sessions),
            "totalSets": totals["sets"],
            "avgReps": avg_reps,
            "recentSessions": recent,
            "favoriteCount": sum(1 for w in workouts if w.favorite),
        }

    def category_stats(self, category_id: str) -> Dict[str, int]:
        workouts = self.workouts.list_by_category(category_id)
        workout_ids = {w.id for w in workouts}
        sessions = [s for s in self.sessions.list() if s.workout_id in workout_ids]
        totals = _totals(sessions)
        return {
            "workoutCount": len(workouts),
            "sessionCount": len(sessions),
            "totalSets": totals["sets"],
            "totalReps": totals["reps"],
        }

    def daily_sets(self, days: int = 7, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Sets logged per UTC calendar day, oldest day first."""
        now = now or datetime.now(timezone.utc)
        today = now.astimezone(timezone.utc).date()
        sessions = self.sessions.list()
        buckets: List[Dict[str, Any]] = []
        for i in range(days):
            day = today - timedelta(days=days - 1 - i)
            key = day.isoformat()
            buckets.append({
                "date": key,
                "day": WEEKDAYS[day.weekday()],
                "sets": sum(len(s.sets) for s in sessions if s.date.startswith(key)),
            })
        return buckets

    def recent_workouts(self, limit: int = 3) -> List[Dict[str, Any]]:
        workouts = {w.id: w for w in self.workouts.list()}
        seen = set()
        recent = []
        for s in sort_newest_first(self.sessions.list()):
            if s.workout_id in seen or s.workout_id not in workouts:
                continue
            seen.add(s.workout_id)
            recent.append(workouts[s.workout_id].to_json())
            if len(recent) == limit:
                break
        return recent

    def workout_counts(self) -> Dict[str, int]:
        workouts = self.workouts.list()
        return {c.id: sum(1 for w in workouts if w.category_id == c.id) for c in self.categories.list()}

    def search(self, query: str, limit: int = 8) -> List[Dict[str, Any]]:
        q = query.strip().lower()
        if not q:
            return []
        categories = {c.id: c for c in self.categories.list()}
        workouts = self.workouts.list()

        results: List[Dict[str, Any]] = []
        seen = set()

        def _add(workout) -> None:
            category = categories[workout.category_id]
            seen.add(workout.id)
            results.append({
                "id": workout.id,
                "title": workout.title,
                "categoryId": workout.category_id,
                "categoryName": category.title,
                "categoryIcon": category.icon,
                "type": "workout",
            })

        # Title matches rank ahead of category-name matches
        for w in workouts:
            if w.category_id in categories and q in w.title.lower():
                _add(w)
        for w in workouts:
            category = categories.get(w.category_id)
            if category is not None and w.id not in seen and q in category.title.lower():
                _add(w)
        return results[:limit]


def get_stats(tracker: Tracker = Depends(get_tracker)) -> StatsAggregator:
    return StatsAggregator(tracker.categories, tracker.workouts, tracker.sessions)


@router.get("/stats")
def summary(stats: StatsAggregator = Depends(get_stats)) -> Dict[str, int]:
    return stats.global_stats()


@router.get("/stats/categories/{category_id}")
def category_summary(category_id: str, stats: StatsAggregator = Depends(get_stats)) -> Dict[str, int]:
    return stats.category_stats(category_id)


@router.get("/stats/daily-sets")
def daily_sets(days: int = Query(7, ge=1, le=366), stats: StatsAggregator = Depends(get_stats)) -> List[Dict[str, Any]]:
    return stats.daily_sets(days=days)


@router.get("/stats/recent-workouts")
def recent_workouts(limit: int = Query(3, ge=1, le=50), stats: StatsAggregator = Depends(get_stats)) -> List[Dict[str, Any]]:
    return stats.recent_workouts(limit=limit)


@router.get("/stats/workout-counts")
def workout_counts(stats: StatsAggregator = Depends(get_stats)) -> Dict[str, int]:
    return stats.workout_counts()


@router.get("/search")
def search(q: str = "", limit: int = Query(8, ge=1, le=50), stats: StatsAggregator = Depends(get_stats)) -> List[Dict[str, Any]]:
    return stats.search(q, limit=limit)

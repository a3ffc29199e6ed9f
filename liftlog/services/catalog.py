from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ..models import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    SessionCreate,
    SessionUpdate,
    UserSettings,
    Workout,
    WorkoutCreate,
    WorkoutSession,
    WorkoutUpdate,
)
from .tracker import Tracker, get_tracker

# Sync endpoints: FastAPI runs them in its threadpool
router = APIRouter()


def _found(record, kind: str, record_id: str):
    if record is None:
        raise HTTPException(status_code=404, detail=f"{kind} {record_id} not found")
    return record


# Categories

@router.get("/categories")
def list_categories(tracker: Tracker = Depends(get_tracker)) -> List[Category]:
    return tracker.categories.list()


@router.post("/categories", status_code=201)
def add_category(body: CategoryCreate, tracker: Tracker = Depends(get_tracker)) -> Category:
    return tracker.categories.add(body)


@router.get("/categories/{category_id}")
def get_category(category_id: str, tracker: Tracker = Depends(get_tracker)) -> Category:
    return _found(tracker.categories.get_by_id(category_id), "category", category_id)


@router.patch("/categories/{category_id}")
def update_category(category_id: str, body: CategoryUpdate, tracker: Tracker = Depends(get_tracker)) -> Category:
    return _found(tracker.categories.update(category_id, body), "category", category_id)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: str, tracker: Tracker = Depends(get_tracker)) -> Response:
    tracker.categories.delete(category_id)
    return Response(status_code=204)


@router.get("/categories/{category_id}/workouts")
def category_workouts(category_id: str, tracker: Tracker = Depends(get_tracker)) -> List[Workout]:
    return tracker.workouts.list_by_category(category_id)


# Workouts

@router.get("/workouts")
def list_workouts(tracker: Tracker = Depends(get_tracker)) -> List[Workout]:
    return tracker.workouts.list()


@router.put("/workouts")
def save_workouts(body: List[Workout], tracker: Tracker = Depends(get_tracker)) -> List[Workout]:
    tracker.workouts.save_all(body)
    return tracker.workouts.list()


@router.post("/workouts", status_code=201)
def add_workout(body: WorkoutCreate, tracker: Tracker = Depends(get_tracker)) -> Workout:
    return tracker.workouts.add(body)


@router.get("/workouts/{workout_id}")
def get_workout(workout_id: str, tracker: Tracker = Depends(get_tracker)) -> Workout:
    return _found(tracker.workouts.get_by_id(workout_id), "workout", workout_id)


@router.patch("/workouts/{workout_id}")
def update_workout(workout_id: str, body: WorkoutUpdate, tracker: Tracker = Depends(get_tracker)) -> Workout:
    return _found(tracker.workouts.update(workout_id, body), "workout", workout_id)


@router.post("/workouts/{workout_id}/favorite")
def toggle_favorite(workout_id: str, tracker: Tracker = Depends(get_tracker)) -> Workout:
    return _found(tracker.workouts.toggle_favorite(workout_id), "workout", workout_id)


@router.delete("/workouts/{workout_id}", status_code=204)
def delete_workout(workout_id: str, tracker: Tracker = Depends(get_tracker)) -> Response:
    tracker.workouts.delete(workout_id)
    return Response(status_code=204)


@router.get("/workouts/{workout_id}/sessions")
def workout_sessions(workout_id: str, tracker: Tracker = Depends(get_tracker)) -> List[WorkoutSession]:
    return tracker.sessions.list_by_workout(workout_id)


# Sessions

@router.get("/sessions")
def list_sessions(tracker: Tracker = Depends(get_tracker)) -> List[WorkoutSession]:
    return tracker.sessions.list()


@router.post("/sessions", status_code=201)
def add_session(body: SessionCreate, tracker: Tracker = Depends(get_tracker)) -> WorkoutSession:
    return tracker.sessions.add(body)


@router.get("/sessions/{session_id}")
def get_session_record(session_id: str, tracker: Tracker = Depends(get_tracker)) -> WorkoutSession:
    return _found(tracker.sessions.get_by_id(session_id), "session", session_id)


@router.patch("/sessions/{session_id}")
def update_session(session_id: str, body: SessionUpdate, tracker: Tracker = Depends(get_tracker)) -> WorkoutSession:
    return _found(tracker.sessions.update(session_id, body), "session", session_id)


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str, tracker: Tracker = Depends(get_tracker)) -> Response:
    tracker.sessions.delete(session_id)
    return Response(status_code=204)


# Settings

@router.get("/settings")
def get_user_settings(tracker: Tracker = Depends(get_tracker)) -> UserSettings:
    return tracker.settings.get()


@router.put("/settings")
def set_user_settings(body: UserSettings, tracker: Tracker = Depends(get_tracker)) -> UserSettings:
    tracker.settings.set(body)
    return tracker.settings.get()


@router.post("/settings/toggle-unit")
def toggle_unit(tracker: Tracker = Depends(get_tracker)) -> UserSettings:
    return tracker.settings.toggle_unit()

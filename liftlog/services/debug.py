from __future__ import annotations

import json
from typing import Any, Dict

from fastapi import APIRouter, Depends

from .tracker import Tracker, get_tracker

router = APIRouter()


@router.get("/debug/store")
def debug_store(tracker: Tracker = Depends(get_tracker)) -> Dict[str, Any]:
    # Raw view of every key, bypassing the repositories (no seeding, no validation)
    keys: Dict[str, Any] = {}
    for key in tracker.store.keys():
        raw = tracker.store.medium.get_item(key) or ""
        try:
            value = json.loads(raw)
            parsed = True
        except ValueError:
            value = None
            parsed = False
        keys[key] = {
            "bytes": len(raw.encode()),
            "parsed": parsed,
            "items": len(value) if isinstance(value, (list, dict)) else None,
        }
    return {"medium": type(tracker.store.medium).__name__, "keys": keys}


@router.get("/debug/config")
def debug_config() -> Dict[str, Any]:
    from ..settings import get_settings
    s = get_settings()
    return {
        "store_backend": s.store_backend,
        "database_url": s.database_url,
        "documents_database": s.documents_database,
        "has_documents_uri": bool(s.documents_uri),
    }

"""
api/routes/preferences.py
-------------------------
POST /v1/preferences/infer

Layers, lowest priority first:
  1. inferred from already-scheduled activities
  2. hints found in the chat message
  3. explicit fields sent by the caller
"""

from __future__ import annotations

import dataclasses
from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tripslot.modules.scheduling.preferences import (
    extract_preference_hints_from_message,
    infer_preferences_from_activities,
    merge_preferences,
)
from tripslot.modules.scheduling.themes import infer_day_theme_from_message
from tripslot.modules.validation import normalize_preferences

router = APIRouter()


class InferPreferencesRequest(BaseModel):
    activities: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Scheduled rows: date, start_time, end_time, types",
    )
    message:  Optional[str] = None
    explicit: Optional[dict[str, Any]] = None


@router.post("/infer", summary="Infer scheduling preferences")
def infer_preferences(req: InferPreferencesRequest) -> dict:
    inferred = infer_preferences_from_activities(req.activities)
    hints = extract_preference_hints_from_message(req.message)
    merged = merge_preferences(merge_preferences(inferred, hints), req.explicit)
    prefs = normalize_preferences(dataclasses.asdict(merged))
    return {
        "preferences": dataclasses.asdict(prefs),
        "hints": hints,
        "theme": infer_day_theme_from_message(req.message),
    }

from __future__ import annotations

import json
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from meetinghub.api.schemas import DashboardStats, MeetingRead
from meetinghub.deps import get_current_user, get_storage
from meetinghub.models.meeting import Meeting
from meetinghub.models.user import User
from meetinghub.storage.base import Storage


router = APIRouter(tags=["dashboard"])


def format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB"):
        value /= 1024
        if value < 1024:
            return f"{value:.1f} {unit}"
    return f"{value / 1024:.1f} GB"


def _stored_bytes(meeting: Meeting) -> int:
    size = len(meeting.transcription.encode("utf-8")) + len(meeting.summarization.encode("utf-8"))
    if meeting.utterances:
        size += len(json.dumps(meeting.utterances).encode("utf-8"))
    return size


@router.get("/dashboard/stats")
def dashboard_stats(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)) -> DashboardStats:
    meetings = storage.get_meetings_by_user_id(user.id)  # type: ignore[arg-type]
    items = storage.get_action_items_by_user_id(user.id)  # type: ignore[arg-type]
    completed = sum(1 for item in items if item.completed)
    return DashboardStats(
        total_meetings=len(meetings),
        meeting_minutes=sum(m.duration for m in meetings),
        action_items=len(items) - completed,
        completed_action_items=completed,
        storage_used=format_bytes(sum(_stored_bytes(m) for m in meetings)),
    )


@router.get("/search/meetings")
def search_meetings(
    q: str = Query(default=""),
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[MeetingRead]:
    query = q.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Search query is required")
    return [MeetingRead.model_validate(m) for m in storage.search_meetings(user.id, query)]  # type: ignore[arg-type]

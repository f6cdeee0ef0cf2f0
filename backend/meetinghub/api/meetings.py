from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from meetinghub.api.schemas import (
    ActionItemRead,
    MeetingCreate,
    MeetingRead,
    MeetingUpdate,
    ScheduleMeetingRequest,
    SummaryCreate,
    SummaryResponse,
    TranscriptCreate,
    TranscriptResponse,
)
from meetinghub.config import get_settings
from meetinghub.deps import get_current_user, get_storage, require_owned_meeting
from meetinghub.models.base import to_naive_utc
from meetinghub.models.meeting import Meeting, MeetingStatus, MeetingType
from meetinghub.models.summary import Summary
from meetinghub.models.transcript import Transcript
from meetinghub.models.user import User
from meetinghub.services.scheduling import MeetingConflictError, find_conflicts
from meetinghub.storage.base import Storage

logger = logging.getLogger("meetinghub.api")


router = APIRouter(prefix="/meetings", tags=["meetings"])


def _read(meetings: List[Meeting]) -> List[MeetingRead]:
    return [MeetingRead.model_validate(m) for m in meetings]


# Static paths first so they are not captured by /{meeting_id}

@router.get("")
def list_meetings(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)) -> List[MeetingRead]:
    return _read(storage.get_meetings_by_user_id(user.id))  # type: ignore[arg-type]


@router.get("/recent")
def recent_meetings(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[MeetingRead]:
    limit = limit or get_settings().recent_meetings_limit
    return _read(storage.get_recent_meetings(user.id, limit))  # type: ignore[arg-type]


@router.get("/range")
def meetings_in_range(
    start: datetime,
    end: datetime,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[MeetingRead]:
    start, end = to_naive_utc(start), to_naive_utc(end)
    if end < start:
        raise HTTPException(status_code=400, detail="'end' must not be before 'start'")
    return _read(storage.get_meetings_in_range(user.id, start, end))  # type: ignore[arg-type]


@router.post("/schedule", status_code=status.HTTP_201_CREATED)
def schedule_meeting(
    body: ScheduleMeetingRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> MeetingRead:
    conflicts = find_conflicts(storage.get_meetings_by_user_id(user.id), body.start_time, body.duration)  # type: ignore[arg-type]
    if conflicts:
        logger.info("Schedule conflict for user %s: %s", user.id, [m.id for m in conflicts])
        raise MeetingConflictError(conflicts)

    meeting = storage.create_meeting(
        Meeting(
            user_id=user.id,  # type: ignore[arg-type]
            type=MeetingType.SCHEDULED.value,
            status=MeetingStatus.SCHEDULED.value,
            title=body.title,
            description=body.description,
            start_time=body.start_time,
            duration=body.duration,
            participants=body.participants,
            meeting_link=body.meeting_link,
        )
    )
    return MeetingRead.model_validate(meeting)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_meeting(
    body: MeetingCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> MeetingRead:
    data = body.model_dump(exclude_none=True)
    meeting = storage.create_meeting(Meeting(user_id=user.id, **data))  # type: ignore[arg-type]
    return MeetingRead.model_validate(meeting)


@router.get("/{meeting_id}")
def get_meeting(
    meeting_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> MeetingRead:
    return MeetingRead.model_validate(require_owned_meeting(storage, meeting_id, user))


@router.patch("/{meeting_id}")
def update_meeting(
    meeting_id: int,
    body: MeetingUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> MeetingRead:
    require_owned_meeting(storage, meeting_id, user)
    meeting = storage.update_meeting(meeting_id, body.changes())
    if meeting is None:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return MeetingRead.model_validate(meeting)


@router.delete("/{meeting_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meeting(
    meeting_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Response:
    require_owned_meeting(storage, meeting_id, user)
    if not storage.delete_meeting(meeting_id):
        raise HTTPException(status_code=404, detail="Meeting not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{meeting_id}/cancel")
def cancel_meeting(
    meeting_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> MeetingRead:
    meeting = require_owned_meeting(storage, meeting_id, user)
    if meeting.status == MeetingStatus.CANCELLED.value:
        return MeetingRead.model_validate(meeting)
    updated = storage.update_meeting(meeting_id, {"status": MeetingStatus.CANCELLED.value, "is_recording": False})
    if updated is None:
        raise HTTPException(status_code=404, detail="Meeting not found")
    logger.info("Meeting %s cancelled by user %s", meeting_id, user.id)
    return MeetingRead.model_validate(updated)


@router.get("/{meeting_id}/transcript", response_model_exclude_none=True)
def get_transcript(
    meeting_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> TranscriptResponse:
    meeting = require_owned_meeting(storage, meeting_id, user)
    transcript = storage.get_transcript(meeting_id)
    if transcript is None and not meeting.transcription and not meeting.utterances:
        raise HTTPException(status_code=404, detail="Transcript not found")

    # Legacy documents are handed over as a JSON-encoded segment list
    content = json.dumps(transcript.content, ensure_ascii=False) if transcript else meeting.transcription
    return TranscriptResponse.model_validate(
        {"content": content, "utterances": meeting.utterances or None}
    )


@router.post("/{meeting_id}/transcript", status_code=status.HTTP_201_CREATED)
def create_transcript(
    meeting_id: int,
    body: TranscriptCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> TranscriptResponse:
    require_owned_meeting(storage, meeting_id, user)
    segments = [seg.model_dump() for seg in body.content]
    transcript = storage.create_transcript(Transcript(meeting_id=meeting_id, content=segments))
    return TranscriptResponse(content=json.dumps(transcript.content, ensure_ascii=False))


@router.get("/{meeting_id}/summary")
def get_summary(
    meeting_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> SummaryResponse:
    meeting = require_owned_meeting(storage, meeting_id, user)
    summary = storage.get_summary(meeting_id)
    if summary is not None:
        return SummaryResponse(content=summary.content)
    if meeting.summarization:
        return SummaryResponse(content=meeting.summarization)
    raise HTTPException(status_code=404, detail="Summary not found")


@router.post("/{meeting_id}/summary", status_code=status.HTTP_201_CREATED)
def create_summary(
    meeting_id: int,
    body: SummaryCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> SummaryResponse:
    require_owned_meeting(storage, meeting_id, user)
    summary = storage.create_summary(Summary(meeting_id=meeting_id, content=body.content))
    return SummaryResponse(content=summary.content)


@router.get("/{meeting_id}/action-items")
def meeting_action_items(
    meeting_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[ActionItemRead]:
    require_owned_meeting(storage, meeting_id, user)
    return [ActionItemRead.model_validate(a) for a in storage.get_action_items(meeting_id)]

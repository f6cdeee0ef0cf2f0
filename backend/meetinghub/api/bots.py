from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from meetinghub.api.schemas import MeetingRead
from meetinghub.deps import get_bot_client, get_current_user, get_storage, require_owned_meeting
from meetinghub.models.meeting import MeetingStatus
from meetinghub.models.user import User
from meetinghub.services.bot_service import BotServiceClient, extract_bot_id
from meetinghub.services.bot_sync import sync_bot_meetings
from meetinghub.storage.base import Storage

logger = logging.getLogger("meetinghub.bots")


router = APIRouter(tags=["bots"])


@router.post("/meetings/{meeting_id}/recording/start")
def start_recording(
    meeting_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    bots: BotServiceClient = Depends(get_bot_client),
) -> MeetingRead:
    meeting = require_owned_meeting(storage, meeting_id, user)
    if meeting.status in (MeetingStatus.CANCELLED.value, MeetingStatus.COMPLETED.value):
        raise HTTPException(status_code=400, detail=f"Cannot record a {meeting.status} meeting")
    target = meeting.meeting_id or meeting.meeting_link
    if not target:
        raise HTTPException(status_code=400, detail="Meeting has no meeting id or link to record")

    result = bots.start_recording(target)
    changes = {"is_recording": True, "status": MeetingStatus.IN_PROGRESS.value}
    bot_id = extract_bot_id(result)
    if bot_id:
        changes["bot_id"] = bot_id
    updated = storage.update_meeting(meeting_id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="Meeting not found")
    logger.info("Recording started for meeting %s (bot %s)", meeting_id, bot_id)
    return MeetingRead.model_validate(updated)


@router.post("/meetings/{meeting_id}/recording/stop")
def stop_recording(
    meeting_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    bots: BotServiceClient = Depends(get_bot_client),
) -> MeetingRead:
    meeting = require_owned_meeting(storage, meeting_id, user)
    if not meeting.bot_id or not meeting.is_recording:
        raise HTTPException(status_code=400, detail="Meeting is not being recorded")

    bots.stop_recording(meeting.bot_id)
    updated = storage.update_meeting(meeting_id, {"is_recording": False})
    if updated is None:
        raise HTTPException(status_code=404, detail="Meeting not found")
    logger.info("Recording stopped for meeting %s", meeting_id)
    return MeetingRead.model_validate(updated)


@router.post("/bots/sync")
def sync_bots(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    bots: BotServiceClient = Depends(get_bot_client),
) -> List[MeetingRead]:
    synced = sync_bot_meetings(storage, bots.list_bots(), user)
    return [MeetingRead.model_validate(m) for m in synced]

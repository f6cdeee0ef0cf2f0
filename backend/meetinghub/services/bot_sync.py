from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from meetinghub.models.meeting import Meeting, MeetingStatus, MeetingType
from meetinghub.models.user import User
from meetinghub.storage.base import Storage

logger = logging.getLogger("meetinghub.bots")

_STATUSES = {s.value for s in MeetingStatus}


def _bot_fields(bot: Dict[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    status = bot.get("status")
    if isinstance(status, str) and status.lower() in _STATUSES:
        fields["status"] = status.lower()
    if "isRecording" in bot:
        fields["is_recording"] = bool(bot["isRecording"])
    for src, dst in (("transcription", "transcription"), ("summarization", "summarization"), ("outputUrl", "output_url")):
        value = bot.get(src)
        if isinstance(value, str):
            fields[dst] = value
    utterances = bot.get("utterances")
    if isinstance(utterances, list):
        fields["utterances"] = [u for u in utterances if isinstance(u, dict)]
    return fields


def _owner_id(bot: Dict[str, Any]) -> Optional[int]:
    try:
        return int(bot["userId"])
    except (KeyError, TypeError, ValueError):
        return None


def sync_bot_meeting(storage: Storage, bot: Dict[str, Any], user: User) -> Meeting:
    bot_id = str(bot.get("_id") or bot.get("botId") or "")
    if not bot_id:
        raise ValueError("bot record has no id")

    fields = _bot_fields(bot)
    existing = storage.get_meeting_by_bot_id(bot_id)
    if existing is not None:
        if existing.user_id != user.id:
            raise PermissionError(f"bot {bot_id} belongs to another user")
        updated = storage.update_meeting(existing.id, fields)  # type: ignore[arg-type]
        if updated is None:
            raise RuntimeError(f"meeting for bot {bot_id} disappeared during sync")
        return updated

    meeting_id = bot.get("meetingId")
    meeting = Meeting(
        bot_id=bot_id,
        user_id=user.id,  # type: ignore[arg-type]
        type=MeetingType.BOT_RECORDED.value,
        title=str(bot.get("title") or meeting_id or "Recorded meeting"),
        meeting_id=str(meeting_id) if meeting_id else None,
        **fields,
    )
    return storage.create_meeting(meeting)


def sync_bot_meetings(storage: Storage, bots: Iterable[Dict[str, Any]], user: User) -> List[Meeting]:
    """Mirror bot records owned by ``user`` into meetings.

    Records tagged with another user id are ignored. A record that fails to
    sync is logged and skipped so one bad bot does not block the rest.
    """
    synced: List[Meeting] = []
    for bot in bots:
        owner = _owner_id(bot)
        if owner is not None and owner != user.id:
            continue
        try:
            synced.append(sync_bot_meeting(storage, bot, user))
        except (ValueError, PermissionError, RuntimeError) as exc:
            logger.warning("Failed to sync bot meeting %s: %s", bot.get("_id"), exc)
    return synced

"""Derived views over already-fetched data: search, filter, sort and calendar buckets.

Everything here is pure and synchronous; nothing talks to the server.
"""

from __future__ import annotations

import json
import math
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from pydantic import ValidationError

from meetinghub.api.schemas import ActionItemRead, MeetingRead, TranscriptResponse, TranscriptSegment

ActionItemSort = Literal["dueDate", "assignee", "createdAt"]
StatusFilter = Literal["all", "pending", "completed"]
DueStatus = Literal["overdue", "due-soon", "upcoming"]


def _matches(query: str, *fields: Optional[str]) -> bool:
    needle = query.lower()
    return any(needle in (field or "").lower() for field in fields)


def filter_meetings(meetings: Iterable[MeetingRead], query: str) -> List[MeetingRead]:
    """Case-insensitive substring match on title or external meeting id."""
    if not query:
        return list(meetings)
    return [m for m in meetings if _matches(query, m.title, m.meeting_id)]


def filter_action_items(
    items: Iterable[ActionItemRead],
    query: str = "",
    status: StatusFilter = "all",
) -> List[ActionItemRead]:
    result = []
    for item in items:
        if query and not _matches(query, item.description, item.assignee):
            continue
        if status == "completed" and not item.completed:
            continue
        if status == "pending" and item.completed:
            continue
        result.append(item)
    return result


def sort_action_items(items: Iterable[ActionItemRead], sort_by: ActionItemSort = "dueDate") -> List[ActionItemRead]:
    """Return a sorted copy.

    ``dueDate`` sorts ascending with undated items last, ``assignee``
    alphabetically ignoring case, ``createdAt`` newest first.
    """
    rows = list(items)
    if sort_by == "dueDate":
        return sorted(rows, key=lambda i: (i.due_date is None, i.due_date or datetime.min))
    if sort_by == "assignee":
        return sorted(rows, key=lambda i: i.assignee.casefold())
    if sort_by == "createdAt":
        return sorted(rows, key=lambda i: i.created_at, reverse=True)
    raise ValueError(f"unknown sort key: {sort_by}")


def group_meetings_by_day(meetings: Iterable[MeetingRead]) -> "OrderedDict[date, List[MeetingRead]]":
    """Bucket meetings into calendar days by start time, days and buckets in order."""
    buckets: Dict[date, List[MeetingRead]] = {}
    for meeting in sorted(meetings, key=lambda m: m.start_time):
        buckets.setdefault(meeting.start_time.date(), []).append(meeting)
    return OrderedDict(sorted(buckets.items()))


def upcoming_meetings(meetings: Iterable[MeetingRead], now: datetime, limit: Optional[int] = None) -> List[MeetingRead]:
    future = sorted((m for m in meetings if m.start_time > now), key=lambda m: m.start_time)
    return future[:limit] if limit is not None else future


def meeting_end(meeting: MeetingRead) -> datetime:
    return meeting.start_time + timedelta(minutes=meeting.duration)


def parse_transcript(transcript: TranscriptResponse) -> List[TranscriptSegment]:
    """Decode the JSON-encoded legacy segment list; plain-text transcripts yield no segments."""
    try:
        raw = json.loads(transcript.content)
    except ValueError:
        return []
    if not isinstance(raw, list):
        return []
    segments = []
    for row in raw:
        try:
            segments.append(TranscriptSegment.model_validate(row))
        except ValidationError:
            continue
    return segments


def transcript_speakers(segments: Sequence[TranscriptSegment]) -> List[str]:
    # First-appearance order
    return list(OrderedDict.fromkeys(seg.speaker for seg in segments))


def filter_transcript(
    segments: Sequence[TranscriptSegment],
    query: str = "",
    speakers: Optional[Iterable[str]] = None,
) -> List[TranscriptSegment]:
    active = set(speakers or ())
    return [
        seg for seg in segments
        if (not query or _matches(query, seg.text, seg.speaker))
        and (not active or seg.speaker in active)
    ]


def relative_due_date(due: Optional[datetime], now: datetime) -> Tuple[str, DueStatus]:
    if due is None:
        return "No due date", "upcoming"

    today = now.date()
    if due < now and due.date() != today:
        return "Overdue", "overdue"
    if due.date() == today:
        return "Due Today", "due-soon"
    if due.date() == today + timedelta(days=1):
        return "Due Tomorrow", "due-soon"
    if due < now + timedelta(days=3):
        days = math.ceil((due - now).total_seconds() / 86400)
        return f"Due in {days} days", "upcoming"
    return f"Due {due.strftime('%b')} {due.day}", "upcoming"

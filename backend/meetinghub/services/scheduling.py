from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List

from meetinghub.models.meeting import Meeting, MeetingStatus


class MeetingConflictError(Exception):
    """The proposed slot overlaps meetings the user already has."""

    def __init__(self, conflicts: List[Meeting]) -> None:
        super().__init__("Meeting overlaps with an existing meeting")
        self.conflicts = conflicts


def meeting_interval(meeting: Meeting) -> tuple[datetime, datetime]:
    return meeting.start_time, meeting.start_time + timedelta(minutes=meeting.duration)


def find_conflicts(existing: Iterable[Meeting], start: datetime, duration: int) -> List[Meeting]:
    """Meetings whose ``[start, start + duration)`` interval intersects the proposed one.

    Cancelled meetings never block a slot. Intervals are half-open, so a
    meeting may start exactly when another ends.
    """
    end = start + timedelta(minutes=duration)
    conflicts: List[Meeting] = []
    for meeting in existing:
        if meeting.status == MeetingStatus.CANCELLED.value:
            continue
        other_start, other_end = meeting_interval(meeting)
        if start < other_end and other_start < end:
            conflicts.append(meeting)
    return conflicts

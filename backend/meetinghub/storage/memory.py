"""In-process development store.

Plain dicts keyed by auto-incrementing integer ids. There is no locking: it is
only safe when requests are served one at a time, as in the dev server.
"""

from __future__ import annotations

import itertools
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from meetinghub.models.action_item import ActionItem
from meetinghub.models.base import utcnow
from meetinghub.models.meeting import Meeting
from meetinghub.models.summary import Summary
from meetinghub.models.transcript import Transcript
from meetinghub.models.user import User
from meetinghub.repositories.meetings import touch
from meetinghub.storage.base import DuplicateUserError, Storage


def _newest_first(rows: List[Any]) -> List[Any]:
    return sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)


class MemoryStorage(Storage):
    def __init__(self) -> None:
        self.users: Dict[int, User] = {}
        self.meetings: Dict[int, Meeting] = {}
        self.transcripts: Dict[int, Transcript] = {}
        self.summaries: Dict[int, Summary] = {}
        self.action_items: Dict[int, ActionItem] = {}
        self._ids: Dict[str, Iterator[int]] = {
            name: itertools.count(1)
            for name in ("users", "meetings", "transcripts", "summaries", "action_items")
        }

    def _next_id(self, table: str) -> int:
        return next(self._ids[table])

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def _check_unique(self, user: User) -> None:
        for other in self.users.values():
            if other.id != user.id and (other.username == user.username or other.email == user.email):
                raise DuplicateUserError(f"username or email already taken: {user.username}")

    def create_user(self, user: User) -> User:
        self._check_unique(user)
        user.id = self._next_id("users")
        self.users[user.id] = user
        return user

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]:
        user = self.users.get(user_id)
        if user is None:
            return None
        self._check_unique(user.model_copy(update=changes))
        for key, value in changes.items():
            setattr(user, key, value)
        return user

    # Meetings

    def get_meeting(self, meeting_id: int) -> Optional[Meeting]:
        return self.meetings.get(meeting_id)

    def get_meeting_by_bot_id(self, bot_id: str) -> Optional[Meeting]:
        return next((m for m in self.meetings.values() if m.bot_id == bot_id), None)

    def get_meetings_by_user_id(self, user_id: int) -> List[Meeting]:
        return _newest_first([m for m in self.meetings.values() if m.user_id == user_id])

    def get_recent_meetings(self, user_id: int, limit: int) -> List[Meeting]:
        return self.get_meetings_by_user_id(user_id)[:limit]

    def get_meetings_in_range(self, user_id: int, start: datetime, end: datetime) -> List[Meeting]:
        rows = [
            m for m in self.meetings.values()
            if m.user_id == user_id and start <= m.start_time <= end
        ]
        return sorted(rows, key=lambda m: (m.start_time, m.id))

    def create_meeting(self, meeting: Meeting) -> Meeting:
        now = utcnow()
        meeting.id = self._next_id("meetings")
        meeting.created_at = now
        meeting.updated_at = now
        self.meetings[meeting.id] = meeting
        return meeting

    def update_meeting(self, meeting_id: int, changes: Dict[str, Any]) -> Optional[Meeting]:
        meeting = self.meetings.get(meeting_id)
        if meeting is None:
            return None
        for key, value in changes.items():
            setattr(meeting, key, value)
        touch(meeting)
        return meeting

    def delete_meeting(self, meeting_id: int) -> bool:
        if self.meetings.pop(meeting_id, None) is None:
            return False
        for table in (self.transcripts, self.summaries, self.action_items):
            for row_id in [k for k, row in table.items() if row.meeting_id == meeting_id]:
                del table[row_id]
        return True

    def search_meetings(self, user_id: int, query: str) -> List[Meeting]:
        needle = query.lower()
        return [
            m for m in self.get_meetings_by_user_id(user_id)
            if needle in m.title.lower() or needle in (m.meeting_id or "").lower()
        ]

    # Transcripts / summaries

    def get_transcript(self, meeting_id: int) -> Optional[Transcript]:
        rows = _newest_first([t for t in self.transcripts.values() if t.meeting_id == meeting_id])
        return rows[0] if rows else None

    def create_transcript(self, transcript: Transcript) -> Transcript:
        transcript.id = self._next_id("transcripts")
        transcript.created_at = utcnow()
        self.transcripts[transcript.id] = transcript
        return transcript

    def get_summary(self, meeting_id: int) -> Optional[Summary]:
        rows = _newest_first([s for s in self.summaries.values() if s.meeting_id == meeting_id])
        return rows[0] if rows else None

    def create_summary(self, summary: Summary) -> Summary:
        summary.id = self._next_id("summaries")
        summary.created_at = utcnow()
        self.summaries[summary.id] = summary
        return summary

    # Action items

    def get_action_item(self, item_id: int) -> Optional[ActionItem]:
        return self.action_items.get(item_id)

    def get_action_items(self, meeting_id: int) -> List[ActionItem]:
        return _newest_first([a for a in self.action_items.values() if a.meeting_id == meeting_id])

    def get_action_items_by_user_id(self, user_id: int) -> List[ActionItem]:
        owned = {m.id for m in self.meetings.values() if m.user_id == user_id}
        return _newest_first([a for a in self.action_items.values() if a.meeting_id in owned])

    def get_pending_action_items(self, user_id: int) -> List[ActionItem]:
        return [a for a in self.get_action_items_by_user_id(user_id) if not a.completed]

    def create_action_item(self, item: ActionItem) -> ActionItem:
        item.id = self._next_id("action_items")
        item.created_at = utcnow()
        self.action_items[item.id] = item
        return item

    def update_action_item(self, item_id: int, changes: Dict[str, Any]) -> Optional[ActionItem]:
        item = self.action_items.get(item_id)
        if item is None:
            return None
        for key, value in changes.items():
            setattr(item, key, value)
        return item

    def delete_action_item(self, item_id: int) -> bool:
        return self.action_items.pop(item_id, None) is not None

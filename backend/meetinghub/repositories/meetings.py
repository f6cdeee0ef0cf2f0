from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from meetinghub.models.action_item import ActionItem
from meetinghub.models.base import utcnow
from meetinghub.models.meeting import Meeting
from meetinghub.models.summary import Summary
from meetinghub.models.transcript import Transcript


def touch(meeting: Meeting) -> None:
    """Refresh ``updated_at`` so it strictly increases on every mutation."""
    now = utcnow()
    if meeting.updated_at is not None and now <= meeting.updated_at:
        now = meeting.updated_at + timedelta(microseconds=1)
    meeting.updated_at = now


class MeetingsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, meeting: Meeting) -> Meeting:
        now = utcnow()
        meeting.created_at = now
        meeting.updated_at = now
        self.session.add(meeting)
        self.session.commit()
        self.session.refresh(meeting)
        return meeting

    def get(self, meeting_id: int) -> Optional[Meeting]:
        return self.session.get(Meeting, meeting_id)

    def get_by_bot_id(self, bot_id: str) -> Optional[Meeting]:
        statement = select(Meeting).where(Meeting.bot_id == bot_id)
        return self.session.exec(statement).first()

    def list_by_user(self, user_id: int, limit: Optional[int] = None) -> list[Meeting]:
        statement = (
            select(Meeting)
            .where(Meeting.user_id == user_id)
            .order_by(Meeting.created_at.desc(), Meeting.id.desc())
        )
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.session.exec(statement))

    def list_in_range(self, user_id: int, start: datetime, end: datetime) -> list[Meeting]:
        statement = (
            select(Meeting)
            .where(Meeting.user_id == user_id, Meeting.start_time >= start, Meeting.start_time <= end)
            .order_by(Meeting.start_time.asc(), Meeting.id.asc())
        )
        return list(self.session.exec(statement))

    def search(self, user_id: int, query: str) -> list[Meeting]:
        needle = query.lower()
        statement = (
            select(Meeting)
            .where(
                Meeting.user_id == user_id,
                or_(
                    func.lower(Meeting.title).contains(needle, autoescape=True),
                    func.lower(func.coalesce(Meeting.meeting_id, "")).contains(needle, autoescape=True),
                ),
            )
            .order_by(Meeting.created_at.desc(), Meeting.id.desc())
        )
        return list(self.session.exec(statement))

    def update(self, meeting_id: int, changes: Dict[str, Any]) -> Optional[Meeting]:
        meeting = self.get(meeting_id)
        if meeting is None:
            return None
        for key, value in changes.items():
            setattr(meeting, key, value)
        touch(meeting)
        self.session.add(meeting)
        self.session.commit()
        self.session.refresh(meeting)
        return meeting

    def delete(self, meeting_id: int) -> bool:
        meeting = self.get(meeting_id)
        if meeting is None:
            return False
        # Children go with the meeting; SQLite does not enforce the foreign keys
        for model in (Transcript, Summary, ActionItem):
            for child in self.session.exec(select(model).where(model.meeting_id == meeting_id)):
                self.session.delete(child)
        self.session.delete(meeting)
        self.session.commit()
        return True

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session

from meetinghub.models.action_item import ActionItem
from meetinghub.models.meeting import Meeting
from meetinghub.models.summary import Summary
from meetinghub.models.transcript import Transcript
from meetinghub.models.user import User
from meetinghub.repositories.action_items import ActionItemsRepository
from meetinghub.repositories.meetings import MeetingsRepository
from meetinghub.repositories.summaries import SummariesRepository
from meetinghub.repositories.transcripts import TranscriptsRepository
from meetinghub.repositories.users import UsersRepository
from meetinghub.storage.base import Storage


class SqlStorage(Storage):
    """Storage over one SQLModel session; every mutation commits before returning."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UsersRepository(session)
        self.meetings = MeetingsRepository(session)
        self.transcripts = TranscriptsRepository(session)
        self.summaries = SummariesRepository(session)
        self.action_items = ActionItemsRepository(session)

    def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.users.get_by_username(username)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.users.get_by_email(email)

    def create_user(self, user: User) -> User:
        return self.users.create(user)

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]:
        return self.users.update(user_id, changes)

    def get_meeting(self, meeting_id: int) -> Optional[Meeting]:
        return self.meetings.get(meeting_id)

    def get_meeting_by_bot_id(self, bot_id: str) -> Optional[Meeting]:
        return self.meetings.get_by_bot_id(bot_id)

    def get_meetings_by_user_id(self, user_id: int) -> List[Meeting]:
        return self.meetings.list_by_user(user_id)

    def get_recent_meetings(self, user_id: int, limit: int) -> List[Meeting]:
        return self.meetings.list_by_user(user_id, limit=limit)

    def get_meetings_in_range(self, user_id: int, start: datetime, end: datetime) -> List[Meeting]:
        return self.meetings.list_in_range(user_id, start, end)

    def create_meeting(self, meeting: Meeting) -> Meeting:
        return self.meetings.create(meeting)

    def update_meeting(self, meeting_id: int, changes: Dict[str, Any]) -> Optional[Meeting]:
        return self.meetings.update(meeting_id, changes)

    def delete_meeting(self, meeting_id: int) -> bool:
        return self.meetings.delete(meeting_id)

    def search_meetings(self, user_id: int, query: str) -> List[Meeting]:
        return self.meetings.search(user_id, query)

    def get_transcript(self, meeting_id: int) -> Optional[Transcript]:
        return self.transcripts.get_by_meeting(meeting_id)

    def create_transcript(self, transcript: Transcript) -> Transcript:
        return self.transcripts.create(transcript)

    def get_summary(self, meeting_id: int) -> Optional[Summary]:
        return self.summaries.get_by_meeting(meeting_id)

    def create_summary(self, summary: Summary) -> Summary:
        return self.summaries.create(summary)

    def get_action_item(self, item_id: int) -> Optional[ActionItem]:
        return self.action_items.get(item_id)

    def get_action_items(self, meeting_id: int) -> List[ActionItem]:
        return self.action_items.list_by_meeting(meeting_id)

    def get_action_items_by_user_id(self, user_id: int) -> List[ActionItem]:
        return self.action_items.list_by_user(user_id)

    def get_pending_action_items(self, user_id: int) -> List[ActionItem]:
        return self.action_items.list_by_user(user_id, pending_only=True)

    def create_action_item(self, item: ActionItem) -> ActionItem:
        return self.action_items.create(item)

    def update_action_item(self, item_id: int, changes: Dict[str, Any]) -> Optional[ActionItem]:
        return self.action_items.update(item_id, changes)

    def delete_action_item(self, item_id: int) -> bool:
        return self.action_items.delete(item_id)

"""Storage interface shared by the SQL and in-memory backends.

Route handlers only talk to :class:`Storage`. Not-found is a normal return
value (``None`` / ``False``); anything else the backend raises propagates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from meetinghub.models.action_item import ActionItem
from meetinghub.models.meeting import Meeting
from meetinghub.models.summary import Summary
from meetinghub.models.transcript import Transcript
from meetinghub.models.user import User


class DuplicateUserError(Exception):
    """Username or email is already taken."""


class Storage(ABC):
    # Users
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, user: User) -> User: ...

    @abstractmethod
    def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]: ...

    # Meetings
    @abstractmethod
    def get_meeting(self, meeting_id: int) -> Optional[Meeting]: ...

    @abstractmethod
    def get_meeting_by_bot_id(self, bot_id: str) -> Optional[Meeting]: ...

    @abstractmethod
    def get_meetings_by_user_id(self, user_id: int) -> List[Meeting]:
        """All meetings of a user, newest first by creation time."""

    @abstractmethod
    def get_recent_meetings(self, user_id: int, limit: int) -> List[Meeting]: ...

    @abstractmethod
    def get_meetings_in_range(self, user_id: int, start: datetime, end: datetime) -> List[Meeting]:
        """Meetings starting within ``[start, end]``, earliest first."""

    @abstractmethod
    def create_meeting(self, meeting: Meeting) -> Meeting: ...

    @abstractmethod
    def update_meeting(self, meeting_id: int, changes: Dict[str, Any]) -> Optional[Meeting]: ...

    def update_meeting_by_bot_id(self, bot_id: str, changes: Dict[str, Any]) -> Optional[Meeting]:
        meeting = self.get_meeting_by_bot_id(bot_id)
        if meeting is None:
            return None
        return self.update_meeting(meeting.id, changes)  # type: ignore[arg-type]

    @abstractmethod
    def delete_meeting(self, meeting_id: int) -> bool: ...

    @abstractmethod
    def search_meetings(self, user_id: int, query: str) -> List[Meeting]:
        """Case-insensitive substring match on title or external meeting id."""

    # Transcripts (legacy documents)
    @abstractmethod
    def get_transcript(self, meeting_id: int) -> Optional[Transcript]: ...

    @abstractmethod
    def create_transcript(self, transcript: Transcript) -> Transcript: ...

    # Summaries
    @abstractmethod
    def get_summary(self, meeting_id: int) -> Optional[Summary]: ...

    @abstractmethod
    def create_summary(self, summary: Summary) -> Summary: ...

    # Action items
    @abstractmethod
    def get_action_item(self, item_id: int) -> Optional[ActionItem]: ...

    @abstractmethod
    def get_action_items(self, meeting_id: int) -> List[ActionItem]: ...

    @abstractmethod
    def get_action_items_by_user_id(self, user_id: int) -> List[ActionItem]: ...

    @abstractmethod
    def get_pending_action_items(self, user_id: int) -> List[ActionItem]:
        """Uncompleted items whose meeting belongs to ``user_id``."""

    @abstractmethod
    def create_action_item(self, item: ActionItem) -> ActionItem: ...

    @abstractmethod
    def update_action_item(self, item_id: int, changes: Dict[str, Any]) -> Optional[ActionItem]: ...

    @abstractmethod
    def delete_action_item(self, item_id: int) -> bool: ...

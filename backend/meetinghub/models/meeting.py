from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from meetinghub.models.base import utc_column, utcnow


class MeetingStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class MeetingType(str, Enum):
    SCHEDULED = "scheduled"
    BOT_RECORDED = "bot_recorded"


class Meeting(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    bot_id: Optional[str] = Field(default=None, index=True)
    user_id: int = Field(index=True, foreign_key="user.id")
    type: str = Field(default=MeetingType.BOT_RECORDED.value)
    status: str = Field(default=MeetingStatus.PENDING.value)
    title: str = Field(default="Untitled Meeting")
    description: str = ""
    start_time: datetime = Field(default_factory=utcnow, sa_column=utc_column(index=True))
    duration: int = 0  # minutes
    participants: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    meeting_link: Optional[str] = None
    meeting_id: Optional[str] = None  # external meeting identifier, e.g. a Meet code
    is_recording: bool = False
    transcription: str = ""
    summarization: str = ""
    output_url: str = ""
    utterances: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_column())

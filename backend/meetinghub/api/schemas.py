"""Wire schemas: camelCase on the wire, snake_case in Python.

Request models accept either spelling; responses are always serialized by alias.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from meetinghub.models.base import to_naive_utc
from meetinghub.models.meeting import MeetingStatus, MeetingType


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
        validate_default=True,
    )


# Aware timestamps from the browser are stored as naive UTC
UtcDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]

BCRYPT_MAX_BYTES = 72


class PatchModel(ApiModel):
    """Partial update: only fields the client sent, explicit nulls only where the column allows them."""

    nullable: ClassVar[FrozenSet[str]] = frozenset()

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k in self.nullable}


# Users

class UserRead(ApiModel):
    id: int
    username: str
    full_name: str
    email: str
    avatar_url: Optional[str] = None


class RegisterRequest(ApiModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=BCRYPT_MAX_BYTES)
    full_name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    avatar_url: Optional[str] = None

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        # bcrypt only hashes the first 72 bytes and newer releases refuse more
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password must be at most {BCRYPT_MAX_BYTES} bytes")
        return value


class LoginRequest(ApiModel):
    email: str
    password: str


class AuthResponse(ApiModel):
    user: UserRead
    token: str


class ProfileUpdate(PatchModel):
    nullable = frozenset({"avatar_url"})

    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    avatar_url: Optional[str] = None


# Meetings

class Word(ApiModel):
    word: str
    start: float
    end: float
    confidence: Optional[float] = None


class Utterance(ApiModel):
    speaker: str
    text: str
    confidence: Optional[float] = None
    start: float
    end: float
    words: List[Word] = Field(default_factory=list)


class MeetingRead(ApiModel):
    id: int
    bot_id: Optional[str] = None
    user_id: int
    type: MeetingType
    status: MeetingStatus
    title: str
    description: str
    start_time: datetime
    duration: int
    participants: List[str]
    meeting_link: Optional[str] = None
    meeting_id: Optional[str] = None
    is_recording: bool
    transcription: str
    summarization: str
    output_url: str
    utterances: List[Utterance]
    created_at: datetime
    updated_at: datetime


class MeetingCreate(ApiModel):
    # bot_id is assigned by the recording routes and bot sync only
    type: MeetingType = MeetingType.BOT_RECORDED
    status: MeetingStatus = MeetingStatus.PENDING
    title: str = Field(default="Untitled Meeting", min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    start_time: Optional[UtcDateTime] = None
    duration: int = Field(default=0, ge=0)
    participants: List[str] = Field(default_factory=list)
    meeting_link: Optional[str] = None
    meeting_id: Optional[str] = None
    is_recording: bool = False
    transcription: str = ""
    summarization: str = ""
    output_url: str = ""
    utterances: List[Utterance] = Field(default_factory=list)


class MeetingUpdate(PatchModel):
    nullable = frozenset({"meeting_link", "meeting_id"})

    type: Optional[MeetingType] = None
    status: Optional[MeetingStatus] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    start_time: Optional[UtcDateTime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    participants: Optional[List[str]] = None
    meeting_link: Optional[str] = None
    meeting_id: Optional[str] = None
    is_recording: Optional[bool] = None
    transcription: Optional[str] = None
    summarization: Optional[str] = None
    output_url: Optional[str] = None
    utterances: Optional[List[Utterance]] = None


class ScheduleMeetingRequest(ApiModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    start_time: UtcDateTime
    duration: int = Field(gt=0, le=24 * 60)
    participants: List[str] = Field(default_factory=list)
    meeting_link: Optional[str] = None


class DashboardStats(ApiModel):
    total_meetings: int
    meeting_minutes: int
    action_items: int
    completed_action_items: int
    storage_used: str


# Transcripts / summaries

class TranscriptSegment(ApiModel):
    timestamp: str = Field(pattern=r"^\d{2}:\d{2}:\d{2}$")
    speaker: str
    text: str


class TranscriptCreate(ApiModel):
    content: List[TranscriptSegment] = Field(min_length=1)


class TranscriptResponse(ApiModel):
    content: str
    utterances: Optional[List[Utterance]] = None


class SummaryCreate(ApiModel):
    content: str = Field(min_length=1)


class SummaryResponse(ApiModel):
    content: str


# Action items

class ActionItemRead(ApiModel):
    id: int
    meeting_id: int
    description: str
    assignee: str
    due_date: Optional[datetime] = None
    completed: bool
    created_at: datetime


class ActionItemCreate(ApiModel):
    meeting_id: int
    description: str = Field(min_length=1, max_length=500)
    assignee: str = Field(min_length=1, max_length=100)
    due_date: Optional[UtcDateTime] = None
    completed: bool = False


class ActionItemUpdate(PatchModel):
    nullable = frozenset({"due_date"})

    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    assignee: Optional[str] = Field(default=None, min_length=1, max_length=100)
    due_date: Optional[UtcDateTime] = None
    completed: Optional[bool] = None

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from meetinghub.models.base import utc_column, utcnow


class Transcript(SQLModel, table=True):
    """Legacy transcript document: ordered ``{timestamp, speaker, text}`` segments.

    Newer meetings carry utterances on the meeting row itself.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    meeting_id: int = Field(index=True, foreign_key="meeting.id")
    content: List[Dict[str, str]] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_column())

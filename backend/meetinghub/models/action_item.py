from __future__ import annotations

from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field

from meetinghub.models.base import utc_column, utcnow


class ActionItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    meeting_id: int = Field(index=True, foreign_key="meeting.id")
    description: str
    assignee: str
    due_date: Optional[datetime] = Field(default=None, sa_column=utc_column(nullable=True))
    completed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_column())

from __future__ import annotations

from typing import Optional
from sqlmodel import Session, select

from meetinghub.models.summary import Summary


class SummariesRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, summary: Summary) -> Summary:
        self.session.add(summary)
        self.session.commit()
        self.session.refresh(summary)
        return summary

    def get_by_meeting(self, meeting_id: int) -> Optional[Summary]:
        statement = (
            select(Summary)
            .where(Summary.meeting_id == meeting_id)
            .order_by(Summary.created_at.desc(), Summary.id.desc())
        )
        return self.session.exec(statement).first()

from __future__ import annotations

from typing import Optional
from sqlmodel import Session, select

from meetinghub.models.transcript import Transcript


class TranscriptsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, transcript: Transcript) -> Transcript:
        self.session.add(transcript)
        self.session.commit()
        self.session.refresh(transcript)
        return transcript

    def get_by_meeting(self, meeting_id: int) -> Optional[Transcript]:
        # Latest document wins if a meeting was transcribed more than once
        statement = (
            select(Transcript)
            .where(Transcript.meeting_id == meeting_id)
            .order_by(Transcript.created_at.desc(), Transcript.id.desc())
        )
        return self.session.exec(statement).first()

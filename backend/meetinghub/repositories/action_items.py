from __future__ import annotations

from typing import Any, Dict, Optional
from sqlmodel import Session, select

from meetinghub.models.action_item import ActionItem
from meetinghub.models.meeting import Meeting


class ActionItemsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, item: ActionItem) -> ActionItem:
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def get(self, item_id: int) -> Optional[ActionItem]:
        return self.session.get(ActionItem, item_id)

    def list_by_meeting(self, meeting_id: int) -> list[ActionItem]:
        statement = (
            select(ActionItem)
            .where(ActionItem.meeting_id == meeting_id)
            .order_by(ActionItem.created_at.desc(), ActionItem.id.desc())
        )
        return list(self.session.exec(statement))

    def list_by_user(self, user_id: int, pending_only: bool = False) -> list[ActionItem]:
        statement = (
            select(ActionItem)
            .join(Meeting, Meeting.id == ActionItem.meeting_id)
            .where(Meeting.user_id == user_id)
        )
        if pending_only:
            statement = statement.where(ActionItem.completed == False)  # noqa: E712
        statement = statement.order_by(ActionItem.created_at.desc(), ActionItem.id.desc())
        return list(self.session.exec(statement))

    def update(self, item_id: int, changes: Dict[str, Any]) -> Optional[ActionItem]:
        item = self.get(item_id)
        if item is None:
            return None
        for key, value in changes.items():
            setattr(item, key, value)
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        return item

    def delete(self, item_id: int) -> bool:
        item = self.get(item_id)
        if item is None:
            return False
        self.session.delete(item)
        self.session.commit()
        return True

from __future__ import annotations

from typing import Any, Dict, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from meetinghub.models.user import User
from meetinghub.storage.base import DuplicateUserError


class UsersRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _commit(self) -> None:
        # Unique username/email races end here, after the route-level check passed
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateUserError(str(exc.orig)) from exc

    def create(self, user: User) -> User:
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    def get(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        statement = select(User).where(User.username == username)
        return self.session.exec(statement).first()

    def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email)
        return self.session.exec(statement).first()

    def update(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]:
        user = self.get(user_id)
        if user is None:
            return None
        for key, value in changes.items():
            setattr(user, key, value)
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

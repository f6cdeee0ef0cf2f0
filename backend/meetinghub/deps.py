from __future__ import annotations

from typing import Iterator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from meetinghub.config import get_settings
from meetinghub.models.base import engine
from meetinghub.models.action_item import ActionItem
from meetinghub.models.meeting import Meeting
from meetinghub.models.user import User
from meetinghub.security import TokenError, decode_access_token
from meetinghub.services.bot_service import BotServiceClient
from meetinghub.storage.base import Storage
from meetinghub.storage.memory import MemoryStorage
from meetinghub.storage.sql import SqlStorage


_bearer = HTTPBearer(auto_error=False)
_memory_storage: Optional[MemoryStorage] = None


def get_memory_storage() -> MemoryStorage:
    global _memory_storage
    if _memory_storage is None:
        _memory_storage = MemoryStorage()
    return _memory_storage


def get_storage() -> Iterator[Storage]:
    if get_settings().storage_backend == "memory":
        yield get_memory_storage()
        return
    with Session(engine) as session:
        yield SqlStorage(session)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    storage: Storage = Depends(get_storage),
) -> User:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")

    user = storage.get_user(payload["id"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_owned_meeting(storage: Storage, meeting_id: int, user: User) -> Meeting:
    meeting = storage.get_meeting(meeting_id)
    if meeting is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meeting not found")
    if meeting.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this meeting")
    return meeting


def require_owned_action_item(storage: Storage, item_id: int, user: User) -> ActionItem:
    item = storage.get_action_item(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Action item not found")
    meeting = storage.get_meeting(item.meeting_id)
    if meeting is None or meeting.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this action item")
    return item


def get_bot_client() -> BotServiceClient:
    return BotServiceClient.from_settings()

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from meetinghub.api.schemas import ActionItemCreate, ActionItemRead, ActionItemUpdate
from meetinghub.deps import get_current_user, get_storage, require_owned_action_item, require_owned_meeting
from meetinghub.models.action_item import ActionItem
from meetinghub.models.user import User
from meetinghub.storage.base import Storage


router = APIRouter(prefix="/action-items", tags=["action-items"])


@router.get("")
def list_action_items(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)) -> List[ActionItemRead]:
    return [ActionItemRead.model_validate(a) for a in storage.get_action_items_by_user_id(user.id)]  # type: ignore[arg-type]


@router.get("/pending")
def pending_action_items(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)) -> List[ActionItemRead]:
    return [ActionItemRead.model_validate(a) for a in storage.get_pending_action_items(user.id)]  # type: ignore[arg-type]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_action_item(
    body: ActionItemCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> ActionItemRead:
    require_owned_meeting(storage, body.meeting_id, user)
    item = storage.create_action_item(ActionItem(**body.model_dump()))
    return ActionItemRead.model_validate(item)


@router.get("/{item_id}")
def get_action_item(
    item_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> ActionItemRead:
    return ActionItemRead.model_validate(require_owned_action_item(storage, item_id, user))


@router.patch("/{item_id}")
def update_action_item(
    item_id: int,
    body: ActionItemUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> ActionItemRead:
    require_owned_action_item(storage, item_id, user)
    item = storage.update_action_item(item_id, body.changes())
    if item is None:
        raise HTTPException(status_code=404, detail="Action item not found")
    return ActionItemRead.model_validate(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_action_item(
    item_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Response:
    require_owned_action_item(storage, item_id, user)
    if not storage.delete_action_item(item_id):
        raise HTTPException(status_code=404, detail="Action item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from meetinghub.api.schemas import AuthResponse, LoginRequest, ProfileUpdate, RegisterRequest, UserRead
from meetinghub.deps import get_current_user, get_storage
from meetinghub.models.user import User
from meetinghub.security import create_access_token, hash_password, verify_password
from meetinghub.storage.base import DuplicateUserError, Storage

logger = logging.getLogger("meetinghub.auth")


router = APIRouter(tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, storage: Storage = Depends(get_storage)) -> AuthResponse:
    if storage.get_user_by_email(body.email) is not None:
        raise HTTPException(status_code=400, detail="Email is already registered")
    if storage.get_user_by_username(body.username) is not None:
        raise HTTPException(status_code=400, detail="Username is already taken")

    try:
        user = storage.create_user(
            User(
                username=body.username,
                password=hash_password(body.password),
                full_name=body.full_name,
                email=body.email,
                avatar_url=body.avatar_url,
            )
        )
    except DuplicateUserError:
        logger.info("Concurrent registration for %s lost the race", body.email)
        raise HTTPException(status_code=400, detail="Email or username is already registered")
    logger.info("Registered user %s", user.id)
    return AuthResponse(user=UserRead.model_validate(user), token=create_access_token(user))


@router.post("/login")
def login(body: LoginRequest, storage: Storage = Depends(get_storage)) -> AuthResponse:
    user = storage.get_user_by_email(body.email)
    if user is None or not verify_password(body.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthResponse(user=UserRead.model_validate(user), token=create_access_token(user))


@router.get("/me")
def read_me(user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(user)


@router.patch("/me")
def update_me(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> UserRead:
    changes = body.changes()
    email = changes.get("email")
    if email and email != user.email:
        other = storage.get_user_by_email(email)
        if other is not None and other.id != user.id:
            raise HTTPException(status_code=400, detail="Email is already registered")
    try:
        updated = storage.update_user(user.id, changes)  # type: ignore[arg-type]
    except DuplicateUserError:
        raise HTTPException(status_code=400, detail="Email is already registered")
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserRead.model_validate(updated)

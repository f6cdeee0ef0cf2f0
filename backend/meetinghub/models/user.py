from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    password: str  # bcrypt hash, never serialized
    full_name: str
    email: str = Field(index=True, unique=True)
    avatar_url: Optional[str] = None

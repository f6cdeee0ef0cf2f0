"""Typed client for the MeetingHub REST API.

Mirrors what the web frontend does: every read goes through a
:class:`QueryCache` keyed by ``(resource, id, sub-resource)`` tuples, and every
mutation invalidates the keys whose data it changed so the next read refetches.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple, Type, TypeVar

import requests
from pydantic import BaseModel

from meetinghub.api.schemas import (
    ActionItemRead,
    AuthResponse,
    DashboardStats,
    MeetingRead,
    SummaryResponse,
    TranscriptResponse,
    UserRead,
)

logger = logging.getLogger("meetinghub.client")

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)
QueryKey = Tuple[Hashable, ...]


class ApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class QueryCache:
    """Result cache keyed by tuples.

    Concurrent fetches of the same key are serialized on a per-key lock, so
    only the first caller hits the network and the rest read its result.
    """

    def __init__(self) -> None:
        self._data: Dict[QueryKey, Any] = {}
        self._locks: Dict[QueryKey, threading.Lock] = {}
        self._guard = threading.Lock()

    def _get_lock(self, key: QueryKey) -> threading.Lock:
        with self._guard:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def fetch(self, key: QueryKey, fetcher: Callable[[], T]) -> T:
        if key in self._data:
            return self._data[key]
        with self._get_lock(key):
            if key in self._data:
                return self._data[key]
            value = fetcher()
            self._data[key] = value
            return value

    def get(self, key: QueryKey) -> Optional[Any]:
        return self._data.get(key)

    def invalidate(self, prefix: QueryKey = ()) -> int:
        """Drop every key starting with ``prefix``; the empty prefix clears everything."""
        with self._guard:
            stale = [k for k in self._data if k[: len(prefix)] == prefix]
            for key in stale:
                del self._data[key]
            # A held lock belongs to a fetch in flight and must survive
            for key in [k for k in self._locks if k[: len(prefix)] == prefix]:
                if not self._locks[key].locked():
                    del self._locks[key]
        return len(stale)

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._data


class ApiClient:
    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        token: Optional[str] = None,
        http: Optional[Any] = None,
        cache: Optional[QueryCache] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        # Anything with a requests-style ``request()`` works, including FastAPI's TestClient
        self.http = http or requests.Session()
        self.cache = cache or QueryCache()

    # Transport

    def _request(self, method: str, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        resp = self.http.request(method, f"{self.base_url}{path}", json=json, params=params, headers=headers)
        if resp.status_code >= 400:
            try:
                message = resp.json().get("message", resp.text)
            except ValueError:
                message = resp.text
            logger.info("%s %s failed with %d: %s", method, path, resp.status_code, message)
            raise ApiError(resp.status_code, message)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def _one(self, model: Type[M], method: str, path: str, **kwargs: Any) -> M:
        return model.model_validate(self._request(method, path, **kwargs))

    def _many(self, model: Type[M], method: str, path: str, **kwargs: Any) -> List[M]:
        return [model.model_validate(row) for row in self._request(method, path, **kwargs)]

    def _invalidate_meeting(self, meeting_id: Optional[int] = None) -> None:
        self.cache.invalidate(("meetings",))
        self.cache.invalidate(("dashboard",))
        self.cache.invalidate(("search",))
        if meeting_id is not None:
            self.cache.invalidate(("meeting", meeting_id))

    def _invalidate_action_items(self, meeting_id: Optional[int] = None) -> None:
        self.cache.invalidate(("action-items",))
        self.cache.invalidate(("dashboard",))
        if meeting_id is not None:
            self.cache.invalidate(("meeting", meeting_id, "action-items"))

    # Auth

    def register(self, username: str, password: str, full_name: str, email: str) -> AuthResponse:
        auth = self._one(
            AuthResponse,
            "POST",
            "/api/register",
            json={"username": username, "password": password, "fullName": full_name, "email": email},
        )
        self.token = auth.token
        self.cache.invalidate()
        return auth

    def login(self, email: str, password: str) -> AuthResponse:
        auth = self._one(AuthResponse, "POST", "/api/login", json={"email": email, "password": password})
        self.token = auth.token
        self.cache.invalidate()
        return auth

    def logout(self) -> None:
        self.token = None
        self.cache.invalidate()

    def me(self) -> UserRead:
        return self.cache.fetch(("me",), lambda: self._one(UserRead, "GET", "/api/me"))

    # Reads

    def dashboard_stats(self) -> DashboardStats:
        return self.cache.fetch(("dashboard", "stats"), lambda: self._one(DashboardStats, "GET", "/api/dashboard/stats"))

    def meetings(self) -> List[MeetingRead]:
        return self.cache.fetch(("meetings",), lambda: self._many(MeetingRead, "GET", "/api/meetings"))

    def recent_meetings(self, limit: int = 6) -> List[MeetingRead]:
        return self.cache.fetch(
            ("meetings", "recent", limit),
            lambda: self._many(MeetingRead, "GET", "/api/meetings/recent", params={"limit": limit}),
        )

    def meetings_in_range(self, start: datetime, end: datetime) -> List[MeetingRead]:
        params = {"start": start.isoformat(), "end": end.isoformat()}
        return self.cache.fetch(
            ("meetings", "range", params["start"], params["end"]),
            lambda: self._many(MeetingRead, "GET", "/api/meetings/range", params=params),
        )

    def meeting(self, meeting_id: int) -> MeetingRead:
        return self.cache.fetch(
            ("meeting", meeting_id),
            lambda: self._one(MeetingRead, "GET", f"/api/meetings/{meeting_id}"),
        )

    def transcript(self, meeting_id: int) -> TranscriptResponse:
        return self.cache.fetch(
            ("meeting", meeting_id, "transcript"),
            lambda: self._one(TranscriptResponse, "GET", f"/api/meetings/{meeting_id}/transcript"),
        )

    def summary(self, meeting_id: int) -> SummaryResponse:
        return self.cache.fetch(
            ("meeting", meeting_id, "summary"),
            lambda: self._one(SummaryResponse, "GET", f"/api/meetings/{meeting_id}/summary"),
        )

    def meeting_action_items(self, meeting_id: int) -> List[ActionItemRead]:
        return self.cache.fetch(
            ("meeting", meeting_id, "action-items"),
            lambda: self._many(ActionItemRead, "GET", f"/api/meetings/{meeting_id}/action-items"),
        )

    def action_items(self) -> List[ActionItemRead]:
        return self.cache.fetch(("action-items",), lambda: self._many(ActionItemRead, "GET", "/api/action-items"))

    def pending_action_items(self) -> List[ActionItemRead]:
        return self.cache.fetch(
            ("action-items", "pending"),
            lambda: self._many(ActionItemRead, "GET", "/api/action-items/pending"),
        )

    def search_meetings(self, query: str) -> List[MeetingRead]:
        return self.cache.fetch(
            ("search", query),
            lambda: self._many(MeetingRead, "GET", "/api/search/meetings", params={"q": query}),
        )

    # Mutations

    def create_meeting(self, **fields: Any) -> MeetingRead:
        meeting = self._one(MeetingRead, "POST", "/api/meetings", json=fields)
        self._invalidate_meeting()
        return meeting

    def schedule_meeting(
        self,
        title: str,
        start_time: datetime,
        duration: int,
        participants: Optional[List[str]] = None,
        description: str = "",
        meeting_link: Optional[str] = None,
    ) -> MeetingRead:
        payload: Dict[str, Any] = {
            "title": title,
            "description": description,
            "startTime": start_time.isoformat(),
            "duration": duration,
            "participants": participants or [],
        }
        if meeting_link:
            payload["meetingLink"] = meeting_link
        meeting = self._one(MeetingRead, "POST", "/api/meetings/schedule", json=payload)
        self._invalidate_meeting()
        return meeting

    def update_meeting(self, meeting_id: int, **changes: Any) -> MeetingRead:
        meeting = self._one(MeetingRead, "PATCH", f"/api/meetings/{meeting_id}", json=changes)
        self._invalidate_meeting(meeting_id)
        return meeting

    def cancel_meeting(self, meeting_id: int) -> MeetingRead:
        meeting = self._one(MeetingRead, "POST", f"/api/meetings/{meeting_id}/cancel")
        self._invalidate_meeting(meeting_id)
        return meeting

    def delete_meeting(self, meeting_id: int) -> None:
        self._request("DELETE", f"/api/meetings/{meeting_id}")
        self._invalidate_meeting(meeting_id)
        self._invalidate_action_items()

    def create_action_item(
        self,
        meeting_id: int,
        description: str,
        assignee: str,
        due_date: Optional[datetime] = None,
    ) -> ActionItemRead:
        payload: Dict[str, Any] = {"meetingId": meeting_id, "description": description, "assignee": assignee}
        if due_date is not None:
            payload["dueDate"] = due_date.isoformat()
        item = self._one(ActionItemRead, "POST", "/api/action-items", json=payload)
        self._invalidate_action_items(meeting_id)
        return item

    def set_action_item_completed(self, item: ActionItemRead, completed: bool) -> ActionItemRead:
        updated = self._one(ActionItemRead, "PATCH", f"/api/action-items/{item.id}", json={"completed": completed})
        self._invalidate_action_items(item.meeting_id)
        return updated

    def delete_action_item(self, item: ActionItemRead) -> None:
        self._request("DELETE", f"/api/action-items/{item.id}")
        self._invalidate_action_items(item.meeting_id)

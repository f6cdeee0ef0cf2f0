"""Recording bot endpoints and the bot-service HTTP client."""

from __future__ import annotations

from typing import Any, Dict, List
from unittest import mock

import pytest
import requests

from meetinghub.deps import get_bot_client
from meetinghub.services.bot_service import BotServiceClient, BotServiceError, extract_bot_id


class FakeBotClient:
    def __init__(self, bots: List[Dict[str, Any]] = None, fail: bool = False) -> None:
        self.bots = bots or []
        self.fail = fail
        self.started: List[str] = []
        self.stopped: List[str] = []

    def start_recording(self, meeting_id: str) -> Dict[str, Any]:
        if self.fail:
            raise BotServiceError("Bot service returned 503")
        self.started.append(meeting_id)
        return {"success": True, "data": {"botId": "bot-123"}}

    def stop_recording(self, bot_id: str) -> Dict[str, Any]:
        self.stopped.append(bot_id)
        return {"success": True}

    def list_bots(self) -> List[Dict[str, Any]]:
        return self.bots


@pytest.fixture
def bots(app) -> FakeBotClient:
    fake = FakeBotClient()
    app.dependency_overrides[get_bot_client] = lambda: fake
    return fake


def _meeting(client, headers, **fields) -> dict:
    payload = {"title": "Design review", "meetingId": "abc-defg-hij"}
    payload.update(fields)
    return client.post("/api/meetings", json=payload, headers=headers).json()


# ── Recording ─────────────────────────────────────────────────────────────────


def test_start_and_stop_recording(client, bots, alice_headers):
    meeting = _meeting(client, alice_headers)

    started = client.post(f"/api/meetings/{meeting['id']}/recording/start", headers=alice_headers)
    assert started.status_code == 200
    body = started.json()
    assert body["botId"] == "bot-123"
    assert body["isRecording"] is True
    assert body["status"] == "in_progress"
    assert bots.started == ["abc-defg-hij"]

    stopped = client.post(f"/api/meetings/{meeting['id']}/recording/stop", headers=alice_headers)
    assert stopped.status_code == 200
    assert stopped.json()["isRecording"] is False
    assert bots.stopped == ["bot-123"]


def test_start_recording_needs_a_target(client, bots, alice_headers):
    meeting = _meeting(client, alice_headers, meetingId=None)
    response = client.post(f"/api/meetings/{meeting['id']}/recording/start", headers=alice_headers)
    assert response.status_code == 400
    assert bots.started == []


def test_cannot_record_cancelled_meeting(client, bots, alice_headers):
    meeting = _meeting(client, alice_headers)
    client.post(f"/api/meetings/{meeting['id']}/cancel", headers=alice_headers)

    response = client.post(f"/api/meetings/{meeting['id']}/recording/start", headers=alice_headers)
    assert response.status_code == 400


def test_stop_when_not_recording_is_400(client, bots, alice_headers):
    meeting = _meeting(client, alice_headers)
    response = client.post(f"/api/meetings/{meeting['id']}/recording/stop", headers=alice_headers)
    assert response.status_code == 400


def test_recording_other_users_meeting_is_403(client, bots, alice_headers, bob_headers):
    meeting = _meeting(client, alice_headers)
    response = client.post(f"/api/meetings/{meeting['id']}/recording/start", headers=bob_headers)
    assert response.status_code == 403


def test_bot_service_failure_is_502(client, app, alice_headers):
    app.dependency_overrides[get_bot_client] = lambda: FakeBotClient(fail=True)
    meeting = _meeting(client, alice_headers)

    response = client.post(f"/api/meetings/{meeting['id']}/recording/start", headers=alice_headers)
    assert response.status_code == 502
    assert response.json() == {"message": "Bot service request failed"}


# ── Sync ──────────────────────────────────────────────────────────────────────


def test_sync_creates_and_updates_meetings(client, bots, alice, alice_headers):
    user_id = alice["user"]["id"]
    bots.bots = [
        {"_id": "bot-1", "userId": str(user_id), "meetingId": "abc-defg-hij", "status": "in_progress", "isRecording": True},
        {"_id": "bot-2", "userId": str(user_id + 1), "meetingId": "zzz"},
        {"meetingId": "no-id"},
    ]

    synced = client.post("/api/bots/sync", headers=alice_headers)
    assert synced.status_code == 200
    [meeting] = synced.json()
    assert meeting["botId"] == "bot-1"
    assert meeting["type"] == "bot_recorded"
    assert meeting["isRecording"] is True

    bots.bots = [
        {
            "_id": "bot-1",
            "status": "completed",
            "isRecording": False,
            "transcription": "Hello team",
            "summarization": "Greetings",
            "utterances": [{"speaker": "A", "text": "Hello team", "start": 0, "end": 1.2, "words": []}],
        }
    ]
    [updated] = client.post("/api/bots/sync", headers=alice_headers).json()
    assert updated["id"] == meeting["id"]
    assert updated["status"] == "completed"
    assert updated["summarization"] == "Greetings"
    assert len(client.get("/api/meetings", headers=alice_headers).json()) == 1


def test_sync_skips_bots_owned_by_another_meeting_owner(client, bots, alice_headers, bob_headers):
    bots.bots = [{"_id": "bot-9", "meetingId": "shared"}]
    client.post("/api/bots/sync", headers=alice_headers)

    assert client.post("/api/bots/sync", headers=bob_headers).json() == []


def test_other_user_cannot_claim_a_bot_before_its_owner_syncs(client, bots, alice_headers, bob, bob_headers):
    mine = client.post("/api/meetings", json={"title": "Mine"}, headers=alice_headers).json()
    client.patch(f"/api/meetings/{mine['id']}", json={"botId": "b-bob"}, headers=alice_headers)

    bots.bots = [{"_id": "b-bob", "userId": str(bob["user"]["id"]), "meetingId": "bob-call"}]
    synced = client.post("/api/bots/sync", headers=bob_headers).json()

    assert [m["botId"] for m in synced] == ["b-bob"]
    assert synced[0]["userId"] == bob["user"]["id"]


# ── HTTP client ───────────────────────────────────────────────────────────────


def _response(status_code: int, body: Any) -> mock.Mock:
    resp = mock.Mock(status_code=status_code, text=str(body))
    resp.json.return_value = body
    return resp


def test_client_posts_to_start_endpoint():
    session = mock.Mock()
    session.request.return_value = _response(200, {"success": True, "data": {"botId": "b1"}})
    client = BotServiceClient("http://bots.local/api/v1/", timeout=3, session=session)

    result = client.start_recording("abc-defg-hij")

    session.request.assert_called_once_with(
        "POST", "http://bots.local/api/v1/bots/recording/start", json={"meetingId": "abc-defg-hij"}, timeout=3
    )
    assert extract_bot_id(result) == "b1"


def test_client_lists_bots():
    session = mock.Mock()
    session.request.return_value = _response(200, {"bots": [{"_id": "b1"}, "junk"]})
    client = BotServiceClient("http://bots.local", session=session)

    assert client.list_bots() == [{"_id": "b1"}]


def test_client_raises_on_http_error():
    session = mock.Mock()
    session.request.return_value = _response(500, {"error": "boom"})
    client = BotServiceClient("http://bots.local", session=session)

    with pytest.raises(BotServiceError):
        client.stop_recording("b1")


def test_client_raises_when_unreachable():
    session = mock.Mock()
    session.request.side_effect = requests.ConnectionError("refused")
    client = BotServiceClient("http://bots.local", session=session)

    with pytest.raises(BotServiceError):
        client.list_bots()


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"botId": "a"}, "a"),
        ({"data": {"bot_id": "b"}}, "b"),
        ({"_id": 42}, "42"),
        ({"success": True}, None),
    ],
)
def test_extract_bot_id(payload, expected):
    assert extract_bot_id(payload) == expected


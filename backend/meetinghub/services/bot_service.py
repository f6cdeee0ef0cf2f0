"""Client for the external bot-recording service.

The service joins a call with a recording bot, transcribes it and exposes
the results. Only three endpoints are used:

    POST /bots/recording/start  {"meetingId": ...}
    POST /bots/recording/stop   {"botId": ...}
    GET  /bots/all              {"bots": [...]}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from meetinghub.config import Settings, get_settings

logger = logging.getLogger("meetinghub.bots")


class BotServiceError(Exception):
    """The bot service was unreachable or answered with an error."""


class BotServiceClient:
    def __init__(self, base_url: str, timeout: float = 15.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "BotServiceClient":
        s = settings or get_settings()
        return cls(s.bot_service_url, timeout=s.bot_service_timeout)

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.info("Bot service: %s %s", method, url)
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Bot service unreachable: %s", exc)
            raise BotServiceError(f"Bot service unreachable: {exc}") from exc

        if resp.status_code >= 400:
            logger.error("Bot service error %d: %s", resp.status_code, resp.text[:500])
            raise BotServiceError(f"Bot service returned {resp.status_code}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise BotServiceError("Bot service returned a non-JSON body") from exc
        return body if isinstance(body, dict) else {"data": body}

    def start_recording(self, meeting_id: str) -> Dict[str, Any]:
        return self._request("POST", "/bots/recording/start", {"meetingId": meeting_id})

    def stop_recording(self, bot_id: str) -> Dict[str, Any]:
        return self._request("POST", "/bots/recording/stop", {"botId": bot_id})

    def list_bots(self) -> List[Dict[str, Any]]:
        body = self._request("GET", "/bots/all")
        bots = body.get("bots", [])
        return [b for b in bots if isinstance(b, dict)] if isinstance(bots, list) else []


def extract_bot_id(payload: Dict[str, Any]) -> Optional[str]:
    # The service has answered with each of these shapes over time
    data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    for key in ("botId", "bot_id", "_id", "id"):
        value = data.get(key)
        if value:
            return str(value)
    return None

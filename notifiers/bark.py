"""Bark push notifications (https://github.com/Finb/Bark)."""

from __future__ import annotations

from typing import Optional

import httpx

from config import BarkSettings
from models import NotificationLevel
from utils.exceptions import NotificationError

from .base import BaseNotifier


# Bark interruption levels
_BARK_LEVELS = {
    NotificationLevel.INFO: "passive",
    NotificationLevel.SUCCESS: "active",
    NotificationLevel.WARNING: "timeSensitive",
    NotificationLevel.ERROR: "timeSensitive",
}


class BarkNotifier(BaseNotifier):
    channel = "bark"

    def __init__(
        self,
        settings: Optional[BarkSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self.settings = settings or BarkSettings()
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def is_configured(self) -> bool:
        return bool(self.settings.device_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def _send(self, level: NotificationLevel, title: str, body: str) -> None:
        if not self.is_configured():
            raise NotificationError("bark device key not configured (BARK_DEVICE_KEY)")

        payload = {
            "device_key": self.settings.device_key,
            "title": title,
            "body": body,
            "group": self.settings.group,
            "level": _BARK_LEVELS[level],
        }
        response = await self._get_client().post(f"{self.settings.server_url.rstrip('/')}/push", json=payload)
        if response.status_code >= 400:
            raise NotificationError(f"bark http {response.status_code}: {response.text[:200]}")
        code = (response.json() or {}).get("code", 200)
        if int(code) != 200:
            raise NotificationError(f"bark rejected message: code={code}")

    async def refresh(self) -> None:
        if self._owns_client:
            await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

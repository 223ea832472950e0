"""Notifier abstraction: four severity levels, failures never propagate."""

from __future__ import annotations

import logging

from models import NotificationLevel


logger = logging.getLogger(__name__)


class BaseNotifier:
    """Out-of-band notification channel."""

    channel = "base"

    async def _send(self, level: NotificationLevel, title: str, body: str) -> None:
        raise NotImplementedError

    async def notify(self, level: NotificationLevel, title: str, body: str) -> bool:
        """Dispatch one message; returns False when the channel failed."""
        try:
            await self._send(level, str(title), str(body))
            return True
        except Exception as exc:
            logger.warning("notification failed channel=%s level=%s title=%s: %s", self.channel, level.value, title, exc)
            return False

    async def info(self, title: str, body: str) -> bool:
        return await self.notify(NotificationLevel.INFO, title, body)

    async def success(self, title: str, body: str) -> bool:
        return await self.notify(NotificationLevel.SUCCESS, title, body)

    async def warning(self, title: str, body: str) -> bool:
        return await self.notify(NotificationLevel.WARNING, title, body)

    async def error(self, title: str, body: str) -> bool:
        return await self.notify(NotificationLevel.ERROR, title, body)

    async def refresh(self) -> None:
        return None

    async def aclose(self) -> None:
        return None

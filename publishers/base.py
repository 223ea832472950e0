"""Publisher abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from models import PublishResult


class ContentPublisher(ABC):
    """Publishing backend: cover upload plus article publish."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def upload_image(self, image_url: str) -> str:
        """Upload a remote image, return the backend media reference."""

    @abstractmethod
    async def publish(self, content: str, title: str, digest: str, thumb_media_id: str) -> PublishResult:
        """Publish one rendered article."""

    async def refresh(self) -> None:
        return None

    async def aclose(self) -> None:
        return None

"""Image generator adapter abstractions."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from models import ImageTaskStatus
from utils.exceptions import ImageGenerationError


logger = logging.getLogger(__name__)


class BaseImageGenerator:
    """
    Two-phase image generation: submit() returns a task id, poll_status()
    reports task state. wait_for_completion() drives the polling loop.
    """

    provider = "base"

    def __init__(
        self,
        *,
        poll_interval: float = 3.0,
        timeout: float = 180.0,
        max_polls: int = 60,
    ) -> None:
        self.poll_interval = max(0.0, float(poll_interval))
        self.timeout = float(timeout)
        self.max_polls = max(1, int(max_polls))

    async def submit(self, prompt: str, size: str) -> str:
        raise NotImplementedError

    async def poll_status(self, task_id: str) -> ImageTaskStatus:
        raise NotImplementedError

    async def refresh(self) -> None:
        return None

    async def aclose(self) -> None:
        return None

    async def wait_for_completion(
        self,
        task_id: str,
        *,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        max_polls: Optional[int] = None,
    ) -> ImageTaskStatus:
        """Poll until a terminal state; return the succeeded status with a result url."""
        interval = self.poll_interval if poll_interval is None else max(0.0, float(poll_interval))
        ceiling = self.timeout if timeout is None else float(timeout)
        limit = self.max_polls if max_polls is None else max(1, int(max_polls))

        loop = asyncio.get_running_loop()
        deadline = loop.time() + ceiling
        last: Optional[ImageTaskStatus] = None

        for attempt in range(1, limit + 1):
            try:
                last = await self.poll_status(task_id)
            except httpx.TransportError as exc:
                logger.warning("poll transport error provider=%s task_id=%s attempt=%s: %s", self.provider, task_id, attempt, exc)
                last = None
            else:
                if last.done:
                    return self._finish(task_id, last)
                logger.debug("task still running provider=%s task_id=%s state=%s", self.provider, task_id, last.state.value)

            if loop.time() >= deadline or attempt == limit:
                break
            await asyncio.sleep(interval)

        state = last.state.value if last else "unreachable"
        raise ImageGenerationError(
            f"image task did not finish (last state: {state})",
            task_id=task_id,
            polls=attempt,
        )

    def _finish(self, task_id: str, status: ImageTaskStatus) -> ImageTaskStatus:
        if not status.succeeded:
            raise ImageGenerationError(
                f"image task {status.state.value.lower()}: {status.message or 'no detail'}",
                task_id=task_id,
            )
        if not status.result_url:
            raise ImageGenerationError("image task finished without output url", task_id=task_id)
        return status

"""Tongyi Wanxiang (DashScope) text-to-image adapter."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from config import WanxSettings
from models import ImageTaskState, ImageTaskStatus
from utils.exceptions import ImageGenerationError

from .base import BaseImageGenerator


class WanxImageGenerator(BaseImageGenerator):
    """Adapter boundary for the DashScope async image-synthesis API."""

    provider = "wanx"

    def __init__(
        self,
        settings: Optional[WanxSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        request_timeout: float = 30.0,
        poll_interval: float = 3.0,
        timeout: float = 180.0,
        max_polls: int = 60,
    ) -> None:
        super().__init__(poll_interval=poll_interval, timeout=timeout, max_polls=max_polls)
        self.settings = settings or WanxSettings()
        self.request_timeout = request_timeout
        self._client = client
        self._owns_client = client is None

    def _headers(self, *, async_task: bool = False) -> Dict[str, str]:
        if not self.settings.api_key:
            raise ImageGenerationError("wanx config missing: WANX_API_KEY")
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }
        if async_task:
            headers["X-DashScope-Async"] = "enable"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.request_timeout)
            self._owns_client = True
        return self._client

    async def submit(self, prompt: str, size: str) -> str:
        endpoint = f"{self.settings.base_url.rstrip('/')}/services/aigc/text2image/image-synthesis"
        request_payload = {
            "model": self.settings.model,
            "input": {"prompt": prompt},
            "parameters": {"size": size, "n": 1},
        }
        try:
            payload = await self._request("POST", endpoint, headers=self._headers(async_task=True), json=request_payload)
        except httpx.TransportError as exc:
            raise ImageGenerationError(f"wanx submit failed: {exc}") from exc
        task_id = str((payload.get("output") or {}).get("task_id") or "").strip()
        if not task_id:
            raise ImageGenerationError(f"wanx response missing task_id: {payload.get('message') or payload}")
        return task_id

    async def poll_status(self, task_id: str) -> ImageTaskStatus:
        endpoint = f"{self.settings.base_url.rstrip('/')}/tasks/{task_id}"
        payload = await self._request("GET", endpoint, headers=self._headers())
        output = dict(payload.get("output") or {})

        raw_state = str(output.get("task_status") or "UNKNOWN").upper()
        try:
            state = ImageTaskState(raw_state)
        except ValueError:
            state = ImageTaskState.RUNNING

        results = output.get("results") or []
        result_url = None
        for item in results:
            if isinstance(item, dict) and item.get("url"):
                result_url = str(item["url"])
                break

        return ImageTaskStatus(
            task_id=task_id,
            state=state,
            result_url=result_url,
            message=output.get("message") or payload.get("message"),
        )

    async def refresh(self) -> None:
        if self._owns_client:
            await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        client = self._get_client()
        response = await client.request(method, url, **kwargs)
        if response.status_code in {401, 403}:
            raise ImageGenerationError("wanx auth failed")
        if response.status_code == 429:
            raise ImageGenerationError("wanx quota exceeded")
        if response.status_code >= 400:
            raise ImageGenerationError(f"wanx http {response.status_code}: {response.text[:200]}")
        return dict(response.json() or {})

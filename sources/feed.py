"""
Feed Source
从候选文章接口拉取待处理的文章引用
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from models import Candidate
from utils.exceptions import FeedUnavailableError


logger = logging.getLogger(__name__)


class FeedSource:
    """
    候选文章数据源

    接口返回格式::

        {"data": [{"id", "title", "url", "author", "timestamp", "cover", "mobileUrl"}, ...]}

    - 未配置 / 网络错误 / HTTP 错误 / 外层格式错误 -> FeedUnavailableError
    - 单条记录校验失败只记录警告并跳过, 不影响其余候选
    - 合法但为空的列表原样返回, 是否为空由调用方判断
    """

    def __init__(
        self,
        api_url: Optional[str],
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.api_url = str(api_url or "").strip()
        self.timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "feed"

    def is_configured(self) -> bool:
        return bool(self.api_url)

    async def refresh(self) -> None:
        """数据源无会话状态, 保留接口以便统一刷新"""
        return None

    async def get_candidates(self) -> List[Candidate]:
        if not self.is_configured():
            raise FeedUnavailableError("feed api url is not configured (FEED_API_URL)")

        logger.info(f"[Feed] Requesting candidates from {self.api_url}")
        try:
            payload = await self._fetch_json()
        except httpx.HTTPStatusError as e:
            raise FeedUnavailableError(
                f"feed http {e.response.status_code}",
                {"url": self.api_url},
            ) from e
        except httpx.HTTPError as e:
            raise FeedUnavailableError(f"feed request failed: {e}", {"url": self.api_url}) from e
        except ValueError as e:
            raise FeedUnavailableError("feed returned invalid json", {"url": self.api_url}) from e

        items = self._extract_items(payload)
        candidates = []
        for raw in items:
            try:
                candidates.append(Candidate.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"[Feed] Skipping malformed item {raw.get('id')!r}: {e.errors()[0].get('msg')}")

        skipped = len(items) - len(candidates)
        logger.info(f"[Feed] Received {len(candidates)} candidates" + (f" ({skipped} skipped)" if skipped else ""))
        return candidates

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _fetch_json(self) -> Any:
        if self._client is not None:
            response = await self._client.get(self.api_url)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            response = await client.get(self.api_url)
            response.raise_for_status()
            return response.json()

    @staticmethod
    def _extract_items(payload: Any) -> List[Dict[str, Any]]:
        if not isinstance(payload, dict) or "data" not in payload:
            raise FeedUnavailableError("feed response missing 'data' field")
        data = payload.get("data")
        if data is None:
            return []
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise FeedUnavailableError("feed 'data' must be a list of objects")
        return data

"""
DeepSeek balance check
运行前检查 API 余额, 仅作提醒, 不影响流程
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from utils.exceptions import LLMError


logger = logging.getLogger(__name__)


class DeepSeekBalanceChecker:
    """查询 DeepSeek 账户余额"""

    DEFAULT_BASE_URL = "https://api.deepseek.com"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ) -> None:
        self.api_key = str(api_key or "").strip()
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._client = client

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def refresh(self) -> None:
        return None

    async def get_cny_balance(self) -> float:
        """返回人民币总余额, 账户无 CNY 余额时返回 0"""
        if not self.is_configured():
            raise LLMError("deepseek api key is not configured", provider="deepseek")

        payload = await self._get_balance()
        for info in payload.get("balance_infos") or []:
            if str(info.get("currency") or "").upper() == "CNY":
                try:
                    return float(info.get("total_balance") or 0.0)
                except (TypeError, ValueError) as e:
                    raise LLMError("invalid balance value", provider="deepseek", info=info) from e
        return 0.0

    async def _get_balance(self) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"}
        try:
            if self._client is not None:
                response = await self._client.get(f"{self.base_url}/user/balance", headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(f"{self.base_url}/user/balance", headers=headers)
            response.raise_for_status()
            return dict(response.json() or {})
        except httpx.HTTPStatusError as e:
            raise LLMError(f"balance http {e.response.status_code}", provider="deepseek") from e
        except httpx.HTTPError as e:
            raise LLMError(f"balance request failed: {e}", provider="deepseek") from e

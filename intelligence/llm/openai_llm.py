"""
OpenAI-compatible chat LLM
OpenAI 官方接口, 以及 DeepSeek / 通义千问 等兼容接口的共用实现
"""
from typing import Any, Dict, Optional, Sequence
import logging

from openai import AsyncOpenAI

from utils.exceptions import LLMError

from .base import BaseLLM, LLMResponse, Message


logger = logging.getLogger(__name__)


class OpenAILLM(BaseLLM):
    """通过 openai SDK 调用 chat.completions"""

    DEFAULT_MODEL = "gpt-4o-mini"

    _client: Optional[AsyncOpenAI] = None

    @property
    def provider(self) -> str:
        return "openai"

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.is_configured():
                raise LLMError(f"{self.provider} api key is not configured", provider=self.provider)
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def acomplete(self, messages: Sequence[Message], *, json_mode: bool = False, **overrides) -> LLMResponse:
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": overrides.get("temperature", self.temperature),
            "max_tokens": overrides.get("max_tokens", self.max_tokens),
        }
        if json_mode:
            params["response_format"] = {"type": "json_object"}

        response = await self._get_client().chat.completions.create(**params)

        choice = response.choices[0]
        usage = response.usage
        logger.debug(
            f"[{self.provider}] {response.model} tokens="
            f"{usage.total_tokens if usage else '?'} finish={choice.finish_reason}"
        )
        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            usage={
                "prompt_tokens": usage.prompt_tokens if usage else 0,
                "completion_tokens": usage.completion_tokens if usage else 0,
                "total_tokens": usage.total_tokens if usage else 0,
            },
            finish_reason=choice.finish_reason,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

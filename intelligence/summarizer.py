"""
Content Summarizer
调用 LLM 对抓取内容进行改写/摘要
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from models import SummaryResult
from utils.exceptions import SummarizerError

from .llm import BaseLLM, get_llm
from .prompts import SUMMARIZE_SYSTEM_PROMPT, build_summarize_prompt


logger = logging.getLogger(__name__)


class ContentSummarizer(ABC):
    """摘要器抽象基类"""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def summarize(self, serialized_content: str) -> SummaryResult:
        """
        改写一篇文章

        Args:
            serialized_content: 完整抓取内容的 JSON 序列化结果

        Returns:
            SummaryResult, 失败时抛出 SummarizerError
        """
        pass

    async def refresh(self) -> None:
        return None

    async def aclose(self) -> None:
        return None


class LLMSummarizer(ContentSummarizer):
    """基于对话模型的摘要器, 要求模型返回 JSON 对象"""

    def __init__(self, llm: BaseLLM, *, system_prompt: str = SUMMARIZE_SYSTEM_PROMPT):
        self.llm = llm
        self.system_prompt = system_prompt

    @property
    def name(self) -> str:
        return f"llm:{self.llm.provider}"

    async def summarize(self, serialized_content: str) -> SummaryResult:
        if not str(serialized_content or "").strip():
            raise SummarizerError("empty content", provider=self.llm.provider)

        try:
            reply = await self.llm.achat(
                build_summarize_prompt(serialized_content),
                system_prompt=self.system_prompt,
                json_mode=True,
            )
        except Exception as e:
            raise SummarizerError(f"llm call failed: {e}", provider=self.llm.provider) from e

        data = self._extract_json(reply)
        if not data:
            raise SummarizerError("llm reply is not a json object", provider=self.llm.provider)

        try:
            result = SummaryResult.model_validate(self._normalize(data))
        except ValidationError as e:
            raise SummarizerError(f"incomplete summary: {e.errors()[0].get('loc')}", provider=self.llm.provider) from e

        if not result.title.strip() or not result.content.strip():
            raise SummarizerError("summary title/content is empty", provider=self.llm.provider)

        logger.info(f"[Summarizer] {self.name} rewrote '{result.title}' (score={result.score})")
        return result

    async def refresh(self) -> None:
        await self.llm.refresh()

    async def aclose(self) -> None:
        await self.llm.aclose()

    @staticmethod
    def _extract_json(text: str) -> Dict[str, Any]:
        raw = (text or "").strip()
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
            return parsed if isinstance(parsed, dict) else {}
        except Exception:
            pass
        match = re.search(r"\{[\s\S]*\}", raw)
        if not match:
            return {}
        try:
            parsed = json.loads(match.group())
            return parsed if isinstance(parsed, dict) else {}
        except Exception:
            return {}

    @staticmethod
    def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
        keywords = data.get("keywords") or []
        if isinstance(keywords, str):
            keywords = [part.strip() for part in re.split(r"[,，、]", keywords) if part.strip()]
        score = data.get("score")
        try:
            score = float(score) if score is not None else None
        except (TypeError, ValueError):
            score = None
        return {
            "title": str(data.get("title") or "").strip(),
            "content": str(data.get("content") or "").strip(),
            "score": score,
            "keywords": [str(k).strip() for k in keywords if str(k).strip()],
        }


def get_summarizer(provider: Optional[str] = None, **kwargs) -> ContentSummarizer:
    """按 LLM 供应商创建摘要器"""
    return LLMSummarizer(get_llm(provider=provider, **kwargs))

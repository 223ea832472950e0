from __future__ import annotations

import json
from typing import List

import pytest

from intelligence.llm.base import BaseLLM, LLMResponse, Message
from intelligence.summarizer import LLMSummarizer
from utils.exceptions import SummarizerError


class ScriptedLLM(BaseLLM):
    def __init__(self, reply: str = "", error: Exception = None):
        super().__init__(model="scripted")
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []
        self.closed = 0

    @property
    def provider(self) -> str:
        return "scripted"

    async def acomplete(self, messages: List[Message], **kwargs) -> LLMResponse:
        self.calls.append({"messages": messages, "kwargs": kwargs})
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply, model=self.model)

    async def aclose(self) -> None:
        self.closed += 1


ARTICLE = json.dumps({"id": "a1", "title": "Original", "content": "Body text", "url": "https://x"})


@pytest.mark.asyncio
async def test_parses_json_reply() -> None:
    llm = ScriptedLLM(json.dumps({"title": "新标题", "content": "新正文", "score": "86", "keywords": ["AI", "开源"]}))
    result = await LLMSummarizer(llm).summarize(ARTICLE)

    assert result.title == "新标题"
    assert result.content == "新正文"
    assert result.score == 86.0
    assert result.keywords == ["AI", "开源"]

    call = llm.calls[0]
    assert call["messages"][0].role.value == "system"
    assert ARTICLE in call["messages"][1].content
    assert call["kwargs"]["json_mode"] is True


@pytest.mark.asyncio
async def test_extracts_json_wrapped_in_text() -> None:
    reply = '好的, 结果如下:\n```json\n{"title": "T", "content": "C", "keywords": "a, b，c"}\n```'
    result = await LLMSummarizer(ScriptedLLM(reply)).summarize(ARTICLE)

    assert result.title == "T"
    assert result.keywords == ["a", "b", "c"]
    assert result.score is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [
        "not json at all",
        json.dumps({"title": "", "content": "C"}),
        json.dumps({"title": "T"}),
        json.dumps(["list"]),
    ],
)
async def test_unusable_reply_raises(reply: str) -> None:
    with pytest.raises(SummarizerError):
        await LLMSummarizer(ScriptedLLM(reply)).summarize(ARTICLE)


@pytest.mark.asyncio
async def test_llm_error_is_wrapped() -> None:
    llm = ScriptedLLM(error=RuntimeError("rate limited"))
    with pytest.raises(SummarizerError) as exc_info:
        await LLMSummarizer(llm).summarize(ARTICLE)
    assert "rate limited" in str(exc_info.value)


@pytest.mark.asyncio
async def test_empty_input_raises_without_calling_llm() -> None:
    llm = ScriptedLLM("{}")
    with pytest.raises(SummarizerError):
        await LLMSummarizer(llm).summarize("  ")
    assert llm.calls == []


@pytest.mark.asyncio
async def test_refresh_closes_llm_client() -> None:
    llm = ScriptedLLM("{}")
    await LLMSummarizer(llm).refresh()
    assert llm.closed == 1

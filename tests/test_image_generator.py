from __future__ import annotations

import json

import httpx
import pytest

from config import WanxSettings
from models import ImageTaskState
from render import WanxImageGenerator
from utils.exceptions import ImageGenerationError


def _generator(handler, **kwargs) -> WanxImageGenerator:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    params = {"poll_interval": 0, "timeout": 5, "max_polls": 4}
    params.update(kwargs)
    return WanxImageGenerator(WanxSettings(api_key="sk-test"), client=client, **params)


def _task_handler(states, *, results=None, seen=None):
    """Submit returns task-1; each poll pops the next state."""
    states = list(states)

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.method == "POST":
            return httpx.Response(200, json={"output": {"task_id": "task-1", "task_status": "PENDING"}})
        state = states.pop(0) if states else "RUNNING"
        if isinstance(state, Exception):
            raise state
        output = {"task_id": "task-1", "task_status": state}
        if state == "SUCCEEDED":
            output["results"] = results or [{"url": "https://img.example.com/cover.png"}]
        if state == "FAILED":
            output["message"] = "content moderation"
        return httpx.Response(200, json={"output": output})

    return handler


@pytest.mark.asyncio
async def test_submit_sends_async_header_and_size() -> None:
    seen = []
    generator = _generator(_task_handler([], seen=seen))

    task_id = await generator.submit("封面 prompt", "1440*768")

    assert task_id == "task-1"
    request = seen[0]
    assert request.headers["X-DashScope-Async"] == "enable"
    assert request.url.path.endswith("/services/aigc/text2image/image-synthesis")
    body = json.loads(request.content)
    assert body["input"]["prompt"] == "封面 prompt"
    assert body["parameters"] == {"size": "1440*768", "n": 1}


@pytest.mark.asyncio
async def test_wait_returns_result_url_after_pending_states() -> None:
    generator = _generator(_task_handler(["PENDING", "RUNNING", "SUCCEEDED"]))

    status = await generator.wait_for_completion("task-1")

    assert status.state == ImageTaskState.SUCCEEDED
    assert status.result_url == "https://img.example.com/cover.png"


@pytest.mark.asyncio
async def test_transient_poll_error_is_tolerated() -> None:
    request = httpx.Request("GET", "https://dashscope.aliyuncs.com/api/v1/tasks/task-1")
    generator = _generator(_task_handler([httpx.ConnectError("reset", request=request), "SUCCEEDED"]))

    status = await generator.wait_for_completion("task-1")

    assert status.succeeded


@pytest.mark.asyncio
async def test_failed_task_raises() -> None:
    generator = _generator(_task_handler(["RUNNING", "FAILED"]))

    with pytest.raises(ImageGenerationError) as exc_info:
        await generator.wait_for_completion("task-1")

    assert "failed" in str(exc_info.value)
    assert exc_info.value.task_id == "task-1"


@pytest.mark.asyncio
async def test_poll_limit_raises_with_last_state() -> None:
    generator = _generator(_task_handler([]), max_polls=3)

    with pytest.raises(ImageGenerationError) as exc_info:
        await generator.wait_for_completion("task-1")

    assert "RUNNING" in str(exc_info.value)


@pytest.mark.asyncio
async def test_succeeded_without_url_raises() -> None:
    generator = _generator(_task_handler(["SUCCEEDED"], results=[{"code": "DataInspectionFailed"}]))

    with pytest.raises(ImageGenerationError):
        await generator.wait_for_completion("task-1")


@pytest.mark.asyncio
async def test_missing_api_key_raises_on_submit() -> None:
    generator = WanxImageGenerator(WanxSettings(api_key=None))

    with pytest.raises(ImageGenerationError):
        await generator.submit("prompt", "1440*768")


@pytest.mark.asyncio
async def test_auth_error_on_submit() -> None:
    generator = _generator(lambda request: httpx.Response(401, json={"code": "InvalidApiKey"}))

    with pytest.raises(ImageGenerationError) as exc_info:
        await generator.submit("prompt", "1440*768")

    assert "auth" in str(exc_info.value)

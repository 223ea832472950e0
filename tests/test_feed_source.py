from __future__ import annotations

import httpx
import pytest

from sources import FeedSource
from utils.exceptions import FeedUnavailableError


FEED_URL = "https://feed.example.com/api/hot"


def _feed(handler) -> FeedSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FeedSource(FEED_URL, client=client)


@pytest.mark.asyncio
async def test_parses_candidates() -> None:
    payload = {
        "data": [
            {
                "id": 101,
                "title": "OpenAI 发布新模型",
                "url": "https://news.example.com/101",
                "author": "记者",
                "timestamp": "2024-05-01T08:00:00+08:00",
                "cover": "https://img.example.com/101.jpg",
                "mobileUrl": "https://m.example.com/101",
            },
            {"id": "102", "title": "第二条", "url": "https://news.example.com/102"},
        ]
    }
    feed = _feed(lambda request: httpx.Response(200, json=payload))

    candidates = await feed.get_candidates()

    assert [c.id for c in candidates] == ["101", "102"]
    assert candidates[0].mobile_url == "https://m.example.com/101"
    assert candidates[0].timestamp.year == 2024
    assert candidates[1].author is None


@pytest.mark.asyncio
async def test_empty_data_returns_empty_list() -> None:
    feed = _feed(lambda request: httpx.Response(200, json={"data": []}))
    assert await feed.get_candidates() == []


@pytest.mark.asyncio
async def test_http_error_is_unavailable() -> None:
    feed = _feed(lambda request: httpx.Response(503, text="maintenance"))
    with pytest.raises(FeedUnavailableError) as exc_info:
        await feed.get_candidates()
    assert "503" in str(exc_info.value)


@pytest.mark.asyncio
async def test_missing_data_field_is_unavailable() -> None:
    feed = _feed(lambda request: httpx.Response(200, json={"items": []}))
    with pytest.raises(FeedUnavailableError):
        await feed.get_candidates()


@pytest.mark.asyncio
async def test_invalid_json_is_unavailable() -> None:
    feed = _feed(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(FeedUnavailableError):
        await feed.get_candidates()


@pytest.mark.asyncio
async def test_malformed_item_is_skipped() -> None:
    payload = {
        "data": [
            {"id": 1, "title": "毫秒时间戳", "url": "https://news.example.com/1", "timestamp": 1714567890000},
            {"id": 2, "title": "相对时间", "url": "https://news.example.com/2", "timestamp": "2小时前"},
            {"id": 3, "title": "no url", "timestamp": None},
            {"id": 4, "title": "空时间", "url": "https://news.example.com/4", "timestamp": None},
        ]
    }
    feed = _feed(lambda request: httpx.Response(200, json=payload))

    candidates = await feed.get_candidates()

    assert [c.id for c in candidates] == ["1", "2", "4"]
    assert candidates[0].timestamp.year == 2024
    assert candidates[1].timestamp is None
    assert candidates[2].timestamp is None


@pytest.mark.asyncio
async def test_all_items_malformed_returns_empty_list() -> None:
    feed = _feed(lambda request: httpx.Response(200, json={"data": [{"id": 1, "title": "no url"}, {"title": "no id"}]}))
    assert await feed.get_candidates() == []


@pytest.mark.asyncio
async def test_non_list_data_is_unavailable() -> None:
    feed = _feed(lambda request: httpx.Response(200, json={"data": {"id": 1}}))
    with pytest.raises(FeedUnavailableError):
        await feed.get_candidates()


@pytest.mark.asyncio
async def test_unconfigured_feed() -> None:
    with pytest.raises(FeedUnavailableError):
        await FeedSource(None).get_candidates()

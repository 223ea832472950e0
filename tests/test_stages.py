from __future__ import annotations

import pytest

from models import ScrapedContent
from orchestrator import CONTENT_PLACEHOLDER, UNTITLED_PLACEHOLDER, PipelineStages, make_digest
from render import WeixinTemplateRenderer
from scrapers import ScraperRegistry
from utils.exceptions import ConfigurationError, FeedEmptyError, ImageGenerationError

from conftest import FakeFeed, make_candidates


def _stages(pipeline, **overrides) -> PipelineStages:
    params = dict(
        feed=pipeline.feed,
        scrapers=ScraperRegistry({"firecrawl": pipeline.scraper}),
        summarizer=pipeline.summarizer,
        image_generator=pipeline.images,
        publisher=pipeline.publisher,
        renderer=WeixinTemplateRenderer(),
        notifier=pipeline.notifier,
        settings=pipeline.settings,
    )
    params.update(overrides)
    return PipelineStages(**params)


def test_make_digest() -> None:
    assert make_digest("## 标题\n\n- 第一点 **加粗**") == "标题 第一点 加粗"
    assert make_digest("* GPT-4o 于 2024-05-01 发布\n+ 第二点") == "GPT-4o 于 2024-05-01 发布 第二点"
    long_digest = make_digest("字" * 300, max_len=50)
    assert len(long_digest) == 50
    assert long_digest.endswith("…")


@pytest.mark.asyncio
async def test_fetch_candidates_caps_batch(pipeline) -> None:
    pipeline.settings.max_candidates = 2
    stages = _stages(pipeline, feed=FakeFeed(make_candidates(4)))

    candidates = await stages.fetch_candidates()

    assert [c.id for c in candidates] == ["1", "2"]


@pytest.mark.asyncio
async def test_fetch_candidates_empty(pipeline) -> None:
    with pytest.raises(FeedEmptyError):
        await _stages(pipeline, feed=FakeFeed([])).fetch_candidates()


@pytest.mark.asyncio
async def test_scrape_one_uses_configured_backend(pipeline) -> None:
    pipeline.settings.scraper_key = "web"
    stages = _stages(pipeline)

    with pytest.raises(ConfigurationError):
        await stages.scrape_one(make_candidates(1)[0])


@pytest.mark.asyncio
async def test_scrape_one_returns_none_when_empty(pipeline) -> None:
    pipeline.scraper.empty.add("https://news.example.com/1")
    assert await _stages(pipeline).scrape_one(make_candidates(1)[0]) is None


@pytest.mark.asyncio
async def test_summarize_one_overwrites_fields(pipeline) -> None:
    content = ScrapedContent(id="c1", title="原", content="正文", url="https://x")

    await _stages(pipeline).summarize_one(content)

    assert content.title == "改写 原"
    assert content.score == 88
    assert content.keywords == ["科技", "新闻"]
    assert content.metadata["keywords"] == ["科技", "新闻"]


@pytest.mark.asyncio
async def test_summarize_one_fills_placeholders_on_failure(pipeline) -> None:
    pipeline.summarizer.fail_all = True
    content = ScrapedContent(id="c1", title="", content="", url="https://x")

    await _stages(pipeline).summarize_one(content)

    assert content.title == UNTITLED_PLACEHOLDER
    assert content.content == CONTENT_PLACEHOLDER
    assert content.keywords == []
    assert pipeline.titles("warning") == ["内容处理失败"]


@pytest.mark.asyncio
async def test_cover_prompt_uses_title_and_size(pipeline) -> None:
    media_id = await _stages(pipeline).generate_and_upload_cover("量子计算突破")

    assert media_id == "media-1"
    assert pipeline.images.prompts["task-1"] == "帮我生成一个标题封面，标题是：量子计算突破 ,封面不需要文字，找最符合标题的图片"
    assert pipeline.images.sizes == ["1440*768"]


@pytest.mark.asyncio
async def test_render_and_publish_propagates_cover_failure(pipeline) -> None:
    pipeline.images.stuck_titles.add("卡住")
    content = ScrapedContent(id="c1", title="卡住的任务", content="正文", url="https://x")

    with pytest.raises(ImageGenerationError):
        await _stages(pipeline).render_and_publish_one(content)

    assert pipeline.publisher.published == []

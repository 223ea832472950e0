"""Shared fakes for workflow tests."""

from __future__ import annotations

import json
from typing import Dict, List, Optional, Set

import pytest

from config import Settings, WorkflowSettings
from intelligence.balance import DeepSeekBalanceChecker
from intelligence.summarizer import ContentSummarizer
from models import (
    Candidate,
    ImageTaskState,
    ImageTaskStatus,
    PublishResult,
    PublishStatus,
    ScrapedContent,
    SummaryResult,
)
from notifiers import JsonlNotifier
from orchestrator import ArticleWorkflow
from publishers import ContentPublisher
from render import BaseImageGenerator, WeixinTemplateRenderer
from scrapers import ContentScraper, ScraperRegistry
from sources import FeedSource
from utils.exceptions import PublishError, SummarizerError


def make_candidates(count: int) -> List[Candidate]:
    return [
        Candidate(id=str(idx), title=f"候选 {idx}", url=f"https://news.example.com/{idx}")
        for idx in range(1, count + 1)
    ]


class FakeFeed(FeedSource):
    def __init__(self, candidates=None, error: Optional[Exception] = None) -> None:
        super().__init__("https://feed.example.com/api")
        self.candidates = list(candidates or [])
        self.error = error
        self.calls = 0

    async def get_candidates(self) -> List[Candidate]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.candidates)


class FakeScraper(ContentScraper):
    def __init__(self) -> None:
        super().__init__()
        self.failures: Dict[str, Exception] = {}
        self.empty: Set[str] = set()
        self.calls: List[str] = []
        self.refreshed = 0

    @property
    def name(self) -> str:
        return "Fake"

    async def scrape(self, url: str) -> List[ScrapedContent]:
        self.calls.append(url)
        if url in self.failures:
            raise self.failures[url]
        if url in self.empty:
            return []
        slug = url.rsplit("/", 1)[-1]
        return [
            ScrapedContent(
                id=f"content-{slug}",
                title=f"原标题 {slug}",
                content=f"原始正文 {slug}\n\n第二段内容",
                url=url,
                publish_date="2024-05-01",
            )
        ]

    async def refresh(self) -> None:
        self.refreshed += 1


class FakeSummarizer(ContentSummarizer):
    def __init__(self) -> None:
        self.fail_all = False
        self.fail_ids: Set[str] = set()
        self.inputs: List[dict] = []

    @property
    def name(self) -> str:
        return "fake"

    async def summarize(self, serialized_content: str) -> SummaryResult:
        data = json.loads(serialized_content)
        self.inputs.append(data)
        if self.fail_all or data["id"] in self.fail_ids:
            raise SummarizerError("model unavailable", provider="fake")
        return SummaryResult(
            title=f"改写 {data['title']}",
            content=f"改写正文: {data['content']}",
            score=88,
            keywords=["科技", "新闻"],
        )


class FakeImageGenerator(BaseImageGenerator):
    provider = "fake"

    def __init__(self) -> None:
        super().__init__(poll_interval=0, timeout=5, max_polls=3)
        self.prompts: Dict[str, str] = {}
        self.sizes: List[str] = []
        self.stuck_titles: Set[str] = set()
        self.polls = 0

    async def submit(self, prompt: str, size: str) -> str:
        task_id = f"task-{len(self.prompts) + 1}"
        self.prompts[task_id] = prompt
        self.sizes.append(size)
        return task_id

    async def poll_status(self, task_id: str) -> ImageTaskStatus:
        self.polls += 1
        prompt = self.prompts[task_id]
        if any(title in prompt for title in self.stuck_titles):
            return ImageTaskStatus(task_id=task_id, state=ImageTaskState.RUNNING)
        return ImageTaskStatus(
            task_id=task_id,
            state=ImageTaskState.SUCCEEDED,
            result_url=f"https://img.example.com/{task_id}.png",
        )


class FakePublisher(ContentPublisher):
    def __init__(self) -> None:
        self.uploads: List[str] = []
        self.published: List[dict] = []
        self.raise_titles: Set[str] = set()
        self.reject_titles: Set[str] = set()
        self.refreshed = 0

    @property
    def name(self) -> str:
        return "fake"

    async def upload_image(self, image_url: str) -> str:
        self.uploads.append(image_url)
        return f"media-{len(self.uploads)}"

    async def publish(self, content: str, title: str, digest: str, thumb_media_id: str) -> PublishResult:
        if title in self.raise_titles:
            raise PublishError("draft rejected", errcode=45009)
        if title in self.reject_titles:
            return PublishResult(status=PublishStatus.FAILED, media_id="draft-x", article_title=title, error="submit failed")
        self.published.append(
            {"content": content, "title": title, "digest": digest, "thumb_media_id": thumb_media_id}
        )
        return PublishResult(
            status=PublishStatus.PUBLISHED,
            media_id=f"draft-{len(self.published)}",
            publish_id=f"pub-{len(self.published)}",
            article_title=title,
        )

    async def refresh(self) -> None:
        self.refreshed += 1


class FakeBalanceChecker(DeepSeekBalanceChecker):
    def __init__(self, balance: Optional[float] = None, error: Optional[Exception] = None) -> None:
        super().__init__("sk-test")
        self.balance = balance
        self.error = error

    async def get_cny_balance(self) -> float:
        if self.error is not None:
            raise self.error
        return float(self.balance or 0.0)


class Pipeline:
    """Bundle of fakes plus a workflow factory."""

    def __init__(self) -> None:
        self.feed = FakeFeed(make_candidates(3))
        self.scraper = FakeScraper()
        self.summarizer = FakeSummarizer()
        self.images = FakeImageGenerator()
        self.publisher = FakePublisher()
        self.notifier = JsonlNotifier()
        self.balance = DeepSeekBalanceChecker(None)
        self.settings = WorkflowSettings(
            show_progress=False,
            summary_flush_delay=0,
            notify_flush_delay=0,
            poll_interval=0,
            poll_timeout=5,
            max_polls=3,
        )

    def workflow(self) -> ArticleWorkflow:
        return ArticleWorkflow(
            settings=Settings(),
            feed=self.feed,
            scrapers=ScraperRegistry({"firecrawl": self.scraper}),
            summarizer=self.summarizer,
            image_generator=self.images,
            publisher=self.publisher,
            renderer=WeixinTemplateRenderer(),
            notifier=self.notifier,
            balance_checker=self.balance,
            workflow_settings=self.settings,
        )

    def events(self, level: Optional[str] = None) -> List[dict]:
        return [event for event in self.notifier.events if level is None or event["level"] == level]

    def titles(self, level: Optional[str] = None) -> List[str]:
        return [event["title"] for event in self.events(level)]


@pytest.fixture
def pipeline() -> Pipeline:
    return Pipeline()

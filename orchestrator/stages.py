"""Per-item pipeline stages: fetch, scrape, summarize, render and publish."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from config import WorkflowSettings
from intelligence.summarizer import ContentSummarizer
from models import Candidate, PublishResult, RenderableArticle, ScrapedContent
from notifiers import BaseNotifier
from publishers import ContentPublisher
from render import BaseImageGenerator, WeixinTemplateRenderer
from scrapers import ScraperRegistry
from sources import FeedSource
from utils.exceptions import FeedEmptyError, FeedUnavailableError


logger = logging.getLogger(__name__)

UNTITLED_PLACEHOLDER = "无标题"
CONTENT_PLACEHOLDER = "内容处理失败"


def make_digest(content: str, max_len: int = 100) -> str:
    text = re.sub(r"(?m)^\s*[-*+]\s+", "", str(content or ""))
    text = re.sub(r"[#>*`]+", " ", text)
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + "…"


class PipelineStages:
    """Stage functions sharing one set of provider adapters."""

    def __init__(
        self,
        *,
        feed: FeedSource,
        scrapers: ScraperRegistry,
        summarizer: ContentSummarizer,
        image_generator: BaseImageGenerator,
        publisher: ContentPublisher,
        renderer: WeixinTemplateRenderer,
        notifier: BaseNotifier,
        settings: WorkflowSettings,
    ) -> None:
        self.feed = feed
        self.scrapers = scrapers
        self.summarizer = summarizer
        self.image_generator = image_generator
        self.publisher = publisher
        self.renderer = renderer
        self.notifier = notifier
        self.settings = settings

    async def fetch_candidates(self) -> List[Candidate]:
        """Read the feed and apply the per-run batch cap."""
        candidates = await self.feed.get_candidates()
        if not isinstance(candidates, list):
            raise FeedUnavailableError("feed returned a non-list response")
        if not candidates:
            raise FeedEmptyError("feed returned no candidates")

        limit = self.settings.max_candidates
        if len(candidates) > limit:
            logger.info("batch cap applied: %s -> %s candidates", len(candidates), limit)
        return candidates[:limit]

    async def scrape_one(self, candidate: Candidate) -> Optional[ScrapedContent]:
        """Scrape one candidate with the configured backend; None when nothing was extracted."""
        scraper = self.scrapers.get(self.settings.scraper_key)
        logger.info(f"[Scrape] {candidate.title} ({candidate.url}) via {scraper.name}")
        contents = await scraper.scrape(candidate.url)
        if not contents:
            return None
        if len(contents) > 1:
            logger.debug("scraper returned %s contents, keeping the first", len(contents))
        return contents[0]

    async def summarize_one(self, content: ScrapedContent) -> ScrapedContent:
        """
        Rewrite the content in place. Best-effort: on failure the scraped
        values (or placeholders) are kept and a warning is sent.
        """
        try:
            summary = await self.summarizer.summarize(content.model_dump_json())
        except Exception as e:
            logger.error(f"[Summarize] {content.id} failed: {e}")
            await self.notifier.warning("内容处理失败", f"ID: {content.id}\n保留原始内容\n错误: {e}")
            content.title = content.title or UNTITLED_PLACEHOLDER
            content.content = content.content or CONTENT_PLACEHOLDER
            content.set_keywords(content.keywords)
            return content

        content.title = summary.title
        content.content = summary.content
        content.score = summary.score
        content.set_keywords(summary.keywords)
        return content

    async def generate_and_upload_cover(self, title: str) -> str:
        """Generate a cover for the title and upload it; returns the media reference."""
        prompt = self.settings.cover_prompt_template.format(title=title)
        logger.info(f"[Cover] Generating cover for: {title}")
        task_id = await self.image_generator.submit(prompt, self.settings.cover_size)
        logger.info(f"[Cover] Task id: {task_id}")

        status = await self.image_generator.wait_for_completion(
            task_id,
            poll_interval=self.settings.poll_interval,
            timeout=self.settings.poll_timeout,
            max_polls=self.settings.max_polls,
        )
        media_id = await self.publisher.upload_image(status.result_url)
        logger.info(f"[Cover] Uploaded, media id: {media_id}")
        return media_id

    async def render_and_publish_one(self, content: ScrapedContent) -> PublishResult:
        """Cover, template and publish. Every failure propagates."""
        media_id = await self.generate_and_upload_cover(content.title)
        article = RenderableArticle.from_content(content, cover_media_id=media_id)
        rendered = self.renderer.render([article])

        logger.info(f"[Publish] {article.title}")
        result = await self.publisher.publish(rendered, article.title, make_digest(article.content), media_id)
        logger.info(f"[Publish] '{article.title}' status: {result.status.value}")
        return result

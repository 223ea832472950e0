"""
Article workflow
按候选逐条执行 抓取 -> 改写 -> 封面/发布, 单条失败不影响整批
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import List, Optional, Sequence

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from config import Settings, WorkflowSettings, get_settings
from intelligence.balance import DeepSeekBalanceChecker
from intelligence.summarizer import ContentSummarizer, get_summarizer
from models import Candidate, PublishResult, RunOutcome, RunStats, RunStatus
from notifiers import BaseNotifier, get_notifier
from publishers import ContentPublisher, WeixinPublisher
from render import BaseImageGenerator, WanxImageGenerator, WeixinTemplateRenderer
from scrapers import ScraperRegistry, build_scraper_registry
from sources import FeedSource
from utils.exceptions import FeedEmptyError
from utils.logger import console

from .reporter import RunReporter
from .stages import PipelineStages


logger = logging.getLogger(__name__)


class Workflow(ABC):
    """Scheduler-facing entry points."""

    @abstractmethod
    async def refresh(self) -> None:
        pass

    @abstractmethod
    async def process(self) -> Optional[RunOutcome]:
        pass


class ArticleWorkflow(Workflow):
    """
    WeChat article workflow.

    Collaborators are built once per instance and reused across runs;
    run statistics live only for the duration of one run_once() call.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        feed: Optional[FeedSource] = None,
        scrapers: Optional[ScraperRegistry] = None,
        summarizer: Optional[ContentSummarizer] = None,
        image_generator: Optional[BaseImageGenerator] = None,
        publisher: Optional[ContentPublisher] = None,
        renderer: Optional[WeixinTemplateRenderer] = None,
        notifier: Optional[BaseNotifier] = None,
        balance_checker: Optional[DeepSeekBalanceChecker] = None,
        workflow_settings: Optional[WorkflowSettings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.settings: WorkflowSettings = workflow_settings or settings.workflow
        timeout = float(settings.general.request_timeout)

        self.notifier = notifier or get_notifier(settings)
        self.stages = PipelineStages(
            feed=feed or FeedSource(settings.feed.api_url, timeout=timeout),
            scrapers=scrapers or build_scraper_registry(settings),
            summarizer=summarizer or get_summarizer(self.settings.summarizer_provider, settings=settings.llm),
            image_generator=image_generator or WanxImageGenerator(
                settings.wanx,
                request_timeout=timeout,
                poll_interval=self.settings.poll_interval,
                timeout=self.settings.poll_timeout,
                max_polls=self.settings.max_polls,
            ),
            publisher=publisher or WeixinPublisher(settings.weixin, timeout=timeout),
            renderer=renderer or WeixinTemplateRenderer(),
            notifier=self.notifier,
            settings=self.settings,
        )
        self.balance_checker = balance_checker or DeepSeekBalanceChecker(settings.llm.deepseek_api_key)
        self.reporter = RunReporter(self.notifier)

    async def refresh(self) -> None:
        """Renew credentials/sessions of every collaborator before a run."""
        await self.notifier.refresh()
        await self.stages.summarizer.refresh()
        await self.stages.publisher.refresh()
        await self.stages.scrapers.refresh_all()
        await self.stages.image_generator.refresh()
        await self.stages.feed.refresh()
        await self.balance_checker.refresh()

    async def aclose(self) -> None:
        await self.stages.scrapers.aclose_all()
        await self.stages.summarizer.aclose()
        await self.stages.image_generator.aclose()
        await self.stages.publisher.aclose()
        await self.notifier.aclose()

    async def process(self) -> RunOutcome:
        """Full run: notify start, check balance, fetch the feed, run the batch."""
        try:
            logger.info("=== workflow started ===")
            await self.notifier.info("工作流开始", "开始执行内容抓取和处理")

            await self.check_balance()

            candidates = await self.stages.fetch_candidates()
            return await self.run_once(candidates)
        except Exception as e:
            logger.error(f"[Workflow] run failed: {e}")
            await self.notifier.error("工作流失败", str(e))
            raise

    async def check_balance(self) -> Optional[float]:
        """Advisory quota check; never blocks the run."""
        if not self.balance_checker.is_configured():
            return None
        try:
            balance = await self.balance_checker.get_cny_balance()
        except Exception as e:
            logger.warning(f"[Balance] check failed: {e}")
            return None

        logger.info(f"[Balance] DeepSeek balance: {balance:.2f} CNY")
        if balance < self.settings.balance_threshold:
            await self.notifier.warning("DeepSeek", f"余额不足 {self.settings.balance_threshold:g} 元 (当前 {balance:.2f})")
        return balance

    async def run_once(self, candidates: Sequence[Candidate]) -> RunOutcome:
        """Process one batch, isolating failures per item."""
        if not candidates:
            raise FeedEmptyError("no input: candidate batch is empty")

        stats = RunStats()
        publish_results: List[PublishResult] = []
        total = len(candidates)
        logger.info(f"[Workflow] processing {total} candidates")

        with self._progress() as progress:
            task = progress.add_task("processing", total=total)
            for candidate in candidates:
                stats.begin_item()
                await self._process_item(candidate, stats, publish_results)
                progress.advance(task)

        if stats.contents == 0:
            message = "未成功处理任何内容"
            logger.error(f"[Workflow] {message}")
            await self.notifier.error("工作流终止", message)
            return RunOutcome(
                status=RunStatus.NO_CONTENT,
                stats=stats,
                total_candidates=total,
                publish_results=publish_results,
                publish_failed=len(publish_results),
                summary=message,
            )

        return await self.reporter.report(
            total_candidates=total,
            stats=stats,
            publish_results=publish_results,
            summary_delay=self.settings.summary_flush_delay,
            notify_delay=self.settings.notify_flush_delay,
        )

    async def _process_item(self, candidate: Candidate, stats: RunStats, publish_results: List[PublishResult]) -> None:
        try:
            content = await self.stages.scrape_one(candidate)
            if content is None:
                logger.info(f"[Scrape] nothing extracted from {candidate.url}, skipped")
                stats.record_failure()
                return

            await self.stages.summarize_one(content)
            result = await self.stages.render_and_publish_one(content)
        except Exception as e:
            stats.record_failure()
            logger.error(f"[Item] {candidate.url} failed: {e}")
            await self.notifier.warning("内容处理失败", f"URL: {candidate.url}\n错误: {e}")
            return

        publish_results.append(result)
        if result.is_success:
            stats.record_success()
            stats.record_content()
        else:
            stats.record_failure()
            await self.notifier.warning("文章发布失败", f"标题: {result.article_title}\n错误: {result.error or result.status.value}")

    def _progress(self) -> Progress:
        return Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            disable=not self.settings.show_progress,
            transient=False,
        )

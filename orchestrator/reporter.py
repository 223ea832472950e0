"""Run summary formatting and terminal notification."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence, Tuple

from models import PublishResult, RunOutcome, RunStats, RunStatus
from notifiers import BaseNotifier
from utils.logger import console, flush_output


logger = logging.getLogger(__name__)


async def drain_output(delay: float) -> None:
    """Flush buffered log/console output, then give async writers time to finish."""
    flush_output()
    if delay > 0:
        await asyncio.sleep(delay)


class RunReporter:
    """Classifies a finished run and sends exactly one terminal notification."""

    def __init__(self, notifier: BaseNotifier) -> None:
        self.notifier = notifier

    @staticmethod
    def count_publish_results(results: Sequence[PublishResult]) -> Tuple[int, int]:
        succeeded = sum(1 for result in results if result.is_success)
        return succeeded, len(results) - succeeded

    @staticmethod
    def classify(stats: RunStats, publish_failed: int) -> RunStatus:
        if stats.failed > 0 or publish_failed > 0:
            return RunStatus.PARTIAL_FAILURE
        return RunStatus.SUCCESS

    @staticmethod
    def build_summary(
        *,
        total_candidates: int,
        stats: RunStats,
        publish_succeeded: int,
        publish_failed: int,
    ) -> str:
        lines = [
            "工作流执行完成",
            f"- 数据源: {total_candidates} 个",
            f"- 成功: {stats.succeeded} 个",
            f"- 失败: {stats.failed} 个",
            f"- 内容: {stats.contents} 条",
            f"- 发布: {publish_succeeded} 成功, {publish_failed} 失败",
        ]
        return "\n".join(lines)

    def print_banner(self, summary: str) -> None:
        console.print("\n")
        console.print("=" * 80)
        console.print("=" * 30 + " 工作流执行完成 " + "=" * 30)
        console.print("=" * 80)
        console.print(summary, markup=False)
        console.print("=" * 80)
        console.print("\n")

    def prepare(
        self,
        *,
        total_candidates: int,
        stats: RunStats,
        publish_results: Sequence[PublishResult],
    ) -> RunOutcome:
        """Build the outcome (classification + summary) without side effects."""
        publish_succeeded, publish_failed = self.count_publish_results(publish_results)
        summary = self.build_summary(
            total_candidates=total_candidates,
            stats=stats,
            publish_succeeded=publish_succeeded,
            publish_failed=publish_failed,
        )
        return RunOutcome(
            status=self.classify(stats, publish_failed),
            stats=stats,
            total_candidates=total_candidates,
            publish_results=list(publish_results),
            publish_succeeded=publish_succeeded,
            publish_failed=publish_failed,
            summary=summary,
        )

    async def notify(self, outcome: RunOutcome) -> None:
        if outcome.status == RunStatus.SUCCESS:
            await self.notifier.success("工作流完成", outcome.summary)
        else:
            await self.notifier.warning("工作流完成(部分失败)", outcome.summary)
        logger.info("terminal notification sent status=%s", outcome.status.value)

    async def report(
        self,
        *,
        total_candidates: int,
        stats: RunStats,
        publish_results: Sequence[PublishResult],
        summary_delay: float = 0.0,
        notify_delay: float = 0.0,
    ) -> RunOutcome:
        """Summarize the run, print it, then send the terminal notification last."""
        outcome = self.prepare(total_candidates=total_candidates, stats=stats, publish_results=publish_results)

        await drain_output(summary_delay)
        self.print_banner(outcome.summary)
        logger.info("run finished status=%s", outcome.status.value)

        await drain_output(notify_delay)
        await self.notify(outcome)
        return outcome

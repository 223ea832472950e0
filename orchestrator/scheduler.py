"""
Workflow scheduler
按 星期 -> 工作流 映射, 在每日时间窗内以固定分钟间隔触发 (默认 */10 7-23 * * *, Asia/Shanghai)
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
import logging
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from config import SchedulerSettings, Settings, get_settings

from .workflow import ArticleWorkflow, Workflow


logger = logging.getLogger(__name__)

_MAX_LOOKAHEAD_MINUTES = 8 * 24 * 60


class WorkflowScheduler:
    """
    Cron-style trigger for workflows.

    Weekdays use ISO numbering (1=Monday ... 7=Sunday). Each tick refreshes
    the selected workflow then processes it; errors are logged and never
    stop the loop.
    """

    def __init__(self, workflows: Dict[int, Workflow], settings: Optional[SchedulerSettings] = None) -> None:
        self.settings = settings or SchedulerSettings()
        try:
            self.tz = ZoneInfo(self.settings.timezone)
        except Exception:
            logger.warning(f"[Scheduler] unknown timezone {self.settings.timezone!r}, falling back to UTC")
            self.tz = ZoneInfo("UTC")

        enabled = set(self.settings.enabled_weekdays)
        self.workflows: Dict[int, Workflow] = {
            int(day): workflow for day, workflow in workflows.items() if int(day) in enabled
        }
        self._lock = asyncio.Lock()

    def _localize(self, now: Optional[datetime]) -> datetime:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(self.tz)

    def is_within_window(self, now: Optional[datetime] = None) -> bool:
        local = self._localize(now)
        return self.settings.start_hour <= local.hour <= self.settings.end_hour

    def is_due(self, now: Optional[datetime] = None) -> bool:
        local = self._localize(now)
        return (
            self.is_within_window(local)
            and local.minute % self.settings.interval_minutes == 0
            and local.isoweekday() in self.workflows
        )

    def select_workflow(self, now: Optional[datetime] = None) -> Optional[Workflow]:
        return self.workflows.get(self._localize(now).isoweekday())

    def next_run_time(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """First due minute strictly after ``now`` (timezone-aware, local zone)."""
        local = self._localize(now).replace(second=0, microsecond=0)
        for _ in range(_MAX_LOOKAHEAD_MINUTES):
            local = (local + timedelta(minutes=1)).astimezone(self.tz)
            if self.is_due(local):
                return local
        return None

    async def tick(self, now: Optional[datetime] = None) -> bool:
        """Run the workflow selected for ``now``. Returns True when it completed."""
        workflow = self.select_workflow(now)
        if workflow is None:
            logger.info("[Scheduler] no workflow for today, skipped")
            return False
        if self._lock.locked():
            logger.warning("[Scheduler] previous run still in progress, tick skipped")
            return False

        async with self._lock:
            try:
                await workflow.refresh()
                await workflow.process()
                return True
            except Exception as e:
                logger.error(f"[Scheduler] workflow {type(workflow).__name__} failed: {e}")
                return False

    async def run_forever(self) -> None:
        logger.info(
            f"[Scheduler] started: every {self.settings.interval_minutes} min, "
            f"{self.settings.start_hour}-{self.settings.end_hour}h, tz={self.tz.key}, "
            f"weekdays={sorted(self.workflows)}"
        )
        while True:
            next_run = self.next_run_time()
            if next_run is None:
                logger.error("[Scheduler] no upcoming run within a week, stopping")
                return
            delay = (next_run - datetime.now(timezone.utc)).total_seconds()
            logger.info(f"[Scheduler] next run at {next_run.isoformat()}")
            if delay > 0:
                await asyncio.sleep(delay)
            await self.tick(next_run)


def build_default_scheduler(settings: Optional[Settings] = None) -> WorkflowScheduler:
    """One shared ArticleWorkflow registered for every enabled weekday."""
    settings = settings or get_settings()
    workflow = ArticleWorkflow(settings=settings)
    workflows = {day: workflow for day in settings.scheduler.enabled_weekdays}
    return WorkflowScheduler(workflows, settings.scheduler)

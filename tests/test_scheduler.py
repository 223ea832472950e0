from __future__ import annotations

from datetime import datetime, timezone

import pytest

from config import SchedulerSettings
from orchestrator import Workflow, WorkflowScheduler


class CountingWorkflow(Workflow):
    def __init__(self, error: Exception = None) -> None:
        self.refreshed = 0
        self.processed = 0
        self.error = error

    async def refresh(self) -> None:
        self.refreshed += 1

    async def process(self):
        self.processed += 1
        if self.error is not None:
            raise self.error
        return None


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_window_uses_local_timezone() -> None:
    scheduler = WorkflowScheduler({3: CountingWorkflow()}, SchedulerSettings())

    # 2024-05-01 is a Wednesday; Asia/Shanghai is UTC+8
    assert scheduler.is_within_window(_utc(2024, 5, 1, 0, 5)) is True
    assert scheduler.is_within_window(_utc(2024, 4, 30, 22, 30)) is False
    assert scheduler.is_within_window(_utc(2024, 5, 1, 15, 59)) is True


def test_is_due_on_interval_boundaries() -> None:
    scheduler = WorkflowScheduler({3: CountingWorkflow()}, SchedulerSettings())

    assert scheduler.is_due(_utc(2024, 5, 1, 2, 20)) is True
    assert scheduler.is_due(_utc(2024, 5, 1, 2, 25)) is False


def test_next_run_time_aligns_to_interval() -> None:
    scheduler = WorkflowScheduler({3: CountingWorkflow()}, SchedulerSettings())

    next_run = scheduler.next_run_time(_utc(2024, 5, 1, 0, 5))

    assert (next_run.hour, next_run.minute) == (8, 10)
    assert next_run.utcoffset().total_seconds() == 8 * 3600


def test_next_run_time_skips_to_next_window() -> None:
    workflow = CountingWorkflow()
    scheduler = WorkflowScheduler({day: workflow for day in range(1, 8)}, SchedulerSettings())

    next_run = scheduler.next_run_time(_utc(2024, 5, 1, 15, 55))

    assert (next_run.day, next_run.hour, next_run.minute) == (2, 7, 0)


def test_select_workflow_by_iso_weekday() -> None:
    weekday_flow, sunday_flow = CountingWorkflow(), CountingWorkflow()
    scheduler = WorkflowScheduler({3: weekday_flow, 7: sunday_flow}, SchedulerSettings())

    assert scheduler.select_workflow(_utc(2024, 5, 1, 4, 0)) is weekday_flow
    assert scheduler.select_workflow(_utc(2024, 5, 5, 4, 0)) is sunday_flow
    assert scheduler.select_workflow(_utc(2024, 5, 2, 4, 0)) is None


def test_disabled_weekdays_are_dropped() -> None:
    settings = SchedulerSettings(weekdays="3, 1,3")
    scheduler = WorkflowScheduler({1: CountingWorkflow(), 5: CountingWorkflow()}, settings)

    assert settings.enabled_weekdays == [1, 3]
    assert sorted(scheduler.workflows) == [1]


def test_weekdays_must_be_in_range() -> None:
    with pytest.raises(ValueError):
        SchedulerSettings(weekdays="0,8")


@pytest.mark.asyncio
async def test_tick_refreshes_then_processes() -> None:
    workflow = CountingWorkflow()
    scheduler = WorkflowScheduler({3: workflow}, SchedulerSettings())

    assert await scheduler.tick(_utc(2024, 5, 1, 2, 0)) is True
    assert (workflow.refreshed, workflow.processed) == (1, 1)


@pytest.mark.asyncio
async def test_tick_absorbs_workflow_errors() -> None:
    workflow = CountingWorkflow(error=RuntimeError("feed down"))
    scheduler = WorkflowScheduler({3: workflow}, SchedulerSettings())

    assert await scheduler.tick(_utc(2024, 5, 1, 2, 0)) is False
    assert workflow.processed == 1


@pytest.mark.asyncio
async def test_tick_without_workflow_for_today() -> None:
    scheduler = WorkflowScheduler({1: CountingWorkflow()}, SchedulerSettings())
    assert await scheduler.tick(_utc(2024, 5, 1, 2, 0)) is False

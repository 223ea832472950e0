"""CLI entrypoint: one-off runs, the cron-style scheduler and the balance check."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional, Sequence

from config import get_settings
from intelligence.balance import DeepSeekBalanceChecker
from models import RunOutcome
from orchestrator import ArticleWorkflow, build_default_scheduler
from utils.logger import setup_logger


logger = logging.getLogger(__name__)


def _outcome_payload(outcome: RunOutcome) -> Dict[str, Any]:
    return {
        "status": outcome.status.value,
        "total_candidates": outcome.total_candidates,
        "succeeded": outcome.stats.succeeded,
        "failed": outcome.stats.failed,
        "contents": outcome.stats.contents,
        "publish_succeeded": outcome.publish_succeeded,
        "publish_failed": outcome.publish_failed,
        "summary": outcome.summary,
    }


async def _run_once(no_progress: bool) -> RunOutcome:
    settings = get_settings()
    if no_progress:
        settings.workflow.show_progress = False
    workflow = ArticleWorkflow(settings=settings)
    try:
        await workflow.refresh()
        return await workflow.process()
    finally:
        await workflow.aclose()


async def _balance() -> float:
    settings = get_settings()
    checker = DeepSeekBalanceChecker(settings.llm.deepseek_api_key, timeout=float(settings.general.request_timeout))
    return await checker.get_cny_balance()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="WeChat article pipeline CLI")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="run the workflow once")
    run.add_argument("--no-progress", action="store_true")

    sub.add_parser("schedule", help="run the scheduler until interrupted")
    sub.add_parser("balance", help="print the DeepSeek CNY balance")

    args = parser.parse_args(argv)
    setup_logger(None, level=args.log_level.upper(), log_file=args.log_file)

    try:
        if args.command == "run":
            outcome = asyncio.run(_run_once(args.no_progress))
            print(json.dumps(_outcome_payload(outcome), ensure_ascii=False))
            return 0

        if args.command == "balance":
            balance = asyncio.run(_balance())
            print(json.dumps({"currency": "CNY", "total_balance": balance}, ensure_ascii=False))
            return 0

        if args.command == "schedule":
            scheduler = build_default_scheduler()
            asyncio.run(scheduler.run_forever())
            return 0
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130
    except Exception as e:
        logger.error(f"fatal: {e}")
        print(json.dumps({"error": str(e)}, ensure_ascii=False))
        return 1

    parser.error(f"unsupported command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())

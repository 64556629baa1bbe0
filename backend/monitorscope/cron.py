"""One-shot check run for external schedulers (cron, systemd timers).

    monitorscope-check              # every active API
    monitorscope-check --api-id 3   # a single API
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import settings
from .database import async_session, init_db, close_db
from .exceptions import TargetNotFoundError
from .services.orchestrator import SingleFlight, build_orchestrator

logger = logging.getLogger(__name__)


async def run_once(target_id: Optional[int] = None) -> int:
    """Run one check cycle and return a process exit code."""
    await init_db()
    try:
        orchestrator = build_orchestrator(async_session, settings, SingleFlight())
        if settings.email_enabled:
            logger.info("Email alerts enabled")
        else:
            logger.info("Email alerts disabled")

        if target_id is not None:
            try:
                await orchestrator.run_check(target_id)
            except TargetNotFoundError as e:
                logger.error(str(e))
                return 2
            return 0

        outcomes = await orchestrator.run_all_checks()
        return 1 if any(o.error for o in outcomes) else 0
    finally:
        await close_db()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run MonitorScope health checks once")
    parser.add_argument("--api-id", type=int, default=None, help="check a single API by id")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(run_once(args.api_id))


if __name__ == "__main__":
    sys.exit(main())

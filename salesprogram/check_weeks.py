# salesprogram/check_weeks.py
"""
Check every agent and create the weeks they are missing.

Exits 1 when any agent failed, when the agent list could not be read, or
when the run was stopped (SIGINT / SIGTERM) before every agent was seen.
A stopped run still reports what it did so far.
"""
import asyncio
import logging
import signal
import sys
from typing import Optional

from salesprogram.config import settings
from salesprogram.database import AsyncSessionLocal, engine
from salesprogram.schemas.batch import BatchSummary
from salesprogram.services.engine import ProgramEngine
from salesprogram.store.sql import SqlRecordStore

logger = logging.getLogger("CheckAndGenerateWeeks")


def report(summary: BatchSummary) -> int:
    logger.info("COMPLETED!" if not summary.cancelled else "STOPPED before all agents were processed")
    logger.info("-------------------------")
    logger.info("Total agents processed: %s", summary.total_agents)
    # includes agents whose first week has not started yet
    logger.info("Agents with no missing weeks: %s", summary.agents_with_complete_weeks)
    logger.info("Agents with new weeks generated: %s", summary.agents_with_generated_weeks)
    logger.info("Agents without starting date (skipped): %s", summary.agents_without_start_date)
    logger.info("Total new weeks generated: %s", summary.weeks_generated)
    logger.info("Errors encountered: %s", summary.errors)
    logger.info("-------------------------")

    if summary.errors > 0:
        for failure in summary.failures:
            logger.warning("%s: %s", failure.label, failure.error)
        logger.warning("WARNING: Some errors occurred during processing. Check the logs for details.")
        return 1
    if summary.cancelled:
        logger.warning("WARNING: Run was stopped early. Run it again to finish the remaining agents.")
        return 1
    logger.info("SUCCESS: All agents processed successfully.")
    return 0


def stop_on_signals(loop: asyncio.AbstractEventLoop) -> asyncio.Event:
    """Event set by SIGINT / SIGTERM, so the batch ends between agents instead of mid-write."""
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C then aborts the run
            logger.debug("Signal handler for %s not supported on this platform", sig)
    return stop


async def run(program_engine: Optional[ProgramEngine] = None, stop: Optional[asyncio.Event] = None) -> int:
    if program_engine is None:
        program_engine = ProgramEngine.from_settings(SqlRecordStore(AsyncSessionLocal))

    logger.info("Starting check for missing weeks across all agents...")
    try:
        summary = await program_engine.generate_missing_weeks_for_all_agents(stop=stop)
    except Exception as exc:
        logger.error("ERROR: %s", exc)
        return 1
    return report(summary)


async def _main() -> int:
    stop = stop_on_signals(asyncio.get_running_loop())
    try:
        return await run(stop=stop)
    finally:
        await engine.dispose()


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="[%(name)s] %(levelname)s %(message)s",
    )
    sys.exit(asyncio.run(_main()))


if __name__ == "__main__":
    main()

"""Bootstrap function for setting up the chain tracker scheduler.

This module registers the recurring fan-out operations of the State
orchestrator as scheduler jobs. The orchestrator itself has no notion of
cadence; the intervals below come from RuntimeConfig.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from chain_tracker.orchestration import State
from chain_tracker.runtime import RuntimeConfig

logger = logging.getLogger(__name__)


def bootstrap(state: State, runtime: RuntimeConfig) -> AsyncIOScheduler:
    """Set up the scheduler with one job per recurring fan-out operation.

    Jobs registered (each runs immediately on start, then on its interval):
    - update_data(): on-chain data of every chain
    - update_prices(): one price-feed request, then per-chain price updates
    - update_database(): validator database of every chain

    Args:
        state: Orchestrator owning the chain registry
        runtime: Resolved runtime configuration with job intervals

    Returns:
        Configured AsyncIOScheduler ready to start

    Example:
        scheduler = bootstrap(State.new(), runtime)
        scheduler.start()
        await state.subscribe_to_events()
    """
    scheduler = AsyncIOScheduler(
        job_defaults={
            "coalesce": True,  # Skip missed runs if overlapping
            "max_instances": 1,  # Only one instance per job at a time
            "misfire_grace_time": 60,
        }
    )

    jobs = (
        ("update_data", state.update_data, runtime.data_interval_seconds),
        ("update_prices", state.update_prices, runtime.price_interval_seconds),
        ("update_database", state.update_database, runtime.database_interval_seconds),
    )

    for name, func, interval in jobs:
        scheduler.add_job(
            func,
            trigger=OrTrigger(
                [
                    DateTrigger(),  # Run immediately on start
                    IntervalTrigger(seconds=interval),
                ]
            ),
            name=name,
            id=name,
        )
        logger.info(f"Registered {name} job (immediate + every {interval}s)")

    logger.info(
        f"Bootstrap complete: {len(state)} chain(s) configured, "
        f"{len(scheduler.get_jobs())} job(s) registered"
    )

    return scheduler

"""Entry point for chain tracker application."""

import os

# Force UTC timezone for entire application
os.environ["TZ"] = "UTC"  # noqa: E402

import asyncio
import logging
import sys

from chain_tracker.bootstrap import bootstrap
from chain_tracker.chains import CHAIN_NAMES
from chain_tracker.cli import build_parser
from chain_tracker.logging_setup import (
    configure_chain_debug_logging,
    configure_events_debug_logging,
    configure_logging,
)
from chain_tracker.orchestration import FanOutReport, State
from chain_tracker.runtime import RuntimeConfig, build_runtime_config
from chain_tracker.settings import Settings

logger = logging.getLogger(__name__)


async def run_once(state: State, operation: str) -> FanOutReport:
    """Run one fan-out operation ('data', 'prices' or 'database')."""
    operations = {
        "data": state.update_data,
        "prices": state.update_prices,
        "database": state.update_database,
    }
    return await operations[operation]()


async def run(settings: Settings, runtime: RuntimeConfig) -> int:
    runtime.data_dir.mkdir(parents=True, exist_ok=True)

    async with State.new(settings) as state:
        if state.uow_factory is not None:
            await state.uow_factory.create_schema()

        if runtime.once is not None:
            report = await run_once(state, runtime.once)
            print(report.summary())
            for name, error in report.failed.items():
                print(f"  {name}: {error}")
            return 0 if report.ok else 1

        scheduler = bootstrap(state, runtime)
        scheduler.start()
        logger.info("Scheduler started")

        try:
            if runtime.subscribe_events:
                await state.subscribe_to_events()
                logger.warning("All event subscriptions ended, keeping scheduler alive")
            # Block forever, keeping the scheduler running
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown(wait=False)

    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for chain tracker."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
        runtime = build_runtime_config(args, settings, CHAIN_NAMES)
    except ValueError as e:
        sys.exit(f"Configuration error: {e}")

    configure_logging()
    configure_chain_debug_logging(runtime.debug_chains)
    configure_events_debug_logging(runtime.debug_chains_events)

    logger.info("Starting chain tracker application...")

    try:
        exit_code = asyncio.run(run(settings, runtime))
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
        return
    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

"""Runtime configuration building for chain tracker startup."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from chain_tracker.logging_setup import parse_csv
from chain_tracker.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeConfig:
    """Resolved startup configuration after CLI/ENV merge."""

    data_dir: Path
    once: str | None
    debug_chains: list[str]
    debug_chains_events: list[str]
    subscribe_events: bool
    data_interval_seconds: int
    price_interval_seconds: int
    database_interval_seconds: int


def build_runtime_config(
    args: argparse.Namespace, settings: Settings, all_chains: Iterable[str]
) -> RuntimeConfig:
    """Resolve final runtime configuration used by main()."""
    known_chains = set(all_chains)

    debug_chains_arg = (
        args.debug_chains if args.debug_chains is not None else settings.debug_chains
    )
    debug_chains_events_arg = (
        args.debug_chains_events
        if args.debug_chains_events is not None
        else settings.debug_chains_events
    )
    data_interval = (
        args.data_interval if args.data_interval is not None else settings.data_interval_seconds
    )
    price_interval = (
        args.price_interval if args.price_interval is not None else settings.price_interval_seconds
    )
    database_interval = (
        args.database_interval
        if args.database_interval is not None
        else settings.database_interval_seconds
    )

    for label, value in (
        ("DATA_INTERVAL_SECONDS", data_interval),
        ("PRICE_INTERVAL_SECONDS", price_interval),
        ("DATABASE_INTERVAL_SECONDS", database_interval),
    ):
        if value <= 0:
            raise ValueError(f"{label} must be greater than 0")

    return RuntimeConfig(
        data_dir=settings.data_dir,
        once=args.once,
        debug_chains=_parse_chain_list(debug_chains_arg, known_chains),
        debug_chains_events=_parse_chain_list(debug_chains_events_arg, known_chains),
        subscribe_events=settings.subscribe_events and not args.no_events,
        data_interval_seconds=data_interval,
        price_interval_seconds=price_interval,
        database_interval_seconds=database_interval,
    )


def _parse_chain_list(chains_value: str | None, known_chains: set[str]) -> list[str]:
    """Parse comma-separated chain names, dropping unknown ones."""
    requested = parse_csv(chains_value)

    unknown = sorted(set(requested) - known_chains)
    if unknown:
        logger.warning(
            "Unknown chain names requested: %s. Available chains: %s",
            unknown,
            sorted(known_chains),
        )

    return [name for name in dict.fromkeys(requested) if name in known_chains]

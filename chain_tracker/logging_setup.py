"""Logging setup helpers for chain tracker startup."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure base logging and quiet noisy third-party loggers."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def configure_chain_debug_logging(chains: list[str]) -> None:
    """Enable DEBUG logs for chain-level loggers."""
    for chain_name in chains:
        logging.getLogger(f"chain_tracker.chains.{chain_name}").setLevel(logging.DEBUG)
    if chains:
        logger.info("Enabling DEBUG logging for chains: %s", chains)


def configure_events_debug_logging(chains: list[str]) -> None:
    """Enable DEBUG logs for event subscription loggers."""
    for chain_name in chains:
        logging.getLogger(f"chain_tracker.chains.{chain_name}.events").setLevel(logging.DEBUG)
    if chains:
        logger.info("Enabling DEBUG logging for event subscriptions: %s", chains)


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]

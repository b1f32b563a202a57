"""CLI argument parsing for chain tracker."""

from __future__ import annotations

import argparse

ONCE_OPERATIONS = ("data", "prices", "database")


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser used by the main entrypoint."""
    parser = argparse.ArgumentParser(
        description="Chain tracker - Cosmos SDK chain data, prices and validators",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run scheduler and event subscriptions for all chains (default)
  chain-tracker

  # Refresh validator databases once and exit
  chain-tracker --once database

  # Enable debug logging for specific chains
  chain-tracker --debug-chains osmosis,secret

Environment Variables:
  DATA_DIR                   Data directory (default: /root/.backend)
  DB_CONNECTION              SQLAlchemy URL of the validator store
  PRICE_FEED_URL             CoinGecko API base URL
  DEBUG_CHAINS               Comma-separated list for debug logging
  DEBUG_CHAINS_EVENTS        Comma-separated list for event subscription debug logging
  DATA_INTERVAL_SECONDS      Seconds between on-chain data refreshes
  PRICE_INTERVAL_SECONDS     Seconds between price refreshes
  DATABASE_INTERVAL_SECONDS  Seconds between validator database refreshes
  SUBSCRIBE_EVENTS           Run event subscriptions (default: true)
        """,
    )

    parser.add_argument(
        "--once",
        choices=ONCE_OPERATIONS,
        default=None,
        help="Run a single fan-out operation for all chains and exit.",
    )
    parser.add_argument(
        "--debug-chains",
        type=str,
        default=None,
        help="Comma-separated list of chains for DEBUG logging.",
    )
    parser.add_argument(
        "--debug-chains-events",
        type=str,
        default=None,
        help="Comma-separated list of chains for event subscription DEBUG logging.",
    )
    parser.add_argument(
        "--no-events",
        action="store_true",
        help="Do not run WebSocket event subscriptions.",
    )
    parser.add_argument(
        "--data-interval",
        type=int,
        default=None,
        help="Seconds between on-chain data refreshes.",
    )
    parser.add_argument(
        "--price-interval",
        type=int,
        default=None,
        help="Seconds between price refreshes.",
    )
    parser.add_argument(
        "--database-interval",
        type=int,
        default=None,
        help="Seconds between validator database refreshes.",
    )

    return parser

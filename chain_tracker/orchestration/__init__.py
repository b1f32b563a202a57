"""Orchestration layer for chain tracker.

This module provides the State orchestrator, which owns the chain registry and
runs each recurring operation across all chains for the scheduler.

The orchestration layer sits between the scheduler and chain adapters:
- Scheduler calls simple methods: update_data(), update_prices(), ...
- State fans each call out to one concurrent task per chain
- Chain adapters remain single-chain and testable

Example:
    state = State.new()
    await state.update_data()          # Refresh on-chain data of every chain
    await state.update_prices()        # One price request, then per-chain updates
    chain = state.get("osmosis")       # Raises UnsupportedChain for unknown names
"""

from chain_tracker.orchestration.report import FanOutReport
from chain_tracker.orchestration.state import State, UnsupportedChain

__all__ = ["FanOutReport", "State", "UnsupportedChain"]

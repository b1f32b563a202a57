"""Chain adapter protocol.

The orchestrator only dispatches these capabilities; it never reads or writes
adapter-internal state.
"""

from typing import Protocol, runtime_checkable

from chain_tracker.chains.config import ChainConfig


@runtime_checkable
class ChainAdapter(Protocol):
    """Contract for per-chain adapters.

    Implementations own their mutable state and must be safe to call from
    several concurrent fan-out tasks.
    """

    config: ChainConfig

    @property
    def name(self) -> str: ...

    async def update_data(self) -> None:
        """Refresh on-chain data (block, staking pool, supply, ...)."""
        ...

    async def update_price(self, price: float | None) -> None:
        """Accept a price update; None means no price is available."""
        ...

    async def update_validator_database(self) -> None:
        """Refresh the persisted validator set."""
        ...

    async def subscribe_to_events(self) -> None:
        """Run the event subscription. Returns only when the session ends for good."""
        ...

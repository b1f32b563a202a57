"""Chain state orchestrator."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator
from datetime import UTC, datetime
from functools import partial
from types import MappingProxyType, TracebackType
from typing import Self

from chain_tracker.chains import CHAIN_CONFIGS, Chain, ChainAdapter, InvalidChainConfig
from chain_tracker.db.unit_of_work import UnitOfWorkFactory, create_uow_factory
from chain_tracker.infrastructure.http_client import HttpClient
from chain_tracker.orchestration.report import FanOutReport
from chain_tracker.prices.coingecko import PriceFetcher, get_prices
from chain_tracker.settings import Settings

logger = logging.getLogger(__name__)


class UnsupportedChain(LookupError):
    """Lookup of a chain name that is not in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is not a supported chain.")
        self.name = name


class State:
    """Registry of chain adapters plus the fan-out operations run across them.

    The registry is fixed at construction. Every fan-out launches one task per
    eligible chain, waits for all of them, and reports per-chain failures
    instead of raising them.
    """

    def __init__(
        self,
        chains: Iterable[ChainAdapter],
        http_client: HttpClient,
        price_fetcher: PriceFetcher = get_prices,
        uow_factory: UnitOfWorkFactory | None = None,
    ) -> None:
        registry: dict[str, ChainAdapter] = {}
        for chain in chains:
            if chain.name in registry:
                raise InvalidChainConfig(f"{chain.name}: registered twice")
            registry[chain.name] = chain

        self._chains = MappingProxyType(registry)
        self._http_client = http_client
        self._price_fetcher = price_fetcher
        self._uow_factory = uow_factory

    @classmethod
    def new(cls, settings: Settings | None = None) -> Self:
        """Build the registry from CHAIN_CONFIGS.

        All chains share one HTTP client and one validator store. No network
        I/O happens here.
        """
        settings = settings or Settings()

        http_client = HttpClient(timeout=settings.http_timeout)
        uow_factory = create_uow_factory(settings.db_connection)
        chains = [Chain(config, http_client, uow_factory) for config in CHAIN_CONFIGS]
        price_fetcher = partial(
            get_prices,
            base_url=settings.price_feed_url,
            vs_currency=settings.price_currency,
        )

        logger.info(f"Chain registry initialized with {len(chains)} chains")
        return cls(chains, http_client, price_fetcher=price_fetcher, uow_factory=uow_factory)

    # ------------------------------------------------------------------
    # Registry access
    # ------------------------------------------------------------------

    def get(self, name: str) -> ChainAdapter:
        """Return the adapter registered under `name` (exact, case-sensitive).

        Raises:
            UnsupportedChain: If no chain is registered under `name`
        """
        try:
            return self._chains[name]
        except KeyError:
            raise UnsupportedChain(name) from None

    @property
    def chains(self) -> MappingProxyType[str, ChainAdapter]:
        return self._chains

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._chains)

    @property
    def http_client(self) -> HttpClient:
        return self._http_client

    @property
    def uow_factory(self) -> UnitOfWorkFactory | None:
        return self._uow_factory

    def __len__(self) -> int:
        return len(self._chains)

    def __iter__(self) -> Iterator[ChainAdapter]:
        return iter(self._chains.values())

    def __contains__(self, name: object) -> bool:
        return name in self._chains

    # ------------------------------------------------------------------
    # Fan-out operations
    # ------------------------------------------------------------------

    async def update_data(self) -> FanOutReport:
        """Refresh every chain's on-chain data concurrently."""
        return await self._fan_out("update_data", self, lambda chain: chain.update_data())

    async def update_prices(self) -> FanOutReport:
        """Fetch all prices in one request, then hand each price-eligible chain its entry.

        Chains without a price-feed key are skipped entirely. A failed fetch
        still runs the fan-out, with every chain receiving None.
        """
        eligible = [chain for chain in self if chain.config.price_eligible]
        if not eligible:
            logger.warning("No price-eligible chains registered, skipping price update")
            return self._finish(FanOutReport(operation="update_prices"))

        price_keys = [chain.config.gecko for chain in eligible]
        try:
            prices = await self._price_fetcher(self._http_client, price_keys)
        except Exception as e:
            logger.error(f"Failed to fetch prices for {price_keys}: {e}", exc_info=True)
            prices = {}

        logger.debug(f"Fetched {len(prices)}/{len(price_keys)} prices")

        return await self._fan_out(
            "update_prices",
            eligible,
            lambda chain: chain.update_price(prices.get(chain.config.gecko)),  # type: ignore[arg-type]
        )

    async def update_database(self) -> FanOutReport:
        """Refresh every chain's validator database concurrently."""
        return await self._fan_out(
            "update_database", self, lambda chain: chain.update_validator_database()
        )

    async def subscribe_to_events(self) -> FanOutReport:
        """Run every chain's event subscription concurrently.

        Blocks until every subscription has ended, which in normal operation
        means until the caller is cancelled.
        """
        logger.info(f"Starting event subscriptions for {', '.join(self.names)}")
        return await self._fan_out(
            "subscribe_to_events", self, lambda chain: chain.subscribe_to_events()
        )

    async def _fan_out(
        self,
        operation: str,
        chains: Iterable[ChainAdapter],
        call: Callable[[ChainAdapter], Awaitable[None]],
    ) -> FanOutReport:
        report = FanOutReport(operation=operation)

        async def run_for_chain(chain: ChainAdapter) -> None:
            try:
                await call(chain)
            except Exception as e:
                logger.error(f"{operation} failed for {chain.name}: {e}", exc_info=True)
                report.failed[chain.name] = e
            else:
                report.succeeded.append(chain.name)

        tasks = [run_for_chain(chain) for chain in chains]
        logger.debug(f"Dispatching {operation} to {len(tasks)} chain(s)")
        await asyncio.gather(*tasks)

        return self._finish(report)

    @staticmethod
    def _finish(report: FanOutReport) -> FanOutReport:
        report.finished_at = datetime.now(UTC)
        if report.ok:
            logger.info(report.summary())
        else:
            logger.warning(report.summary())
        return report

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Release the shared HTTP client and the validator store engine."""
        await self._http_client.aclose()
        if self._uow_factory is not None:
            await self._uow_factory.dispose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

"""Shared test fixtures and fake collaborators."""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from chain_tracker.chains.config import ChainConfig
from chain_tracker.infrastructure.http_client import HttpClient
from chain_tracker.settings import Settings

# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


def build_config(name: str = "osmosis", **overrides) -> ChainConfig:
    fields = dict(
        name=name,
        gecko=name,
        base_prefix=name,
        valoper_prefix=f"{name}valoper",
        cons_prefix=f"{name}valcons",
        main_denom=f"u{name}",
        decimals_pow=1_000_000,
        rpc_url=f"https://rpc.{name}.example.com",
        jsonrpc_url=None,
        rest_url=f"https://rest.{name}.example.com",
        wss_url=f"wss://rpc.{name}.example.com/websocket",
        sdk_version=45,
    )
    fields.update(overrides)
    return ChainConfig(**fields)


@pytest.fixture()
def make_config() -> Callable[..., ChainConfig]:
    return build_config


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(DATA_DIR=tmp_path, DB_CONNECTION=f"sqlite+aiosqlite:///{tmp_path / 'v.db'}")


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeChain:
    """Records every capability call; optionally fails or blocks on some of them."""

    def __init__(
        self,
        config: ChainConfig,
        events: list[tuple[str, str]] | None = None,
        fail_on: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.config = config
        self.events = events if events is not None else []
        self.fail_on = fail_on or set()
        self.delay = delay
        self.prices: list[float | None] = []

    @property
    def name(self) -> str:
        return self.config.name

    async def _record(self, operation: str) -> None:
        self.events.append((operation, self.name))
        if self.delay:
            await asyncio.sleep(self.delay)
        if operation in self.fail_on:
            raise RuntimeError(f"{self.name} {operation} exploded")
        self.events.append((f"{operation}:done", self.name))

    def calls(self, operation: str) -> int:
        return sum(1 for op, name in self.events if op == operation and name == self.name)

    async def update_data(self) -> None:
        await self._record("update_data")

    async def update_price(self, price: float | None) -> None:
        self.prices.append(price)
        await self._record("update_price")

    async def update_validator_database(self) -> None:
        await self._record("update_validator_database")

    async def subscribe_to_events(self) -> None:
        await self._record("subscribe_to_events")


@pytest.fixture()
def http_client() -> MagicMock:
    client = MagicMock(spec=HttpClient)
    client.get = AsyncMock()
    client.post = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture()
def events() -> list[tuple[str, str]]:
    return []


@pytest.fixture()
def fake_chains(events: list[tuple[str, str]]) -> dict[str, FakeChain]:
    """The production chain set; kyve has no price-feed key."""
    chains = {}
    for name in ("axelar", "evmos", "kyve", "osmosis", "secret"):
        gecko = None if name == "kyve" else name
        chains[name] = FakeChain(build_config(name, gecko=gecko), events=events)
    return chains


@pytest.fixture()
def make_fake_chain(events: list[tuple[str, str]]) -> Callable[..., FakeChain]:
    def _make(
        name: str,
        gecko: str | None = "",
        fail_on: set[str] | None = None,
        delay: float = 0.0,
    ) -> FakeChain:
        config = build_config(name, gecko=name if gecko == "" else gecko)
        return FakeChain(config, events=events, fail_on=fail_on, delay=delay)

    return _make

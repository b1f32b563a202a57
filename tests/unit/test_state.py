"""Tests for the State orchestrator: lookup, fan-out and price aggregation."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from chain_tracker.chains import InvalidChainConfig
from chain_tracker.orchestration import State, UnsupportedChain


@pytest.fixture()
def price_fetcher(events):
    async def _fetch(client, ids):
        events.append(("fetch_prices", ",".join(ids)))
        return {"axelar": 1.23}

    return AsyncMock(side_effect=_fetch)


@pytest.fixture()
def state(fake_chains, http_client, price_fetcher) -> State:
    return State(fake_chains.values(), http_client, price_fetcher=price_fetcher)


class TestLookup:
    @pytest.mark.parametrize("name", ["axelar", "evmos", "kyve", "osmosis", "secret"])
    def test_get_returns_registered_adapter(self, state, fake_chains, name) -> None:
        chain = state.get(name)
        assert chain is fake_chains[name]
        assert chain.config.name == name

    def test_get_returns_same_handle_every_time(self, state) -> None:
        assert state.get("osmosis") is state.get("osmosis")

    @pytest.mark.parametrize("name", ["OSMOSIS", "cosmos", "", " osmosis", "osmosis "])
    def test_get_unknown_raises_unsupported_chain(self, state, name) -> None:
        with pytest.raises(UnsupportedChain) as exc_info:
            state.get(name)
        assert exc_info.value.name == name
        assert str(exc_info.value) == f"{name} is not a supported chain."

    def test_unsupported_chain_message(self, state) -> None:
        with pytest.raises(UnsupportedChain, match=r"^cosmos is not a supported chain\.$"):
            state.get("cosmos")

    def test_unsupported_chain_is_lookup_error(self) -> None:
        assert isinstance(UnsupportedChain("x"), LookupError)

    def test_registry_views(self, state) -> None:
        assert state.names == ("axelar", "evmos", "kyve", "osmosis", "secret")
        assert len(state) == 5
        assert "kyve" in state
        assert "cosmos" not in state
        assert [chain.name for chain in state] == list(state.names)

    def test_registry_is_read_only(self, state) -> None:
        with pytest.raises(TypeError):
            state.chains["cosmos"] = state.get("osmosis")  # type: ignore[index]

    def test_duplicate_registration_rejected(self, make_fake_chain, http_client) -> None:
        with pytest.raises(InvalidChainConfig, match="registered twice"):
            State([make_fake_chain("osmosis"), make_fake_chain("osmosis")], http_client)


class TestFanOut:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "operation"),
        [
            ("update_data", "update_data"),
            ("update_database", "update_validator_database"),
            ("subscribe_to_events", "subscribe_to_events"),
        ],
    )
    async def test_one_call_per_chain(self, state, fake_chains, method, operation) -> None:
        report = await getattr(state, method)()

        for chain in fake_chains.values():
            assert chain.calls(operation) == 1
        assert sorted(report.succeeded) == sorted(fake_chains)
        assert report.ok
        assert report.operation == method
        assert report.finished_at is not None

    @pytest.mark.asyncio
    async def test_chains_run_concurrently(self, make_fake_chain, http_client, events) -> None:
        chains = [make_fake_chain(name, delay=0.01) for name in ("a", "b", "c")]
        state = State(chains, http_client)

        await state.update_data()

        starts = [i for i, (op, _) in enumerate(events) if op == "update_data"]
        first_done = next(i for i, (op, _) in enumerate(events) if op == "update_data:done")
        assert len(starts) == 3
        assert max(starts) < first_done

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "operation"),
        [
            ("update_data", "update_data"),
            ("update_database", "update_validator_database"),
            ("subscribe_to_events", "subscribe_to_events"),
        ],
    )
    async def test_failure_is_isolated(
        self, make_fake_chain, http_client, events, method, operation
    ) -> None:
        chains = [
            make_fake_chain("axelar", delay=0.01),
            make_fake_chain("evmos", fail_on={operation}),
            make_fake_chain("osmosis", delay=0.02),
        ]
        state = State(chains, http_client)

        report = await getattr(state, method)()

        assert set(report.failed) == {"evmos"}
        assert isinstance(report.failed["evmos"], RuntimeError)
        assert sorted(report.succeeded) == ["axelar", "osmosis"]
        assert not report.ok
        assert (f"{operation}:done", "axelar") in events
        assert (f"{operation}:done", "osmosis") in events

    @pytest.mark.asyncio
    async def test_all_chains_failing_still_completes(self, make_fake_chain, http_client) -> None:
        chains = [make_fake_chain(name, fail_on={"update_data"}) for name in ("a", "b")]
        state = State(chains, http_client)

        report = await state.update_data()

        assert set(report.failed) == {"a", "b"}
        assert report.succeeded == []

    @pytest.mark.asyncio
    async def test_repeated_calls_dispatch_independent_rounds(self, state, fake_chains) -> None:
        first = await state.update_data()
        second = await state.update_data()

        assert first is not second
        assert sorted(first.succeeded) == sorted(second.succeeded) == sorted(fake_chains)
        for chain in fake_chains.values():
            assert chain.calls("update_data") == 2
        assert len(state) == 5

    @pytest.mark.asyncio
    async def test_cancelling_caller_cancels_chain_tasks(
        self, make_fake_chain, http_client, events
    ) -> None:
        chains = [make_fake_chain(name, delay=10) for name in ("a", "b")]
        state = State(chains, http_client)

        task = asyncio.create_task(state.subscribe_to_events())
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert [op for op, _ in events] == ["subscribe_to_events", "subscribe_to_events"]


class TestUpdatePrices:
    @pytest.mark.asyncio
    async def test_fetches_once_with_eligible_keys(self, state, price_fetcher, http_client) -> None:
        await state.update_prices()

        price_fetcher.assert_awaited_once()
        client_arg, ids_arg = price_fetcher.await_args.args
        assert client_arg is http_client
        assert list(ids_arg) == ["axelar", "evmos", "osmosis", "secret"]

    @pytest.mark.asyncio
    async def test_partial_prices_send_explicit_absent(self, state, fake_chains) -> None:
        report = await state.update_prices()

        assert fake_chains["axelar"].prices == [1.23]
        for name in ("evmos", "osmosis", "secret"):
            assert fake_chains[name].prices == [None]
        assert sorted(report.succeeded) == ["axelar", "evmos", "osmosis", "secret"]

    @pytest.mark.asyncio
    async def test_ineligible_chain_never_updated(self, state, fake_chains) -> None:
        report = await state.update_prices()

        assert fake_chains["kyve"].calls("update_price") == 0
        assert fake_chains["kyve"].prices == []
        assert "kyve" not in report.chains

    @pytest.mark.asyncio
    async def test_fetch_completes_before_any_price_update(self, state, events) -> None:
        await state.update_prices()

        assert events[0][0] == "fetch_prices"
        assert all(op != "fetch_prices" for op, _ in events[1:])
        assert sum(1 for op, _ in events if op == "update_price") == 4

    @pytest.mark.asyncio
    async def test_failed_fetch_still_updates_every_eligible_chain(
        self, fake_chains, http_client
    ) -> None:
        fetcher = AsyncMock(side_effect=RuntimeError("price feed down"))
        state = State(fake_chains.values(), http_client, price_fetcher=fetcher)

        report = await state.update_prices()

        assert report.ok
        for name in ("axelar", "evmos", "osmosis", "secret"):
            assert fake_chains[name].prices == [None]
        assert fake_chains["kyve"].prices == []

    @pytest.mark.asyncio
    async def test_price_update_failure_is_isolated(
        self, make_fake_chain, http_client
    ) -> None:
        chains = [
            make_fake_chain("axelar", fail_on={"update_price"}),
            make_fake_chain("osmosis"),
        ]
        fetcher = AsyncMock(return_value={"axelar": 1.0, "osmosis": 2.0})
        state = State(chains, http_client, price_fetcher=fetcher)

        report = await state.update_prices()

        assert set(report.failed) == {"axelar"}
        assert report.succeeded == ["osmosis"]
        assert chains[1].prices == [2.0]

    @pytest.mark.asyncio
    async def test_no_eligible_chains_skips_fetch(self, make_fake_chain, http_client) -> None:
        fetcher = AsyncMock(return_value={})
        state = State([make_fake_chain("kyve", gecko=None)], http_client, price_fetcher=fetcher)

        report = await state.update_prices()

        fetcher.assert_not_awaited()
        assert report.chains == []
        assert report.ok

    @pytest.mark.asyncio
    async def test_price_key_differs_from_chain_name(self, make_fake_chain, http_client) -> None:
        chain = make_fake_chain("secret", gecko="secret-network")
        fetcher = AsyncMock(return_value={"secret-network": 0.5})
        state = State([chain], http_client, price_fetcher=fetcher)

        await state.update_prices()

        assert list(fetcher.await_args.args[1]) == ["secret-network"]
        assert chain.prices == [0.5]

    @pytest.mark.asyncio
    async def test_repeated_price_updates(self, state, fake_chains, price_fetcher) -> None:
        await state.update_prices()
        await state.update_prices()

        assert price_fetcher.await_count == 2
        assert fake_chains["axelar"].prices == [1.23, 1.23]


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_aclose_closes_shared_client(self, state, http_client) -> None:
        await state.aclose()
        http_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, fake_chains, http_client) -> None:
        async with State(fake_chains.values(), http_client) as state:
            assert len(state) == 5
        http_client.aclose.assert_awaited_once()

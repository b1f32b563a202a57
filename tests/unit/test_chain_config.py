"""Tests for ChainConfig validation and the static chain table."""
from __future__ import annotations

import pytest

from chain_tracker.chains import CHAIN_CONFIGS, CHAIN_NAMES, InvalidChainConfig, validate_configs


class TestChainConfig:
    def test_valid_config(self, make_config) -> None:
        config = make_config("osmosis")
        assert config.price_eligible
        assert not config.has_jsonrpc

    def test_missing_gecko_disables_price_tracking(self, make_config) -> None:
        assert not make_config("kyve", gecko=None).price_eligible

    def test_jsonrpc_enabled(self, make_config) -> None:
        config = make_config("evmos", jsonrpc_url="https://eth.example.com:8545/")
        assert config.has_jsonrpc

    def test_is_frozen(self, make_config) -> None:
        config = make_config()
        with pytest.raises(AttributeError):
            config.name = "other"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("amount", "decimals_pow", "expected"),
        [
            ("1500000", 1_000_000, 1.5),
            (250, 100, 2.5),
            ("123456789.5", 10**14, 123456789.5 / 10**14),
        ],
    )
    def test_to_display(self, make_config, amount, decimals_pow, expected) -> None:
        config = make_config(decimals_pow=decimals_pow)
        assert config.to_display(amount) == pytest.approx(expected)

    @pytest.mark.parametrize("name", ["Osmosis", "", "osmo sis"])
    def test_invalid_name(self, make_config, name) -> None:
        with pytest.raises(InvalidChainConfig):
            make_config(name)

    @pytest.mark.parametrize("decimals_pow", [0, -10, 3, 250, 1.0, True])
    def test_invalid_decimals_pow(self, make_config, decimals_pow) -> None:
        with pytest.raises(InvalidChainConfig, match="decimals_pow"):
            make_config(decimals_pow=decimals_pow)

    @pytest.mark.parametrize(
        ("field", "url"),
        [
            ("rest_url", "not a url"),
            ("rest_url", "wss://rest.example.com"),
            ("rpc_url", "ftp://rpc.example.com"),
            ("wss_url", "https://rpc.example.com/websocket"),
            ("jsonrpc_url", "eth.example.com:8545"),
        ],
    )
    def test_invalid_urls(self, make_config, field, url) -> None:
        with pytest.raises(InvalidChainConfig, match=field):
            make_config(**{field: url})

    def test_empty_gecko_rejected(self, make_config) -> None:
        with pytest.raises(InvalidChainConfig, match="gecko"):
            make_config(gecko="")

    def test_empty_prefix_rejected(self, make_config) -> None:
        with pytest.raises(InvalidChainConfig, match="valoper_prefix"):
            make_config(valoper_prefix="")


class TestChainTable:
    def test_supported_chains(self) -> None:
        assert CHAIN_NAMES == ("axelar", "evmos", "kyve", "osmosis", "secret")

    def test_price_eligibility(self) -> None:
        eligible = [config.name for config in CHAIN_CONFIGS if config.price_eligible]
        assert eligible == ["axelar", "evmos", "osmosis", "secret"]

    def test_only_evmos_has_jsonrpc(self) -> None:
        assert [config.name for config in CHAIN_CONFIGS if config.has_jsonrpc] == ["evmos"]

    def test_evmos_scaling(self) -> None:
        evmos = next(config for config in CHAIN_CONFIGS if config.name == "evmos")
        assert evmos.decimals_pow == 10**14
        assert evmos.main_denom == "aevmos"

    def test_duplicate_names_rejected(self, make_config) -> None:
        with pytest.raises(InvalidChainConfig, match="duplicate"):
            validate_configs((make_config("osmosis"), make_config("osmosis")))

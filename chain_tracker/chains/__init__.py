"""Chain registry table.

Every supported chain is one ChainConfig entry in CHAIN_CONFIGS. Adding a chain
is a data change: append an entry here; the orchestrator builds one Chain
adapter per entry.

Example:
    ChainConfig(
        name="juno",
        gecko="juno-network",
        base_prefix="juno",
        ...
    )
"""

from chain_tracker.chains.chain import Chain, ChainRequestError
from chain_tracker.chains.config import ChainConfig, InvalidChainConfig
from chain_tracker.chains.protocol import ChainAdapter

CHAIN_CONFIGS: tuple[ChainConfig, ...] = (
    ChainConfig(
        name="axelar",
        gecko="axelar",
        base_prefix="axelar",
        valoper_prefix="axelarvaloper",
        cons_prefix="axelarvalcons",
        main_denom="uaxl",
        decimals_pow=100,
        rpc_url="https://rpc.cosmos.directory/axelar",
        jsonrpc_url=None,
        rest_url="https://axelar-api.polkachu.com",
        wss_url="wss://axelar-rpc.chainode.tech/websocket",
        sdk_version=45,
    ),
    ChainConfig(
        name="evmos",
        gecko="evmos",
        base_prefix="evmos",
        valoper_prefix="evmosvaloper",
        cons_prefix="evmosvalcons",
        main_denom="aevmos",
        decimals_pow=100_000_000_000_000,
        rpc_url="https://rpc.cosmos.directory/evmos",
        jsonrpc_url="https://eth.bd.evmos.org:8545/",
        rest_url="https://evmos-api.polkachu.com",
        wss_url="wss://rpc-evmos.ecostake.com/websocket",
        sdk_version=45,
    ),
    ChainConfig(
        name="kyve",
        gecko=None,  # not listed on the price feed
        base_prefix="kyve",
        valoper_prefix="kyvevaloper",
        cons_prefix="kyvevalcons",
        main_denom="tkyve",
        decimals_pow=100,
        rpc_url="https://rpc.beta.kyve.network",
        jsonrpc_url=None,
        rest_url="https://api.beta.kyve.network",
        wss_url="wss://rpc.beta.kyve.network/websocket",
        sdk_version=45,
    ),
    ChainConfig(
        name="osmosis",
        gecko="osmosis",
        base_prefix="osmo",
        valoper_prefix="osmovaloper",
        cons_prefix="osmovalcons",
        main_denom="uosmo",
        decimals_pow=100,
        rpc_url="https://rpc.cosmos.directory/osmosis",
        jsonrpc_url=None,
        rest_url="https://rest.cosmos.directory/osmosis",
        wss_url="wss://rpc.osmosis.interbloc.org/websocket",
        sdk_version=45,
    ),
    ChainConfig(
        name="secret",
        gecko="secret",
        base_prefix="secret",
        valoper_prefix="secretvaloper",
        cons_prefix="secretvalcons",
        main_denom="uscrt",
        decimals_pow=100,
        rpc_url="https://rpc.cosmos.directory/secretnetwork",
        jsonrpc_url=None,
        rest_url="https://rest.cosmos.directory/secretnetwork",
        wss_url="wss://scrt-rpc.blockpane.com/websocket",
        sdk_version=45,
    ),
)


def validate_configs(configs: tuple[ChainConfig, ...]) -> tuple[str, ...]:
    """Check the table for duplicate names and return the names in table order.

    Raises:
        InvalidChainConfig: If two entries share a name
    """
    names: list[str] = []
    for config in configs:
        if config.name in names:
            raise InvalidChainConfig(f"{config.name}: duplicate chain name in CHAIN_CONFIGS")
        names.append(config.name)
    return tuple(names)


CHAIN_NAMES: tuple[str, ...] = validate_configs(CHAIN_CONFIGS)

__all__ = [
    "CHAIN_CONFIGS",
    "CHAIN_NAMES",
    "Chain",
    "ChainAdapter",
    "ChainConfig",
    "ChainRequestError",
    "InvalidChainConfig",
    "validate_configs",
]

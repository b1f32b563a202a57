"""Static per-chain configuration."""

from dataclasses import dataclass
from urllib.parse import urlparse

_HTTP_SCHEMES = ("http", "https")
_WS_SCHEMES = ("ws", "wss")


class InvalidChainConfig(ValueError):
    """Raised when the static chain table contains a malformed entry."""


@dataclass(frozen=True)
class ChainConfig:
    """Immutable configuration of one Cosmos SDK chain.

    A chain opts out of price tracking by leaving `gecko` unset, and out of
    EVM JSON-RPC queries by leaving `jsonrpc_url` unset. Neither is an error.
    """

    name: str
    gecko: str | None
    base_prefix: str
    valoper_prefix: str
    cons_prefix: str
    main_denom: str
    decimals_pow: int  # divisor from base-denom integer amounts to display units
    rpc_url: str
    jsonrpc_url: str | None
    rest_url: str
    wss_url: str
    sdk_version: int

    def __post_init__(self) -> None:
        if not self.name or self.name != self.name.lower() or " " in self.name:
            raise InvalidChainConfig(f"{self.name!r}: chain name must be lowercase, no spaces")

        for field_name in ("base_prefix", "valoper_prefix", "cons_prefix", "main_denom"):
            if not getattr(self, field_name):
                raise InvalidChainConfig(f"{self.name}: {field_name} must not be empty")

        if self.gecko is not None and not self.gecko:
            raise InvalidChainConfig(f"{self.name}: gecko must be None or a non-empty id")

        if not _is_power_of_ten(self.decimals_pow):
            raise InvalidChainConfig(
                f"{self.name}: decimals_pow must be a positive power of ten, "
                f"got {self.decimals_pow}"
            )

        _check_url(self.name, "rpc_url", self.rpc_url, _HTTP_SCHEMES)
        _check_url(self.name, "rest_url", self.rest_url, _HTTP_SCHEMES)
        _check_url(self.name, "wss_url", self.wss_url, _WS_SCHEMES)
        if self.jsonrpc_url is not None:
            _check_url(self.name, "jsonrpc_url", self.jsonrpc_url, _HTTP_SCHEMES)

        if self.sdk_version <= 0:
            raise InvalidChainConfig(f"{self.name}: sdk_version must be positive")

    @property
    def price_eligible(self) -> bool:
        return self.gecko is not None

    @property
    def has_jsonrpc(self) -> bool:
        return self.jsonrpc_url is not None

    def to_display(self, amount: int | str | float) -> float:
        """Convert a base-denom amount (as returned by REST, often a string) to display units."""
        return float(amount) / self.decimals_pow


def _is_power_of_ten(value: int) -> bool:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return False
    while value % 10 == 0:
        value //= 10
    return value == 1


def _check_url(chain: str, field_name: str, url: str, schemes: tuple[str, ...]) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in schemes or not parsed.netloc:
        raise InvalidChainConfig(
            f"{chain}: {field_name} must be a {'/'.join(schemes)} URL, got {url!r}"
        )

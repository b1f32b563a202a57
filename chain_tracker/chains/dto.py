"""Data Transfer Objects for chain adapters."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ChainData:
    """Latest on-chain snapshot. Amounts are in display units."""

    chain_id: str | None = None
    block_height: int | None = None
    block_time: datetime | None = None
    bonded_tokens: float | None = None
    not_bonded_tokens: float | None = None
    total_supply: float | None = None
    inflation: float | None = None  # Decimal format: 0.07 = 7%
    community_pool: float | None = None
    evm_block_height: int | None = None
    updated_at: datetime | None = None

    @property
    def bonded_ratio(self) -> float | None:
        if self.bonded_tokens is None or not self.total_supply:
            return None
        return self.bonded_tokens / self.total_supply


@dataclass
class ValidatorInfo:
    operator_address: str
    moniker: str
    tokens: float  # display units
    commission_rate: float
    jailed: bool
    status: str
    website: str = ""
    details: str = ""


@dataclass
class BlockEvent:
    height: int
    time: datetime | None
    num_txs: int = 0

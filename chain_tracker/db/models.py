import datetime

from sqlalchemy import Index, PrimaryKeyConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class Validator(SQLModel, table=True):
    """Validator record of one chain, refreshed by update_validator_database()."""

    __tablename__: str = "validator"

    __table_args__ = (
        PrimaryKeyConstraint("chain", "operator_address"),
        Index("ix_validator_chain_removed", "chain", "removed"),
    )

    chain: str
    operator_address: str
    moniker: str = ""
    tokens: float = 0.0  # display units
    commission_rate: float = 0.0  # Decimal format: 0.05 = 5%
    jailed: bool = False
    status: str = ""
    website: str = ""
    details: str = ""
    removed: bool = Field(default=False)
    updated_at: datetime.datetime = Field(default_factory=_utcnow)

    def __hash__(self) -> int:
        return hash((self.chain, self.operator_address))

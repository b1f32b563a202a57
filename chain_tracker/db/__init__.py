"""Validator store: SQLModel tables, repositories and the unit of work."""

from chain_tracker.db.models import Validator
from chain_tracker.db.unit_of_work import (
    UnitOfWork,
    UnitOfWorkFactory,
    UOWFactoryType,
    create_uow_factory,
)

__all__ = [
    "Validator",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "UOWFactoryType",
    "create_uow_factory",
]

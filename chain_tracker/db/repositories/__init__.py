"""Repository layer for database access using the Repository pattern."""

from chain_tracker.db.repositories.base import Repository
from chain_tracker.db.repositories.validator import ValidatorRepository

__all__ = [
    # Base
    "Repository",
    # Repositories
    "ValidatorRepository",
]

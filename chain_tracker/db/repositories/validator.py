from collections.abc import Iterable, Sequence

from sqlalchemy import update
from sqlalchemy.sql.expression import desc, select

from chain_tracker.db.models import Validator
from chain_tracker.db.repositories.base import Repository
from chain_tracker.db.repositories.utils import bulk_insert

_UPDATE_FIELDS = [
    "moniker",
    "tokens",
    "commission_rate",
    "jailed",
    "status",
    "website",
    "details",
    "removed",
    "updated_at",
]


class ValidatorRepository(Repository[Validator]):
    _model = Validator

    async def get_by_chain(
        self, chain: str, include_removed: bool = False
    ) -> Sequence[Validator]:
        """Returns validators ordered by voting power, largest first."""
        stmt = select(Validator).where(Validator.chain == chain)  # type: ignore[arg-type]
        if not include_removed:
            stmt = stmt.where(Validator.removed == False)  # noqa: E712
        stmt = stmt.order_by(desc(Validator.tokens))  # type: ignore[arg-type]
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def upsert_many(self, validators: Iterable[Validator]) -> None:
        """Overwrites every mutable column on conflict and clears `removed`."""
        await bulk_insert(
            self._session,
            Validator,
            validators,
            conflict_target=["chain", "operator_address"],
            on_conflict="update",
            update_fields=_UPDATE_FIELDS,
        )

    async def mark_removed(self, chain: str, keep: Iterable[str]) -> int:
        """Flags validators of `chain` whose operator address is not in `keep`."""
        stmt = (
            update(Validator)
            .where(
                Validator.chain == chain,  # type: ignore[arg-type]
                Validator.removed == False,  # noqa: E712
                Validator.operator_address.not_in(list(keep)),  # type: ignore[attr-defined]
            )
            .values(removed=True)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

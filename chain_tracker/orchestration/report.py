"""Outcome of one fan-out call."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta


@dataclass
class FanOutReport:
    """Per-chain outcome of one fan-out operation.

    Completion of the call only means every dispatched chain finished; `failed`
    holds the chains that finished with an exception.
    """

    operation: str
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, BaseException] = field(default_factory=dict)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def chains(self) -> list[str]:
        return [*self.succeeded, *self.failed]

    @property
    def duration(self) -> timedelta | None:
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    def summary(self) -> str:
        parts = [f"{self.operation}: {len(self.succeeded)} ok, {len(self.failed)} failed"]
        if self.failed:
            parts.append(f"(failed: {', '.join(sorted(self.failed))})")
        if self.duration is not None:
            parts.append(f"in {self.duration}")
        return " ".join(parts)

"""Tests for FanOutReport."""
from __future__ import annotations

from datetime import timedelta

from chain_tracker.orchestration import FanOutReport


def test_empty_report_is_ok() -> None:
    report = FanOutReport(operation="update_data")
    assert report.ok
    assert report.chains == []
    assert report.duration is None


def test_summary_lists_failures() -> None:
    report = FanOutReport(
        operation="update_database",
        succeeded=["axelar"],
        failed={"secret": RuntimeError("boom"), "evmos": RuntimeError("boom")},
    )
    report.finished_at = report.started_at + timedelta(seconds=2)

    assert not report.ok
    assert report.chains == ["axelar", "secret", "evmos"]
    assert report.duration == timedelta(seconds=2)
    assert report.summary() == (
        "update_database: 1 ok, 2 failed (failed: evmos, secret) in 0:00:02"
    )

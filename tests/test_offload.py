"""Tests for the computation offload boundary."""

import logging
from concurrent.futures.process import BrokenProcessPool
from decimal import Decimal

from overtime_tool.engine import offload
from overtime_tool.engine.offload import (
    AnalysisRequest,
    InlineRunner,
    ProcessPoolRunner,
    get_runner,
)
from overtime_tool.models import CalcSnapshot, CalculationParams, DateRange, TimeEntry, User


def _make_request() -> AnalysisRequest:
    entries = tuple(
        TimeEntry(id=f"e{i}", user_id="u1", start=f"2024-01-1{5 + i}T09:00:00Z", duration="PT9H30M",
                  earned_rate=Decimal("4500"), cost_rate=Decimal("2500"))
        for i in range(3)
    )
    snapshot = CalcSnapshot(
        users=(User(id="u1", name="Alice"), User(id="u2", name="Bob")),
        params=CalculationParams(tier2_threshold_hours=Decimal("2")),
    )
    return AnalysisRequest(entries=entries, snapshot=snapshot, date_range=DateRange("2024-01-15", "2024-01-19"))


class TestRunners:
    def test_get_runner(self):
        assert isinstance(get_runner(False), InlineRunner)
        runner = get_runner(True, max_workers=2)
        assert isinstance(runner, ProcessPoolRunner)
        assert runner.max_workers == 2

    def test_process_pool_matches_inline(self):
        request = _make_request()
        assert ProcessPoolRunner().run(request) == InlineRunner().run(request)

    def test_falls_back_inline_when_pool_breaks(self, monkeypatch, caplog):
        class BrokenExecutor:
            def __init__(self, *args, **kwargs):
                raise BrokenProcessPool("no workers")

        monkeypatch.setattr(offload, "ProcessPoolExecutor", BrokenExecutor)
        request = _make_request()
        with caplog.at_level(logging.WARNING, logger="overtime_tool.engine.offload"):
            results = ProcessPoolRunner().run(request)
        assert results == InlineRunner().run(request)
        assert "running analysis inline" in caplog.text

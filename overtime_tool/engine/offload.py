"""Computation offload boundary.

The whole request is pickled into a worker process and the whole result is
pickled back. Nothing is streamed and nothing is shared, so inline and
offloaded runs return equal results for equal input.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from dataclasses import dataclass
from typing import Optional, Protocol

from overtime_tool.engine.calculator import calculate_analysis
from overtime_tool.models import CalcSnapshot, DateRange, TimeEntry, UserAnalysis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisRequest:
    entries: tuple[TimeEntry, ...]
    snapshot: CalcSnapshot
    date_range: Optional[DateRange]


def execute(request: AnalysisRequest) -> list[UserAnalysis]:
    return calculate_analysis(request.entries, request.snapshot, request.date_range)


class AnalysisRunner(Protocol):
    def run(self, request: AnalysisRequest) -> list[UserAnalysis]: ...


class InlineRunner:
    def run(self, request: AnalysisRequest) -> list[UserAnalysis]:
        return execute(request)


class ProcessPoolRunner:
    """Runs each request in a separate worker process.

    If the pool cannot be started, or dies mid-request, the request is run
    inline instead. There is no cancellation: a started request always
    completes.
    """

    def __init__(self, max_workers: int = 1):
        self.max_workers = max_workers

    def run(self, request: AnalysisRequest) -> list[UserAnalysis]:
        try:
            with ProcessPoolExecutor(max_workers=self.max_workers) as pool:
                return pool.submit(execute, request).result()
        except (BrokenProcessPool, OSError, NotImplementedError) as e:
            logger.warning("Offload unavailable (%s); running analysis inline", e)
            return execute(request)


def get_runner(offload: bool, max_workers: int = 1) -> AnalysisRunner:
    if offload:
        return ProcessPoolRunner(max_workers=max_workers)
    return InlineRunner()

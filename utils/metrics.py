"""
Capture latency tracking.

Each capture is timed in three stages: ``clipboard`` (reading the
clipboard), ``canvas_append`` (load, place and save the day file) and
``capture`` (the whole run in the executor). A stage slower than its
limit logs a warning; a slow capture usually means a slow clipboard or a
large canvas file. One summary line per stage is printed at shutdown.
"""
import time
import logging
from contextlib import contextmanager
from typing import Dict

logger = logging.getLogger(__name__)

STAGE_LIMITS: Dict[str, float] = {
    "clipboard": 0.2,
    "canvas_append": 0.5,
    "capture": 1.0,
}


class StageTimings:
    """Running count, total and worst duration for one capture stage."""

    def __init__(self, stage: str):
        self.stage = stage
        self.count = 0
        self.total = 0.0
        self.slowest = 0.0
        self.over_limit = 0

    def add(self, duration: float) -> None:
        self.count += 1
        self.total += duration
        self.slowest = max(self.slowest, duration)

        limit = STAGE_LIMITS.get(self.stage)
        if limit is not None and duration > limit:
            self.over_limit += 1
            logger.warning(f"{self.stage} took {duration:.3f}s (limit {limit}s)")

    def summary(self) -> str:
        avg_ms = self.total / self.count * 1000
        line = (f"{self.stage}: {self.count} runs, "
                f"avg {avg_ms:.0f}ms, slowest {self.slowest * 1000:.0f}ms")
        if self.over_limit:
            line += f", {self.over_limit} over limit"
        return line


# Per-stage timings for this process
_timings: Dict[str, StageTimings] = {}


@contextmanager
def timer(stage: str):
    """Time the enclosed block as one run of ``stage``, even if it raises."""
    start_time = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start_time
        _timings.setdefault(stage, StageTimings(stage)).add(duration)


def log_latency() -> None:
    """Print one latency line per capture stage seen so far."""
    for stage in STAGE_LIMITS:
        if stage in _timings:
            print(f"⏱️  {_timings[stage].summary()}")

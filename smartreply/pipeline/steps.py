"""Stage timing records and the metrics derived from them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from smartreply.clock import now_ms
from smartreply.models import PerformanceMetrics, PipelineStepRecord

if TYPE_CHECKING:
    from smartreply.clock import Clock


def start_step(name: str, clock: Clock = now_ms) -> PipelineStepRecord:
    """Open a step record stamped with the current time."""
    return PipelineStepRecord(name=name, start_time=clock(), success=False)


def complete_step(
    step: PipelineStepRecord,
    success: bool,
    error: str | None = None,
    clock: Clock = now_ms,
) -> PipelineStepRecord:
    """Return a closed copy of *step* with end time, duration and outcome."""
    end = clock()
    return step.model_copy(
        update={
            "end_time": end,
            "duration_ms": end - step.start_time,
            "success": success,
            "error": error,
        }
    )


def create_performance_metrics(steps: list[PipelineStepRecord]) -> PerformanceMetrics:
    """Summarise a run's steps: total time, per-step time and failure ratio."""
    durations = {step.name: step.duration_ms for step in steps}
    failures = sum(1 for step in steps if not step.success)
    return PerformanceMetrics(
        total_duration_ms=sum(step.duration_ms for step in steps),
        step_durations=durations,
        error_rate=failures / len(steps) if steps else 0.0,
    )

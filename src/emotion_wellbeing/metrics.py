"""Derived metrics — reduce fetched datasets to the three prediction inputs.

Pure functions, no I/O.  Absent values count as zero; nothing is clamped or
validated beyond that.
"""

from __future__ import annotations

from emotion_wellbeing.models import (
    FitnessDataset,
    PredictionRequest,
    SleepDataset,
    UsageRecord,
)


def steps_count(fitness: FitnessDataset | None) -> int:
    """Sum of the first value's ``intVal`` over every point of the steps series."""
    if fitness is None:
        return 0
    total = 0
    for point in fitness.steps_data.point:
        first = point.value[0] if point.value else None
        total += (first.intVal if first is not None else None) or 0
    return total


def sleep_hours(sleep: SleepDataset | None) -> float:
    if sleep is None or sleep.sleep_summary is None:
        return 0.0
    return sleep.sleep_summary.total_sleep_minutes / 60.0


def social_time(usage: list[UsageRecord]) -> int:
    """Total minutes across the (already truncated) usage list."""
    return sum(record.minutes for record in usage)


def derive_prediction_request(
    fitness: FitnessDataset | None,
    sleep: SleepDataset | None,
    usage: list[UsageRecord],
) -> PredictionRequest:
    return PredictionRequest(
        sleep_hours=sleep_hours(sleep),
        steps_count=steps_count(fitness),
        social_time=social_time(usage),
    )

"""Metric aggregation across experiments.

Summarizes baseline/target/actual for one metric definition and
decides whether a recorded value hit its target.

Pure functions - no store access.
"""

from __future__ import annotations

from collections.abc import Iterable

from growthboard.models.domain import Experiment, MetricDefinition, MetricValue
from growthboard.models.types import MetricSummary


def _mean(values: list[float]) -> float | None:
    """Arithmetic mean, or None for an empty list (never 0)."""
    if not values:
        return None
    return sum(values) / len(values)


def metric_hit(value: MetricValue) -> bool | None:
    """Whether a metric value met its target.

    Ties count as a hit. Returns None (no verdict) unless both
    actual and target are recorded.
    """
    if value.actual is None or value.target is None:
        return None
    return value.actual >= value.target


def metric_progress(
    baseline: float | None,
    target: float | None,
    actual: float | None,
) -> float | None:
    """Percentage of the way from baseline to target, clamped to [0, 100].

    Missing baseline/target count as 0. Returns 0 when actual is
    missing and None when target equals baseline.
    """
    if actual is None:
        return 0.0
    baseline = baseline or 0.0
    target = target or 0.0
    if target == baseline:
        return None
    progress = (actual - baseline) / (target - baseline) * 100
    return min(max(progress, 0.0), 100.0)


def aggregate_metric(
    metric: MetricDefinition,
    experiments: Iterable[Experiment],
) -> MetricSummary:
    """Summarize a metric across experiments.

    Only experiments with a MetricValue for this metric count. Each
    average is taken independently over its non-null values.

    Args:
        metric: Metric to summarize.
        experiments: Experiments to scan (typically one board's).

    Returns:
        MetricSummary with count and averages; hit/progress are derived
        from the averages.
    """
    values: list[MetricValue] = []
    for experiment in experiments:
        value = experiment.metric_value(metric.id)
        if value is not None:
            values.append(value)

    avg_baseline = _mean([v.baseline for v in values if v.baseline is not None])
    avg_target = _mean([v.target for v in values if v.target is not None])
    avg_actual = _mean([v.actual for v in values if v.actual is not None])

    averaged = MetricValue(
        metric_id=metric.id,
        baseline=avg_baseline,
        target=avg_target,
        actual=avg_actual,
    )

    return MetricSummary(
        metric_id=metric.id,
        name=metric.name,
        unit=metric.unit,
        count=len(values),
        avg_baseline=avg_baseline,
        avg_target=avg_target,
        avg_actual=avg_actual,
        hit=metric_hit(averaged),
        progress=metric_progress(avg_baseline, avg_target, avg_actual) if values else None,
    )

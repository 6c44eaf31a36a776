"""Experiment scoring.

Composite priority score from either the legacy ICE fields or a board's
custom dimension set, plus dimension score edits that keep the reserved
ICE dimension ids synchronized with the legacy fields.

Domain logic is pure - every function returns a new Experiment.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from growthboard.core.errors import ScoreRangeError
from growthboard.models.domain import (
    DEFAULT_DIMENSIONS,
    Board,
    DimensionDefinition,
    DimensionScore,
    Experiment,
    MetricValue,
)

logger = logging.getLogger(__name__)

# Reserved dimension id -> legacy Experiment field
LEGACY_FIELDS: dict[str, str] = {
    "ice_impact": "ice_impact",
    "ice_confidence": "ice_confidence",
    "ice_ease": "ice_ease",
}

# Score band floors (ICE badge colouring)
BAND_HIGH_FLOOR = 8.0
BAND_GOOD_FLOOR = 6.0
BAND_FAIR_FLOOR = 4.0

ScoreBand = Literal["high", "good", "fair", "low"]


def round1(value: float) -> float:
    """Round to one decimal place, halves away from zero.

    Matches the fixed one-decimal display used across the board
    (2.25 -> 2.3, not banker's 2.2).
    """
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def uses_custom_dimensions(board: Board | None) -> bool:
    return bool(board is not None and board.config and board.config.use_custom_dimensions)


def active_dimensions(board: Board | None) -> list[DimensionDefinition]:
    """Dimensions an experiment on this board is scored against."""
    if uses_custom_dimensions(board):
        return list(board.config.dimensions)
    return list(DEFAULT_DIMENSIONS)


def legacy_mean(experiment: Experiment) -> float:
    """Mean of the three legacy ICE fields, one decimal."""
    total = experiment.ice_impact + experiment.ice_confidence + experiment.ice_ease
    return round1(total / 3)


def composite_score(experiment: Experiment, board: Board | None = None) -> float:
    """Compute the composite priority score for an experiment.

    With custom dimensions enabled, the mean of recorded dimension
    scores; falls back to the ICE mean when nothing is recorded yet.
    In default mode the ICE mean is always used.

    Args:
        experiment: Experiment to score.
        board: Owning board (None behaves as default ICE).

    Returns:
        Score rounded to one decimal place.
    """
    if uses_custom_dimensions(board):
        scores = experiment.dimension_scores
        if not scores:
            return legacy_mean(experiment)
        return round1(sum(s.value for s in scores) / len(scores))

    return legacy_mean(experiment)


def score_band(score: float) -> ScoreBand:
    """Bucket a composite score for display."""
    if score >= BAND_HIGH_FLOOR:
        return "high"
    if score >= BAND_GOOD_FLOOR:
        return "good"
    if score >= BAND_FAIR_FLOOR:
        return "fair"
    return "low"


def set_dimension_value(
    experiment: Experiment,
    dimension: DimensionDefinition,
    value: int,
) -> Experiment:
    """Upsert a dimension score.

    Reserved ICE ids also update the matching legacy field in the
    same update. Locked experiments are returned unchanged.

    Args:
        experiment: Experiment to update.
        dimension: Definition of the dimension being scored.
        value: New score.

    Returns:
        Updated copy of the experiment.

    Raises:
        ScoreRangeError: If value is outside [dimension.min, dimension.max].
    """
    if not dimension.contains(value):
        raise ScoreRangeError(dimension.id, value, dimension.min, dimension.max)

    if experiment.locked:
        logger.debug(f"Ignoring dimension score on locked experiment {experiment.id}")
        return experiment

    scores = [replace(s) for s in experiment.dimension_scores]
    for score in scores:
        if score.dimension_id == dimension.id:
            score.value = value
            break
    else:
        scores.append(DimensionScore(dimension_id=dimension.id, value=value))

    updates: dict = {"dimension_scores": scores}
    legacy_field = LEGACY_FIELDS.get(dimension.id)
    if legacy_field is not None:
        updates[legacy_field] = value

    return replace(experiment, **updates)


def check_score_ranges(experiment: Experiment, board: Board | None) -> None:
    """Range-check recorded scores against the board's active dimensions.

    Scores for dimensions the board does not define are left alone.

    Raises:
        ScoreRangeError: On the first score outside its dimension's range.
    """
    dimensions = {d.id: d for d in active_dimensions(board)}
    for score in experiment.dimension_scores:
        dimension = dimensions.get(score.dimension_id)
        if dimension is not None and not dimension.contains(score.value):
            raise ScoreRangeError(dimension.id, score.value, dimension.min, dimension.max)


def hydrate(experiment: Experiment, board: Board | None) -> Experiment:
    """Fill in dimension scores and metric values for a board.

    One MetricValue per board metric (existing kept, otherwise all-null)
    and one DimensionScore per active dimension (existing kept, reserved
    ids seeded from the legacy field, otherwise the range midpoint).

    Args:
        experiment: Experiment to hydrate.
        board: Board whose configuration drives the shape.

    Returns:
        Copy of the experiment with complete score/metric lists.
    """
    metric_defs = board.config.metrics if board is not None and board.config else []
    metric_values: list[MetricValue] = []
    for metric in metric_defs:
        existing = experiment.metric_value(metric.id)
        metric_values.append(replace(existing) if existing else MetricValue(metric_id=metric.id))

    dimension_scores: list[DimensionScore] = []
    for dimension in active_dimensions(board):
        existing_score = experiment.dimension_score(dimension.id)
        if existing_score is not None:
            dimension_scores.append(replace(existing_score))
        elif dimension.id in LEGACY_FIELDS:
            legacy_value = getattr(experiment, LEGACY_FIELDS[dimension.id])
            dimension_scores.append(DimensionScore(dimension_id=dimension.id, value=legacy_value))
        else:
            dimension_scores.append(
                DimensionScore(dimension_id=dimension.id, value=dimension.midpoint)
            )

    return replace(experiment, metric_values=metric_values, dimension_scores=dimension_scores)

"""Experiment lifecycle and record edits.

States: idea -> hypothesis -> running -> complete -> learnings.
Status may be set directly to any value; archive and complete carry
extra side effects. Once locked, every field edit is a silent no-op
except comment append and delete.

Domain logic is pure - functions return new records, the workspace
handles persistence.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from growthboard.core.errors import NotFoundError, ValidationError
from growthboard.core.identity import new_id, utc_now_iso
from growthboard.core.scoring import LEGACY_FIELDS
from growthboard.models.domain import (
    DEFAULT_DIMENSIONS,
    ICE_MAX,
    ICE_MIN,
    RESULT_STATUSES,
    RESULTS,
    STATUSES,
    BoardConfig,
    Comment,
    DimensionDefinition,
    Experiment,
    MetricValue,
)

logger = logging.getLogger(__name__)

METRIC_FIELDS = ("baseline", "target", "actual")

# Fields a partial update may touch
EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "status",
        "ice_impact",
        "ice_confidence",
        "ice_ease",
        "dimension_scores",
        "metric_values",
        "market",
        "type",
        "tags",
        "result",
    }
)


def _ignored_when_locked(experiment: Experiment, operation: str) -> bool:
    if experiment.locked:
        logger.debug(f"Ignoring {operation} on locked experiment {experiment.id}")
        return True
    return False


# ============================================================================
# Creation and validation
# ============================================================================


def new_experiment(
    board_id: str,
    title: str,
    *,
    owner: str = "Me",
    description: str = "",
    market: str = "US",
    type: str = "Acquisition",
    ice_impact: int | None = None,
    ice_confidence: int | None = None,
    ice_ease: int | None = None,
    tags: list[str] | None = None,
    dimension_scores: list | None = None,
    metric_values: list[MetricValue] | None = None,
) -> Experiment:
    """Create a new experiment in status 'idea'.

    Scores not supplied default to 5, the lower middle of the ICE range.

    Raises:
        ValidationError: If the title is blank, a score is out of range
            or tags repeat.
    """
    default_score = (ICE_MIN + ICE_MAX) // 2
    experiment = Experiment(
        id=new_id(),
        board_id=board_id,
        title=title.strip(),
        description=description,
        status="idea",
        ice_impact=default_score if ice_impact is None else ice_impact,
        ice_confidence=default_score if ice_confidence is None else ice_confidence,
        ice_ease=default_score if ice_ease is None else ice_ease,
        dimension_scores=list(dimension_scores or []),
        metric_values=list(metric_values or []),
        market=market,
        type=type,
        tags=list(tags or []),
        created_at=utc_now_iso(),
        owner=owner or "Me",
    )
    validate_for_save(experiment)
    return experiment


def validate_for_save(experiment: Experiment) -> None:
    """Check record-level invariants before a write.

    Raises:
        ValidationError: On a blank title, an unknown status or result,
            out-of-range ICE scores, duplicate tags or duplicate
            metric/dimension entries.
    """
    if not experiment.title or not experiment.title.strip():
        raise ValidationError("Title is required")

    if experiment.status not in STATUSES:
        raise ValidationError(f"Unknown status: {experiment.status}")

    if experiment.result is not None:
        if experiment.result not in RESULTS:
            raise ValidationError(f"Unknown result: {experiment.result}")

    for field_name in LEGACY_FIELDS.values():
        value = getattr(experiment, field_name)
        if not ICE_MIN <= value <= ICE_MAX:
            raise ValidationError(f"{field_name}={value} outside [{ICE_MIN}, {ICE_MAX}]")

    if len(set(experiment.tags)) != len(experiment.tags):
        raise ValidationError("Duplicate tags")

    metric_ids = [mv.metric_id for mv in experiment.metric_values]
    if len(set(metric_ids)) != len(metric_ids):
        raise ValidationError("Duplicate metric values")

    dimension_ids = [s.dimension_id for s in experiment.dimension_scores]
    if len(set(dimension_ids)) != len(dimension_ids):
        raise ValidationError("Duplicate dimension scores")


def clean_board_config(config: BoardConfig) -> BoardConfig:
    """Drop blank rows and validate a board configuration for saving.

    Turning custom scoring off restores the default ICE dimensions.

    Raises:
        ValidationError: On duplicate ids, max <= min, or an empty
            dimension list with custom scoring on.
    """
    metrics = [replace(m) for m in config.metrics if m.name.strip()]
    if config.use_custom_dimensions:
        dimensions = [replace(d) for d in config.dimensions if d.name.strip()]
    else:
        dimensions = list(DEFAULT_DIMENSIONS)

    metric_ids = [m.id for m in metrics]
    if len(set(metric_ids)) != len(metric_ids):
        raise ValidationError("Duplicate metric ids")

    dimension_ids = [d.id for d in dimensions]
    if len(set(dimension_ids)) != len(dimension_ids):
        raise ValidationError("Duplicate dimension ids")

    for dimension in dimensions:
        _validate_dimension(dimension)

    if config.use_custom_dimensions and not dimensions:
        raise ValidationError("Custom scoring needs at least one dimension")

    return BoardConfig(
        metrics=metrics,
        dimensions=dimensions,
        use_custom_dimensions=config.use_custom_dimensions,
    )


def _validate_dimension(dimension: DimensionDefinition) -> None:
    if dimension.max <= dimension.min:
        raise ValidationError(
            f"Dimension '{dimension.name}' max ({dimension.max}) must exceed min ({dimension.min})"
        )


# ============================================================================
# Status transitions
# ============================================================================


def set_status(experiment: Experiment, status: str) -> Experiment:
    """Set status directly (manual edit or kanban drop).

    No other field changes; a stored result is left in place.

    Raises:
        ValidationError: If status is not one of the five states.
    """
    if status not in STATUSES:
        raise ValidationError(f"Unknown status: {status}")
    if _ignored_when_locked(experiment, "status edit"):
        return experiment
    return replace(experiment, status=status)


def set_result(experiment: Experiment, result: str | None) -> Experiment:
    """Record the outcome of an experiment.

    Raises:
        ValidationError: If result is unknown or status is not
            complete/learnings.
    """
    if result is not None and result not in RESULTS:
        raise ValidationError(f"Unknown result: {result}")
    if _ignored_when_locked(experiment, "result edit"):
        return experiment
    if result is not None and experiment.status not in RESULT_STATUSES:
        raise ValidationError(
            f"Result can only be set when status is complete or learnings "
            f"(status={experiment.status})"
        )
    return replace(experiment, result=result)


def archive(experiment: Experiment) -> Experiment:
    """Move to learnings and archive. No-op on locked experiments."""
    if _ignored_when_locked(experiment, "archive"):
        return experiment
    return replace(experiment, status="learnings", archived=True)


def complete(experiment: Experiment, *, require_result: bool = False) -> Experiment:
    """Move to learnings, archive and lock.

    Completing without a result is a data-quality warning unless
    require_result is set.

    Raises:
        ValidationError: If require_result is set and result is None.
    """
    if _ignored_when_locked(experiment, "complete"):
        return experiment
    if experiment.result is None:
        if require_result:
            raise ValidationError("Result is required before completing")
        logger.warning(f"Completing experiment {experiment.id} without a result")
    return replace(experiment, status="learnings", archived=True, locked=True)


def delete(experiments: list[Experiment], experiment_id: str) -> list[Experiment]:
    """Remove an experiment permanently, regardless of lock state.

    Raises:
        NotFoundError: If no experiment has this id.
    """
    remaining = [e for e in experiments if e.id != experiment_id]
    if len(remaining) == len(experiments):
        raise NotFoundError("Experiment", experiment_id)
    return remaining


# ============================================================================
# Field edits
# ============================================================================


def apply_update(experiment: Experiment, changes: dict[str, Any]) -> Experiment:
    """Apply a partial update (form save).

    The reserved ICE dimension scores and the legacy fields stay in
    sync. When the update carries dimension_scores those win; otherwise
    an edited legacy field is copied onto its recorded reserved score.

    Raises:
        ValidationError: On unknown fields or if the result record fails
            validate_for_save.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")
    if _ignored_when_locked(experiment, "update"):
        return experiment

    updated = replace(experiment, **changes)
    if "dimension_scores" in changes:
        for score in updated.dimension_scores:
            legacy_field = LEGACY_FIELDS.get(score.dimension_id)
            if legacy_field is not None:
                updated = replace(updated, **{legacy_field: score.value})
    else:
        scores = [replace(s) for s in updated.dimension_scores]
        for score in scores:
            legacy_field = LEGACY_FIELDS.get(score.dimension_id)
            if legacy_field in changes:
                score.value = changes[legacy_field]
        updated = replace(updated, dimension_scores=scores)

    if "result" in changes and updated.result is not None:
        if updated.status not in RESULT_STATUSES:
            raise ValidationError("Result can only be set when status is complete or learnings")

    validate_for_save(updated)
    return updated


def add_tag(experiment: Experiment, tag: str) -> Experiment:
    """Append a tag.

    Raises:
        ValidationError: If the tag is blank or already present.
    """
    tag = tag.strip()
    if not tag:
        raise ValidationError("Tag must not be empty")
    if tag in experiment.tags:
        raise ValidationError(f"Duplicate tag: {tag}")
    if _ignored_when_locked(experiment, "tag add"):
        return experiment
    return replace(experiment, tags=[*experiment.tags, tag])


def remove_tag(experiment: Experiment, tag: str) -> Experiment:
    if _ignored_when_locked(experiment, "tag remove"):
        return experiment
    return replace(experiment, tags=[t for t in experiment.tags if t != tag])


def set_metric_value(
    experiment: Experiment,
    metric_id: str,
    field: str,
    value: float | None,
) -> Experiment:
    """Upsert one field (baseline/target/actual) of a metric value.

    Raises:
        ValidationError: If field is not a metric field.
    """
    if field not in METRIC_FIELDS:
        raise ValidationError(f"Unknown metric field: {field}")
    if _ignored_when_locked(experiment, "metric edit"):
        return experiment

    values = [replace(mv) for mv in experiment.metric_values]
    for mv in values:
        if mv.metric_id == metric_id:
            setattr(mv, field, value)
            break
    else:
        values.append(MetricValue(metric_id=metric_id, **{field: value}))

    return replace(experiment, metric_values=values)


def add_comment(
    experiment: Experiment,
    text: str,
    *,
    user_id: str,
    user_name: str,
    has_attachment: bool = False,
) -> Experiment:
    """Append a comment. Allowed on locked experiments.

    Raises:
        ValidationError: If the text is blank.
    """
    if not text.strip():
        raise ValidationError("Comment must not be empty")
    comment = Comment(
        id=new_id(),
        user_id=user_id,
        user_name=user_name,
        text=text,
        timestamp=utc_now_iso(),
        has_attachment=has_attachment,
    )
    return replace(experiment, comments=[*experiment.comments, comment])

"""Conversions between domain dataclasses and API payload models."""

from __future__ import annotations

from typing import Any

from growthboard.core.scoring import composite_score, score_band
from growthboard.models.domain import (
    Board,
    BoardConfig,
    DimensionDefinition,
    DimensionScore,
    Experiment,
    MetricDefinition,
    MetricValue,
)
from growthboard.models.types import (
    BoardConfigModel,
    BoardDetail,
    CommentDetail,
    DimensionDefinitionModel,
    DimensionScoreModel,
    ExperimentDetail,
    ExperimentUpdate,
    MetricDefinitionModel,
    MetricValueModel,
)


def config_to_model(config: BoardConfig) -> BoardConfigModel:
    return BoardConfigModel(
        metrics=[
            MetricDefinitionModel(id=m.id, name=m.name, unit=m.unit, description=m.description)
            for m in config.metrics
        ],
        dimensions=[
            DimensionDefinitionModel(
                id=d.id, name=d.name, min=d.min, max=d.max, description=d.description
            )
            for d in config.dimensions
        ],
        use_custom_dimensions=config.use_custom_dimensions,
    )


def config_from_model(model: BoardConfigModel) -> BoardConfig:
    return BoardConfig(
        metrics=[MetricDefinition(**m.model_dump()) for m in model.metrics],
        dimensions=[DimensionDefinition(**d.model_dump()) for d in model.dimensions],
        use_custom_dimensions=model.use_custom_dimensions,
    )


def board_to_detail(board: Board) -> BoardDetail:
    """Convert Board to BoardDetail."""
    return BoardDetail(
        id=board.id,
        name=board.name,
        description=board.description,
        created_at=board.created_at,
        config=config_to_model(board.config) if board.config else None,
    )


def scores_from_models(models: list[DimensionScoreModel]) -> list[DimensionScore]:
    return [DimensionScore(dimension_id=m.dimension_id, value=m.value) for m in models]


def metric_values_from_models(models: list[MetricValueModel]) -> list[MetricValue]:
    return [MetricValue(**m.model_dump()) for m in models]


def experiment_to_detail(experiment: Experiment, board: Board | None) -> ExperimentDetail:
    """Convert Experiment to ExperimentDetail, with its composite score."""
    score = composite_score(experiment, board)
    return ExperimentDetail(
        id=experiment.id,
        board_id=experiment.board_id,
        board_name=board.name if board else None,
        title=experiment.title,
        description=experiment.description,
        status=experiment.status,
        ice_impact=experiment.ice_impact,
        ice_confidence=experiment.ice_confidence,
        ice_ease=experiment.ice_ease,
        dimension_scores=[
            DimensionScoreModel(dimension_id=s.dimension_id, value=s.value)
            for s in experiment.dimension_scores
        ],
        metric_values=[
            MetricValueModel(
                metric_id=v.metric_id, baseline=v.baseline, target=v.target, actual=v.actual
            )
            for v in experiment.metric_values
        ],
        market=experiment.market,
        type=experiment.type,
        tags=list(experiment.tags),
        created_at=experiment.created_at,
        archived=experiment.archived,
        locked=experiment.locked,
        result=experiment.result,
        owner=experiment.owner,
        comments=[
            CommentDetail(
                id=c.id,
                user_id=c.user_id,
                user_name=c.user_name,
                text=c.text,
                timestamp=c.timestamp,
                has_attachment=c.has_attachment,
            )
            for c in experiment.comments
        ],
        composite_score=score,
        score_band=score_band(score),
    )


def update_to_changes(update: ExperimentUpdate) -> dict[str, Any]:
    """Turn a partial update into workspace changes. Only set fields are included."""
    changes = update.model_dump(exclude_unset=True)
    if update.dimension_scores is not None:
        changes["dimension_scores"] = scores_from_models(update.dimension_scores)
    if update.metric_values is not None:
        changes["metric_values"] = metric_values_from_models(update.metric_values)
    # Explicit nulls on non-nullable fields mean "leave alone"
    for key in list(changes):
        if changes[key] is None and key != "result":
            del changes[key]
    return changes

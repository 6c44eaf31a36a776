"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping domain logic pure.
Returns domain models (not SQLAlchemy entities) to external callers.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.orm import Session

from growthboard.core.identity import parse_timestamp
from growthboard.db.schema import Board, Experiment, ExperimentComment
from growthboard.models.domain import Board as BoardEntity
from growthboard.models.domain import (
    BoardConfig,
    Comment,
    DimensionDefinition,
    DimensionScore,
    MetricDefinition,
    MetricValue,
)
from growthboard.models.domain import Experiment as ExperimentEntity

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession"]


# ============================================================================
# Timestamp helpers
# ============================================================================


def _to_datetime(value: str) -> datetime:
    """ISO string -> naive UTC datetime for storage."""
    if not value:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    return parse_timestamp(value).astimezone(timezone.utc).replace(tzinfo=None)


def _to_iso(value: datetime) -> str:
    """Stored datetime (naive UTC) -> ISO string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


# ============================================================================
# Converters: JSON columns
# ============================================================================


def _config_to_json(config: BoardConfig | None) -> str | None:
    if config is None:
        return None
    return json.dumps(
        {
            "metrics": [
                {"id": m.id, "name": m.name, "unit": m.unit, "description": m.description}
                for m in config.metrics
            ],
            "dimensions": [
                {
                    "id": d.id,
                    "name": d.name,
                    "description": d.description,
                    "min": d.min,
                    "max": d.max,
                }
                for d in config.dimensions
            ],
            "useCustomDimensions": config.use_custom_dimensions,
        }
    )


def _config_from_json(raw: str | None) -> BoardConfig | None:
    if not raw:
        return None
    data = json.loads(raw)
    return BoardConfig(
        metrics=[MetricDefinition(**m) for m in data.get("metrics", [])],
        dimensions=[DimensionDefinition(**d) for d in data.get("dimensions", [])],
        use_custom_dimensions=bool(data.get("useCustomDimensions", False)),
    )


def _scores_to_json(scores: list[DimensionScore]) -> str:
    return json.dumps([{"dimensionId": s.dimension_id, "value": s.value} for s in scores])


def _scores_from_json(raw: str | None) -> list[DimensionScore]:
    if not raw:
        return []
    return [DimensionScore(dimension_id=s["dimensionId"], value=s["value"]) for s in json.loads(raw)]


def _metric_values_to_json(values: list[MetricValue]) -> str:
    return json.dumps(
        [
            {"metricId": v.metric_id, "baseline": v.baseline, "target": v.target, "actual": v.actual}
            for v in values
        ]
    )


def _metric_values_from_json(raw: str | None) -> list[MetricValue]:
    if not raw:
        return []
    return [
        MetricValue(
            metric_id=v["metricId"],
            baseline=v.get("baseline"),
            target=v.get("target"),
            actual=v.get("actual"),
        )
        for v in json.loads(raw)
    ]


# ============================================================================
# Converters: SQLAlchemy -> Domain
# ============================================================================


def _board_to_entity(board: Board) -> BoardEntity:
    """Convert SQLAlchemy Board to domain entity."""
    return BoardEntity(
        id=board.id,
        name=board.name,
        description=board.description,
        created_at=_to_iso(board.created_at),
        config=_config_from_json(board.config_json),
    )


def _comment_to_entity(comment: ExperimentComment) -> Comment:
    """Convert SQLAlchemy ExperimentComment to domain entity."""
    return Comment(
        id=comment.id,
        user_id=comment.user_id,
        user_name=comment.user_name,
        text=comment.text,
        timestamp=_to_iso(comment.created_at),
        has_attachment=comment.has_attachment,
    )


def _experiment_to_entity(exp: Experiment, comments: list[Comment]) -> ExperimentEntity:
    """Convert SQLAlchemy Experiment to domain entity."""
    return ExperimentEntity(
        id=exp.id,
        board_id=exp.board_id,
        title=exp.title,
        description=exp.description,
        status=exp.status,
        ice_impact=exp.ice_impact,
        ice_confidence=exp.ice_confidence,
        ice_ease=exp.ice_ease,
        dimension_scores=_scores_from_json(exp.dimension_scores_json),
        metric_values=_metric_values_from_json(exp.metric_values_json),
        market=exp.market,
        type=exp.type,
        tags=json.loads(exp.tags_json) if exp.tags_json else [],
        created_at=_to_iso(exp.created_at),
        archived=exp.archived,
        locked=exp.locked,
        result=exp.result,
        owner=exp.owner,
        comments=comments,
    )


# ============================================================================
# Board Repository
# ============================================================================


def list_boards(session: DbSession) -> list[BoardEntity]:
    """Get all boards, oldest first."""
    boards = session.query(Board).order_by(Board.created_at.asc()).all()
    return [_board_to_entity(b) for b in boards]


def get_board(session: DbSession, board_id: str) -> BoardEntity | None:
    """Get board by ID."""
    board = session.query(Board).filter(Board.id == board_id).first()
    return _board_to_entity(board) if board else None


def upsert_board(session: DbSession, entity: BoardEntity) -> BoardEntity:
    """Insert or replace a board."""
    board = session.query(Board).filter(Board.id == entity.id).first()
    if board is None:
        board = Board(id=entity.id, created_at=_to_datetime(entity.created_at))
        session.add(board)
    board.name = entity.name
    board.description = entity.description
    board.config_json = _config_to_json(entity.config)
    return entity


# ============================================================================
# Experiment Repository
# ============================================================================


def _comments_by_experiment(
    session: DbSession, experiment_ids: list[str]
) -> dict[str, list[Comment]]:
    """Load comments for many experiments in one query, in insertion order."""
    if not experiment_ids:
        return {}
    rows = (
        session.query(ExperimentComment)
        .filter(ExperimentComment.experiment_id.in_(experiment_ids))
        .order_by(ExperimentComment.experiment_id, ExperimentComment.position)
        .all()
    )
    grouped: dict[str, list[Comment]] = {}
    for row in rows:
        grouped.setdefault(row.experiment_id, []).append(_comment_to_entity(row))
    return grouped


def list_experiments(session: DbSession, board_id: str | None = None) -> list[ExperimentEntity]:
    """Get experiments (optionally for one board), newest first."""
    query = session.query(Experiment)
    if board_id is not None:
        query = query.filter(Experiment.board_id == board_id)
    experiments = query.order_by(Experiment.created_at.desc()).all()
    comments = _comments_by_experiment(session, [e.id for e in experiments])
    return [_experiment_to_entity(e, comments.get(e.id, [])) for e in experiments]


def get_experiment(session: DbSession, experiment_id: str) -> ExperimentEntity | None:
    """Get experiment by ID, with its comments."""
    exp = session.query(Experiment).filter(Experiment.id == experiment_id).first()
    if exp is None:
        return None
    comments = _comments_by_experiment(session, [exp.id])
    return _experiment_to_entity(exp, comments.get(exp.id, []))


def upsert_experiment(session: DbSession, entity: ExperimentEntity) -> ExperimentEntity:
    """Insert or replace an experiment's fields.

    Comments are not written here; use append_comment.
    """
    exp = session.query(Experiment).filter(Experiment.id == entity.id).first()
    if exp is None:
        exp = Experiment(id=entity.id, created_at=_to_datetime(entity.created_at))
        session.add(exp)
    exp.board_id = entity.board_id
    exp.title = entity.title
    exp.description = entity.description
    exp.status = entity.status
    exp.ice_impact = entity.ice_impact
    exp.ice_confidence = entity.ice_confidence
    exp.ice_ease = entity.ice_ease
    exp.dimension_scores_json = _scores_to_json(entity.dimension_scores)
    exp.metric_values_json = _metric_values_to_json(entity.metric_values)
    exp.market = entity.market
    exp.type = entity.type
    exp.tags_json = json.dumps(entity.tags)
    exp.archived = entity.archived
    exp.locked = entity.locked
    exp.result = entity.result
    exp.owner = entity.owner
    return entity


def delete_experiment(session: DbSession, experiment_id: str) -> bool:
    """Delete an experiment and its comments.

    Returns:
        True if a row was deleted.
    """
    session.query(ExperimentComment).filter(
        ExperimentComment.experiment_id == experiment_id
    ).delete(synchronize_session=False)
    deleted = session.query(Experiment).filter(Experiment.id == experiment_id).delete(
        synchronize_session=False
    )
    return deleted > 0


# ============================================================================
# Comment Repository
# ============================================================================


def append_comment(session: DbSession, experiment_id: str, comment: Comment) -> Comment:
    """Append a comment at the next position."""
    last = (
        session.query(func.max(ExperimentComment.position))
        .filter(ExperimentComment.experiment_id == experiment_id)
        .scalar()
    )
    row = ExperimentComment(
        id=comment.id,
        experiment_id=experiment_id,
        position=0 if last is None else last + 1,
        user_id=comment.user_id,
        user_name=comment.user_name,
        text=comment.text,
        has_attachment=comment.has_attachment,
        created_at=_to_datetime(comment.timestamp),
    )
    session.add(row)
    return comment


# ============================================================================
# Batch Operations
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    session.commit()

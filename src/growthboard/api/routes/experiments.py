"""Experiments API endpoints.

POST /api/experiments - Create experiment
GET /api/experiments/{experiment_id} - Get experiment
PATCH /api/experiments/{experiment_id} - Partial update (form save)
DELETE /api/experiments/{experiment_id} - Delete permanently
PUT /api/experiments/{experiment_id}/status - Status edit / kanban drop
PUT /api/experiments/{experiment_id}/result - Record outcome
POST /api/experiments/{experiment_id}/archive - Archive
POST /api/experiments/{experiment_id}/complete - Complete and lock
PUT /api/experiments/{experiment_id}/dimensions/{dimension_id} - Score a dimension
PUT /api/experiments/{experiment_id}/metrics/{metric_id} - Record metric values
POST /api/experiments/{experiment_id}/tags - Add tag
DELETE /api/experiments/{experiment_id}/tags/{tag} - Remove tag
POST /api/experiments/{experiment_id}/comments - Append comment
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from growthboard.api.app import get_owner, get_workspace
from growthboard.api.convert import (
    experiment_to_detail,
    metric_values_from_models,
    scores_from_models,
    update_to_changes,
)
from growthboard.core.errors import LockedRecordError
from growthboard.models.domain import Experiment
from growthboard.models.types import (
    CommentCreate,
    DimensionValueUpdate,
    ExperimentCreate,
    ExperimentDetail,
    ExperimentUpdate,
    MetricValueUpdate,
    ResultUpdate,
    StatusUpdate,
    TagCreate,
)
from growthboard.workspace import Workspace

router = APIRouter()


def _detail(workspace: Workspace, experiment: Experiment) -> ExperimentDetail:
    return experiment_to_detail(experiment, workspace.find_board(experiment.board_id))


def _require_unlocked(workspace: Workspace, experiment_id: str) -> None:
    """Surface the silent locked no-op as 409 so clients know nothing changed.

    Raises:
        NotFoundError: 404 if experiment not found.
        LockedRecordError: 409 if the experiment is locked.
    """
    if workspace.get_experiment(experiment_id).locked:
        raise LockedRecordError(experiment_id)


@router.post("/experiments", response_model=ExperimentDetail, status_code=201)
def create_experiment(
    body: ExperimentCreate,
    workspace: Workspace = Depends(get_workspace),
    owner: str = Depends(get_owner),
) -> ExperimentDetail:
    """Create an experiment in status 'idea'.

    Raises:
        NotFoundError: 404 if the board does not exist.
        ValidationError: 422 on a blank title or invalid scores.
    """
    experiment = workspace.add_experiment(
        body.board_id,
        body.title,
        owner=owner,
        description=body.description,
        market=body.market,
        type=body.type,
        ice_impact=body.ice_impact,
        ice_confidence=body.ice_confidence,
        ice_ease=body.ice_ease,
        tags=body.tags,
        dimension_scores=scores_from_models(body.dimension_scores),
        metric_values=metric_values_from_models(body.metric_values),
    )
    return _detail(workspace, experiment)


@router.get("/experiments/{experiment_id}", response_model=ExperimentDetail)
def get_experiment(
    experiment_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    """Get one experiment with its composite score."""
    return _detail(workspace, workspace.get_experiment(experiment_id))


@router.patch("/experiments/{experiment_id}", response_model=ExperimentDetail)
def update_experiment(
    experiment_id: str,
    body: ExperimentUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    """Apply a partial update. Only fields present in the body change."""
    _require_unlocked(workspace, experiment_id)
    experiment = workspace.update_experiment(experiment_id, update_to_changes(body))
    return _detail(workspace, experiment)


@router.delete("/experiments/{experiment_id}", status_code=204)
def delete_experiment(
    experiment_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> Response:
    """Delete permanently, locked or not."""
    workspace.delete(experiment_id)
    return Response(status_code=204)


@router.put("/experiments/{experiment_id}/status", response_model=ExperimentDetail)
def update_status(
    experiment_id: str,
    body: StatusUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    """Set status directly (manual edit or kanban drop)."""
    _require_unlocked(workspace, experiment_id)
    return _detail(workspace, workspace.move_card(experiment_id, body.status))


@router.put("/experiments/{experiment_id}/result", response_model=ExperimentDetail)
def update_result(
    experiment_id: str,
    body: ResultUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    """Record won/lost/inconclusive (status must be complete or learnings)."""
    _require_unlocked(workspace, experiment_id)
    return _detail(workspace, workspace.set_result(experiment_id, body.result))


@router.post("/experiments/{experiment_id}/archive", response_model=ExperimentDetail)
def archive_experiment(
    experiment_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    """Archive into learnings. Locked experiments are returned unchanged."""
    return _detail(workspace, workspace.archive(experiment_id))


@router.post("/experiments/{experiment_id}/complete", response_model=ExperimentDetail)
def complete_experiment(
    experiment_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    """Complete: archive into learnings and lock."""
    return _detail(workspace, workspace.complete(experiment_id))


@router.put(
    "/experiments/{experiment_id}/dimensions/{dimension_id}",
    response_model=ExperimentDetail,
)
def set_dimension_value(
    experiment_id: str,
    dimension_id: str,
    body: DimensionValueUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    """Score one dimension; reserved ICE ids also update the legacy field."""
    _require_unlocked(workspace, experiment_id)
    experiment = workspace.set_dimension_value(experiment_id, dimension_id, body.value)
    return _detail(workspace, experiment)


@router.put("/experiments/{experiment_id}/metrics/{metric_id}", response_model=ExperimentDetail)
def set_metric_values(
    experiment_id: str,
    metric_id: str,
    body: MetricValueUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    """Record baseline/target/actual; fields absent from the body are left alone."""
    _require_unlocked(workspace, experiment_id)
    experiment = workspace.get_experiment(experiment_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        experiment = workspace.set_metric_value(experiment_id, metric_id, field, value)
    return _detail(workspace, experiment)


@router.post("/experiments/{experiment_id}/tags", response_model=ExperimentDetail)
def add_tag(
    experiment_id: str,
    body: TagCreate,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    _require_unlocked(workspace, experiment_id)
    return _detail(workspace, workspace.add_tag(experiment_id, body.tag))


@router.delete("/experiments/{experiment_id}/tags/{tag}", response_model=ExperimentDetail)
def remove_tag(
    experiment_id: str,
    tag: str,
    workspace: Workspace = Depends(get_workspace),
) -> ExperimentDetail:
    _require_unlocked(workspace, experiment_id)
    return _detail(workspace, workspace.remove_tag(experiment_id, tag))


@router.post(
    "/experiments/{experiment_id}/comments",
    response_model=ExperimentDetail,
    status_code=201,
)
def add_comment(
    experiment_id: str,
    body: CommentCreate,
    workspace: Workspace = Depends(get_workspace),
    owner: str = Depends(get_owner),
) -> ExperimentDetail:
    """Append a comment. Locked experiments still accept comments."""
    experiment = workspace.add_comment(
        experiment_id, body.text, has_attachment=body.has_attachment, owner=owner
    )
    return _detail(workspace, experiment)

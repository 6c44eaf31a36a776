"""Analytics API endpoints.

GET /api/boards/{board_id}/analytics - Dashboard summary for a board
GET /api/boards/{board_id}/metrics/{metric_id}/summary - One metric's summary
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from growthboard.aggregation.metrics import aggregate_metric
from growthboard.api.app import get_workspace
from growthboard.core.errors import NotFoundError
from growthboard.models.types import BoardAnalytics, MetricSummary
from growthboard.workspace import Workspace

router = APIRouter()


@router.get("/boards/{board_id}/analytics", response_model=BoardAnalytics)
def get_board_analytics(
    board_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> BoardAnalytics:
    """Active/completed counts, win rate, velocity, average score,
    metric summaries and distributions for a board.
    """
    return workspace.analytics(board_id)


@router.get("/boards/{board_id}/metrics/{metric_id}/summary", response_model=MetricSummary)
def get_metric_summary(
    board_id: str,
    metric_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> MetricSummary:
    """Baseline/target/actual averages for one board metric.

    Raises:
        NotFoundError: 404 if the board or metric does not exist.
    """
    board = workspace.get_board(board_id)
    metrics = board.config.metrics if board.config else []
    for metric in metrics:
        if metric.id == metric_id:
            return aggregate_metric(metric, workspace.board_experiments(board_id))
    raise NotFoundError("Metric", metric_id)

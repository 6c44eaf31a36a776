"""Boards API endpoints.

GET /api/boards - List boards
POST /api/boards - Create board
PATCH /api/boards/{board_id} - Rename / describe board
PUT /api/boards/{board_id}/config - Save metric and dimension configuration
GET /api/boards/{board_id}/experiments - Vault listing with search and filters
GET /api/boards/{board_id}/kanban - Kanban columns
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from growthboard.api.app import get_workspace
from growthboard.api.convert import board_to_detail, config_from_model, experiment_to_detail
from growthboard.board.vault import VaultQuery
from growthboard.models.domain import STATUS_LABELS
from growthboard.models.types import (
    BoardConfigModel,
    BoardCreate,
    BoardDetail,
    BoardUpdate,
    ExperimentDetail,
    KanbanBoard,
    KanbanColumnDetail,
)
from growthboard.workspace import Workspace

router = APIRouter()


@router.get("/boards", response_model=list[BoardDetail])
def list_boards(workspace: Workspace = Depends(get_workspace)) -> list[BoardDetail]:
    """List all boards."""
    return [board_to_detail(b) for b in workspace.boards]


@router.post("/boards", response_model=BoardDetail, status_code=201)
def create_board(
    body: BoardCreate,
    workspace: Workspace = Depends(get_workspace),
) -> BoardDetail:
    """Create a board with the default ICE configuration."""
    return board_to_detail(workspace.create_board(body.name, body.description))


@router.patch("/boards/{board_id}", response_model=BoardDetail)
def update_board(
    board_id: str,
    body: BoardUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> BoardDetail:
    """Update a board's name and/or description.

    Raises:
        NotFoundError: 404 if board not found.
    """
    board = workspace.update_board(board_id, name=body.name, description=body.description)
    return board_to_detail(board)


@router.put("/boards/{board_id}/config", response_model=BoardDetail)
def save_board_config(
    board_id: str,
    body: BoardConfigModel,
    workspace: Workspace = Depends(get_workspace),
) -> BoardDetail:
    """Save a board's metrics and scoring dimensions.

    Blank rows are dropped; duplicate ids or max <= min yield 422.
    """
    board = workspace.save_board_config(board_id, config_from_model(body))
    return board_to_detail(board)


@router.get("/boards/{board_id}/experiments", response_model=list[ExperimentDetail])
def list_board_experiments(
    board_id: str,
    q: str = "",
    status: str | None = Query(default=None),
    result: str | None = Query(default=None),
    market: str | None = Query(default=None),
    type: str | None = Query(default=None),
    workspace: Workspace = Depends(get_workspace),
) -> list[ExperimentDetail]:
    """Vault listing: search title/description/tags and filter.

    result=pending matches experiments with no result yet.
    """
    query = VaultQuery(search=q, status=status, result=result, market=market, type=type)
    board = workspace.get_board(board_id)
    return [experiment_to_detail(e, board) for e in workspace.vault(board_id, query)]


@router.get("/boards/{board_id}/kanban", response_model=KanbanBoard)
def get_kanban(
    board_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> KanbanBoard:
    """Kanban columns (one per status) of non-archived experiments."""
    board = workspace.get_board(board_id)
    columns = workspace.kanban(board_id)
    return KanbanBoard(
        board_id=board_id,
        columns=[
            KanbanColumnDetail(
                status=status,
                label=STATUS_LABELS[status],
                experiments=[experiment_to_detail(e, board) for e in experiments],
            )
            for status, experiments in columns.items()
        ],
    )

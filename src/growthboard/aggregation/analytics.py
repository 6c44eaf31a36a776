"""Board analytics summary.

Computes dashboard figures for one board: active/completed counts,
win rate, 30-day velocity, average composite score, metric summaries
and distributions by type, market and status.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from growthboard.aggregation.metrics import aggregate_metric
from growthboard.core.identity import parse_timestamp
from growthboard.core.scoring import composite_score, round1
from growthboard.models.domain import (
    MARKETS,
    RESULT_STATUSES,
    STATUS_LABELS,
    STATUSES,
    TYPES,
    Board,
    Experiment,
)
from growthboard.models.types import BoardAnalytics, DistributionBucket

VELOCITY_WINDOW = timedelta(days=30)


def summarize_board(
    experiments: list[Experiment],
    board: Board | None = None,
    *,
    now: datetime | None = None,
) -> BoardAnalytics:
    """Compute the analytics dashboard for a board.

    Args:
        experiments: The board's experiments (archived included).
        board: Board whose metrics and scoring mode apply.
        now: Reference time for velocity (defaults to current UTC time).

    Returns:
        BoardAnalytics summary.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    active = [e for e in experiments if not e.archived]
    completed = [e for e in experiments if e.status in RESULT_STATUSES]

    return BoardAnalytics(
        board_id=board.id if board else None,
        active_count=len(active),
        completed_count=len(completed),
        win_rate=_win_rate(completed),
        velocity=_velocity(completed, now),
        avg_score=_average_score(active, board),
        metric_summaries=[
            aggregate_metric(metric, experiments)
            for metric in (board.config.metrics if board and board.config else [])
        ],
        by_type=[
            DistributionBucket(label=t, value=sum(1 for e in active if e.type == t))
            for t in TYPES
        ],
        by_market=[
            DistributionBucket(label=m, value=sum(1 for e in active if e.market == m))
            for m in MARKETS
        ],
        by_status=[
            DistributionBucket(
                label=STATUS_LABELS[s], value=sum(1 for e in active if e.status == s)
            )
            for s in STATUSES
        ],
    )


def _win_rate(completed: list[Experiment]) -> int:
    """Percentage of completed experiments with a result that won."""
    with_result = [e for e in completed if e.result]
    if not with_result:
        return 0
    wins = sum(1 for e in with_result if e.result == "won")
    return math.floor(wins / len(with_result) * 100 + 0.5)


def _velocity(completed: list[Experiment], now: datetime) -> int:
    """Completed experiments created within the velocity window."""
    cutoff = now - VELOCITY_WINDOW
    count = 0
    for experiment in completed:
        if not experiment.created_at:
            continue
        try:
            created = parse_timestamp(experiment.created_at)
        except ValueError:
            continue
        if created >= cutoff:
            count += 1
    return count


def _average_score(active: list[Experiment], board: Board | None) -> float:
    if not active:
        return 0.0
    total = sum(composite_score(e, board) for e in active)
    return round1(total / len(active))

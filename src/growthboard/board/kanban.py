"""Kanban board grouping.

One column per status, in lifecycle order, over the board's
non-archived experiments. Dropping a card is a plain status edit.
"""

from __future__ import annotations

from growthboard.core.lifecycle import set_status
from growthboard.models.domain import STATUSES, Experiment


def build_columns(experiments: list[Experiment]) -> dict[str, list[Experiment]]:
    """Group non-archived experiments by status.

    Every status gets a column (possibly empty); card order follows
    input order.
    """
    columns: dict[str, list[Experiment]] = {status: [] for status in STATUSES}
    for experiment in experiments:
        if experiment.archived:
            continue
        columns[experiment.status].append(experiment)
    return columns


def drop_card(experiment: Experiment, status: str) -> Experiment:
    """Move a card to another column (no-op when locked)."""
    return set_status(experiment, status)

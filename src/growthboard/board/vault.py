"""Vault search and filtering.

Case-insensitive search over title, description and tags, combined
with exact filters on status, result, market and type. Archived
experiments stay searchable.
"""

from __future__ import annotations

from dataclasses import dataclass

from growthboard.models.domain import Experiment

ALL = "all"
PENDING = "pending"


@dataclass
class VaultQuery:
    """Vault filter state. None or 'all' disables a filter."""

    search: str = ""
    status: str | None = None
    result: str | None = None
    market: str | None = None
    type: str | None = None


def _enabled(value: str | None) -> bool:
    return value is not None and value != ALL


def matches_search(experiment: Experiment, search: str) -> bool:
    term = search.strip().lower()
    if not term:
        return True
    return (
        term in experiment.title.lower()
        or term in experiment.description.lower()
        or any(term in tag.lower() for tag in experiment.tags)
    )


def matches(experiment: Experiment, query: VaultQuery) -> bool:
    """Whether an experiment passes every active filter.

    The result filter accepts 'pending' for experiments with no result.
    """
    if not matches_search(experiment, query.search):
        return False
    if _enabled(query.status) and experiment.status != query.status:
        return False
    if _enabled(query.result):
        if query.result == PENDING:
            if experiment.result:
                return False
        elif experiment.result != query.result:
            return False
    if _enabled(query.market) and experiment.market != query.market:
        return False
    if _enabled(query.type) and experiment.type != query.type:
        return False
    return True


def filter_experiments(experiments: list[Experiment], query: VaultQuery) -> list[Experiment]:
    """Apply a vault query, preserving input order."""
    return [e for e in experiments if matches(e, query)]

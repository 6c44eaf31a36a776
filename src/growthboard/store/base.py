"""Base store interface.

The persistence capability the workspace is constructed with:
record-shaped CRUD over boards and experiments keyed by string id.
Stores hold no domain rules; validation, locking and scoring happen
before a record reaches them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from growthboard.models.domain import Board, Comment, Experiment


class ExperimentStore(ABC):
    """Abstract base class for board/experiment persistence.

    Implementations raise any exception on failure; the workspace
    wraps it in SyncFailure.
    """

    @abstractmethod
    def fetch_boards(self) -> list[Board]:
        """Return every board."""

    @abstractmethod
    def fetch_experiments(self) -> list[Experiment]:
        """Return every experiment with its comments, newest first."""

    @abstractmethod
    def upsert_board(self, board: Board) -> None:
        """Insert or replace a board."""

    @abstractmethod
    def upsert_experiment(self, experiment: Experiment) -> None:
        """Insert or replace an experiment's fields (not its comments)."""

    @abstractmethod
    def delete_experiment(self, experiment_id: str) -> None:
        """Remove an experiment and its comments permanently."""

    @abstractmethod
    def append_comment(self, experiment_id: str, comment: Comment) -> None:
        """Append a comment to an experiment."""

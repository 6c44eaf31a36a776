"""Session workspace: local board/experiment state plus store sync.

Every mutation is applied to the local copy first (the UI responds
immediately), then written to the store. A failed write is logged and
queued rather than rolled back; queued writes are replayed in order by
flush_pending(), and later writes queue behind earlier failures so the
store never sees them out of order.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Any, Callable

from growthboard.aggregation.analytics import summarize_board
from growthboard.board.kanban import build_columns, drop_card
from growthboard.board.vault import VaultQuery, filter_experiments
from growthboard.config import Settings
from growthboard.core import lifecycle, scoring
from growthboard.core.errors import NotFoundError, SyncFailure, ValidationError
from growthboard.core.identity import new_id, utc_now_iso
from growthboard.models.domain import Board, BoardConfig, Experiment
from growthboard.models.types import BoardAnalytics
from growthboard.store.base import ExperimentStore

logger = logging.getLogger(__name__)


@dataclass
class PendingWrite:
    """A store write that has not reached the store yet."""

    operation: str
    record_id: str
    apply: Callable[[], None]


class Workspace:
    """Boards and experiments for one session, synced to a store.

    Args:
        store: Persistence capability (in-memory for guest mode, SQL for live).
        owner: Display name stamped on new experiments and comments.
        user_id: Identifier stamped on comments.
        settings: Runtime settings (only require_result_on_complete is used).
    """

    def __init__(
        self,
        store: ExperimentStore,
        *,
        owner: str = "Me",
        user_id: str = "local",
        settings: Settings | None = None,
    ):
        self.store = store
        self.owner = owner
        self.user_id = user_id
        self.settings = settings or Settings()
        self._boards: dict[str, Board] = {}
        self._experiments: list[Experiment] = []
        self._pending: deque[PendingWrite] = deque()

    # ------------------------------------------------------------------
    # Loading and lookup
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace local state with a full fetch from the store.

        On a store error the workspace is left empty and the error logged.
        """
        try:
            boards = self.store.fetch_boards()
            experiments = self.store.fetch_experiments()
        except Exception as e:
            logger.error(f"Failed to load workspace from store: {e}")
            boards, experiments = [], []
        self._boards = {b.id: b for b in boards}
        self._experiments = sorted(experiments, key=lambda e: e.created_at, reverse=True)
        logger.info(f"Loaded {len(self._boards)} boards and {len(self._experiments)} experiments")

    @property
    def boards(self) -> list[Board]:
        return list(self._boards.values())

    @property
    def experiments(self) -> list[Experiment]:
        """All experiments, newest first."""
        return list(self._experiments)

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    def get_board(self, board_id: str) -> Board:
        board = self._boards.get(board_id)
        if board is None:
            raise NotFoundError("Board", board_id)
        return board

    def find_board(self, board_id: str) -> Board | None:
        return self._boards.get(board_id)

    def get_experiment(self, experiment_id: str) -> Experiment:
        for experiment in self._experiments:
            if experiment.id == experiment_id:
                return experiment
        raise NotFoundError("Experiment", experiment_id)

    def board_experiments(self, board_id: str) -> list[Experiment]:
        return [e for e in self._experiments if e.board_id == board_id]

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def _sync(self, operation: str, record_id: str, apply: Callable[[], None]) -> None:
        """Issue a store write after the local update.

        Writes queue behind any earlier failure to keep store order.
        """
        write = PendingWrite(operation=operation, record_id=record_id, apply=apply)
        if self._pending:
            self._pending.append(write)
            logger.debug(f"Queued {operation} for {record_id} behind {len(self._pending) - 1}")
            return
        try:
            apply()
        except Exception as e:
            failure = SyncFailure(operation, record_id, e)
            logger.warning(f"Sync failure, queued for retry: {failure}")
            self._pending.append(write)

    def flush_pending(self) -> int:
        """Replay queued writes in order, stopping at the first failure.

        Returns:
            Number of writes that reached the store.
        """
        flushed = 0
        while self._pending:
            write = self._pending[0]
            try:
                write.apply()
            except Exception as e:
                logger.warning(f"Retry failed: {SyncFailure(write.operation, write.record_id, e)}")
                break
            self._pending.popleft()
            flushed += 1
        if flushed:
            logger.info(f"Flushed {flushed} pending writes ({len(self._pending)} remaining)")
        return flushed

    def _replace_experiment(self, updated: Experiment) -> Experiment:
        self._experiments = [updated if e.id == updated.id else e for e in self._experiments]
        return updated

    def _commit_experiment(self, operation: str, before: Experiment, after: Experiment) -> Experiment:
        """Store a changed experiment locally and remotely. Unchanged records skip the store."""
        if after is before:
            return before
        self._replace_experiment(after)
        self._sync(operation, after.id, lambda: self.store.upsert_experiment(after))
        return after

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    def create_board(self, name: str, description: str = "") -> Board:
        """Create a board with the default (ICE) configuration.

        Raises:
            ValidationError: If the name is blank.
        """
        if not name.strip():
            raise ValidationError("Board name is required")
        board = Board(
            id=new_id(),
            name=name.strip(),
            description=description,
            created_at=utc_now_iso(),
            config=BoardConfig(),
        )
        self._boards[board.id] = board
        self._sync("create_board", board.id, lambda: self.store.upsert_board(board))
        return board

    def update_board(
        self,
        board_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Board:
        board = self.get_board(board_id)
        changes: dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Board name is required")
            changes["name"] = name.strip()
        if description is not None:
            changes["description"] = description
        updated = replace(board, **changes)
        self._boards[board_id] = updated
        self._sync("update_board", board_id, lambda: self.store.upsert_board(updated))
        return updated

    def save_board_config(self, board_id: str, config: BoardConfig) -> Board:
        """Validate and store a board's metric/dimension configuration.

        Raises:
            NotFoundError: If the board does not exist.
            ValidationError: If the configuration is invalid.
        """
        board = self.get_board(board_id)
        cleaned = lifecycle.clean_board_config(config)
        updated = replace(board, config=cleaned)
        self._boards[board_id] = updated
        self._sync("save_board_config", board_id, lambda: self.store.upsert_board(updated))
        return updated

    # ------------------------------------------------------------------
    # Experiments
    # ------------------------------------------------------------------

    def add_experiment(
        self,
        board_id: str,
        title: str,
        *,
        owner: str | None = None,
        **fields: Any,
    ) -> Experiment:
        """Create an experiment on a board, newest first in the list.

        owner overrides the workspace owner for this record. The record
        is hydrated with one entry per board metric and active dimension.

        Raises:
            NotFoundError: If the board does not exist.
            ValidationError: If the record is invalid (e.g. blank title).
        """
        board = self.get_board(board_id)
        draft = lifecycle.new_experiment(board_id, title, owner=owner or self.owner, **fields)
        scoring.check_score_ranges(draft, board)
        experiment = scoring.hydrate(draft, board)
        self._experiments.insert(0, experiment)
        self._sync(
            "add_experiment", experiment.id, lambda: self.store.upsert_experiment(experiment)
        )
        logger.info(f"Created experiment {experiment.id} on board {board_id}")
        return experiment

    def update_experiment(self, experiment_id: str, changes: dict[str, Any]) -> Experiment:
        before = self.get_experiment(experiment_id)
        after = lifecycle.apply_update(before, changes)
        scoring.check_score_ranges(after, self.find_board(before.board_id))
        return self._commit_experiment("update_experiment", before, after)

    def update_status(self, experiment_id: str, status: str) -> Experiment:
        before = self.get_experiment(experiment_id)
        return self._commit_experiment("update_status", before, lifecycle.set_status(before, status))

    def move_card(self, experiment_id: str, status: str) -> Experiment:
        """Kanban drop onto a status column."""
        before = self.get_experiment(experiment_id)
        return self._commit_experiment("move_card", before, drop_card(before, status))

    def set_result(self, experiment_id: str, result: str | None) -> Experiment:
        before = self.get_experiment(experiment_id)
        return self._commit_experiment("set_result", before, lifecycle.set_result(before, result))

    def archive(self, experiment_id: str) -> Experiment:
        before = self.get_experiment(experiment_id)
        after = self._commit_experiment("archive", before, lifecycle.archive(before))
        if after is not before:
            logger.info(f"Archived experiment {experiment_id}")
        return after

    def complete(self, experiment_id: str) -> Experiment:
        before = self.get_experiment(experiment_id)
        after = lifecycle.complete(
            before, require_result=self.settings.require_result_on_complete
        )
        after = self._commit_experiment("complete", before, after)
        if after is not before:
            logger.info(f"Completed and locked experiment {experiment_id}")
        return after

    def delete(self, experiment_id: str) -> None:
        """Delete permanently (allowed on locked experiments).

        Raises:
            NotFoundError: If the experiment does not exist.
        """
        self._experiments = lifecycle.delete(self._experiments, experiment_id)
        self._sync("delete", experiment_id, lambda: self.store.delete_experiment(experiment_id))
        logger.info(f"Deleted experiment {experiment_id}")

    def set_dimension_value(self, experiment_id: str, dimension_id: str, value: int) -> Experiment:
        """Score one dimension of the experiment's board.

        Raises:
            NotFoundError: If the dimension is not active on the board.
            ScoreRangeError: If value is outside the dimension's range.
        """
        before = self.get_experiment(experiment_id)
        board = self.find_board(before.board_id)
        for dimension in scoring.active_dimensions(board):
            if dimension.id == dimension_id:
                break
        else:
            raise NotFoundError("Dimension", dimension_id)
        after = scoring.set_dimension_value(before, dimension, value)
        return self._commit_experiment("set_dimension_value", before, after)

    def set_metric_value(
        self,
        experiment_id: str,
        metric_id: str,
        field: str,
        value: float | None,
    ) -> Experiment:
        """Set baseline/target/actual for a board metric.

        Raises:
            NotFoundError: If the metric is not configured on the board.
        """
        before = self.get_experiment(experiment_id)
        board = self.find_board(before.board_id)
        metrics = board.config.metrics if board is not None and board.config else []
        if not any(m.id == metric_id for m in metrics):
            raise NotFoundError("Metric", metric_id)
        after = lifecycle.set_metric_value(before, metric_id, field, value)
        return self._commit_experiment("set_metric_value", before, after)

    def add_tag(self, experiment_id: str, tag: str) -> Experiment:
        before = self.get_experiment(experiment_id)
        return self._commit_experiment("add_tag", before, lifecycle.add_tag(before, tag))

    def remove_tag(self, experiment_id: str, tag: str) -> Experiment:
        before = self.get_experiment(experiment_id)
        return self._commit_experiment("remove_tag", before, lifecycle.remove_tag(before, tag))

    def add_comment(
        self,
        experiment_id: str,
        text: str,
        *,
        has_attachment: bool = False,
        owner: str | None = None,
        user_id: str | None = None,
    ) -> Experiment:
        """Append a comment (open even on locked experiments)."""
        before = self.get_experiment(experiment_id)
        after = lifecycle.add_comment(
            before,
            text,
            user_id=user_id or self.user_id,
            user_name=owner or self.owner,
            has_attachment=has_attachment,
        )
        self._replace_experiment(after)
        comment = after.comments[-1]
        self._sync(
            "add_comment", experiment_id, lambda: self.store.append_comment(experiment_id, comment)
        )
        return after

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def composite_score(self, experiment: Experiment) -> float:
        return scoring.composite_score(experiment, self.find_board(experiment.board_id))

    def analytics(self, board_id: str) -> BoardAnalytics:
        board = self.get_board(board_id)
        return summarize_board(self.board_experiments(board_id), board)

    def vault(self, board_id: str, query: VaultQuery | None = None) -> list[Experiment]:
        self.get_board(board_id)
        return filter_experiments(self.board_experiments(board_id), query or VaultQuery())

    def kanban(self, board_id: str) -> dict[str, list[Experiment]]:
        self.get_board(board_id)
        return build_columns(self.board_experiments(board_id))

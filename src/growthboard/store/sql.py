"""SQL-backed store for live mode.

Each call runs in its own transaction through the repository layer.
"""

from __future__ import annotations

from pathlib import Path

from growthboard.db import repo
from growthboard.db.session import init_db, session_scope
from growthboard.models.domain import Board, Comment, Experiment
from growthboard.store.base import ExperimentStore


class SqlStore(ExperimentStore):
    """Store backed by a SQLAlchemy database."""

    def __init__(self, db_path: Path | str | None = None, *, create_tables: bool = True):
        """Initialize SQL store.

        Args:
            db_path: SQLite path, ":memory:", or a database URL.
            create_tables: Create missing tables on startup.
        """
        self.db_path = db_path
        if create_tables:
            init_db(db_path)

    def fetch_boards(self) -> list[Board]:
        with session_scope(self.db_path) as session:
            return repo.list_boards(session)

    def fetch_experiments(self) -> list[Experiment]:
        with session_scope(self.db_path) as session:
            return repo.list_experiments(session)

    def upsert_board(self, board: Board) -> None:
        with session_scope(self.db_path) as session:
            repo.upsert_board(session, board)

    def upsert_experiment(self, experiment: Experiment) -> None:
        with session_scope(self.db_path) as session:
            repo.upsert_experiment(session, experiment)

    def delete_experiment(self, experiment_id: str) -> None:
        with session_scope(self.db_path) as session:
            repo.delete_experiment(session, experiment_id)

    def append_comment(self, experiment_id: str, comment: Comment) -> None:
        with session_scope(self.db_path) as session:
            repo.append_comment(session, experiment_id, comment)

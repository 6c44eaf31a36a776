"""Database schema for Growthboard.

Boards, experiments and their comments. Nested value lists (board
config, dimension scores, metric values, tags) are stored as JSON text
columns, matching the record shape the UI exchanges.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Board(Base):
    """A named workspace scoping experiments and their configuration."""

    __tablename__ = "boards"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    config_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )


class Experiment(Base):
    """A growth experiment on a board."""

    __tablename__ = "experiments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    board_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("boards.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="idea")
    ice_impact: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    ice_confidence: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    ice_ease: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    dimension_scores_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    metric_values_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    market: Mapped[str] = mapped_column(String(16), nullable=False, default="US")
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="Acquisition")
    tags_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    result: Mapped[str | None] = mapped_column(String(16), nullable=True)
    owner: Mapped[str] = mapped_column(String(256), nullable=False, default="Me")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )


class ExperimentComment(Base):
    """Comment on an experiment (append-only).

    Invariant: UNIQUE(experiment_id, position)
    Preserves insertion order per experiment.
    """

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    experiment_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("experiments.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_name: Mapped[str] = mapped_column(String(256), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    has_attachment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        UniqueConstraint("experiment_id", "position", name="uq_comment_position"),
    )

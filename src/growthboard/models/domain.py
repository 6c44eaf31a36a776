"""Domain models for Growthboard.

Pure Python dataclasses representing domain entities.
These models are independent of SQLAlchemy and used throughout
the application for clean separation from the database layer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal

# ============================================================================
# Enumerations
# ============================================================================

ExperimentStatus = Literal["idea", "hypothesis", "running", "complete", "learnings"]
ExperimentResult = Literal["won", "lost", "inconclusive"]
MetricField = Literal["baseline", "target", "actual"]

STATUSES: tuple[str, ...] = ("idea", "hypothesis", "running", "complete", "learnings")
RESULTS: tuple[str, ...] = ("won", "lost", "inconclusive")
RESULT_STATUSES: frozenset[str] = frozenset({"complete", "learnings"})

STATUS_LABELS: dict[str, str] = {
    "idea": "Idea/Backlog",
    "hypothesis": "Prioritized",
    "running": "In Progress",
    "complete": "Complete",
    "learnings": "Learnings",
}

MARKETS: tuple[str, ...] = ("US", "UK", "CA", "AU", "NZ", "SG")
TYPES: tuple[str, ...] = ("Acquisition", "Retention", "Monetization", "Product", "Referral")

# Legacy ICE range
ICE_MIN = 1
ICE_MAX = 10


# ============================================================================
# Board Configuration Domain
# ============================================================================


@dataclass
class MetricDefinition:
    """A tracked KPI type scoped to a board."""

    id: str
    name: str
    unit: str = ""
    description: str | None = None


@dataclass
class DimensionDefinition:
    """A ranged scoring axis scoped to a board."""

    id: str
    name: str
    min: int = ICE_MIN
    max: int = ICE_MAX
    description: str | None = None

    @property
    def midpoint(self) -> int:
        """Midpoint of the range, halves rounded up (6 for 1-10, 3 for 1-5)."""
        return math.floor((self.min + self.max) / 2 + 0.5)

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max


DEFAULT_DIMENSIONS: tuple[DimensionDefinition, ...] = (
    DimensionDefinition(
        id="ice_impact",
        name="Impact",
        description="How much will this move the needle?",
    ),
    DimensionDefinition(
        id="ice_confidence",
        name="Confidence",
        description="How sure are we?",
    ),
    DimensionDefinition(
        id="ice_ease",
        name="Ease",
        description="How easy is it?",
    ),
)


@dataclass
class BoardConfig:
    """Per-board metric and scoring configuration.

    When use_custom_dimensions is False the legacy ICE dimensions are
    used regardless of what is stored in dimensions.
    """

    metrics: list[MetricDefinition] = field(default_factory=list)
    dimensions: list[DimensionDefinition] = field(
        default_factory=lambda: list(DEFAULT_DIMENSIONS)
    )
    use_custom_dimensions: bool = False


# ============================================================================
# Board Domain
# ============================================================================


@dataclass
class Board:
    """Domain model for a board (workspace)."""

    id: str
    name: str
    description: str
    created_at: str
    config: BoardConfig | None = None


# ============================================================================
# Experiment Domain
# ============================================================================


@dataclass
class DimensionScore:
    """Score recorded for one dimension."""

    dimension_id: str
    value: int


@dataclass
class MetricValue:
    """Baseline/target/actual recorded for one metric."""

    metric_id: str
    baseline: float | None = None
    target: float | None = None
    actual: float | None = None


@dataclass
class Comment:
    """Domain model for an experiment comment (append-only)."""

    id: str
    user_id: str
    user_name: str
    text: str
    timestamp: str
    has_attachment: bool = False


@dataclass
class Experiment:
    """Domain model for an experiment."""

    id: str
    board_id: str
    title: str
    description: str = ""
    status: ExperimentStatus = "idea"

    # Legacy ICE, kept in sync with the reserved dimension ids
    ice_impact: int = 5
    ice_confidence: int = 5
    ice_ease: int = 5

    dimension_scores: list[DimensionScore] = field(default_factory=list)
    metric_values: list[MetricValue] = field(default_factory=list)

    market: str = "US"
    type: str = "Acquisition"
    tags: list[str] = field(default_factory=list)
    created_at: str = ""
    archived: bool = False
    locked: bool = False
    result: ExperimentResult | None = None
    owner: str = "Me"
    comments: list[Comment] = field(default_factory=list)

    def metric_value(self, metric_id: str) -> MetricValue | None:
        """Get the recorded value for a metric, if any."""
        for mv in self.metric_values:
            if mv.metric_id == metric_id:
                return mv
        return None

    def dimension_score(self, dimension_id: str) -> DimensionScore | None:
        """Get the recorded score for a dimension, if any."""
        for score in self.dimension_scores:
            if score.dimension_id == dimension_id:
                return score
        return None

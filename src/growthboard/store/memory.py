"""In-memory store for mock/guest mode.

Holds boards and experiments in process memory, optionally seeded with
demo data so the board, vault and analytics views have something to
show without a database. Nothing survives a restart.
"""

from __future__ import annotations

import copy

from growthboard.models.domain import (
    Board,
    BoardConfig,
    Comment,
    DimensionDefinition,
    DimensionScore,
    Experiment,
    MetricDefinition,
    MetricValue,
)
from growthboard.store.base import ExperimentStore

DEMO_GROWTH_BOARD_ID = "board-growth"
DEMO_PRODUCT_BOARD_ID = "board-product"


def demo_boards() -> list[Board]:
    """Boards shown in guest mode."""
    return [
        Board(
            id=DEMO_GROWTH_BOARD_ID,
            name="Growth Team",
            description="Acquisition and activation experiments",
            created_at="2024-01-02T09:00:00+00:00",
            config=BoardConfig(
                metrics=[
                    MetricDefinition(id="m-signup", name="Signup rate", unit="%"),
                    MetricDefinition(id="m-cac", name="CAC", unit="$"),
                ],
            ),
        ),
        Board(
            id=DEMO_PRODUCT_BOARD_ID,
            name="Product Bets",
            description="Bigger product bets scored on strategy",
            created_at="2024-01-05T09:00:00+00:00",
            config=BoardConfig(
                metrics=[MetricDefinition(id="m-retention", name="D30 retention", unit="%")],
                dimensions=[
                    DimensionDefinition(id="strategic", name="Strategic fit", min=1, max=5),
                    DimensionDefinition(id="reach", name="Reach", min=1, max=5),
                ],
                use_custom_dimensions=True,
            ),
        ),
    ]


def demo_experiments() -> list[Experiment]:
    """Experiments shown in guest mode, newest first."""
    return [
        Experiment(
            id="exp-referral",
            board_id=DEMO_GROWTH_BOARD_ID,
            title="Double-sided referral credit",
            description="Giving both sides $10 will lift referred signups.",
            status="running",
            ice_impact=8,
            ice_confidence=6,
            ice_ease=5,
            metric_values=[MetricValue(metric_id="m-signup", baseline=3.1, target=3.6)],
            market="US",
            type="Referral",
            tags=["referral", "incentive"],
            created_at="2024-03-10T10:00:00+00:00",
            owner="Demo User",
        ),
        Experiment(
            id="exp-onboarding",
            board_id=DEMO_GROWTH_BOARD_ID,
            title="Shorter onboarding checklist",
            description="Cutting onboarding to three steps will raise activation.",
            status="learnings",
            ice_impact=7,
            ice_confidence=8,
            ice_ease=9,
            metric_values=[
                MetricValue(metric_id="m-signup", baseline=3.0, target=3.3, actual=3.5),
            ],
            market="UK",
            type="Acquisition",
            tags=["onboarding"],
            created_at="2024-02-20T10:00:00+00:00",
            archived=True,
            locked=True,
            result="won",
            owner="Demo User",
            comments=[
                Comment(
                    id="c-1",
                    user_id="demo",
                    user_name="Demo User",
                    text="Rolled out to 100%.",
                    timestamp="2024-03-01T12:00:00+00:00",
                )
            ],
        ),
        Experiment(
            id="exp-pricing",
            board_id=DEMO_GROWTH_BOARD_ID,
            title="Annual plan discount banner",
            description="",
            status="idea",
            ice_impact=6,
            ice_confidence=4,
            ice_ease=8,
            market="AU",
            type="Monetization",
            created_at="2024-02-01T10:00:00+00:00",
            owner="Demo User",
        ),
        Experiment(
            id="exp-widget",
            board_id=DEMO_PRODUCT_BOARD_ID,
            title="Home screen widget",
            description="A widget keeps the app top of mind.",
            status="hypothesis",
            dimension_scores=[
                DimensionScore(dimension_id="strategic", value=4),
                DimensionScore(dimension_id="reach", value=3),
            ],
            market="US",
            type="Retention",
            tags=["mobile"],
            created_at="2024-01-15T10:00:00+00:00",
            owner="Demo User",
        ),
    ]


class InMemoryStore(ExperimentStore):
    """Store that keeps records in dictionaries.

    Records are deep-copied on the way in and out so callers never
    share mutable state with the store.
    """

    def __init__(
        self,
        boards: list[Board] | None = None,
        experiments: list[Experiment] | None = None,
    ):
        """Initialize in-memory store.

        Args:
            boards: Initial boards.
            experiments: Initial experiments.
        """
        self._boards: dict[str, Board] = {b.id: copy.deepcopy(b) for b in boards or []}
        self._experiments: dict[str, Experiment] = {
            e.id: copy.deepcopy(e) for e in experiments or []
        }

    @classmethod
    def with_demo_data(cls) -> InMemoryStore:
        """Store seeded with the guest-mode demo boards and experiments."""
        return cls(boards=demo_boards(), experiments=demo_experiments())

    def fetch_boards(self) -> list[Board]:
        return [copy.deepcopy(b) for b in self._boards.values()]

    def fetch_experiments(self) -> list[Experiment]:
        experiments = sorted(self._experiments.values(), key=lambda e: e.created_at, reverse=True)
        return [copy.deepcopy(e) for e in experiments]

    def upsert_board(self, board: Board) -> None:
        self._boards[board.id] = copy.deepcopy(board)

    def upsert_experiment(self, experiment: Experiment) -> None:
        stored = copy.deepcopy(experiment)
        existing = self._experiments.get(experiment.id)
        # Comments are only written through append_comment
        stored.comments = existing.comments if existing else []
        self._experiments[experiment.id] = stored

    def delete_experiment(self, experiment_id: str) -> None:
        self._experiments.pop(experiment_id, None)

    def append_comment(self, experiment_id: str, comment: Comment) -> None:
        experiment = self._experiments.get(experiment_id)
        if experiment is None:
            raise KeyError(f"Experiment not found: {experiment_id}")
        experiment.comments.append(copy.deepcopy(comment))

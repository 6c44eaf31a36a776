"""Tests for the session workspace.

Invariants:
1. Mutations apply locally even when the store write fails
2. Failed writes are queued and replayed in order
3. Unknown ids raise NotFoundError
"""

import logging

import pytest

from growthboard.config import Settings
from growthboard.core.errors import NotFoundError, ScoreRangeError, ValidationError
from growthboard.models.domain import BoardConfig, DimensionDefinition, MetricDefinition
from growthboard.store.memory import InMemoryStore
from growthboard.workspace import Workspace


class FlakyStore(InMemoryStore):
    """In-memory store whose writes fail while `failing` is set."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.failing = False
        self.fail_fetch = False
        self.writes: list[str] = []

    def _write(self, label: str) -> None:
        if self.failing:
            raise ConnectionError("store offline")
        self.writes.append(label)

    def fetch_boards(self):
        if self.fail_fetch:
            raise ConnectionError("store offline")
        return super().fetch_boards()

    def upsert_board(self, board):
        self._write(f"board:{board.id}")
        super().upsert_board(board)

    def upsert_experiment(self, experiment):
        self._write(f"experiment:{experiment.id}:{experiment.status}")
        super().upsert_experiment(experiment)

    def delete_experiment(self, experiment_id):
        self._write(f"delete:{experiment_id}")
        super().delete_experiment(experiment_id)

    def append_comment(self, experiment_id, comment):
        self._write(f"comment:{experiment_id}")
        super().append_comment(experiment_id, comment)


@pytest.fixture
def flaky_store(ice_board, custom_board, experiment):
    return FlakyStore(boards=[ice_board, custom_board], experiments=[experiment])


@pytest.fixture
def flaky_workspace(flaky_store):
    ws = Workspace(flaky_store)
    ws.load()
    return ws


class TestLoad:
    """Tests for Workspace.load."""

    def test_loads_store_contents(self, workspace):
        assert {b.id for b in workspace.boards} == {"b-ice", "b-custom"}
        assert [e.id for e in workspace.experiments] == ["e-1"]

    def test_store_failure_leaves_empty_state(self, flaky_store, caplog):
        flaky_store.fail_fetch = True
        ws = Workspace(flaky_store)
        with caplog.at_level(logging.ERROR, logger="growthboard.workspace"):
            ws.load()

        assert ws.boards == []
        assert ws.experiments == []
        assert "Failed to load" in caplog.text


class TestExperimentOperations:
    """Local updates flow through to the store."""

    def test_add_experiment_newest_first(self, workspace, store):
        created = workspace.add_experiment("b-ice", "Exit-intent popup")

        assert workspace.experiments[0].id == created.id
        assert created.owner == "Alice"
        assert any(e.id == created.id for e in store.fetch_experiments())

    def test_add_experiment_hydrated_for_board(self, workspace):
        created = workspace.add_experiment("b-ice", "Exit-intent popup", ice_impact=8)

        assert [mv.metric_id for mv in created.metric_values] == ["m-conv", "m-rev"]
        assert created.dimension_score("ice_impact").value == 8
        assert created.dimension_score("ice_ease").value == 5

    def test_legacy_edit_after_hydration(self, workspace, store):
        """A form edit of ice_impact should stick on a hydrated experiment."""
        created = workspace.add_experiment("b-ice", "Exit-intent popup")

        updated = workspace.update_experiment(created.id, {"ice_impact": 9})

        assert updated.ice_impact == 9
        assert updated.dimension_score("ice_impact").value == 9
        [stored] = [e for e in store.fetch_experiments() if e.id == created.id]
        assert stored.ice_impact == 9
        assert stored.dimension_score("ice_impact").value == 9

    def test_custom_dimension_seeded_half_up(self, workspace):
        workspace.save_board_config(
            "b-custom",
            BoardConfig(
                use_custom_dimensions=True,
                dimensions=[DimensionDefinition(id="reach", name="Reach", min=1, max=10)],
            ),
        )
        created = workspace.add_experiment("b-custom", "Referral nudge")

        assert created.dimension_score("reach").value == 6

    def test_add_experiment_owner_override(self, workspace):
        created = workspace.add_experiment("b-ice", "Exit-intent popup", owner="Bob")
        assert created.owner == "Bob"

    def test_add_experiment_unknown_board(self, workspace):
        with pytest.raises(NotFoundError):
            workspace.add_experiment("nope", "Orphan")

    def test_complete_persists_lock(self, workspace, store):
        workspace.complete("e-1")

        [stored] = store.fetch_experiments()
        assert stored.locked is True
        assert stored.status == "learnings"

    def test_complete_honours_require_result(self, store):
        ws = Workspace(store, settings=Settings(require_result_on_complete=True))
        ws.load()

        with pytest.raises(ValidationError):
            ws.complete("e-1")
        assert ws.get_experiment("e-1").locked is False

    def test_locked_edits_are_silent(self, workspace):
        workspace.complete("e-1")
        before = workspace.get_experiment("e-1")

        assert workspace.update_status("e-1", "running") is before
        assert workspace.archive("e-1") is before
        assert workspace.add_tag("e-1", "late") is before

    def test_comment_on_locked(self, workspace, store):
        workspace.complete("e-1")
        workspace.add_comment("e-1", "Shipped it")

        [stored] = store.fetch_experiments()
        assert [c.text for c in stored.comments] == ["Shipped it"]
        assert stored.comments[0].user_name == "Alice"

    def test_delete(self, workspace, store):
        workspace.delete("e-1")

        assert workspace.experiments == []
        assert store.fetch_experiments() == []

    @pytest.mark.parametrize(
        "call",
        [
            lambda ws: ws.update_status("missing", "running"),
            lambda ws: ws.archive("missing"),
            lambda ws: ws.complete("missing"),
            lambda ws: ws.delete("missing"),
            lambda ws: ws.add_tag("missing", "x"),
            lambda ws: ws.add_comment("missing", "hi"),
            lambda ws: ws.set_metric_value("missing", "m-conv", "actual", 1.0),
        ],
    )
    def test_unknown_experiment(self, workspace, call):
        with pytest.raises(NotFoundError):
            call(workspace)

    def test_dimension_must_be_active(self, workspace):
        with pytest.raises(NotFoundError):
            workspace.set_dimension_value("e-1", "strategic", 3)

    def test_dimension_range_checked(self, workspace):
        with pytest.raises(ScoreRangeError):
            workspace.set_dimension_value("e-1", "ice_impact", 11)
        assert workspace.get_experiment("e-1").ice_impact == 9

    def test_dimension_syncs_legacy(self, workspace):
        updated = workspace.set_dimension_value("e-1", "ice_confidence", 2)
        assert updated.ice_confidence == 2
        assert workspace.composite_score(updated) == 5.0

    def test_metric_must_be_on_board(self, workspace):
        with pytest.raises(NotFoundError):
            workspace.set_metric_value("e-1", "m-unknown", "actual", 1.0)

    def test_metric_value(self, workspace):
        workspace.set_metric_value("e-1", "m-conv", "target", 4.0)
        updated = workspace.set_metric_value("e-1", "m-conv", "actual", 5.0)

        assert updated.metric_value("m-conv").target == 4.0
        summary = workspace.analytics("b-ice").metric_summaries[0]
        assert summary.hit is True


class TestBoards:
    """Tests for board operations."""

    def test_create_board_defaults(self, workspace, store):
        board = workspace.create_board("  Retention  ", "Keep users")

        assert board.name == "Retention"
        assert board.config.use_custom_dimensions is False
        assert [d.id for d in board.config.dimensions] == [
            "ice_impact",
            "ice_confidence",
            "ice_ease",
        ]
        assert any(b.id == board.id for b in store.fetch_boards())

    def test_create_board_blank_name(self, workspace):
        with pytest.raises(ValidationError):
            workspace.create_board(" ")

    def test_update_board(self, workspace):
        board = workspace.update_board("b-ice", description="Funnel work")

        assert board.name == "Growth"
        assert board.description == "Funnel work"

    def test_save_board_config(self, workspace):
        config = BoardConfig(
            metrics=[MetricDefinition(id="m-new", name="NPS"), MetricDefinition(id="x", name="")],
            dimensions=[DimensionDefinition(id="reach", name="Reach", min=1, max=5)],
            use_custom_dimensions=True,
        )
        board = workspace.save_board_config("b-ice", config)

        assert [m.id for m in board.config.metrics] == ["m-new"]
        assert workspace.get_board("b-ice").config.use_custom_dimensions is True

    def test_invalid_config_leaves_board(self, workspace):
        config = BoardConfig(
            dimensions=[DimensionDefinition(id="d", name="Bad", min=5, max=1)],
            use_custom_dimensions=True,
        )
        with pytest.raises(ValidationError):
            workspace.save_board_config("b-ice", config)
        assert workspace.get_board("b-ice").config.use_custom_dimensions is False


class TestSync:
    """Failed writes are queued, not rolled back."""

    def test_failure_keeps_local_change(self, flaky_workspace, flaky_store, caplog):
        flaky_store.failing = True
        with caplog.at_level(logging.WARNING, logger="growthboard.workspace"):
            flaky_workspace.update_status("e-1", "running")

        assert flaky_workspace.get_experiment("e-1").status == "running"
        assert flaky_workspace.pending_writes == 1
        assert "Sync failure" in caplog.text

    def test_later_writes_queue_behind_failure(self, flaky_workspace, flaky_store):
        flaky_store.failing = True
        flaky_workspace.update_status("e-1", "running")
        flaky_store.failing = False
        flaky_workspace.update_status("e-1", "complete")

        assert flaky_store.writes == []
        assert flaky_workspace.pending_writes == 2

    def test_flush_replays_in_order(self, flaky_workspace, flaky_store):
        flaky_store.failing = True
        flaky_workspace.update_status("e-1", "running")
        flaky_workspace.update_status("e-1", "complete")
        flaky_workspace.add_comment("e-1", "note")

        flaky_store.failing = False
        assert flaky_workspace.flush_pending() == 3

        assert flaky_store.writes == [
            "experiment:e-1:running",
            "experiment:e-1:complete",
            "comment:e-1",
        ]
        assert flaky_workspace.pending_writes == 0
        [stored] = flaky_store.fetch_experiments()
        assert stored.status == "complete"

    def test_flush_stops_at_failure(self, flaky_workspace, flaky_store):
        flaky_store.failing = True
        flaky_workspace.update_status("e-1", "running")

        assert flaky_workspace.flush_pending() == 0
        assert flaky_workspace.pending_writes == 1

    def test_unchanged_record_skips_store(self, flaky_workspace, flaky_store):
        flaky_workspace.complete("e-1")
        flaky_store.writes.clear()

        flaky_workspace.update_status("e-1", "idea")

        assert flaky_store.writes == []

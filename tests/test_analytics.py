"""Tests for board analytics."""

from datetime import datetime, timezone

from growthboard.aggregation.analytics import summarize_board
from growthboard.models.domain import DimensionScore, Experiment, MetricValue

NOW = datetime(2024, 6, 30, tzinfo=timezone.utc)


def make(id: str, **fields) -> Experiment:
    fields.setdefault("created_at", "2024-06-20T00:00:00+00:00")
    return Experiment(id=id, board_id="b-ice", title=id, **fields)


class TestSummarizeBoard:
    """Tests for summarize_board."""

    def test_empty_board(self, ice_board):
        summary = summarize_board([], ice_board, now=NOW)

        assert summary.board_id == "b-ice"
        assert summary.active_count == 0
        assert summary.completed_count == 0
        assert summary.win_rate == 0
        assert summary.velocity == 0
        assert summary.avg_score == 0.0
        assert [m.count for m in summary.metric_summaries] == [0, 0]

    def test_counts(self, ice_board):
        experiments = [
            make("a", status="running"),
            make("b", status="complete", result="won"),
            make("c", status="learnings", archived=True, result="lost"),
        ]
        summary = summarize_board(experiments, ice_board, now=NOW)

        assert summary.active_count == 2
        assert summary.completed_count == 2

    def test_win_rate_ignores_missing_results(self, ice_board):
        experiments = [
            make("a", status="complete", result="won"),
            make("b", status="complete", result="lost"),
            make("c", status="complete", result="won"),
            make("d", status="learnings"),
        ]
        # 2 of 3 with a result -> 66.7% -> 67
        assert summarize_board(experiments, ice_board, now=NOW).win_rate == 67

    def test_win_rate_half_rounds_up(self, ice_board):
        experiments = [
            make(str(i), status="complete", result="won" if i < 1 else "lost") for i in range(8)
        ]
        # 1 of 8 -> 12.5% -> 13
        assert summarize_board(experiments, ice_board, now=NOW).win_rate == 13

    def test_velocity_window(self, ice_board):
        experiments = [
            make("recent", status="complete", created_at="2024-06-15T00:00:00+00:00"),
            make("old", status="complete", created_at="2024-04-01T00:00:00+00:00"),
            make("running", status="running", created_at="2024-06-29T00:00:00+00:00"),
        ]
        assert summarize_board(experiments, ice_board, now=NOW).velocity == 1

    def test_avg_score_over_active_only(self, ice_board):
        experiments = [
            make("a", ice_impact=8, ice_confidence=8, ice_ease=8),
            make("b", ice_impact=4, ice_confidence=4, ice_ease=4),
            make("c", ice_impact=1, ice_confidence=1, ice_ease=1, archived=True),
        ]
        assert summarize_board(experiments, ice_board, now=NOW).avg_score == 6.0

    def test_avg_score_uses_custom_dimensions(self, custom_board):
        experiments = [
            make("a", dimension_scores=[DimensionScore(dimension_id="strategic", value=5)]),
            make("b", dimension_scores=[DimensionScore(dimension_id="strategic", value=2)]),
        ]
        assert summarize_board(experiments, custom_board, now=NOW).avg_score == 3.5

    def test_metric_summaries_follow_board_order(self, ice_board):
        experiments = [
            make("a", metric_values=[MetricValue(metric_id="m-rev", target=10.0, actual=12.0)]),
        ]
        summaries = summarize_board(experiments, ice_board, now=NOW).metric_summaries

        assert [s.metric_id for s in summaries] == ["m-conv", "m-rev"]
        assert summaries[1].hit is True

    def test_distributions_include_zero_buckets(self, ice_board):
        experiments = [make("a", market="UK", type="Retention")]
        summary = summarize_board(experiments, ice_board, now=NOW)

        by_market = {b.label: b.value for b in summary.by_market}
        assert by_market["UK"] == 1
        assert by_market["US"] == 0
        assert len(summary.by_type) == 5
        assert [b.label for b in summary.by_status] == [
            "Idea/Backlog",
            "Prioritized",
            "In Progress",
            "Complete",
            "Learnings",
        ]

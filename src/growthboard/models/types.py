"""Pydantic models for the Growthboard API.

Request bodies, response payloads, and the summary shapes produced
by the aggregation layer.
"""

from typing import Literal

from pydantic import BaseModel, Field

Status = Literal["idea", "hypothesis", "running", "complete", "learnings"]
Result = Literal["won", "lost", "inconclusive"]
Band = Literal["high", "good", "fair", "low"]


# ============================================================================
# Board configuration
# ============================================================================


class MetricDefinitionModel(BaseModel):
    """Metric definition as sent/received by the UI."""

    id: str
    name: str
    unit: str = ""
    description: str | None = None


class DimensionDefinitionModel(BaseModel):
    """Dimension definition as sent/received by the UI."""

    id: str
    name: str
    min: int = 1
    max: int = 10
    description: str | None = None


class BoardConfigModel(BaseModel):
    """Board configuration payload."""

    metrics: list[MetricDefinitionModel] = Field(default_factory=list)
    dimensions: list[DimensionDefinitionModel] = Field(default_factory=list)
    use_custom_dimensions: bool = False


class BoardCreate(BaseModel):
    """Board creation / rename request."""

    name: str = Field(min_length=1)
    description: str = ""


class BoardUpdate(BaseModel):
    """Partial board update."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None


class BoardDetail(BaseModel):
    """Board details for API response."""

    id: str
    name: str
    description: str
    created_at: str
    config: BoardConfigModel | None


# ============================================================================
# Experiments
# ============================================================================


class DimensionScoreModel(BaseModel):
    dimension_id: str
    value: int


class MetricValueModel(BaseModel):
    metric_id: str
    baseline: float | None = None
    target: float | None = None
    actual: float | None = None


class CommentDetail(BaseModel):
    id: str
    user_id: str
    user_name: str
    text: str
    timestamp: str
    has_attachment: bool = False


class ExperimentCreate(BaseModel):
    """New experiment request."""

    board_id: str
    title: str
    description: str = ""
    market: str = "US"
    type: str = "Acquisition"
    ice_impact: int | None = None
    ice_confidence: int | None = None
    ice_ease: int | None = None
    tags: list[str] = Field(default_factory=list)
    dimension_scores: list[DimensionScoreModel] = Field(default_factory=list)
    metric_values: list[MetricValueModel] = Field(default_factory=list)


class ExperimentUpdate(BaseModel):
    """Partial experiment update (form save). Unset fields are left alone."""

    title: str | None = None
    description: str | None = None
    status: Status | None = None
    ice_impact: int | None = None
    ice_confidence: int | None = None
    ice_ease: int | None = None
    dimension_scores: list[DimensionScoreModel] | None = None
    metric_values: list[MetricValueModel] | None = None
    market: str | None = None
    type: str | None = None
    tags: list[str] | None = None
    result: Result | None = None


class ExperimentDetail(BaseModel):
    """Experiment details for API response."""

    id: str
    board_id: str
    board_name: str | None
    title: str
    description: str
    status: Status
    ice_impact: int
    ice_confidence: int
    ice_ease: int
    dimension_scores: list[DimensionScoreModel]
    metric_values: list[MetricValueModel]
    market: str
    type: str
    tags: list[str]
    created_at: str
    archived: bool
    locked: bool
    result: Result | None
    owner: str
    comments: list[CommentDetail]
    composite_score: float
    score_band: Band


class StatusUpdate(BaseModel):
    status: Status


class ResultUpdate(BaseModel):
    result: Result | None


class DimensionValueUpdate(BaseModel):
    value: int


class MetricValueUpdate(BaseModel):
    """Set any of baseline/target/actual; unset fields are left alone."""

    baseline: float | None = None
    target: float | None = None
    actual: float | None = None


class TagCreate(BaseModel):
    tag: str


class CommentCreate(BaseModel):
    text: str = Field(min_length=1)
    has_attachment: bool = False


# ============================================================================
# Aggregation
# ============================================================================


class MetricSummary(BaseModel):
    """Baseline/target/actual averages for one metric across experiments.

    Averages are None when no experiment recorded that value.
    """

    metric_id: str
    name: str
    unit: str
    count: int
    avg_baseline: float | None
    avg_target: float | None
    avg_actual: float | None
    hit: bool | None = None
    progress: float | None = None


class DistributionBucket(BaseModel):
    label: str
    value: int


class BoardAnalytics(BaseModel):
    """Dashboard summary for a board."""

    board_id: str | None
    active_count: int
    completed_count: int
    win_rate: int
    velocity: int
    avg_score: float
    metric_summaries: list[MetricSummary]
    by_type: list[DistributionBucket]
    by_market: list[DistributionBucket]
    by_status: list[DistributionBucket]


class KanbanColumnDetail(BaseModel):
    status: Status
    label: str
    experiments: list[ExperimentDetail]


class KanbanBoard(BaseModel):
    board_id: str
    columns: list[KanbanColumnDetail]

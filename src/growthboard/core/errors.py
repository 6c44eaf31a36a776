"""Domain error taxonomy.

Raised by the core and the workspace; the api layer maps them to
HTTP status codes.
"""

from __future__ import annotations


class GrowthboardError(Exception):
    """Base class for all Growthboard domain errors."""


class ValidationError(GrowthboardError, ValueError):
    """A write was rejected; no state was mutated."""


class ScoreRangeError(ValidationError):
    """A dimension score fell outside the dimension's [min, max]."""

    def __init__(self, dimension_id: str, value: int, min_value: int, max_value: int):
        self.dimension_id = dimension_id
        self.value = value
        self.min_value = min_value
        self.max_value = max_value
        super().__init__(
            f"Score {value} for dimension '{dimension_id}' outside "
            f"[{min_value}, {max_value}]"
        )


class LockedRecordError(GrowthboardError):
    """A field mutation was attempted on a locked experiment."""

    def __init__(self, experiment_id: str):
        self.experiment_id = experiment_id
        super().__init__(f"Experiment is locked: {experiment_id}")


class NotFoundError(GrowthboardError, LookupError):
    """A referenced board, experiment, metric or dimension does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class SyncFailure(GrowthboardError):
    """A best-effort remote write failed after the local update was applied."""

    def __init__(self, operation: str, record_id: str, cause: Exception):
        self.operation = operation
        self.record_id = record_id
        self.cause = cause
        super().__init__(f"{operation} failed for {record_id}: {cause}")

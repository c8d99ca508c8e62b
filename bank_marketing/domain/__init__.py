"""Domain layer: entities and protocols."""

from .entities import (
    DatasetSplit,
    ColumnSummary,
    ChiSquaredResult,
    ModelResult,
    EvaluationResult,
)

from .protocols import (
    IClassifier,
    IMetric,
)

__all__ = [
    "DatasetSplit",
    "ColumnSummary",
    "ChiSquaredResult",
    "ModelResult",
    "EvaluationResult",
    "IClassifier",
    "IMetric",
]

"""Domain entities for the bank marketing analysis pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np
import polars as pl


@dataclass(frozen=True)
class DatasetSplit:
    """Disjoint train/validation partitions of the bank dataset.

    Both frames carry a ``row_id`` column holding the row's index in the
    original table.
    """
    train: pl.DataFrame
    validation: pl.DataFrame
    n_repaired: int = 0

    @property
    def train_ids(self) -> set[int]:
        return set(self.train["row_id"].to_list())

    @property
    def validation_ids(self) -> set[int]:
        return set(self.validation["row_id"].to_list())

    def is_disjoint(self) -> bool:
        return self.train_ids.isdisjoint(self.validation_ids)


@dataclass(frozen=True)
class ColumnSummary:
    """Descriptive summary of a single attribute."""
    column: str
    n_distinct: int
    distinct_values: list[Any]
    counts: pl.DataFrame
    minimum: float | None = None
    maximum: float | None = None
    n_unknown: int = 0


@dataclass(frozen=True)
class ChiSquaredResult:
    """Pearson chi-squared test of independence between a column and the label."""
    column: str
    statistic: float
    p_value: float
    dof: int
    simulated: bool = False
    n_simulations: int | None = None

    def is_significant(self, alpha: float = 0.05) -> bool:
        return self.p_value < alpha


@dataclass
class ModelResult:
    """Metrics for a single fitted model on a holdout set."""
    model_key: str
    model_name: str
    accuracy: float
    f1_score: float
    auc: float | None = None
    sensitivity: float | None = None
    specificity: float | None = None
    confusion_matrix: np.ndarray | None = None
    best_params: dict[str, Any] | None = None
    fit_seconds: float = 0.0

    def as_row(self) -> dict[str, Any]:
        return {
            "Model": self.model_name,
            "Accuracy": self.accuracy,
            "AUC": self.auc,
            "F1_score": self.f1_score,
        }


@dataclass
class EvaluationResult:
    """Evaluation of the final model against the final holdout set."""
    metrics: dict[str, float]
    predictions: np.ndarray
    actuals: np.ndarray
    model_name: str
    scores: np.ndarray | None = None
    evaluation_timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

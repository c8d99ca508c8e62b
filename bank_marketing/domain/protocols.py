"""Protocol interfaces for the bank marketing pipeline components."""

from typing import Protocol, runtime_checkable

import numpy as np
import polars as pl


@runtime_checkable
class IClassifier(Protocol):
    """Interface for binary term-deposit classifiers.

    Implementations wrap an estimator together with the feature encoding it
    needs, so they accept raw dataset frames.
    """

    @property
    def model_name(self) -> str:
        """Return the model's identifier."""
        ...

    @property
    def is_fitted(self) -> bool:
        """Check if the model has been trained."""
        ...

    def fit(self, df: pl.DataFrame) -> "IClassifier":
        """Train the model on a labelled frame."""
        ...

    def predict(self, df: pl.DataFrame) -> np.ndarray:
        """Predict 0/1 labels."""
        ...

    def predict_scores(self, df: pl.DataFrame) -> np.ndarray | None:
        """Return positive-class probabilities, or None for class-only models."""
        ...


@runtime_checkable
class IMetric(Protocol):
    """Interface for evaluation metrics."""

    @property
    def name(self) -> str:
        """Return the metric's identifier."""
        ...

    @property
    def requires_scores(self) -> bool:
        """Whether the metric needs positive-class scores instead of labels."""
        ...

    def compute(
        self,
        y_true: np.ndarray,
        y_pred: np.ndarray,
        y_score: np.ndarray | None = None,
    ) -> float:
        """Compute the metric value."""
        ...

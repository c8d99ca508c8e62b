"""Metric implementations for term-deposit classifier evaluation.

Provides accuracy, macro F1 and ROC AUC, plus per-class rates read off
the confusion matrix. Labels are 0/1 with 1 meaning the client subscribed.
"""

from dataclasses import dataclass

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    f1_score,
    roc_auc_score,
    roc_curve,
)


@dataclass(frozen=True)
class AccuracyMetric:
    """Share of correctly classified rows."""

    @property
    def name(self) -> str:
        return "accuracy"

    @property
    def requires_scores(self) -> bool:
        return False

    def compute(self, y_true: np.ndarray, y_pred: np.ndarray, y_score: np.ndarray | None = None) -> float:
        return float(accuracy_score(y_true, y_pred))


@dataclass(frozen=True)
class MacroF1Metric:
    """F1 score averaged over both classes with equal weight."""

    @property
    def name(self) -> str:
        return "f1_score"

    @property
    def requires_scores(self) -> bool:
        return False

    def compute(self, y_true: np.ndarray, y_pred: np.ndarray, y_score: np.ndarray | None = None) -> float:
        return float(f1_score(y_true, y_pred, average="macro", labels=[0, 1], zero_division=0))


@dataclass(frozen=True)
class AUCMetric:
    """Area under the ROC curve of the positive-class scores.

    Note: needs both classes present in y_true.
    """

    @property
    def name(self) -> str:
        return "auc"

    @property
    def requires_scores(self) -> bool:
        return True

    def compute(self, y_true: np.ndarray, y_pred: np.ndarray, y_score: np.ndarray | None = None) -> float:
        if y_score is None:
            raise ValueError("AUC requires positive-class scores")
        return float(roc_auc_score(y_true, y_score))


@dataclass(frozen=True)
class SensitivityMetric:
    """True positive rate for subscribers."""

    @property
    def name(self) -> str:
        return "sensitivity"

    @property
    def requires_scores(self) -> bool:
        return False

    def compute(self, y_true: np.ndarray, y_pred: np.ndarray, y_score: np.ndarray | None = None) -> float:
        tn, fp, fn, tp = compute_confusion_matrix(y_true, y_pred).ravel()
        if tp + fn == 0:
            return 0.0
        return float(tp / (tp + fn))


@dataclass(frozen=True)
class SpecificityMetric:
    """True negative rate for non-subscribers."""

    @property
    def name(self) -> str:
        return "specificity"

    @property
    def requires_scores(self) -> bool:
        return False

    def compute(self, y_true: np.ndarray, y_pred: np.ndarray, y_score: np.ndarray | None = None) -> float:
        tn, fp, fn, tp = compute_confusion_matrix(y_true, y_pred).ravel()
        if tn + fp == 0:
            return 0.0
        return float(tn / (tn + fp))


def create_standard_metrics() -> list:
    """Create the metrics reported for every model."""
    return [
        AccuracyMetric(),
        AUCMetric(),
        MacroF1Metric(),
        SensitivityMetric(),
        SpecificityMetric(),
    ]


def compute_all_metrics(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    y_score: np.ndarray | None = None,
    metrics: list | None = None,
) -> dict[str, float]:
    """Compute all specified metrics.

    Metrics that need scores are skipped when y_score is None, so
    class-only models simply have no AUC entry.

    Args:
        y_true: Actual 0/1 labels
        y_pred: Predicted 0/1 labels
        y_score: Optional positive-class probabilities
        metrics: List of metric instances. If None, uses standard metrics.

    Returns:
        Dictionary mapping metric names to computed values
    """
    if metrics is None:
        metrics = create_standard_metrics()

    results = {}
    for metric in metrics:
        if metric.requires_scores and y_score is None:
            continue
        results[metric.name] = metric.compute(y_true, y_pred, y_score)
    return results


def compute_confusion_matrix(y_true: np.ndarray, y_pred: np.ndarray) -> np.ndarray:
    """2x2 confusion matrix, rows actual and columns predicted, order (0, 1)."""
    return confusion_matrix(y_true, y_pred, labels=[0, 1])


def format_confusion_matrix(
    matrix: np.ndarray,
    labels: tuple[str, str] = ("no", "yes"),
) -> str:
    """Render a 2x2 confusion matrix as text."""
    width = max(len(labels[0]), len(labels[1]), 8)
    lines = [
        f"{'actual/pred':<12} {labels[0]:>{width}} {labels[1]:>{width}}",
        f"{labels[0]:<12} {int(matrix[0, 0]):>{width},} {int(matrix[0, 1]):>{width},}",
        f"{labels[1]:<12} {int(matrix[1, 0]):>{width},} {int(matrix[1, 1]):>{width},}",
    ]
    return "\n".join(lines)


def compute_roc(
    y_true: np.ndarray,
    y_score: np.ndarray,
    target_class: int = 1,
) -> tuple[np.ndarray, np.ndarray, float]:
    """ROC curve for one class, treating it as the positive class.

    Returns:
        Tuple of (false positive rates, true positive rates, AUC)
    """
    y_true = np.asarray(y_true)
    y_score = np.asarray(y_score, dtype=np.float64)
    if target_class == 0:
        y_true = 1 - y_true
        y_score = 1.0 - y_score
    fpr, tpr, _ = roc_curve(y_true, y_score)
    return fpr, tpr, float(roc_auc_score(y_true, y_score))


def compute_baseline_metrics(
    y_test: np.ndarray,
    y_train: np.ndarray,
) -> dict[str, float]:
    """Compute baseline metrics (predict the majority training class).

    Useful for comparison against trained model performance.
    """
    majority = int(np.bincount(np.asarray(y_train, dtype=np.int64), minlength=2).argmax())
    baseline_pred = np.full_like(np.asarray(y_test), majority)

    return {
        "baseline_accuracy": float(accuracy_score(y_test, baseline_pred)),
        "baseline_f1_score": float(
            f1_score(y_test, baseline_pred, average="macro", labels=[0, 1], zero_division=0)
        ),
        "majority_class": float(majority),
    }

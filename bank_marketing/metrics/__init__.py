"""Metrics module for model evaluation."""

from .metrics import (
    AccuracyMetric,
    MacroF1Metric,
    AUCMetric,
    SensitivityMetric,
    SpecificityMetric,
    compute_all_metrics,
    compute_confusion_matrix,
    compute_baseline_metrics,
    compute_roc,
    create_standard_metrics,
    format_confusion_matrix,
)

__all__ = [
    "AccuracyMetric",
    "MacroF1Metric",
    "AUCMetric",
    "SensitivityMetric",
    "SpecificityMetric",
    "compute_all_metrics",
    "compute_confusion_matrix",
    "compute_baseline_metrics",
    "compute_roc",
    "create_standard_metrics",
    "format_confusion_matrix",
]

"""Exploratory statistics and plots."""

from .statistics import (
    dataset_overview,
    describe_column,
    unknown_count,
    label_distribution,
    count_by_label,
    contingency_table,
    chi_squared_test,
    feature_significance,
)

__all__ = [
    "dataset_overview",
    "describe_column",
    "unknown_count",
    "label_distribution",
    "count_by_label",
    "contingency_table",
    "chi_squared_test",
    "feature_significance",
]

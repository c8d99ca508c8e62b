"""Descriptive statistics and significance tests for the bank dataset.

Implements the summaries used during exploration:
- Overview of shape and schema
- Per-attribute distinct values, ranges and counts
- Counts grouped by attribute and subscription label
- Pearson chi-squared tests of independence against the label
"""

from typing import Any

import numpy as np
import polars as pl
from scipy.stats import chi2_contingency

from bank_marketing.domain.entities import ChiSquaredResult, ColumnSummary


def dataset_overview(df: pl.DataFrame) -> dict[str, Any]:
    """Shape and column types of a frame."""
    return {
        "n_rows": df.height,
        "n_columns": df.width,
        "schema": {name: str(dtype) for name, dtype in df.schema.items()},
    }


def describe_column(df: pl.DataFrame, column: str, unknown_token: str = "unknown") -> ColumnSummary:
    """Summarise a single attribute.

    Numeric attributes also report their minimum and maximum; string
    attributes report how many entries equal ``unknown_token``.
    """
    series = df[column]
    counts = (
        df.group_by(column)
        .agg(pl.len().alias("count"))
        .sort(column)
    )
    distinct = series.unique().sort().to_list()

    minimum = maximum = None
    n_unknown = 0
    if series.dtype.is_numeric():
        minimum = float(series.min())
        maximum = float(series.max())
    else:
        n_unknown = unknown_count(df, column, unknown_token)

    return ColumnSummary(
        column=column,
        n_distinct=len(distinct),
        distinct_values=distinct,
        counts=counts,
        minimum=minimum,
        maximum=maximum,
        n_unknown=n_unknown,
    )


def unknown_count(df: pl.DataFrame, column: str, token: str = "unknown") -> int:
    """Number of rows whose value equals the missing-information token."""
    return int((df[column].cast(pl.String) == token).sum())


def label_distribution(df: pl.DataFrame, label: str = "y") -> pl.DataFrame:
    """Count per label value, most frequent first."""
    return (
        df.group_by(label)
        .agg(pl.len().alias("count"))
        .sort("count", descending=True)
    )


def count_by_label(df: pl.DataFrame, column: str, label: str = "y") -> pl.DataFrame:
    """Counts per (attribute value, label), most frequent first."""
    return (
        df.select([column, label])
        .group_by([column, label])
        .agg(pl.len().alias("count"))
        .sort(["count", column], descending=[True, False])
    )


def contingency_table(
    df: pl.DataFrame,
    column: str,
    label: str = "y",
) -> tuple[np.ndarray, list[Any], list[Any]]:
    """Cross-tabulate an attribute against the label.

    Returns:
        Tuple of (counts with one row per attribute level and one column
        per label level, attribute levels, label levels)
    """
    row_levels = df[column].drop_nulls().unique().sort().to_list()
    col_levels = df[label].drop_nulls().unique().sort().to_list()
    row_index = {v: i for i, v in enumerate(row_levels)}
    col_index = {v: i for i, v in enumerate(col_levels)}

    table = np.zeros((len(row_levels), len(col_levels)), dtype=np.int64)
    grouped = df.drop_nulls([column, label]).group_by([column, label]).agg(pl.len().alias("count"))
    for value, lab, count in grouped.iter_rows():
        table[row_index[value], col_index[lab]] = count

    return table, row_levels, col_levels


def _pearson_statistic(observed: np.ndarray, expected: np.ndarray) -> float:
    return float(((observed - expected) ** 2 / expected).sum())


def _simulated_p_value(
    row_codes: np.ndarray,
    col_codes: np.ndarray,
    shape: tuple[int, int],
    observed_statistic: float,
    n_simulations: int,
    seed: int | None,
) -> float:
    """Monte Carlo p-value with both margins held fixed.

    Permuting the label column keeps row and column totals, so every
    simulated table is drawn from the null of independence.
    """
    rng = np.random.default_rng(seed)
    n_rows, n_cols = shape
    row_totals = np.bincount(row_codes, minlength=n_rows)
    col_totals = np.bincount(col_codes, minlength=n_cols)
    expected = np.outer(row_totals, col_totals) / len(row_codes)

    # tolerance for ties with the observed statistic
    threshold = observed_statistic - 1e-7 * max(abs(observed_statistic), 1.0)
    exceed = 0
    for _ in range(n_simulations):
        permuted = rng.permutation(col_codes)
        simulated = np.bincount(row_codes * n_cols + permuted, minlength=n_rows * n_cols)
        if _pearson_statistic(simulated.reshape(n_rows, n_cols), expected) >= threshold:
            exceed += 1

    return (1 + exceed) / (n_simulations + 1)


def chi_squared_test(
    df: pl.DataFrame,
    column: str,
    label: str = "y",
    simulate_p_value: bool = False,
    n_simulations: int = 2000,
    seed: int | None = None,
) -> ChiSquaredResult:
    """Pearson chi-squared test of independence between an attribute and the label.

    2x2 tables get Yates' continuity correction. When ``simulate_p_value``
    is set the p-value comes from ``n_simulations`` Monte Carlo tables and
    no correction is applied; this is the better choice when many expected
    cell counts are small.

    Raises:
        ValueError: If the attribute or label has fewer than two levels
    """
    table, row_levels, col_levels = contingency_table(df, column, label)
    if len(row_levels) < 2 or len(col_levels) < 2:
        raise ValueError(
            f"Chi-squared test needs at least two levels in '{column}' and '{label}'"
        )

    if not simulate_p_value:
        statistic, p_value, dof, _ = chi2_contingency(table, correction=True)
        return ChiSquaredResult(
            column=column,
            statistic=float(statistic),
            p_value=float(p_value),
            dof=int(dof),
        )

    expected = np.outer(table.sum(axis=1), table.sum(axis=0)) / table.sum()
    statistic = _pearson_statistic(table, expected)

    clean = df.drop_nulls([column, label])
    row_index = {v: i for i, v in enumerate(row_levels)}
    col_index = {v: i for i, v in enumerate(col_levels)}
    row_codes = np.array([row_index[v] for v in clean[column].to_list()], dtype=np.int64)
    col_codes = np.array([col_index[v] for v in clean[label].to_list()], dtype=np.int64)

    p_value = _simulated_p_value(
        row_codes, col_codes, table.shape, statistic, n_simulations, seed
    )
    return ChiSquaredResult(
        column=column,
        statistic=statistic,
        p_value=float(p_value),
        dof=(len(row_levels) - 1) * (len(col_levels) - 1),
        simulated=True,
        n_simulations=n_simulations,
    )


def feature_significance(
    df: pl.DataFrame,
    columns: list[str],
    label: str = "y",
    alpha: float = 0.05,
    simulate_columns: list[str] | None = None,
    n_simulations: int = 2000,
    seed: int | None = None,
) -> pl.DataFrame:
    """Chi-squared test of every listed attribute against the label.

    Returns:
        One row per attribute with statistic, dof, p-value and whether it
        is significant at ``alpha``
    """
    simulate_columns = set(simulate_columns or [])
    rows = []
    for column in columns:
        result = chi_squared_test(
            df,
            column,
            label,
            simulate_p_value=column in simulate_columns,
            n_simulations=n_simulations,
            seed=seed,
        )
        rows.append({
            "column": result.column,
            "statistic": result.statistic,
            "dof": result.dof,
            "p_value": result.p_value,
            "simulated": result.simulated,
            "significant": result.is_significant(alpha),
        })

    return pl.DataFrame(
        rows,
        schema={
            "column": pl.String,
            "statistic": pl.Float64,
            "dof": pl.Int64,
            "p_value": pl.Float64,
            "simulated": pl.Boolean,
            "significant": pl.Boolean,
        },
    )

"""Figures for the bank marketing exploration and model results.

Every function returns a matplotlib Figure; ``save_figure`` writes it to
disk and closes it.
"""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import polars as pl
import seaborn as sns
from matplotlib.figure import Figure

from bank_marketing.analysis.statistics import count_by_label, label_distribution
from bank_marketing.metrics.metrics import compute_roc


sns.set_palette("husl")


def save_figure(fig: Figure, path: Path, dpi: int = 120) -> Path:
    """Write a figure to disk and release it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path


def plot_label_distribution(df: pl.DataFrame, label: str = "y") -> Figure:
    """Bar chart of subscriptions vs non-subscriptions."""
    counts = label_distribution(df, label)

    fig, ax = plt.subplots(figsize=(6, 5))
    sns.barplot(
        x=[str(v) for v in counts[label].to_list()],
        y=counts["count"].to_list(),
        color="grey",
        ax=ax,
    )
    ax.set_xlabel(label)
    ax.set_ylabel("count")
    ax.set_title("Distribution of term deposit subscription")
    plt.tight_layout()
    return fig


def plot_age_histogram(
    df: pl.DataFrame,
    column: str = "age",
    label: str = "y",
    bins: int = 30,
) -> Figure:
    """Histogram of an attribute with bars stacked by label."""
    fig, ax = plt.subplots(figsize=(10, 6))
    sns.histplot(
        x=df[column].to_numpy(),
        hue=[str(v) for v in df[label].to_list()],
        bins=bins,
        multiple="stack",
        edgecolor="black",
        ax=ax,
    )
    ax.set_xlabel(column)
    ax.set_title("Histogram of the Clients Age Distribution")
    plt.tight_layout()
    return fig


def plot_age_facets(
    df: pl.DataFrame,
    column: str = "age",
    label: str = "y",
    bins: int = 30,
) -> Figure:
    """One histogram panel per label value."""
    levels = df[label].unique().sort().to_list()
    fig, axes = plt.subplots(1, len(levels), figsize=(6 * len(levels), 5), sharey=True, squeeze=False)

    for ax, level in zip(axes[0], levels):
        values = df.filter(pl.col(label) == level)[column].to_numpy()
        sns.histplot(x=values, bins=bins, ax=ax)
        ax.set_title(f"{label} = {level}")
        ax.set_xlabel(column)

    fig.suptitle("Histogram of the Clients Age Subscription")
    plt.tight_layout()
    return fig


def plot_category_counts(
    df: pl.DataFrame,
    column: str,
    label: str = "y",
    rotate_labels: bool = True,
) -> Figure:
    """Dodged bar chart of counts per attribute value and label.

    Values are ordered by their total count, smallest first.
    """
    counts = count_by_label(df, column, label)
    order = (
        counts.group_by(column)
        .agg(pl.col("count").sum().alias("total"))
        .sort(["total", column])
    )[column].to_list()

    fig, ax = plt.subplots(figsize=(max(8, len(order) * 0.6), 6))
    sns.barplot(
        x=[str(v) for v in counts[column].to_list()],
        y=counts["count"].to_list(),
        hue=[str(v) for v in counts[label].to_list()],
        order=[str(v) for v in order],
        ax=ax,
    )
    ax.set_xlabel(column)
    ax.set_ylabel("count")
    ax.set_title(f"Distribution of {column} by {label}")
    if rotate_labels:
        plt.setp(ax.get_xticklabels(), rotation=45, ha="right")
    plt.tight_layout()
    return fig


def plot_numeric_counts(
    df: pl.DataFrame,
    column: str,
    label: str = "y",
    max_levels: int = 60,
) -> Figure:
    """Bar chart of counts per numeric value and label, in value order.

    Attributes with more than ``max_levels`` distinct values are shown as
    a stacked histogram instead.
    """
    n_distinct = df[column].n_unique()
    if n_distinct > max_levels:
        fig, ax = plt.subplots(figsize=(10, 6))
        sns.histplot(
            x=df[column].to_numpy(),
            hue=[str(v) for v in df[label].to_list()],
            multiple="stack",
            ax=ax,
        )
        ax.set_xlabel(column)
        ax.set_title(f"Histogram of {column}")
        plt.tight_layout()
        return fig

    counts = count_by_label(df, column, label)
    order = [str(v) for v in df[column].unique().sort().to_list()]

    fig, ax = plt.subplots(figsize=(max(8, n_distinct * 0.4), 6))
    sns.barplot(
        x=[str(v) for v in counts[column].to_list()],
        y=counts["count"].to_list(),
        hue=[str(v) for v in counts[label].to_list()],
        order=order,
        ax=ax,
    )
    ax.set_xlabel(column)
    ax.set_ylabel("count")
    ax.set_title(f"Barplot of the {column} Distribution")
    plt.setp(ax.get_xticklabels(), rotation=90)
    plt.tight_layout()
    return fig


def plot_roc_curve(
    y_true: np.ndarray,
    y_score: np.ndarray,
    target_class: int = 1,
    title: str = "ROC",
    legend: str | None = None,
) -> Figure:
    """ROC curve for one class with the random-guess diagonal."""
    fpr, tpr, auc = compute_roc(y_true, y_score, target_class)

    fig, ax = plt.subplots(figsize=(7, 7))
    ax.plot(fpr, tpr, linewidth=2, label=f"{legend or target_class} (AUC = {auc:.3f})")
    ax.plot([0, 1], [0, 1], linestyle="--", color="grey", linewidth=1)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_xticks(np.linspace(0, 1, 11))
    ax.set_yticks(np.linspace(0, 1, 11))
    ax.grid(True, alpha=0.4)
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.set_title(title)
    ax.legend(loc="lower right")
    plt.tight_layout()
    return fig


def plot_model_comparison(results: pl.DataFrame) -> Figure:
    """Grouped horizontal bars of Accuracy, AUC and F1 per model."""
    metric_columns = [c for c in ("Accuracy", "AUC", "F1_score") if c in results.columns]
    long = results.unpivot(
        index="Model",
        on=metric_columns,
        variable_name="metric",
        value_name="value",
    ).drop_nulls("value")

    fig, ax = plt.subplots(figsize=(10, max(6, results.height * 0.5)))
    sns.barplot(
        x=long["value"].to_list(),
        y=long["Model"].to_list(),
        hue=long["metric"].to_list(),
        orient="h",
        ax=ax,
    )
    ax.set_xlim(0, 1)
    ax.set_xlabel("score")
    ax.set_ylabel("")
    ax.set_title("Model comparison")
    plt.tight_layout()
    return fig

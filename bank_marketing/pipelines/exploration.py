"""Exploration pipeline for the bank marketing dataset.

Orchestrates the descriptive analysis:
1. Overview and missing-value scan
2. Label distribution and per-attribute summaries
3. Chi-squared tests of every categorical attribute against the label
4. Figures written under the output directory
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import polars as pl

from bank_marketing.analysis import plots
from bank_marketing.analysis.statistics import (
    dataset_overview,
    describe_column,
    feature_significance,
    label_distribution,
)
from bank_marketing.data.loader import CATEGORICAL_COLUMNS, missing_value_counts
from bank_marketing.domain.entities import ColumnSummary
from bank_marketing.pipelines.config import AnalysisConfig


@dataclass
class ExplorationReport:
    """Results of the exploratory analysis."""

    overview: dict[str, Any]
    missing_values: dict[str, int]
    label_counts: pl.DataFrame
    column_summaries: dict[str, ColumnSummary]
    significance: pl.DataFrame
    figures: list[Path] = field(default_factory=list)
    alpha: float = 0.05

    def significant_columns(self) -> list[str]:
        return self.significance.filter(pl.col("significant"))["column"].to_list()

    def generate_report(self) -> str:
        lines = [
            "=" * 70,
            "BANK MARKETING EXPLORATION REPORT",
            f"Timestamp: {datetime.now().isoformat()}",
            "=" * 70,
            "",
            "## Overview",
            "-" * 50,
            f"Rows: {self.overview['n_rows']:,}",
            f"Columns: {self.overview['n_columns']}",
            f"Missing values: {sum(self.missing_values.values())}",
            "",
            "## Subscription (label) distribution",
            "-" * 50,
        ]
        label_col = self.label_counts.columns[0]
        for value, count in self.label_counts.iter_rows():
            lines.append(f"{str(value):<10} {count:>10,}")

        lines.extend([
            "",
            "## Attributes",
            "-" * 50,
            f"{'Attribute':<16} {'Distinct':>9} {'Min':>10} {'Max':>10} {'Unknown':>9}",
        ])
        for name, summary in self.column_summaries.items():
            if name == label_col:
                continue
            lo = f"{summary.minimum:.3f}" if summary.minimum is not None else "-"
            hi = f"{summary.maximum:.3f}" if summary.maximum is not None else "-"
            lines.append(
                f"{name:<16} {summary.n_distinct:>9} {lo:>10} {hi:>10} {summary.n_unknown:>9}"
            )

        lines.extend([
            "",
            f"## Chi-squared tests against the label (alpha = {self.alpha})",
            "-" * 50,
            f"{'Attribute':<16} {'X-squared':>12} {'df':>6} {'p-value':>12} {'Significant':>12}",
        ])
        for row in self.significance.iter_rows(named=True):
            p_value = f"{row['p_value']:.3g}" + ("*" if row["simulated"] else "")
            lines.append(
                f"{row['column']:<16} {row['statistic']:>12.2f} {row['dof']:>6} "
                f"{p_value:>12} {'yes' if row['significant'] else 'no':>12}"
            )
        if self.significance["simulated"].any():
            lines.append("(* Monte Carlo p-value)")

        if self.figures:
            lines.extend(["", f"Figures written: {len(self.figures)}"])

        lines.append("=" * 70)
        return "\n".join(lines)


@dataclass
class ExplorationPipeline:
    """Pipeline for the descriptive analysis of the training partition."""

    output_dir: Path | None = None
    analysis_config: AnalysisConfig = field(default_factory=AnalysisConfig)
    label_column: str = "y"

    def run(self, df: pl.DataFrame) -> ExplorationReport:
        """Execute the complete exploration.

        Args:
            df: Dataset (typically the training partition)

        Returns:
            ExplorationReport with summaries, tests and figure paths
        """
        config = self.analysis_config
        frame = df.drop("row_id") if "row_id" in df.columns else df

        summaries = {col: describe_column(frame, col) for col in frame.columns}

        chi_columns = [c for c in config.chi_squared_columns if c in frame.columns]
        significance = feature_significance(
            frame,
            chi_columns,
            self.label_column,
            alpha=config.significance_level,
            simulate_columns=config.simulate_p_value_columns,
            n_simulations=config.n_simulations,
            seed=config.seed,
        )

        figures: list[Path] = []
        if self.output_dir is not None and config.save_figures:
            figures = self._write_figures(frame)

        return ExplorationReport(
            overview=dataset_overview(frame),
            missing_values=missing_value_counts(frame),
            label_counts=label_distribution(frame, self.label_column),
            column_summaries=summaries,
            significance=significance,
            figures=figures,
            alpha=config.significance_level,
        )

    def _write_figures(self, df: pl.DataFrame) -> list[Path]:
        figures_dir = Path(self.output_dir)
        label = self.label_column
        written = [
            plots.save_figure(plots.plot_label_distribution(df, label), figures_dir / "label_distribution.png"),
        ]

        if "age" in df.columns:
            written.append(plots.save_figure(
                plots.plot_age_histogram(df, "age", label), figures_dir / "age_histogram.png"
            ))
            written.append(plots.save_figure(
                plots.plot_age_facets(df, "age", label), figures_dir / "age_by_label.png"
            ))

        for column in CATEGORICAL_COLUMNS:
            if column in df.columns:
                written.append(plots.save_figure(
                    plots.plot_category_counts(df, column, label),
                    figures_dir / f"{column}_counts.png",
                ))

        numeric = ["duration"] + list(self.analysis_config.numeric_count_columns)
        for column in numeric:
            if column in df.columns:
                written.append(plots.save_figure(
                    plots.plot_numeric_counts(df, column, label),
                    figures_dir / f"{column}_counts.png",
                ))

        return written

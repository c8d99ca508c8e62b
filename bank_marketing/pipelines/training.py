"""Model comparison pipeline for term-deposit prediction.

Orchestrates the comparison workflow:
1. Data loading and partitioning (final holdout, then train/test)
2. Fitting every enabled model on the training partition
3. Scoring each model on the test partition
4. Tabulating Accuracy, AUC and F1 and persisting the table
"""

from dataclasses import dataclass, field
from pathlib import Path
import time
from typing import Any, Callable

import numpy as np
import polars as pl

from bank_marketing.analysis import plots
from bank_marketing.data.split import create_holdout_split
from bank_marketing.domain.entities import DatasetSplit, ModelResult
from bank_marketing.domain.protocols import IMetric
from bank_marketing.features.feature_engineering import label_array
from bank_marketing.metrics.metrics import (
    compute_all_metrics,
    compute_baseline_metrics,
    compute_confusion_matrix,
    format_confusion_matrix,
)
from bank_marketing.models.classifier import SklearnClassifier
from bank_marketing.models.zoo import available_models, build_model, get_spec
from bank_marketing.pipelines.config import PipelineConfig, get_default_config


RESULT_SCHEMA = {
    "Model": pl.String,
    "Accuracy": pl.Float64,
    "AUC": pl.Float64,
    "F1_score": pl.Float64,
}


@dataclass
class ComparisonResult:
    """Accumulated results table of the model comparison."""

    results: list[ModelResult] = field(default_factory=list)
    baseline: dict[str, float] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def append(self, result: ModelResult) -> None:
        self.results.append(result)

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame([r.as_row() for r in self.results], schema=RESULT_SCHEMA)

    def best(self, metric: str = "accuracy") -> ModelResult:
        """Model with the highest value of ``metric``.

        Models without a value for the metric (no AUC) are not ranked.
        """
        ranked = [r for r in self.results if getattr(r, metric) is not None]
        if not ranked:
            raise ValueError(f"No model has a value for '{metric}'")
        return max(ranked, key=lambda r: getattr(r, metric))

    def summary(self) -> str:
        lines = [
            f"{'Model':<45} {'Accuracy':>9} {'AUC':>9} {'F1_score':>9}",
            "-" * 75,
        ]
        for r in self.results:
            auc = f"{r.auc:.4f}" if r.auc is not None else "NA"
            lines.append(f"{r.model_name:<45} {r.accuracy:>9.4f} {auc:>9} {r.f1_score:>9.4f}")
        if self.baseline:
            lines.append("-" * 75)
            lines.append(
                f"{'Majority-class baseline':<45} "
                f"{self.baseline['baseline_accuracy']:>9.4f} {'NA':>9} "
                f"{self.baseline['baseline_f1_score']:>9.4f}"
            )
        return "\n".join(lines)


def evaluate_model(
    model: SklearnClassifier,
    train: pl.DataFrame,
    test: pl.DataFrame,
    metrics: list[IMetric] | None = None,
) -> ModelResult:
    """Fit a model, predict the test rows and score the predictions.

    Args:
        model: Unfitted classifier
        train: Labelled training rows
        test: Labelled rows to score against
        metrics: Optional metric list. Accuracy and F1 are always computed.

    Returns:
        ModelResult with accuracy, F1, AUC (when the model has scores),
        sensitivity, specificity and the confusion matrix
    """
    start = time.perf_counter()
    model.fit(train)
    fit_seconds = time.perf_counter() - start

    y_pred = model.predict(test)
    y_score = model.predict_scores(test)
    y_true = model.labels(test)

    values = compute_all_metrics(y_true, y_pred, y_score, metrics)
    if "accuracy" not in values or "f1_score" not in values:
        values.update(compute_all_metrics(y_true, y_pred, y_score))

    return ModelResult(
        model_key=model.key,
        model_name=model.model_name,
        accuracy=values["accuracy"],
        f1_score=values["f1_score"],
        auc=values.get("auc"),
        sensitivity=values.get("sensitivity"),
        specificity=values.get("specificity"),
        confusion_matrix=compute_confusion_matrix(y_true, y_pred),
        best_params=model.best_params,
        fit_seconds=fit_seconds,
    )


def evaluate_cross_validated(
    model: SklearnClassifier,
    df: pl.DataFrame,
    n_splits: int = 10,
    seed: int = 12345,
) -> ModelResult:
    """Score a model on out-of-fold probabilities over every row of ``df``.

    Rows are predicted "yes" when their out-of-fold probability is at
    least 0.5.
    """
    start = time.perf_counter()
    y_true, y_score = model.cross_val_scores(df, n_splits=n_splits, seed=seed)
    fit_seconds = time.perf_counter() - start

    y_pred = (y_score >= 0.5).astype(np.int64)
    values = compute_all_metrics(y_true, y_pred, y_score)

    return ModelResult(
        model_key=model.key,
        model_name=model.model_name,
        accuracy=values["accuracy"],
        f1_score=values["f1_score"],
        auc=values.get("auc"),
        sensitivity=values.get("sensitivity"),
        specificity=values.get("specificity"),
        confusion_matrix=compute_confusion_matrix(y_true, y_pred),
        fit_seconds=fit_seconds,
    )


def evaluate_named_model(
    key: str,
    train: pl.DataFrame,
    test: pl.DataFrame,
    config: PipelineConfig | None = None,
) -> ModelResult:
    """Build the registered model ``key`` and evaluate it.

    Cross-validated models are scored on the train and test rows together.
    """
    config = config or get_default_config()
    spec = get_spec(key)
    model = build_model(
        key,
        random_state=config.models.random_state,
        excluded_features=config.models.excluded_features,
        numeric_columns=config.models.numeric_columns,
        label_column=config.dataset.label_column,
        positive_label=config.dataset.positive_label,
        negative_label=config.dataset.negative_label,
    )
    if spec.cv_folds is not None:
        return evaluate_cross_validated(model, pl.concat([train, test]), spec.cv_folds, spec.cv_seed)
    return evaluate_model(model, train, test)


@dataclass
class TrainingPipeline:
    """Pipeline comparing the registered classifiers on one train/test split."""

    output_dir: Path | None = None
    config: PipelineConfig = field(default_factory=get_default_config)

    def __post_init__(self) -> None:
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
            self.output_dir.mkdir(parents=True, exist_ok=True)

    def model_keys(self) -> list[str]:
        enabled = self.config.models.enabled
        return list(enabled) if enabled is not None else available_models()

    def run(
        self,
        train: pl.DataFrame,
        test: pl.DataFrame,
        progress: Callable[[ModelResult], None] | None = None,
    ) -> ComparisonResult:
        """Fit and score every enabled model in registry order.

        Args:
            train: Training partition
            test: Test partition
            progress: Optional callback invoked after each model

        Returns:
            ComparisonResult with one row per model
        """
        dataset = self.config.dataset
        y_train = label_array(train, dataset.label_column, dataset.positive_label, dataset.negative_label)
        y_test = label_array(test, dataset.label_column, dataset.positive_label, dataset.negative_label)

        comparison = ComparisonResult(
            baseline=compute_baseline_metrics(y_test, y_train),
            metadata={
                "train_samples": train.height,
                "test_samples": test.height,
                "excluded_features": list(self.config.models.excluded_features),
            },
        )

        for key in self.model_keys():
            result = evaluate_named_model(key, train, test, self.config)
            comparison.append(result)
            if progress is not None:
                progress(result)

        if self.output_dir is not None:
            self._save_artifacts(comparison)

        return comparison

    def _save_artifacts(self, comparison: ComparisonResult) -> None:
        frame = comparison.to_frame()
        frame.write_csv(self.output_dir / "model_comparison.csv")
        if frame.height:
            plots.save_figure(
                plots.plot_model_comparison(frame),
                self.output_dir / "figures" / "model_comparison.png",
            )


def describe_result(result: ModelResult) -> str:
    """Multi-line description of one model's scores."""
    auc = f"{result.auc:.4f}" if result.auc is not None else "NA"
    lines = [
        f"{result.model_name} ({result.fit_seconds:.1f}s)",
        f"  Accuracy: {result.accuracy:.4f}  AUC: {auc}  F1: {result.f1_score:.4f}",
    ]
    if result.best_params:
        lines.append(f"  Selected parameters: {result.best_params}")
    if result.confusion_matrix is not None:
        lines.extend("  " + line for line in format_confusion_matrix(result.confusion_matrix).splitlines())
    return "\n".join(lines)


def partition_dataset(
    df: pl.DataFrame,
    config: PipelineConfig,
) -> tuple[DatasetSplit, DatasetSplit]:
    """Split off the final holdout, then split the remainder for comparison.

    Returns:
        Tuple of (outer split: bank data vs final validation,
                  inner split: model training vs model test)
    """
    split = config.split
    label = config.dataset.label_column

    outer = create_holdout_split(
        df, label, split.validation_fraction, split.seed, split.join_column
    )
    inner = create_holdout_split(
        outer.train, label, split.validation_fraction, split.seed, split.join_column
    )
    return outer, inner

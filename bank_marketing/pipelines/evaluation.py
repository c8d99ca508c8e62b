"""Final evaluation pipeline.

Refits the chosen model on the whole training partition and scores it
once against the final holdout, which no earlier step has touched.
Produces:
- Accuracy, AUC, macro F1, sensitivity and specificity
- Comparison with a majority-class baseline
- ROC curves for both classes
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import numpy as np
import polars as pl

from bank_marketing.analysis import plots
from bank_marketing.domain.entities import EvaluationResult
from bank_marketing.metrics.metrics import (
    compute_all_metrics,
    compute_baseline_metrics,
    compute_confusion_matrix,
    format_confusion_matrix,
)
from bank_marketing.models.classifier import SklearnClassifier
from bank_marketing.models.zoo import build_model, get_spec
from bank_marketing.pipelines.config import PipelineConfig, get_default_config
from bank_marketing.pipelines.training import ComparisonResult


BEST_MODEL = "best"


@dataclass
class EvaluationPipeline:
    """Pipeline for the final-holdout evaluation of a single model."""

    output_dir: Path | None = None
    config: PipelineConfig = field(default_factory=get_default_config)

    _model: SklearnClassifier | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
            self.output_dir.mkdir(parents=True, exist_ok=True)

    def select_model_key(self, comparison: ComparisonResult | None = None) -> str:
        """Resolve the configured final model.

        ``best`` picks the comparison winner by the configured ranking
        metric and therefore needs a comparison result.
        """
        final_model = self.config.models.final_model
        if final_model == BEST_MODEL:
            if comparison is None or not comparison.results:
                raise ValueError("final_model 'best' requires a model comparison")
            return comparison.best(self.config.models.ranking_metric).model_key
        return get_spec(final_model).key

    def run(
        self,
        bank_data: pl.DataFrame,
        validation: pl.DataFrame,
        model_key: str | None = None,
        comparison: ComparisonResult | None = None,
    ) -> EvaluationResult:
        """Fit the final model and score it on the holdout.

        Args:
            bank_data: Complete training partition
            validation: Final holdout partition
            model_key: Registered model to use; defaults to the configured one
            comparison: Optional comparison result, needed for ``best``

        Returns:
            EvaluationResult with metrics, predictions and scores
        """
        key = model_key or self.select_model_key(comparison)
        models = self.config.models
        dataset = self.config.dataset

        self._model = build_model(
            key,
            random_state=models.random_state,
            excluded_features=models.excluded_features,
            numeric_columns=models.numeric_columns,
            label_column=dataset.label_column,
            positive_label=dataset.positive_label,
            negative_label=dataset.negative_label,
        ).fit(bank_data)

        y_pred = self._model.predict(validation)
        y_score = self._model.predict_scores(validation)
        y_true = self._model.labels(validation)

        metrics_results = compute_all_metrics(y_true, y_pred, y_score)
        baseline = compute_baseline_metrics(y_true, self._model.labels(bank_data))
        metrics_results.update(baseline)

        result = EvaluationResult(
            metrics=metrics_results,
            predictions=y_pred,
            actuals=y_true,
            scores=y_score,
            model_name=self._model.model_name,
            metadata={
                "model_key": key,
                "train_samples": bank_data.height,
                "validation_samples": validation.height,
                "best_params": self._model.best_params,
                "confusion_matrix": compute_confusion_matrix(y_true, y_pred),
            },
        )

        if self.output_dir is not None:
            result.metadata["artifacts"] = self._save_artifacts(result)

        return result

    def get_model(self) -> SklearnClassifier | None:
        """Return the fitted final model."""
        return self._model

    def _save_artifacts(self, result: EvaluationResult) -> list[Path]:
        written = []
        model_path = self.output_dir / "final_model.pkl"
        self._model.save(model_path)
        written.append(model_path)

        if result.scores is not None:
            figures_dir = self.output_dir / "figures"
            dataset = self.config.dataset
            for target_class, name in ((1, dataset.positive_label), (0, dataset.negative_label)):
                fig = plots.plot_roc_curve(
                    result.actuals,
                    result.scores,
                    target_class=target_class,
                    title=f"{name.capitalize()} ROC",
                    legend=name.capitalize(),
                )
                written.append(plots.save_figure(fig, figures_dir / f"final_roc_{name}.png"))

        return written

    def generate_report(self, result: EvaluationResult) -> str:
        """Format a final evaluation report."""
        lines = [
            "=" * 70,
            "FINAL HOLDOUT EVALUATION",
            f"Model: {result.model_name}",
            f"Timestamp: {datetime.now().isoformat()}",
            "=" * 70,
            f"Training rows: {result.metadata.get('train_samples', 0):,}",
            f"Holdout rows: {result.metadata.get('validation_samples', 0):,}",
        ]
        if result.metadata.get("best_params"):
            lines.append(f"Selected parameters: {result.metadata['best_params']}")

        lines.extend(["", "## Metrics", "-" * 50])
        for metric_name, value in result.metrics.items():
            lines.append(f"{metric_name}: {value:.6f}")

        matrix = result.metadata.get("confusion_matrix")
        if matrix is not None:
            dataset = self.config.dataset
            lines.extend([
                "",
                "## Confusion matrix",
                "-" * 50,
                format_confusion_matrix(
                    np.asarray(matrix), (dataset.negative_label, dataset.positive_label)
                ),
            ])

        if self._model is not None:
            top = self._model.get_top_features(10)
            if top:
                lines.extend(["", "## Top 10 Features", "-" * 50])
                for rank, (name, imp) in enumerate(top, 1):
                    lines.append(f"{rank:2d}. {name}: {imp:.4f}")

        lines.append("=" * 70)
        return "\n".join(lines)

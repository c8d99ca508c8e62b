import pickle

import polars as pl
import pytest

from bank_marketing.domain.entities import ModelResult
from bank_marketing.models.classifier import SklearnClassifier
from bank_marketing.models.zoo import build_model
from bank_marketing.pipelines.evaluation import EvaluationPipeline
from bank_marketing.pipelines.exploration import ExplorationPipeline
from bank_marketing.pipelines.training import (
    RESULT_SCHEMA,
    ComparisonResult,
    TrainingPipeline,
    describe_result,
    evaluate_cross_validated,
    evaluate_named_model,
    partition_dataset,
)


@pytest.fixture
def splits(bank_df, fast_config):
    return partition_dataset(bank_df, fast_config)


def _result(key, accuracy, f1, auc=None):
    return ModelResult(model_key=key, model_name=key.upper(), accuracy=accuracy, f1_score=f1, auc=auc)


class TestComparisonResult:
    def test_to_frame_schema(self):
        comparison = ComparisonResult([_result("a", 0.9, 0.6, 0.8), _result("b", 0.85, 0.7)])
        frame = comparison.to_frame()

        assert dict(frame.schema) == RESULT_SCHEMA
        assert frame["Model"].to_list() == ["A", "B"]
        assert frame["AUC"].to_list() == [0.8, None]

    def test_best_skips_models_without_the_metric(self):
        comparison = ComparisonResult([_result("a", 0.9, 0.6, 0.8), _result("b", 0.95, 0.7)])

        assert comparison.best("accuracy").model_key == "b"
        assert comparison.best("f1_score").model_key == "b"
        assert comparison.best("auc").model_key == "a"

    def test_best_without_candidates_raises(self):
        with pytest.raises(ValueError):
            ComparisonResult([_result("b", 0.95, 0.7)]).best("auc")

    def test_summary_prints_na_for_missing_auc(self):
        text = ComparisonResult([_result("b", 0.95, 0.7)]).summary()
        assert "NA" in text
        assert "0.9500" in text


def test_partition_dataset_nests_inner_split(bank_df, splits):
    outer, inner = splits

    assert outer.is_disjoint()
    assert inner.is_disjoint()
    assert inner.train_ids | inner.validation_ids == outer.train_ids
    assert outer.train_ids | outer.validation_ids == set(range(bank_df.height))


@pytest.mark.parametrize("key", ["logistic_base", "naive_bayes", "ctree", "xgboost"])
def test_evaluate_named_model_scores_are_fractions(splits, fast_config, key):
    _, inner = splits
    result = evaluate_named_model(key, inner.train, inner.validation, fast_config)

    assert result.model_key == key
    for value in (result.accuracy, result.f1_score, result.auc):
        assert 0.0 <= value <= 1.0
    assert result.confusion_matrix.sum() == inner.validation.height


def test_class_only_model_has_no_auc(splits, fast_config):
    _, inner = splits
    result = evaluate_named_model("lssvm", inner.train, inner.validation, fast_config)

    assert result.auc is None
    assert result.as_row()["AUC"] is None
    assert "AUC: NA" in describe_result(result)


def test_cross_validated_tree_is_scored_on_train_and_test(splits, fast_config):
    _, inner = splits
    result = evaluate_named_model("decision_tree_cv", inner.train, inner.validation, fast_config)

    assert result.model_name == "Decision Tree by cross validation"
    assert result.confusion_matrix.sum() == inner.train.height + inner.validation.height
    for value in (result.accuracy, result.f1_score, result.auc):
        assert 0.0 <= value <= 1.0


def test_evaluate_cross_validated_thresholds_at_one_half(bank_df):
    model = build_model("decision_tree_cv")
    y_true, y_score = build_model("decision_tree_cv").cross_val_scores(bank_df, n_splits=5, seed=3)

    result = evaluate_cross_validated(model, bank_df, n_splits=5, seed=3)

    predicted_yes = int((y_score >= 0.5).sum())
    assert result.confusion_matrix[:, 1].sum() == predicted_yes
    assert result.accuracy == pytest.approx(float(((y_score >= 0.5) == (y_true == 1)).mean()))


def test_training_pipeline_writes_results(splits, fast_config, tmp_path):
    _, inner = splits
    seen = []
    pipeline = TrainingPipeline(output_dir=tmp_path, config=fast_config)

    comparison = pipeline.run(inner.train, inner.validation, progress=seen.append)

    assert [r.model_key for r in comparison.results] == ["logistic_base", "naive_bayes", "ctree", "lssvm"]
    assert len(seen) == 4
    assert 0.0 <= comparison.baseline["baseline_accuracy"] <= 1.0

    written = pl.read_csv(tmp_path / "model_comparison.csv")
    assert written.columns == ["Model", "Accuracy", "AUC", "F1_score"]
    assert written.height == 4
    assert (tmp_path / "figures" / "model_comparison.png").exists()


class TestEvaluationPipeline:
    def test_select_configured_model(self, fast_config):
        assert EvaluationPipeline(config=fast_config).select_model_key() == "ctree"

    def test_best_requires_comparison(self, fast_config):
        config = fast_config.with_overrides(final_model="best")
        with pytest.raises(ValueError):
            EvaluationPipeline(config=config).select_model_key()

    def test_best_picks_comparison_winner(self, fast_config):
        config = fast_config.with_overrides(final_model="best")
        comparison = ComparisonResult([_result("lda", 0.88, 0.6), _result("knn", 0.91, 0.5)])
        assert EvaluationPipeline(config=config).select_model_key(comparison) == "knn"

    def test_unknown_final_model_raises(self, fast_config):
        config = fast_config.with_overrides(final_model="oracle")
        with pytest.raises(KeyError):
            EvaluationPipeline(config=config).select_model_key()

    def test_run_on_final_holdout(self, splits, fast_config, tmp_path):
        outer, _ = splits
        pipeline = EvaluationPipeline(output_dir=tmp_path, config=fast_config)

        result = pipeline.run(outer.train, outer.validation)

        assert pipeline.get_model().is_fitted
        assert pipeline.get_model().key == "ctree"
        assert result.model_name == "cTree Model"
        assert result.metadata["validation_samples"] == outer.validation.height
        assert len(result.predictions) == outer.validation.height
        for name in ("accuracy", "auc", "f1_score", "baseline_accuracy"):
            assert 0.0 <= result.metrics[name] <= 1.0

        assert (tmp_path / "figures" / "final_roc_yes.png").exists()
        assert (tmp_path / "figures" / "final_roc_no.png").exists()
        with open(tmp_path / "final_model.pkl", "rb") as f:
            assert isinstance(pickle.load(f), SklearnClassifier)

        report = pipeline.generate_report(result)
        assert "FINAL HOLDOUT EVALUATION" in report
        assert "cTree Model" in report
        assert "Confusion matrix" in report


class TestExplorationPipeline:
    def test_report_without_figures(self, splits, fast_config):
        outer, _ = splits
        report = ExplorationPipeline(analysis_config=fast_config.analysis).run(outer.train)

        assert report.overview["n_columns"] == 21
        assert "row_id" not in report.column_summaries
        assert report.significance.height == len(fast_config.analysis.chi_squared_columns)
        assert "poutcome" in report.significant_columns()
        assert report.figures == []

        text = report.generate_report()
        assert "Chi-squared tests" in text
        assert "Monte Carlo" in text

    def test_figures_are_written(self, splits, fast_config, tmp_path):
        outer, _ = splits
        pipeline = ExplorationPipeline(output_dir=tmp_path, analysis_config=fast_config.analysis)

        report = pipeline.run(outer.train)

        names = {p.name for p in report.figures}
        assert {"label_distribution.png", "age_histogram.png", "job_counts.png", "euribor3m_counts.png"} <= names
        assert all(p.exists() for p in report.figures)

"""Fitted-model wrapper for scikit-learn compatible classifiers.

Each wrapper owns the feature encoder it was trained with, so callers
only ever hand it raw dataset frames.
"""

from dataclasses import dataclass, field
from pathlib import Path
import pickle
from typing import Any

import numpy as np
import polars as pl
from sklearn.base import BaseEstimator
from sklearn.model_selection import StratifiedKFold, cross_val_predict

from bank_marketing.features.feature_engineering import (
    DEFAULT_EXCLUDED_FEATURES,
    BankFeatureEncoder,
    prepare_model_data,
)


@dataclass
class SklearnClassifier:
    """Binary term-deposit classifier backed by a scikit-learn estimator.

    Estimators that only return class labels (``probabilistic=False``)
    have no scores, and therefore no AUC.
    """

    key: str
    display_name: str
    estimator: BaseEstimator
    include_features: list[str] | None = None
    excluded_features: list[str] = field(default_factory=lambda: DEFAULT_EXCLUDED_FEATURES.copy())
    numeric_columns: list[str] = field(default_factory=lambda: ["euribor3m"])
    probabilistic: bool = True
    label_column: str = "y"
    positive_label: str = "yes"
    negative_label: str = "no"

    _encoder: BankFeatureEncoder | None = field(default=None, init=False)
    _is_fitted: bool = field(default=False, init=False)

    @property
    def model_name(self) -> str:
        return self.display_name

    @property
    def is_fitted(self) -> bool:
        return self._is_fitted

    @property
    def feature_names(self) -> list[str]:
        if self._encoder is None:
            return []
        return self._encoder.get_feature_columns()

    @property
    def best_params(self) -> dict[str, Any] | None:
        """Selected hyperparameters when the estimator runs an internal search."""
        return getattr(self.estimator, "best_params_", None)

    @property
    def selected_features(self) -> list[str]:
        """Encoded features that reach the final estimator.

        Feature selection steps inside a pipeline narrow the encoded
        columns; without any, every encoded column is used.
        """
        if not self._is_fitted:
            return []
        names = self.feature_names
        for step in self._final_pipeline_steps()[:-1]:
            if hasattr(step, "get_support"):
                support = step.get_support()
                names = [name for name, keep in zip(names, support) if keep]
        return names

    @property
    def selected_attributes(self) -> list[str]:
        """Dataset columns behind ``selected_features``, in encoded order."""
        attributes = []
        for name in self.selected_features:
            attribute = name.split("=", 1)[0]
            if attribute not in attributes:
                attributes.append(attribute)
        return attributes

    def fit(self, df: pl.DataFrame) -> "SklearnClassifier":
        """Fit the encoder and the estimator on a labelled frame."""
        X, y = self._training_arrays(df)
        self.estimator.fit(X, y)
        self._is_fitted = True
        return self

    def predict(self, df: pl.DataFrame) -> np.ndarray:
        """Predict 0/1 labels."""
        self._check_fitted()
        X = self._encoder.transform(df).to_numpy().astype(np.float64)
        return np.asarray(self.estimator.predict(X)).astype(np.int64)

    def predict_scores(self, df: pl.DataFrame) -> np.ndarray | None:
        """Positive-class probabilities, or None for class-only models."""
        self._check_fitted()
        if not self.probabilistic or not hasattr(self.estimator, "predict_proba"):
            return None
        X = self._encoder.transform(df).to_numpy().astype(np.float64)
        proba = self.estimator.predict_proba(X)
        positive_idx = list(self.estimator.classes_).index(1)
        return proba[:, positive_idx]

    def labels(self, df: pl.DataFrame) -> np.ndarray:
        """Actual 0/1 labels of a frame."""
        self._check_fitted()
        _, y = self._arrays(df)
        return y

    def cross_val_scores(
        self,
        df: pl.DataFrame,
        n_splits: int = 10,
        seed: int = 12345,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Out-of-fold positive-class probabilities for every row of ``df``.

        Each row is scored by a copy of the estimator trained on the other
        folds. The model counts as unfitted afterwards.

        Returns:
            Tuple of (0/1 labels, out-of-fold scores)

        Raises:
            ValueError: If the model only predicts classes
        """
        if not self.probabilistic:
            raise ValueError(f"{self.display_name} does not produce probabilities")

        X, y = self._training_arrays(df)
        self._is_fitted = False

        cv = StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=seed)
        proba = cross_val_predict(self.estimator, X, y, cv=cv, method="predict_proba")
        return y, proba[:, 1]

    def get_feature_importance(self) -> dict[str, float]:
        """Importance per encoded feature, where the estimator exposes one.

        Tree ensembles report impurity importances, linear models the
        absolute coefficients. Other estimators return an empty dict.
        """
        self._check_fitted()
        estimator = self._final_pipeline_steps()[-1]

        if hasattr(estimator, "feature_importances_"):
            values = np.asarray(estimator.feature_importances_)
        elif hasattr(estimator, "coef_"):
            values = np.abs(np.asarray(estimator.coef_)).ravel()
        else:
            return {}

        names = self.selected_features
        if len(values) != len(names):
            return {}
        return {name: float(v) for name, v in zip(names, values)}

    def get_top_features(self, n: int = 10) -> list[tuple[str, float]]:
        """Get the top N most important features."""
        importance = self.get_feature_importance()
        return sorted(importance.items(), key=lambda x: x[1], reverse=True)[:n]

    def save(self, path: Path) -> None:
        """Pickle the fitted estimator together with its encoder."""
        self._check_fitted()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            pickle.dump(self, f)

    @staticmethod
    def load(path: Path) -> "SklearnClassifier":
        """Load a classifier saved with ``save``."""
        with open(path, "rb") as f:
            model = pickle.load(f)
        if not isinstance(model, SklearnClassifier):
            raise TypeError(f"{path} does not hold a SklearnClassifier")
        return model

    def _training_arrays(self, df: pl.DataFrame) -> tuple[np.ndarray, np.ndarray]:
        self._encoder = BankFeatureEncoder(
            label_column=self.label_column,
            excluded_features=self.excluded_features,
            include_features=self.include_features,
            numeric_columns=self.numeric_columns,
        ).fit(df)

        X, y = self._arrays(df)
        if len(np.unique(y)) < 2:
            raise ValueError("Training data must contain both label classes")
        return X, y

    def _arrays(self, df: pl.DataFrame) -> tuple[np.ndarray, np.ndarray]:
        return prepare_model_data(
            df,
            self._encoder,
            self.label_column,
            self.positive_label,
            self.negative_label,
        )

    def _final_pipeline_steps(self) -> list[BaseEstimator]:
        estimator = self.estimator
        if hasattr(estimator, "best_estimator_"):
            estimator = estimator.best_estimator_
        if hasattr(estimator, "steps"):
            return [step for _, step in estimator.steps]
        return [estimator]

    def _check_fitted(self) -> None:
        if not self._is_fitted:
            raise RuntimeError("Model must be fitted before prediction")

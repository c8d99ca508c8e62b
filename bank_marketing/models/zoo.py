"""Registry of the classifiers compared on the bank marketing data.

Every entry is a named factory for an off-the-shelf estimator. Models
that are sensitive to feature scale are wrapped in a pipeline with a
``StandardScaler``. Searches (``*_tuned``) select their hyperparameters
by internal cross-validation on the training partition. Entries with
``cv_folds`` are scored on out-of-fold predictions instead of a holdout.
"""

from dataclasses import dataclass
from typing import Callable

from sklearn.base import BaseEstimator
from sklearn.calibration import CalibratedClassifierCV
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
from sklearn.ensemble import AdaBoostClassifier, BaggingClassifier, RandomForestClassifier
from sklearn.feature_selection import SequentialFeatureSelector
from sklearn.linear_model import LogisticRegression, LogisticRegressionCV, RidgeClassifier
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.naive_bayes import GaussianNB
from sklearn.neighbors import KNeighborsClassifier
from sklearn.neural_network import MLPClassifier
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeClassifier
from xgboost import XGBClassifier

from bank_marketing.features.feature_engineering import DEFAULT_EXCLUDED_FEATURES
from bank_marketing.models.classifier import SklearnClassifier


# Consumer price and confidence indices are left out of the logistic models
LOGISTIC_EXCLUDED_FEATURES = ("cons.price.idx", "cons.conf.idx")

# Gini impurity of the root node at the dataset's ~11% subscription rate
ROOT_IMPURITY = 0.2


@dataclass(frozen=True)
class ModelSpec:
    """A named model in the comparison."""
    key: str
    display_name: str
    factory: Callable[[int], BaseEstimator]
    excluded: tuple[str, ...] = ()
    probabilistic: bool = True
    cv_folds: int | None = None
    cv_seed: int = 12345


def _scaled(estimator: BaseEstimator) -> BaseEstimator:
    return make_pipeline(StandardScaler(), estimator)


def _logistic(random_state: int) -> BaseEstimator:
    return _scaled(LogisticRegression(max_iter=1000, random_state=random_state))


def _stepwise_logistic(random_state: int) -> BaseEstimator:
    # drops one encoded column at a time while the cross-validated log-loss does not get worse
    selector = SequentialFeatureSelector(
        LogisticRegression(max_iter=1000),
        n_features_to_select="auto",
        tol=0.0,
        direction="backward",
        scoring="neg_log_loss",
        cv=StratifiedKFold(n_splits=3, shuffle=True, random_state=random_state),
        n_jobs=-1,
    )
    return make_pipeline(
        StandardScaler(),
        selector,
        LogisticRegression(max_iter=1000, random_state=random_state),
    )


def _decision_tree(random_state: int) -> DecisionTreeClassifier:
    return DecisionTreeClassifier(
        min_samples_split=20,
        min_samples_leaf=7,
        min_impurity_decrease=1e-4,
        random_state=random_state,
    )


def _rpart(cp: float) -> Callable[[int], BaseEstimator]:
    """Tree with an rpart-style complexity parameter relative to the root impurity."""
    def factory(random_state: int) -> BaseEstimator:
        return DecisionTreeClassifier(
            min_samples_split=20,
            min_samples_leaf=7,
            min_impurity_decrease=cp * ROOT_IMPURITY,
            random_state=random_state,
        )
    return factory


def _tuned_tree(random_state: int) -> BaseEstimator:
    # 8 candidate settings, 10-fold internal validation on AUC
    return GridSearchCV(
        _decision_tree(random_state),
        param_grid={"max_depth": [2, 3, 4, 5, 6, 8, 10, 12]},
        scoring="roc_auc",
        cv=StratifiedKFold(n_splits=10, shuffle=True, random_state=123),
    )


def _xgboost(n_estimators: int) -> Callable[[int], BaseEstimator]:
    def factory(random_state: int) -> BaseEstimator:
        return XGBClassifier(
            n_estimators=n_estimators,
            eval_metric="logloss",
            random_state=random_state,
        )
    return factory


def _svm_classes(random_state: int) -> BaseEstimator:
    return _scaled(SVC(kernel="rbf", random_state=random_state))


def _svm_probabilities(random_state: int) -> BaseEstimator:
    # Platt scaling learned on internal folds, applied to one SVC fitted on every row
    return _scaled(CalibratedClassifierCV(
        SVC(kernel="rbf", random_state=random_state),
        method="sigmoid",
        ensemble=False,
    ))


def _random_forest(random_state: int) -> BaseEstimator:
    return RandomForestClassifier(n_estimators=500, random_state=random_state)


def _tuned_forest(random_state: int) -> BaseEstimator:
    return GridSearchCV(
        RandomForestClassifier(random_state=random_state),
        param_grid={"max_features": [1, 2, 3], "n_estimators": [100, 200, 500]},
        scoring="roc_auc",
        cv=StratifiedKFold(n_splits=3, shuffle=True, random_state=12345),
    )


def _lasso_logistic(folds: int) -> Callable[[int], BaseEstimator]:
    def factory(random_state: int) -> BaseEstimator:
        return _scaled(LogisticRegressionCV(
            Cs=10,
            l1_ratios=(1.0,),
            cv=StratifiedKFold(n_splits=folds, shuffle=True, random_state=random_state),
            solver="liblinear",
            scoring="neg_log_loss",
            max_iter=1000,
            random_state=random_state,
            use_legacy_attributes=False,
        ))
    return factory


def _mlp(random_state: int) -> BaseEstimator:
    return _scaled(MLPClassifier(
        hidden_layer_sizes=(16,),
        max_iter=300,
        early_stopping=True,
        random_state=random_state,
    ))


def _bagging(random_state: int) -> BaseEstimator:
    return BaggingClassifier(
        estimator=DecisionTreeClassifier(random_state=random_state),
        n_estimators=100,
        random_state=random_state,
    )


MODEL_SPECS: dict[str, ModelSpec] = {
    spec.key: spec
    for spec in [
        ModelSpec(
            "logistic_base",
            "Base Logistic Regression model",
            _logistic,
            excluded=LOGISTIC_EXCLUDED_FEATURES,
        ),
        ModelSpec(
            "logistic_step",
            "Step Logistic Regression model",
            _stepwise_logistic,
            excluded=LOGISTIC_EXCLUDED_FEATURES,
        ),
        ModelSpec("naive_bayes", "Naive Bayes Model", lambda rs: GaussianNB()),
        ModelSpec(
            "knn",
            "KNN Model",
            lambda rs: _scaled(KNeighborsClassifier(n_neighbors=7, weights="distance")),
        ),
        ModelSpec("ctree", "cTree Model", _decision_tree),
        ModelSpec("ctree_tuned", "cTree Model by 10-fold internal validation", _tuned_tree),
        ModelSpec("xgboost", "eXtremeGradientBoosting model", _xgboost(2)),
        ModelSpec("xgboost_rounds3", "XGBoost Model(when nrounds = 3)", _xgboost(3)),
        ModelSpec("svm_class", "SVM model with classes", _svm_classes, probabilistic=False),
        ModelSpec("svm_prob", "SVM model with probability", _svm_probabilities),
        ModelSpec(
            "lssvm",
            "LSSVM model with classes",
            lambda rs: _scaled(RidgeClassifier()),
            probabilistic=False,
        ),
        ModelSpec("random_forest", "Random Forest", _random_forest),
        ModelSpec("random_forest_tuned", "Random Forest Tuning", _tuned_forest),
        ModelSpec("lda", "LDA model", lambda rs: LinearDiscriminantAnalysis()),
        ModelSpec("glm", "GLM model", _lasso_logistic(10)),
        ModelSpec("glm_tuned", "GLM model tuning", _lasso_logistic(3)),
        ModelSpec("mlp", "MLP model", _mlp),
        ModelSpec(
            "multinom",
            "Multinomial Logistic Regression model",
            lambda rs: _scaled(LogisticRegression(solver="lbfgs", max_iter=1000, random_state=rs)),
        ),
        ModelSpec("bagging", "Bagging model", _bagging),
        ModelSpec(
            "boosting",
            "Boosting model",
            lambda rs: AdaBoostClassifier(n_estimators=100, random_state=rs),
        ),
        ModelSpec("decision_tree", "Decision Tree", _rpart(0.01)),
        ModelSpec(
            "decision_tree_cv",
            "Decision Tree by cross validation",
            _rpart(0.05),
            cv_folds=10,
            cv_seed=12345,
        ),
    ]
}


def available_models() -> list[str]:
    """Model keys in comparison order."""
    return list(MODEL_SPECS)


def get_spec(key: str) -> ModelSpec:
    """Look up a model by key.

    Raises:
        KeyError: If the key is not registered
    """
    try:
        return MODEL_SPECS[key]
    except KeyError:
        raise KeyError(
            f"Unknown model '{key}'. Available: {', '.join(available_models())}"
        ) from None


def build_model(
    key: str,
    random_state: int = 123,
    excluded_features: list[str] | None = None,
    numeric_columns: list[str] | None = None,
    label_column: str = "y",
    positive_label: str = "yes",
    negative_label: str = "no",
) -> SklearnClassifier:
    """Create an unfitted classifier for a registered model.

    The model's own exclusions are added to ``excluded_features``.
    """
    spec = get_spec(key)
    excluded = list(excluded_features) if excluded_features is not None else DEFAULT_EXCLUDED_FEATURES.copy()
    excluded += [c for c in spec.excluded if c not in excluded]
    return SklearnClassifier(
        key=spec.key,
        display_name=spec.display_name,
        estimator=spec.factory(random_state),
        excluded_features=excluded,
        numeric_columns=list(numeric_columns) if numeric_columns is not None else ["euribor3m"],
        probabilistic=spec.probabilistic,
        label_column=label_column,
        positive_label=positive_label,
        negative_label=negative_label,
    )

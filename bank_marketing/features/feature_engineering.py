"""Feature engineering for term-deposit subscription models.

Implements the conversions the models need:
- Label encoding between yes/no categories and 1/0 integers
- Coercion of string columns (e.g. ``euribor3m``) to numeric
- One-hot encoding of categorical attributes with levels learned on training data
"""

from dataclasses import dataclass, field
from pathlib import Path
import pickle

import numpy as np
import polars as pl


# ``duration`` is only known once the call has ended
DEFAULT_EXCLUDED_FEATURES = ["duration"]

NON_FEATURE_COLUMNS = ["row_id"]


def encode_label(
    df: pl.DataFrame,
    column: str = "y",
    positive: str = "yes",
    negative: str = "no",
) -> pl.DataFrame:
    """Replace the yes/no label with 1/0.

    Raises:
        ValueError: If the column holds anything other than the two categories
    """
    found = set(df[column].unique().to_list())
    unexpected = found - {positive, negative}
    if unexpected:
        raise ValueError(
            f"Cannot encode '{column}': unexpected values {sorted(map(str, unexpected))}"
        )
    return df.with_columns((pl.col(column) == positive).cast(pl.Int8).alias(column))


def decode_label(
    df: pl.DataFrame,
    column: str = "y",
    positive: str = "yes",
    negative: str = "no",
) -> pl.DataFrame:
    """Replace a 1/0 label with yes/no.

    Raises:
        ValueError: If the column holds anything other than 0 and 1
    """
    found = set(df[column].unique().to_list())
    unexpected = found - {0, 1}
    if unexpected:
        raise ValueError(
            f"Cannot decode '{column}': unexpected values {sorted(map(str, unexpected))}"
        )
    return df.with_columns(
        pl.when(pl.col(column) == 1)
          .then(pl.lit(positive))
          .otherwise(pl.lit(negative))
          .alias(column)
    )


def coerce_numeric(df: pl.DataFrame, columns: list[str]) -> pl.DataFrame:
    """Cast the given columns to Float64.

    String columns are parsed strictly, so a non-numeric value raises.
    Columns missing from the frame are ignored.
    """
    exprs = []
    for col in columns:
        if col not in df.columns:
            continue
        dtype = df.schema[col]
        if dtype == pl.String:
            exprs.append(pl.col(col).str.strip_chars().cast(pl.Float64).alias(col))
        elif dtype.is_numeric():
            exprs.append(pl.col(col).cast(pl.Float64).alias(col))
        else:
            raise ValueError(f"Column '{col}' of type {dtype} cannot be made numeric")
    if not exprs:
        return df
    return df.with_columns(exprs)


@dataclass
class BankFeatureEncoder:
    """One-hot encoder for the bank marketing attributes.

    Categorical levels are learned from the training frame; at transform
    time a level never seen during fit encodes to all zeros.
    """

    label_column: str = "y"
    excluded_features: list[str] = field(default_factory=lambda: DEFAULT_EXCLUDED_FEATURES.copy())
    include_features: list[str] | None = None
    numeric_columns: list[str] = field(default_factory=lambda: ["euribor3m"])

    _categorical_levels: dict[str, list[str]] = field(default_factory=dict, init=False)
    _numeric_features: list[str] = field(default_factory=list, init=False)
    _feature_columns: list[str] = field(default_factory=list, init=False)
    _is_fitted: bool = field(default=False, init=False)

    @property
    def is_fitted(self) -> bool:
        return self._is_fitted

    def fit(self, df: pl.DataFrame) -> "BankFeatureEncoder":
        """Learn numeric columns and categorical levels from training data."""
        df = coerce_numeric(df, self.numeric_columns)

        self._categorical_levels = {}
        self._numeric_features = []

        for col in self._source_columns(df):
            dtype = df.schema[col]
            if dtype.is_numeric():
                self._numeric_features.append(col)
            else:
                levels = df[col].cast(pl.String).drop_nulls().unique().sort().to_list()
                self._categorical_levels[col] = levels

        self._feature_columns = self._numeric_features + [
            f"{col}={level}"
            for col, levels in self._categorical_levels.items()
            for level in levels
        ]
        self._is_fitted = True
        return self

    def transform(self, df: pl.DataFrame) -> pl.DataFrame:
        """Encode a frame into the fitted feature layout."""
        if not self._is_fitted:
            raise RuntimeError("Encoder must be fitted before transform")

        df = coerce_numeric(df, self.numeric_columns)

        exprs = [
            pl.col(col).cast(pl.Float64).fill_null(0.0).alias(col)
            for col in self._numeric_features
        ]
        for col, levels in self._categorical_levels.items():
            for level in levels:
                exprs.append(
                    (pl.col(col).cast(pl.String) == level)
                    .fill_null(False)
                    .cast(pl.Int8)
                    .alias(f"{col}={level}")
                )
        return df.select(exprs)

    def fit_transform(self, df: pl.DataFrame) -> pl.DataFrame:
        return self.fit(df).transform(df)

    def get_feature_columns(self) -> list[str]:
        return self._feature_columns.copy()

    def get_categorical_columns(self) -> list[str]:
        return list(self._categorical_levels)

    def get_numeric_columns(self) -> list[str]:
        return self._numeric_features.copy()

    def save(self, path: Path) -> None:
        """Persist the fitted encoder."""
        if not self._is_fitted:
            raise RuntimeError("Cannot save unfitted encoder")
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            pickle.dump({
                "label_column": self.label_column,
                "excluded_features": self.excluded_features,
                "include_features": self.include_features,
                "numeric_columns": self.numeric_columns,
                "categorical_levels": self._categorical_levels,
                "numeric_features": self._numeric_features,
                "feature_columns": self._feature_columns,
            }, f)

    def load(self, path: Path) -> "BankFeatureEncoder":
        """Load a previously fitted encoder."""
        with open(path, "rb") as f:
            state = pickle.load(f)
        self.label_column = state["label_column"]
        self.excluded_features = state["excluded_features"]
        self.include_features = state["include_features"]
        self.numeric_columns = state["numeric_columns"]
        self._categorical_levels = state["categorical_levels"]
        self._numeric_features = state["numeric_features"]
        self._feature_columns = state["feature_columns"]
        self._is_fitted = True
        return self

    def _source_columns(self, df: pl.DataFrame) -> list[str]:
        skip = set(self.excluded_features) | set(NON_FEATURE_COLUMNS) | {self.label_column}
        if self.include_features is not None:
            missing = [c for c in self.include_features if c not in df.columns]
            if missing:
                raise ValueError(f"Requested features not in frame: {missing}")
            return [c for c in self.include_features if c not in skip]
        return [c for c in df.columns if c not in skip]


def label_array(
    df: pl.DataFrame,
    label_column: str = "y",
    positive: str = "yes",
    negative: str = "no",
) -> np.ndarray:
    """Return the label as a 0/1 integer array, encoding it if needed."""
    if df.schema[label_column] == pl.String:
        df = encode_label(df, label_column, positive, negative)
    return df[label_column].cast(pl.Int8).to_numpy().astype(np.int64)


def prepare_model_data(
    df: pl.DataFrame,
    encoder: BankFeatureEncoder,
    label_column: str = "y",
    positive: str = "yes",
    negative: str = "no",
) -> tuple[np.ndarray, np.ndarray]:
    """Prepare numpy arrays for model training/evaluation.

    Returns:
        X: Feature matrix in the encoder's column order
        y: 0/1 labels
    """
    X = encoder.transform(df).to_numpy().astype(np.float64)
    y = label_array(df, label_column, positive, negative)
    return X, y

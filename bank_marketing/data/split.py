"""Train/validation partitioning for the bank dataset.

The validation partition is a stratified sample of the label. After
sampling, validation rows whose join-column value never occurs in the
training partition are moved back into training, so every value a model
sees at evaluation time was also present while fitting.
"""

import numpy as np
import polars as pl
from sklearn.model_selection import train_test_split

from bank_marketing.domain.entities import DatasetSplit


ROW_ID = "row_id"


def _take_rows(df: pl.DataFrame, positions: np.ndarray) -> pl.DataFrame:
    """Select rows by position, preserving the original order."""
    return (
        df.with_row_index("_pos")
        .filter(pl.col("_pos").is_in(positions.tolist()))
        .drop("_pos")
    )


def stratified_partition(
    df: pl.DataFrame,
    label_column: str,
    fraction: float,
    seed: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Hold out a stratified fraction of rows.

    Args:
        df: Source table
        label_column: Column to stratify on
        fraction: Share of rows to hold out, in (0, 1)
        seed: Random seed

    Returns:
        Tuple of (kept_positions, held_positions), both sorted. They are
        disjoint and together cover every row position.
    """
    if not 0 < fraction < 1:
        raise ValueError(f"fraction must be in (0, 1), got {fraction}")

    positions = np.arange(df.height)
    labels = df[label_column].to_numpy()

    kept, held = train_test_split(
        positions,
        test_size=fraction,
        stratify=labels,
        random_state=seed,
    )
    return np.sort(kept), np.sort(held)


def repair_split(
    train: pl.DataFrame,
    held: pl.DataFrame,
    join_column: str,
) -> tuple[pl.DataFrame, pl.DataFrame, int]:
    """Move held-out rows with unseen join values back into training.

    Returns:
        Tuple of (train, validation, number of rows moved)
    """
    validation = held.join(train.select(join_column).unique(), on=join_column, how="semi")
    removed = held.join(train.select(join_column).unique(), on=join_column, how="anti")
    repaired_train = pl.concat([train, removed], how="vertical")
    return repaired_train, validation, removed.height


def create_holdout_split(
    df: pl.DataFrame,
    label_column: str = "y",
    fraction: float = 0.1,
    seed: int = 1,
    join_column: str | None = "euribor3m",
) -> DatasetSplit:
    """Partition the table into training and validation sets.

    A ``row_id`` column is attached when missing so nested splits keep
    referring to rows of the original table.
    """
    if ROW_ID not in df.columns:
        df = df.with_row_index(ROW_ID).with_columns(pl.col(ROW_ID).cast(pl.Int64))

    kept, held = stratified_partition(df, label_column, fraction, seed)
    train = _take_rows(df, kept)
    temp = _take_rows(df, held)

    if join_column is None:
        return DatasetSplit(train=train, validation=temp, n_repaired=0)

    train, validation, n_repaired = repair_split(train, temp, join_column)
    return DatasetSplit(train=train, validation=validation, n_repaired=n_repaired)


def holdout_indices(
    labels: np.ndarray,
    ratio: float = 2 / 3,
    seed: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Stratified holdout with ``ratio`` of the rows used for training.

    Returns:
        Tuple of (train_positions, test_positions)
    """
    if not 0 < ratio < 1:
        raise ValueError(f"ratio must be in (0, 1), got {ratio}")

    positions = np.arange(len(labels))
    tr, ts = train_test_split(
        positions,
        train_size=ratio,
        stratify=labels,
        random_state=seed,
    )
    return np.sort(tr), np.sort(ts)

"""Dataset acquisition and partitioning."""

from .loader import (
    EXPECTED_COLUMNS,
    CATEGORICAL_COLUMNS,
    NUMERIC_COLUMNS,
    download_archive,
    extract_csv,
    read_bank_csv,
    validate_columns,
    validate_labels,
    missing_value_counts,
    load_bank_data,
)
from .split import (
    stratified_partition,
    repair_split,
    create_holdout_split,
    holdout_indices,
)

__all__ = [
    "EXPECTED_COLUMNS",
    "CATEGORICAL_COLUMNS",
    "NUMERIC_COLUMNS",
    "download_archive",
    "extract_csv",
    "read_bank_csv",
    "validate_columns",
    "validate_labels",
    "missing_value_counts",
    "load_bank_data",
    "stratified_partition",
    "repair_split",
    "create_holdout_split",
    "holdout_indices",
]

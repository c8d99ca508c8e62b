"""Acquisition of the UCI bank marketing dataset.

Downloads the zip archive, extracts the semicolon-delimited CSV and
reads it into a polars DataFrame. Any failure along the way propagates
to the caller.
"""

from pathlib import Path
import shutil
import tempfile
from typing import TYPE_CHECKING
import zipfile

import httpx
import polars as pl

if TYPE_CHECKING:
    from bank_marketing.pipelines.config import DatasetConfig, PipelineConfig


EXPECTED_COLUMNS = [
    "age",
    "job",
    "marital",
    "education",
    "default",
    "housing",
    "loan",
    "contact",
    "month",
    "day_of_week",
    "duration",
    "campaign",
    "pdays",
    "previous",
    "poutcome",
    "emp.var.rate",
    "cons.price.idx",
    "cons.conf.idx",
    "euribor3m",
    "nr.employed",
    "y",
]

CATEGORICAL_COLUMNS = [
    "job",
    "marital",
    "education",
    "default",
    "housing",
    "loan",
    "contact",
    "month",
    "day_of_week",
    "poutcome",
]

NUMERIC_COLUMNS = [c for c in EXPECTED_COLUMNS if c not in CATEGORICAL_COLUMNS and c != "y"]


def download_archive(
    url: str,
    destination: Path | None = None,
    timeout: float = 60.0,
) -> Path:
    """Fetch the dataset archive with a single GET request.

    Args:
        url: Archive URL
        destination: Where to write the archive. A temporary file is
                     created when omitted.
        timeout: Request timeout in seconds

    Returns:
        Path to the downloaded archive

    Raises:
        httpx.HTTPStatusError: On a non-success response
        httpx.TransportError: On connection failures
    """
    if destination is None:
        with tempfile.NamedTemporaryFile(suffix=".zip", delete=False) as tmp:
            destination = Path(tmp.name)
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    with httpx.Client(follow_redirects=True, timeout=timeout) as client:
        response = client.get(url)
        response.raise_for_status()

    destination.write_bytes(response.content)
    return destination


def extract_csv(archive_path: Path, member: str, target_dir: Path) -> Path:
    """Extract a single CSV member from a zip archive.

    Raises:
        KeyError: If the member is not in the archive
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target_path = target_dir / Path(member).name

    with zipfile.ZipFile(archive_path) as archive:
        with archive.open(member) as src, open(target_path, "wb") as dst:
            shutil.copyfileobj(src, dst)

    return target_path


def read_bank_csv(path: Path, separator: str = ";") -> pl.DataFrame:
    """Read the bank marketing CSV.

    The whole file is scanned for schema inference since columns such as
    ``nr.employed`` only show fractional values further down.
    """
    return pl.read_csv(
        path,
        separator=separator,
        has_header=True,
        infer_schema_length=None,
    )


def validate_columns(df: pl.DataFrame, expected: list[str] | None = None) -> None:
    """Raise ValueError if any expected column is missing."""
    expected = EXPECTED_COLUMNS if expected is None else expected
    missing = [c for c in expected if c not in df.columns]
    if missing:
        raise ValueError(f"Dataset is missing expected columns: {missing}")


def validate_labels(df: pl.DataFrame, dataset: "DatasetConfig") -> None:
    """Raise ValueError if the label column holds anything but the two classes."""
    allowed = {dataset.positive_label, dataset.negative_label}
    found = set(df[dataset.label_column].unique().to_list())
    unexpected = found - allowed
    if unexpected:
        raise ValueError(
            f"Label column '{dataset.label_column}' has unexpected values: {sorted(map(str, unexpected))}"
        )


def missing_value_counts(df: pl.DataFrame) -> dict[str, int]:
    """Count nulls per column."""
    counts = df.null_count().row(0)
    return dict(zip(df.columns, counts))


def load_bank_data(config: "PipelineConfig", force_download: bool = False) -> pl.DataFrame:
    """Load the bank dataset, downloading it when no cached copy exists.

    Args:
        config: Pipeline configuration
        force_download: Ignore any cached CSV under the data directory

    Returns:
        Validated DataFrame with the expected columns
    """
    dataset = config.dataset
    data_dir = Path(config.paths.data_dir)
    csv_path = data_dir / Path(dataset.archive_member).name

    if force_download or not csv_path.exists():
        with tempfile.TemporaryDirectory() as tmp:
            archive = download_archive(
                dataset.url, Path(tmp) / "archive.zip", timeout=dataset.download_timeout
            )
            csv_path = extract_csv(archive, dataset.archive_member, data_dir)

    df = read_bank_csv(csv_path, dataset.separator)
    validate_columns(df)
    validate_labels(df, dataset)
    return df

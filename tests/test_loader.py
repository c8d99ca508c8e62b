import zipfile

import httpx
import polars as pl
import pytest

from bank_marketing.data.loader import (
    EXPECTED_COLUMNS,
    download_archive,
    extract_csv,
    load_bank_data,
    missing_value_counts,
    read_bank_csv,
    validate_columns,
    validate_labels,
)
from bank_marketing.pipelines.config import DatasetConfig, PathsConfig, PipelineConfig


MEMBER = "bank-additional/bank-additional-full.csv"


@pytest.fixture
def archive(bank_df, tmp_path):
    """Zip laid out like the UCI bank-additional archive."""
    csv_path = tmp_path / "source.csv"
    bank_df.write_csv(csv_path, separator=";")

    path = tmp_path / "bank-additional.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.write(csv_path, MEMBER)
        zf.writestr("bank-additional/bank-additional-names.txt", "attribute notes")
    return path


@pytest.fixture
def serve_archive(monkeypatch, archive):
    """Route httpx.Client requests to an in-memory transport serving the archive."""
    requests = []
    payload = archive.read_bytes()
    real_client = httpx.Client

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith(".zip"):
            return httpx.Response(200, content=payload)
        return httpx.Response(404)

    def client(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "Client", client)
    return requests


def test_extract_and_read(archive, bank_df, tmp_path):
    csv_path = extract_csv(archive, MEMBER, tmp_path / "data")

    assert csv_path.name == "bank-additional-full.csv"
    df = read_bank_csv(csv_path)
    assert df.columns == EXPECTED_COLUMNS
    assert df.height == bank_df.height
    assert df.schema["euribor3m"] == pl.Float64


def test_extract_missing_member_raises(archive, tmp_path):
    with pytest.raises(KeyError):
        extract_csv(archive, "bank-additional/bank-full.csv", tmp_path)


def test_validate_columns(bank_df):
    validate_columns(bank_df)
    with pytest.raises(ValueError, match="euribor3m"):
        validate_columns(bank_df.drop("euribor3m"))


def test_validate_labels(bank_df):
    validate_labels(bank_df, DatasetConfig())
    broken = bank_df.with_columns(pl.lit("maybe").alias("y"))
    with pytest.raises(ValueError):
        validate_labels(broken, DatasetConfig())


def test_missing_value_counts(bank_df):
    counts = missing_value_counts(bank_df)
    assert set(counts) == set(EXPECTED_COLUMNS)
    assert sum(counts.values()) == 0


def test_download_archive(serve_archive, tmp_path):
    path = download_archive("https://example.org/bank-additional.zip", tmp_path / "dl" / "a.zip")

    assert path.exists()
    assert zipfile.is_zipfile(path)
    assert len(serve_archive) == 1


def test_download_error_status_raises(serve_archive, tmp_path):
    with pytest.raises(httpx.HTTPStatusError):
        download_archive("https://example.org/missing", tmp_path / "a.zip")


def test_load_bank_data_downloads_then_uses_cache(serve_archive, bank_df, tmp_path):
    config = PipelineConfig(
        paths=PathsConfig(data_dir=tmp_path / "data"),
        dataset=DatasetConfig(url="https://example.org/bank-additional.zip"),
    )

    first = load_bank_data(config)
    second = load_bank_data(config)

    assert (tmp_path / "data" / "bank-additional-full.csv").exists()
    assert len(serve_archive) == 1
    assert first.equals(second)
    assert first.height == bank_df.height

    load_bank_data(config, force_download=True)
    assert len(serve_archive) == 2

import numpy as np
import polars as pl
import pytest

from bank_marketing.features.feature_engineering import (
    BankFeatureEncoder,
    coerce_numeric,
    decode_label,
    encode_label,
    label_array,
    prepare_model_data,
)


class TestLabelCodec:
    def test_round_trip_is_identity(self, bank_df):
        encoded = encode_label(bank_df)
        assert encoded.schema["y"] == pl.Int8
        assert set(encoded["y"].unique().to_list()) <= {0, 1}

        decoded = decode_label(encoded)
        assert decoded["y"].to_list() == bank_df["y"].to_list()

    def test_yes_maps_to_one(self):
        df = pl.DataFrame({"y": ["yes", "no", "no"]})
        assert encode_label(df)["y"].to_list() == [1, 0, 0]

    def test_encode_rejects_unexpected_values(self):
        df = pl.DataFrame({"y": ["yes", "maybe"]})
        with pytest.raises(ValueError, match="maybe"):
            encode_label(df)

    def test_decode_rejects_unexpected_values(self):
        df = pl.DataFrame({"y": [0, 1, 2]})
        with pytest.raises(ValueError):
            decode_label(df)

    def test_label_array_accepts_encoded_and_raw(self, bank_df):
        raw = label_array(bank_df)
        encoded = label_array(encode_label(bank_df))
        np.testing.assert_array_equal(raw, encoded)
        assert raw.dtype == np.int64


class TestCoerceNumeric:
    def test_parses_string_columns(self):
        df = pl.DataFrame({"euribor3m": ["4.857", " 1.313", "0.634"]})
        result = coerce_numeric(df, ["euribor3m"])
        assert result.schema["euribor3m"] == pl.Float64
        assert result["euribor3m"].to_list() == [4.857, 1.313, 0.634]

    def test_ignores_missing_columns(self):
        df = pl.DataFrame({"age": [30, 40]})
        assert coerce_numeric(df, ["euribor3m"]).equals(df)

    def test_invalid_string_raises(self):
        df = pl.DataFrame({"euribor3m": ["4.857", "n/a"]})
        with pytest.raises(pl.exceptions.PolarsError):
            coerce_numeric(df, ["euribor3m"])


class TestBankFeatureEncoder:
    def test_excludes_duration_label_and_row_id(self, bank_df):
        df = bank_df.with_row_index("row_id")
        encoder = BankFeatureEncoder().fit(df)

        columns = encoder.get_feature_columns()
        assert "duration" not in columns
        assert "y" not in columns
        assert "row_id" not in columns
        assert "age" in encoder.get_numeric_columns()
        assert "job" in encoder.get_categorical_columns()
        assert "contact=cellular" in columns

    def test_transform_produces_fitted_layout(self, bank_df):
        encoder = BankFeatureEncoder()
        features = encoder.fit_transform(bank_df)

        assert features.columns == encoder.get_feature_columns()
        assert features.height == bank_df.height
        # exactly one level of each categorical attribute is set per row
        job_columns = [c for c in features.columns if c.startswith("job=")]
        assert features.select(job_columns).sum_horizontal().to_list() == [1] * bank_df.height

    def test_unseen_level_encodes_to_zeros(self, bank_df):
        encoder = BankFeatureEncoder().fit(bank_df)
        new_row = bank_df.head(1).with_columns(pl.lit("astronaut").alias("job"))

        features = encoder.transform(new_row)
        job_columns = [c for c in features.columns if c.startswith("job=")]
        assert features.select(job_columns).row(0) == tuple([0] * len(job_columns))

    def test_include_features_restricts_columns(self, bank_df):
        encoder = BankFeatureEncoder(include_features=["campaign", "contact"]).fit(bank_df)
        assert encoder.get_feature_columns() == ["campaign", "contact=cellular", "contact=telephone"]

    def test_include_features_must_exist(self, bank_df):
        with pytest.raises(ValueError):
            BankFeatureEncoder(include_features=["salary"]).fit(bank_df)

    def test_transform_before_fit_raises(self, bank_df):
        with pytest.raises(RuntimeError):
            BankFeatureEncoder().transform(bank_df)

    def test_save_and_load(self, bank_df, tmp_path):
        encoder = BankFeatureEncoder().fit(bank_df)
        path = tmp_path / "encoder.pkl"
        encoder.save(path)

        loaded = BankFeatureEncoder().load(path)
        assert loaded.is_fitted
        assert loaded.get_feature_columns() == encoder.get_feature_columns()
        assert loaded.transform(bank_df).equals(encoder.transform(bank_df))


def test_prepare_model_data_shapes(bank_df):
    encoder = BankFeatureEncoder().fit(bank_df)
    X, y = prepare_model_data(bank_df, encoder)

    assert X.shape == (bank_df.height, len(encoder.get_feature_columns()))
    assert X.dtype == np.float64
    assert y.sum() == (bank_df["y"] == "yes").sum()

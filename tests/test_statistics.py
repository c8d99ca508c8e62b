import polars as pl
import pytest
from scipy.stats import chi2_contingency

from bank_marketing.analysis.statistics import (
    chi_squared_test,
    contingency_table,
    count_by_label,
    dataset_overview,
    describe_column,
    feature_significance,
    label_distribution,
)


def test_dataset_overview(bank_df):
    overview = dataset_overview(bank_df)
    assert overview["n_rows"] == bank_df.height
    assert overview["n_columns"] == 21
    assert "euribor3m" in overview["schema"]


def test_describe_numeric_column(bank_df):
    summary = describe_column(bank_df, "age")
    assert summary.minimum == bank_df["age"].min()
    assert summary.maximum == bank_df["age"].max()
    assert summary.n_unknown == 0
    assert summary.counts["count"].sum() == bank_df.height


def test_describe_categorical_column_counts_unknowns(bank_df):
    summary = describe_column(bank_df, "education")
    assert summary.minimum is None
    assert summary.n_unknown == (bank_df["education"] == "unknown").sum()
    assert "unknown" in summary.distinct_values


def test_label_distribution_most_frequent_first(bank_df):
    counts = label_distribution(bank_df, "y")
    assert counts["y"].to_list()[0] == "no"
    assert counts["count"].sum() == bank_df.height


def test_count_by_label_sorted_by_count(bank_df):
    counts = count_by_label(bank_df, "contact", "y")
    assert counts.height == 4
    assert counts["count"].to_list() == sorted(counts["count"].to_list(), reverse=True)


def test_contingency_table_margins(bank_df):
    table, rows, cols = contingency_table(bank_df, "marital", "y")
    assert table.shape == (len(rows), 2)
    assert cols == ["no", "yes"]
    assert table.sum() == bank_df.height
    assert table[:, 1].sum() == (bank_df["y"] == "yes").sum()


@pytest.mark.parametrize("column", ["job", "contact", "poutcome"])
def test_chi_squared_matches_scipy(bank_df, column):
    table, _, _ = contingency_table(bank_df, column, "y")
    expected_stat, expected_p, expected_dof, _ = chi2_contingency(table, correction=True)

    result = chi_squared_test(bank_df, column, "y")

    assert result.statistic == pytest.approx(expected_stat)
    assert result.p_value == pytest.approx(expected_p)
    assert result.dof == expected_dof
    assert not result.simulated


def test_strong_association_is_significant(bank_df):
    assert chi_squared_test(bank_df, "poutcome", "y").is_significant(0.05)


def test_simulated_p_value(bank_df):
    result = chi_squared_test(bank_df, "education", "y", simulate_p_value=True, n_simulations=199, seed=123)

    assert result.simulated
    assert result.n_simulations == 199
    assert 1 / 200 <= result.p_value <= 1.0
    assert result.dof == 4


def test_simulated_p_value_is_reproducible(bank_df):
    first = chi_squared_test(bank_df, "job", "y", simulate_p_value=True, n_simulations=99, seed=5)
    second = chi_squared_test(bank_df, "job", "y", simulate_p_value=True, n_simulations=99, seed=5)
    assert first.p_value == second.p_value


def test_simulated_p_value_floor_for_strong_association(bank_df):
    result = chi_squared_test(bank_df, "poutcome", "y", simulate_p_value=True, n_simulations=99, seed=1)
    assert result.p_value == pytest.approx(1 / 100)


def test_single_level_column_raises():
    df = pl.DataFrame({"loan": ["no"] * 4, "y": ["yes", "no", "no", "yes"]})
    with pytest.raises(ValueError):
        chi_squared_test(df, "loan", "y")


def test_feature_significance_table(bank_df):
    table = feature_significance(
        bank_df,
        ["job", "contact", "duration"],
        "y",
        simulate_columns=["duration"],
        n_simulations=49,
        seed=123,
    )

    assert table["column"].to_list() == ["job", "contact", "duration"]
    assert table["simulated"].to_list() == [False, False, True]
    assert table.schema["significant"] == pl.Boolean
    assert table["p_value"].is_between(0, 1).all()

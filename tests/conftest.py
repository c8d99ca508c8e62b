"""Shared fixtures: a small synthetic dataset shaped like bank-additional-full."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import polars as pl
import pytest

from bank_marketing.pipelines.config import (
    AnalysisConfig,
    ModelsConfig,
    PathsConfig,
    PipelineConfig,
)


EURIBOR_LEVELS = [0.634, 0.715, 1.313, 1.405, 4.191, 4.857, 4.961, 4.962]


def make_bank_frame(n_rows: int = 600, seed: int = 7) -> pl.DataFrame:
    """Bank-like frame whose label depends on euribor3m, poutcome and contact."""
    rng = np.random.default_rng(seed)

    euribor = rng.choice(EURIBOR_LEVELS, size=n_rows)
    poutcome = rng.choice(["nonexistent", "failure", "success"], size=n_rows, p=[0.8, 0.12, 0.08])
    contact = rng.choice(["cellular", "telephone"], size=n_rows, p=[0.65, 0.35])

    logit = (
        -2.2
        + 1.8 * (euribor < 2.0)
        + 2.0 * (poutcome == "success")
        + 0.6 * (contact == "cellular")
    )
    prob = 1.0 / (1.0 + np.exp(-logit))
    y = np.where(rng.random(n_rows) < prob, "yes", "no")

    duration = rng.integers(5, 1200, size=n_rows)
    duration = np.where(y == "yes", duration + 200, duration)

    return pl.DataFrame({
        "age": rng.integers(18, 90, size=n_rows),
        "job": rng.choice(["admin.", "blue-collar", "technician", "services", "retired", "unknown"], size=n_rows),
        "marital": rng.choice(["married", "single", "divorced", "unknown"], size=n_rows, p=[0.6, 0.28, 0.1, 0.02]),
        "education": rng.choice(
            ["basic.4y", "high.school", "university.degree", "professional.course", "unknown"], size=n_rows
        ),
        "default": rng.choice(["no", "unknown"], size=n_rows, p=[0.8, 0.2]),
        "housing": rng.choice(["no", "yes", "unknown"], size=n_rows, p=[0.45, 0.5, 0.05]),
        "loan": rng.choice(["no", "yes", "unknown"], size=n_rows, p=[0.8, 0.15, 0.05]),
        "contact": contact,
        "month": rng.choice(["may", "jun", "jul", "aug", "nov"], size=n_rows),
        "day_of_week": rng.choice(["mon", "tue", "wed", "thu", "fri"], size=n_rows),
        "duration": duration,
        "campaign": rng.integers(1, 6, size=n_rows),
        "pdays": np.where(poutcome == "nonexistent", 999, rng.integers(1, 15, size=n_rows)),
        "previous": np.where(poutcome == "nonexistent", 0, rng.integers(1, 3, size=n_rows)),
        "poutcome": poutcome,
        "emp.var.rate": rng.choice([-1.8, -0.1, 1.1, 1.4], size=n_rows),
        "cons.price.idx": rng.choice([92.893, 93.994, 94.465], size=n_rows),
        "cons.conf.idx": rng.choice([-46.2, -36.4, -41.8], size=n_rows),
        "euribor3m": euribor,
        "nr.employed": rng.choice([5099.1, 5191.0, 5228.1], size=n_rows),
        "y": y,
    })


@pytest.fixture
def bank_df() -> pl.DataFrame:
    return make_bank_frame()


@pytest.fixture
def fast_config(tmp_path) -> PipelineConfig:
    """Configuration with a quick model subset and few simulations."""
    return PipelineConfig(
        paths=PathsConfig(data_dir=tmp_path / "data", output_dir=tmp_path / "artifacts"),
        analysis=AnalysisConfig(n_simulations=99),
        models=ModelsConfig(
            enabled=["logistic_base", "naive_bayes", "ctree", "lssvm"],
            final_model="ctree",
        ),
    )

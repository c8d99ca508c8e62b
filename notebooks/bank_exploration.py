# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "marimo",
#     "polars>=1.0.0",
#     "numpy>=1.24.0",
#     "scikit-learn>=1.8",
#     "xgboost>=2.0.0",
#     "scipy>=1.11.0",
#     "pydantic>=2.0",
#     "pyyaml>=6.0",
#     "httpx>=0.27.0",
#     "matplotlib>=3.8.0",
#     "seaborn>=0.13.0",
# ]
# ///

import marimo

__generated_with = "0.19.4"
app = marimo.App(width="full")


@app.cell
def _():
    import marimo as mo
    import polars as pl
    import matplotlib.pyplot as plt
    import seaborn as sns

    from bank_marketing.analysis import plots
    from bank_marketing.analysis.statistics import (
        describe_column,
        feature_significance,
        label_distribution,
    )
    from bank_marketing.data.loader import CATEGORICAL_COLUMNS, load_bank_data
    from bank_marketing.pipelines.config import get_default_config
    from bank_marketing.pipelines.evaluation import EvaluationPipeline
    from bank_marketing.pipelines.training import TrainingPipeline, partition_dataset

    plt.style.use('seaborn-v0_8-whitegrid')
    sns.set_palette("husl")

    mo.md("""
    # Bank Marketing - Term Deposit Subscription

    Phone campaigns of a Portuguese bank (UCI *bank-additional-full*).
    Each row is one contact; `y` records whether the client subscribed
    to a term deposit.

    ## Plan
    1. Hold out 10% of the rows as a final validation set
    2. Explore the remaining **bank data**
    3. Split the bank data again and compare the classifiers
    4. Refit the chosen model on all bank data and score it on the holdout
    """)
    return (
        CATEGORICAL_COLUMNS,
        EvaluationPipeline,
        TrainingPipeline,
        describe_column,
        feature_significance,
        get_default_config,
        label_distribution,
        load_bank_data,
        mo,
        partition_dataset,
        pl,
        plots,
    )


@app.cell
def _(get_default_config, load_bank_data, partition_dataset):
    config = get_default_config()
    df = load_bank_data(config)
    outer, inner = partition_dataset(df, config)
    bank_data = outer.train.drop("row_id")

    print(f"Full dataset: {df.shape}")
    print(f"Bank data: {outer.train.height:,} rows, validation: {outer.validation.height:,} rows")
    print(f"Rows moved back to training by the euribor3m repair: {outer.n_repaired}")
    return bank_data, config, inner, outer


@app.cell
def _(bank_data, label_distribution, mo, plots):
    counts = label_distribution(bank_data, "y")
    mo.vstack([
        mo.md("## 1. Subscription distribution"),
        mo.ui.table(counts),
        plots.plot_label_distribution(bank_data, "y"),
    ])
    return


@app.cell
def _(bank_data, mo, plots):
    mo.vstack([
        mo.md("## 2. Age"),
        plots.plot_age_histogram(bank_data, "age", "y"),
        plots.plot_age_facets(bank_data, "age", "y"),
    ])
    return


@app.cell
def _(CATEGORICAL_COLUMNS, bank_data, describe_column, mo, pl):
    rows = []
    for column in CATEGORICAL_COLUMNS:
        summary = describe_column(bank_data, column)
        rows.append({
            "column": column,
            "distinct": summary.n_distinct,
            "unknown": summary.n_unknown,
        })

    mo.vstack([
        mo.md("## 3. Categorical attributes"),
        mo.ui.table(pl.DataFrame(rows)),
    ])
    return


@app.cell
def _(mo):
    column_picker = mo.ui.dropdown(
        options=[
            "job", "marital", "education", "default", "housing", "loan",
            "contact", "month", "day_of_week", "poutcome",
        ],
        value="job",
        label="Attribute",
    )
    column_picker
    return (column_picker,)


@app.cell
def _(bank_data, column_picker, plots):
    plots.plot_category_counts(bank_data, column_picker.value, "y")
    return


@app.cell
def _(bank_data, config, feature_significance, mo):
    analysis = config.analysis
    significance = feature_significance(
        bank_data,
        analysis.chi_squared_columns,
        "y",
        alpha=analysis.significance_level,
        simulate_columns=analysis.simulate_p_value_columns,
        n_simulations=analysis.n_simulations,
        seed=analysis.seed,
    )
    mo.vstack([
        mo.md(f"""
        ## 4. Chi-squared tests against `y`

        Columns marked `simulated` use a Monte Carlo p-value with
        {analysis.n_simulations} permutations.
        """),
        mo.ui.table(significance),
    ])
    return


@app.cell
def _(TrainingPipeline, config, inner, mo):
    fast = config.with_overrides(models=["logistic_base", "naive_bayes", "ctree", "xgboost", "lda"])
    comparison = TrainingPipeline(config=fast).run(inner.train, inner.validation)
    mo.vstack([
        mo.md("## 5. Model comparison (fast subset)"),
        mo.ui.table(comparison.to_frame()),
    ])
    return (comparison,)


@app.cell
def _(comparison, plots):
    plots.plot_model_comparison(comparison.to_frame())
    return


@app.cell
def _(EvaluationPipeline, config, mo, outer, plots):
    final = EvaluationPipeline(config=config)
    result = final.run(outer.train, outer.validation)
    mo.vstack([
        mo.md(f"## 6. Final model: {result.model_name}"),
        mo.md(f"```\n{final.generate_report(result)}\n```"),
        plots.plot_roc_curve(result.actuals, result.scores, target_class=1, title="Yes ROC", legend="Yes"),
    ])
    return


if __name__ == "__main__":
    app.run()

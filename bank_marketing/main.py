"""Main entry point for the bank marketing analysis.

Provides a CLI for downloading the data, exploring it, comparing the
classifiers and evaluating the final model on the holdout.

Usage:
    # Download (or refresh) the cached dataset
    python -m bank_marketing.main download --config pipeline_config.yml --force-download

    # Exploratory analysis of the training partition
    python -m bank_marketing.main explore --config pipeline_config.yml

    # Compare a subset of the models
    python -m bank_marketing.main compare --models logistic_base ctree xgboost

    # Final holdout evaluation with the comparison winner
    python -m bank_marketing.main final --final-model best

    # Everything, in order
    python -m bank_marketing.main run --config pipeline_config.yml --output-dir ./artifacts
"""

import argparse
from pathlib import Path

import polars as pl

from bank_marketing.data.loader import load_bank_data, missing_value_counts
from bank_marketing.domain.entities import DatasetSplit, ModelResult
from bank_marketing.pipelines.config import PipelineConfig, get_default_config, load_config
from bank_marketing.pipelines.evaluation import BEST_MODEL, EvaluationPipeline
from bank_marketing.pipelines.exploration import ExplorationPipeline
from bank_marketing.pipelines.training import (
    ComparisonResult,
    TrainingPipeline,
    describe_result,
    partition_dataset,
)


def _load_pipeline_config(args: argparse.Namespace) -> PipelineConfig:
    """Load pipeline config from file or defaults and apply CLI overrides."""
    config = load_config(args.config) if args.config else get_default_config()
    return config.with_overrides(
        output_dir=args.output_dir,
        seed=args.seed,
        models=args.models,
        final_model=args.final_model,
    )


def _banner(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def _load_data(config: PipelineConfig, force_download: bool = False) -> pl.DataFrame:
    print(f"Loading data into {config.paths.data_dir}")
    df = load_bank_data(config, force_download=force_download)
    print(f"Dataset: {df.shape}")
    return df


def _partition(df: pl.DataFrame, config: PipelineConfig) -> tuple[DatasetSplit, DatasetSplit]:
    outer, inner = partition_dataset(df, config)
    print(
        f"Bank data: {outer.train.height:,} rows, final validation: {outer.validation.height:,} rows"
        f" ({outer.n_repaired} moved to training)"
    )
    print(
        f"Model training: {inner.train.height:,} rows, model test: {inner.validation.height:,} rows"
        f" ({inner.n_repaired} moved to training)"
    )
    return outer, inner


def _print_progress(result: ModelResult) -> None:
    print(describe_result(result))


def download(args: argparse.Namespace) -> None:
    """Download the dataset and report its shape."""
    config = _load_pipeline_config(args)
    df = _load_data(config, force_download=True)

    _banner("DOWNLOAD COMPLETE")
    missing = missing_value_counts(df)
    print(f"Rows: {df.height:,}")
    print(f"Columns: {df.width}")
    print(f"Missing values: {sum(missing.values())}")


def _explore(df: pl.DataFrame, config: PipelineConfig) -> None:
    outer, _ = _partition(df, config)
    pipeline = ExplorationPipeline(
        output_dir=config.paths.figures_dir,
        analysis_config=config.analysis,
        label_column=config.dataset.label_column,
    )
    report = pipeline.run(outer.train)
    print(report.generate_report())
    if report.figures:
        print(f"\nFigures saved to: {config.paths.figures_dir}")


def _compare(df: pl.DataFrame, config: PipelineConfig) -> ComparisonResult:
    _, inner = _partition(df, config)
    pipeline = TrainingPipeline(output_dir=config.paths.output_dir, config=config)

    print(f"\nComparing {len(pipeline.model_keys())} models...")
    comparison = pipeline.run(inner.train, inner.validation, progress=_print_progress)

    _banner("MODEL COMPARISON")
    print(comparison.summary())
    print(f"\nResults saved to: {Path(config.paths.output_dir) / 'model_comparison.csv'}")
    return comparison


def _final(
    df: pl.DataFrame,
    config: PipelineConfig,
    comparison: ComparisonResult | None = None,
) -> None:
    if config.models.final_model == BEST_MODEL and comparison is None:
        comparison = _compare(df, config)

    outer, _ = partition_dataset(df, config)
    pipeline = EvaluationPipeline(output_dir=config.paths.output_dir, config=config)
    result = pipeline.run(outer.train, outer.validation, comparison=comparison)
    print(pipeline.generate_report(result))
    print(f"\nArtifacts saved to: {config.paths.output_dir}")


def explore(args: argparse.Namespace) -> None:
    """Run the exploratory analysis on the training partition."""
    config = _load_pipeline_config(args)
    _explore(_load_data(config, args.force_download), config)


def compare(args: argparse.Namespace) -> None:
    """Compare the enabled models on the inner train/test split."""
    config = _load_pipeline_config(args)
    _compare(_load_data(config, args.force_download), config)


def final(args: argparse.Namespace) -> None:
    """Refit the chosen model and score it on the final holdout."""
    config = _load_pipeline_config(args)
    _final(_load_data(config, args.force_download), config)


def run_all(args: argparse.Namespace) -> None:
    """Run exploration, comparison and final evaluation in order."""
    config = _load_pipeline_config(args)
    df = _load_data(config, args.force_download)

    _banner("EXPLORATION")
    _explore(df, config)
    comparison = _compare(df, config)
    _banner("FINAL EVALUATION")
    _final(df, config, comparison)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=str, help="Path to YAML config file")
    parser.add_argument("--output-dir", type=str, help="Path to save artifacts (overrides config)")
    parser.add_argument("--seed", type=int, help="Partitioning seed (overrides config)")
    parser.add_argument("--models", type=str, nargs="+", help="Model keys to compare (overrides config)")
    parser.add_argument("--final-model", type=str, help="Final model key or 'best' (overrides config)")
    parser.add_argument("--force-download", action="store_true", help="Download even if a cached CSV exists")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(description="Bank Marketing Term Deposit Analysis")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    commands = {
        "download": "Download the dataset",
        "explore": "Exploratory analysis of the training partition",
        "compare": "Compare the classifiers",
        "final": "Evaluate the final model on the holdout",
        "run": "Run every step",
    }
    for name, help_text in commands.items():
        _add_common_arguments(subparsers.add_parser(name, help=help_text))

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "download":
        download(args)
    elif args.command == "explore":
        explore(args)
    elif args.command == "compare":
        compare(args)
    elif args.command == "final":
        final(args)
    elif args.command == "run":
        run_all(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()

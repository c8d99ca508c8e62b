"""Configuration loader for the bank marketing pipelines.

Provides typed configuration loading from YAML files with
sensible defaults and validation using Pydantic.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator


DEFAULT_DATASET_URL = (
    "https://archive.ics.uci.edu/ml/machine-learning-databases/00222/bank-additional.zip"
)


class PathsConfig(BaseModel):
    """Configuration for file system paths."""

    model_config = {"frozen": True}

    data_dir: Path = Field(default=Path("data"))
    output_dir: Path = Field(default=Path("artifacts"))

    @property
    def figures_dir(self) -> Path:
        return self.output_dir / "figures"


class DatasetConfig(BaseModel):
    """Where the dataset lives and how it is laid out."""

    model_config = {"frozen": True}

    url: str = Field(default=DEFAULT_DATASET_URL)
    archive_member: str = Field(default="bank-additional/bank-additional-full.csv")
    separator: str = Field(default=";", min_length=1, max_length=1)
    label_column: str = Field(default="y")
    positive_label: str = Field(default="yes")
    negative_label: str = Field(default="no")
    download_timeout: float = Field(default=60.0, gt=0)


class SplitConfig(BaseModel):
    """Configuration for train/validation partitioning."""

    model_config = {"frozen": True}

    validation_fraction: float = Field(default=0.1, gt=0, lt=1)
    seed: int = Field(default=1)
    join_column: str = Field(default="euribor3m")


class AnalysisConfig(BaseModel):
    """Configuration for the exploratory analysis."""

    model_config = {"frozen": True}

    significance_level: float = Field(default=0.05, gt=0, lt=1)
    simulate_p_value_columns: list[str] = Field(
        default_factory=lambda: ["education", "default", "duration"]
    )
    chi_squared_columns: list[str] = Field(
        default_factory=lambda: [
            "job", "marital", "education", "default", "housing", "loan",
            "contact", "month", "day_of_week", "duration", "poutcome",
        ]
    )
    numeric_count_columns: list[str] = Field(
        default_factory=lambda: [
            "campaign", "pdays", "previous", "emp.var.rate",
            "cons.price.idx", "cons.conf.idx", "euribor3m", "nr.employed",
        ]
    )
    n_simulations: int = Field(default=2000, ge=1)
    seed: int = Field(default=123)
    save_figures: bool = Field(default=True)


class ModelsConfig(BaseModel):
    """Configuration for the model comparison and the final model."""

    model_config = {"frozen": True}

    enabled: list[str] | None = Field(default=None)
    excluded_features: list[str] = Field(default_factory=lambda: ["duration"])
    numeric_columns: list[str] = Field(default_factory=lambda: ["euribor3m"])
    final_model: str = Field(default="ctree_tuned")
    ranking_metric: str = Field(default="accuracy")
    random_state: int = Field(default=123)

    @field_validator("ranking_metric")
    @classmethod
    def check_ranking_metric(cls, v: str) -> str:
        if v not in ("accuracy", "auc", "f1_score"):
            raise ValueError(f"ranking_metric must be accuracy, auc or f1_score, got {v!r}")
        return v


class PipelineConfig(BaseModel):
    """Complete pipeline configuration."""

    model_config = {"frozen": True}

    paths: PathsConfig = Field(default_factory=PathsConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    split: SplitConfig = Field(default_factory=SplitConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    models: ModelsConfig = Field(default_factory=ModelsConfig)

    def with_base_path(self, base_path: Path) -> "PipelineConfig":
        """Return a new config with paths resolved against base_path."""
        def resolve(p: Path) -> Path:
            if not p.is_absolute():
                return base_path / p
            return p

        resolved_paths = PathsConfig(
            data_dir=resolve(self.paths.data_dir),
            output_dir=resolve(self.paths.output_dir),
        )
        return self.model_copy(update={"paths": resolved_paths})

    def with_overrides(
        self,
        output_dir: Path | None = None,
        seed: int | None = None,
        models: list[str] | None = None,
        final_model: str | None = None,
    ) -> "PipelineConfig":
        """Return a new config with CLI overrides applied."""
        config = self
        if output_dir is not None:
            config = config.model_copy(update={
                "paths": PathsConfig(data_dir=config.paths.data_dir, output_dir=Path(output_dir)),
            })
        if seed is not None:
            config = config.model_copy(update={
                "split": config.split.model_copy(update={"seed": seed}),
            })
        if models is not None or final_model is not None:
            update = {}
            if models is not None:
                update["enabled"] = models
            if final_model is not None:
                update["final_model"] = final_model
            config = config.model_copy(update={
                "models": config.models.model_copy(update=update),
            })
        return config


def load_config(config_path: Path | str, base_path: Path | None = None) -> PipelineConfig:
    """Load pipeline configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file
        base_path: Optional base path for resolving relative paths.
                   Defaults to the parent directory of the config file.

    Returns:
        PipelineConfig with all settings loaded

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    if base_path is None:
        base_path = config_path.parent

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    config = PipelineConfig.model_validate(data)
    return config.with_base_path(base_path)


def get_default_config(base_path: Path | None = None) -> PipelineConfig:
    """Get default configuration without loading from file."""
    config = PipelineConfig()
    if base_path:
        return config.with_base_path(base_path)
    return config

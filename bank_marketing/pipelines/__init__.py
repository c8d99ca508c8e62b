"""Pipeline implementations for the bank marketing analysis."""

from .config import (
    PipelineConfig,
    PathsConfig,
    DatasetConfig,
    SplitConfig,
    AnalysisConfig,
    ModelsConfig,
    load_config,
    get_default_config,
)
from .exploration import (
    ExplorationPipeline,
    ExplorationReport,
)
from .training import (
    ComparisonResult,
    TrainingPipeline,
    evaluate_model,
    evaluate_named_model,
    partition_dataset,
)
from .evaluation import (
    EvaluationPipeline,
)

__all__ = [
    # Config
    "PipelineConfig",
    "PathsConfig",
    "DatasetConfig",
    "SplitConfig",
    "AnalysisConfig",
    "ModelsConfig",
    "load_config",
    "get_default_config",
    # Exploration
    "ExplorationPipeline",
    "ExplorationReport",
    # Training
    "ComparisonResult",
    "TrainingPipeline",
    "evaluate_model",
    "evaluate_named_model",
    "partition_dataset",
    # Evaluation
    "EvaluationPipeline",
]

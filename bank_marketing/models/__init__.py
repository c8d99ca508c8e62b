"""Classifier wrappers and the model registry."""

from .classifier import SklearnClassifier
from .zoo import (
    MODEL_SPECS,
    ModelSpec,
    available_models,
    build_model,
    get_spec,
)

__all__ = [
    "SklearnClassifier",
    "MODEL_SPECS",
    "ModelSpec",
    "available_models",
    "build_model",
    "get_spec",
]

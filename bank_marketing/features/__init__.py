"""Feature handling for the bank marketing models."""

from .feature_engineering import (
    DEFAULT_EXCLUDED_FEATURES,
    BankFeatureEncoder,
    encode_label,
    decode_label,
    coerce_numeric,
    label_array,
    prepare_model_data,
)

__all__ = [
    "DEFAULT_EXCLUDED_FEATURES",
    "BankFeatureEncoder",
    "encode_label",
    "decode_label",
    "coerce_numeric",
    "label_array",
    "prepare_model_data",
]

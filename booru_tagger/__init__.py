"""
Booru Tagger

Pre/post-processing pipeline around WD-14 style multi-label image taggers:
image normalization, batch chunking, MCut adaptive thresholds and
rating/general/character tag assembly on top of ONNX Runtime.
"""

__version__ = "1.0.0"
__author__ = "Booru Tagger Team"

from .errors import (
    TaggerError,
    ConfigError,
    TensorError,
    InputTensorError,
    OutputTensorError,
    InferenceError,
    ResourceError,
)
from .models import Category, Predictions, DEFAULT_GENERAL_THRESHOLD, DEFAULT_CHARACTER_THRESHOLD
from .thresholds import mcut_threshold
from .tagging_engine import TaggerSession, construct_session

__all__ = [
    "TaggerError",
    "ConfigError",
    "TensorError",
    "InputTensorError",
    "OutputTensorError",
    "InferenceError",
    "ResourceError",
    "Category",
    "Predictions",
    "DEFAULT_GENERAL_THRESHOLD",
    "DEFAULT_CHARACTER_THRESHOLD",
    "mcut_threshold",
    "TaggerSession",
    "construct_session",
]

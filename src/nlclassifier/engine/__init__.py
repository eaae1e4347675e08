"""Inference engines that execute classification models."""

from .base import InferenceEngine
from .sklearn_engine import SklearnEngine, bag_of_ids

__all__ = [
    "InferenceEngine",
    "SklearnEngine",
    "bag_of_ids",
]

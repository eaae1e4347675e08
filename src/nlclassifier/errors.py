"""Exceptions raised while loading models and classifying text."""

from __future__ import annotations


class NLClassifierError(Exception):
    """Base class for all classifier failures."""


class ResourceNotFoundError(NLClassifierError, FileNotFoundError):
    """Raised when a named model asset or model path does not exist."""


class ModelLoadError(NLClassifierError):
    """Raised when bytes are not a valid model for the inference engine."""


class InvalidBufferError(ModelLoadError):
    """Raised when a model buffer is not contiguous or holds no valid model."""


class InferenceError(NLClassifierError):
    """Raised when the engine fails during a forward pass."""


class ClassifierClosedError(NLClassifierError):
    """Raised when a released classifier or model handle is used."""


__all__ = [
    "NLClassifierError",
    "ResourceNotFoundError",
    "ModelLoadError",
    "InvalidBufferError",
    "InferenceError",
    "ClassifierClosedError",
]

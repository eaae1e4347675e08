"""Text classification facade over pluggable inference engines."""

from importlib import metadata

from .assets import AssetContext
from .classifier import TextClassifier
from .errors import (
    ClassifierClosedError,
    InferenceError,
    InvalidBufferError,
    ModelLoadError,
    NLClassifierError,
    ResourceNotFoundError,
)
from .handle import ModelHandle, ModelSource
from .types import Category, ClassificationResult


def _discover_version() -> str:
    """Return the installed package version, falling back to dev marker."""
    try:
        return metadata.version("nlclassifier")
    except metadata.PackageNotFoundError:  # pragma: no cover - occurs in source checkouts
        return "0.0.0"


__version__ = _discover_version()

__all__ = [
    "AssetContext",
    "Category",
    "ClassificationResult",
    "ClassifierClosedError",
    "InferenceError",
    "InvalidBufferError",
    "ModelHandle",
    "ModelLoadError",
    "ModelSource",
    "NLClassifierError",
    "ResourceNotFoundError",
    "TextClassifier",
    "__version__",
]

"""Inference engine protocol definitions."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from ..model_file import LoadedModel
from ..tokenizer import EncodedInput


@runtime_checkable
class InferenceEngine(Protocol):
    """Runtime that decodes model bytes and executes forward passes."""

    name: str

    def load(self, buffer: memoryview) -> LoadedModel:
        """Decode model bytes without copying. Raise ModelLoadError when invalid."""

    def run(self, model: LoadedModel, encoded: EncodedInput) -> np.ndarray:
        """Return one float32 score per model label. Raise InferenceError on failure."""


__all__ = ["InferenceEngine"]

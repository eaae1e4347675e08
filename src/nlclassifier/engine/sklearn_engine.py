"""Inference engine backed by fitted scikit-learn estimators."""

from __future__ import annotations

import logging

import numpy as np
from scipy import sparse

from ..errors import InferenceError
from ..model_file import LoadedModel, parse_model
from ..tokenizer import EncodedInput

LOGGER = logging.getLogger(__name__)


def bag_of_ids(encoded: EncodedInput, vocabulary_size: int) -> sparse.csr_matrix:
    """Count the unmasked token ids of ``encoded`` into a 1 x vocabulary row."""

    ids = encoded.ids[encoded.mask.astype(bool)]
    if ids.size and (int(ids.min()) < 0 or int(ids.max()) >= vocabulary_size):
        raise ValueError(
            f"Token id out of range for vocabulary of size {vocabulary_size}"
        )
    unique, counts = np.unique(ids, return_counts=True)
    return sparse.csr_matrix(
        (counts.astype(np.float64), (np.zeros_like(unique), unique)),
        shape=(1, vocabulary_size),
    )


class SklearnEngine:
    """Scores bag-of-ids vectors with ``predict_proba``.

    ``run`` only reads the fitted estimator, so one loaded model can serve
    concurrent callers.
    """

    name = "sklearn"

    def load(self, buffer: memoryview) -> LoadedModel:
        model = parse_model(buffer)
        LOGGER.debug(
            "Loaded %s with %d labels, vocabulary of %d tokens",
            type(model.estimator).__name__,
            len(model.labels),
            model.tokenizer.vocabulary_size,
        )
        return model

    def run(self, model: LoadedModel, encoded: EncodedInput) -> np.ndarray:
        try:
            matrix = bag_of_ids(encoded, model.tokenizer.vocabulary_size)
            probabilities = np.asarray(model.estimator.predict_proba(matrix))
        except Exception as exc:
            raise InferenceError(f"Forward pass failed: {exc}") from exc

        if probabilities.ndim != 2 or probabilities.shape != (1, len(model.labels)):
            raise InferenceError(
                f"Expected scores of shape (1, {len(model.labels)}), got {probabilities.shape}"
            )
        return probabilities[0].astype(np.float32, copy=True)


__all__ = ["SklearnEngine", "bag_of_ids"]

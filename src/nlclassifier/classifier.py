"""Text classification facade over a loaded model."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, BinaryIO

from .assets import AssetContext
from .engine import InferenceEngine
from .errors import ClassifierClosedError, InferenceError
from .handle import ModelHandle
from .tokenizer import encode
from .types import ClassificationResult

LOGGER = logging.getLogger(__name__)


class TextClassifier:
    """Classifies text with the model behind a :class:`ModelHandle`.

    The classifier owns the handle and releases it on ``close()``. It does no
    locking of its own; the bundled scikit-learn engine only reads the fitted
    estimator, so concurrent ``classify`` calls are safe with it.

    Example::

        with TextClassifier.from_path("sentiment.nlcm") as classifier:
            result = classifier.classify("it's a charming and often affecting journey")
            print(result.top().label)
    """

    def __init__(self, handle: ModelHandle) -> None:
        if not handle.valid:
            raise ClassifierClosedError(f"Model handle {handle.source} has been released.")
        self._handle = handle

    @classmethod
    def from_asset(
        cls,
        context: AssetContext,
        name: str,
        *,
        engine: InferenceEngine | None = None,
    ) -> TextClassifier:
        return cls._bind(lambda: ModelHandle.from_asset(context, name, engine=engine))

    @classmethod
    def from_path(cls, path: Path | str, *, engine: InferenceEngine | None = None) -> TextClassifier:
        return cls._bind(lambda: ModelHandle.from_path(path, engine=engine))

    @classmethod
    def from_file(
        cls,
        file: int | BinaryIO,
        *,
        engine: InferenceEngine | None = None,
    ) -> TextClassifier:
        return cls._bind(lambda: ModelHandle.from_file(file, engine=engine))

    @classmethod
    def from_buffer(cls, buffer: Any, *, engine: InferenceEngine | None = None) -> TextClassifier:
        return cls._bind(lambda: ModelHandle.from_buffer(buffer, engine=engine))

    @classmethod
    def _bind(cls, factory: Callable[[], ModelHandle]) -> TextClassifier:
        handle = factory()
        try:
            return cls(handle)
        except BaseException:
            handle.release()
            raise

    @property
    def handle(self) -> ModelHandle:
        return self._handle

    @property
    def closed(self) -> bool:
        return not self._handle.valid

    @property
    def labels(self) -> tuple[str, ...]:
        return self._handle.model.labels

    def classify(self, text: str) -> ClassificationResult:
        """Return one category per model label, in the model's label order."""

        if not self._handle.valid:
            raise ClassifierClosedError("Classifier has been closed.")
        model = self._handle.model
        try:
            encoded = encode(
                model.tokenizer,
                text,
                model.max_seq_len,
                start_token=model.start_token,
                end_token=model.end_token,
                lowercase=model.lowercase,
            )
        except (TypeError, AttributeError) as exc:
            raise InferenceError(f"Cannot tokenize input of type {type(text).__name__}") from exc

        scores = self._handle.engine.run(model, encoded)
        if len(scores) != len(model.labels):
            raise InferenceError(
                f"Engine {self._handle.engine.name} returned {len(scores)} scores "
                f"for {len(model.labels)} labels."
            )
        LOGGER.debug("Classified %d tokens with %s", encoded.token_count, self._handle.source)
        return ClassificationResult.from_scores(model.labels, scores)

    def close(self) -> None:
        self._handle.release()

    def __enter__(self) -> TextClassifier:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "ready"
        return f"TextClassifier({self._handle.source}, {state})"


__all__ = ["TextClassifier"]

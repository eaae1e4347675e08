"""Ownership of a loaded model and the memory backing it."""

from __future__ import annotations

import logging
import mmap
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO

from .assets import AssetContext
from .engine import InferenceEngine, SklearnEngine
from .errors import (
    ClassifierClosedError,
    InvalidBufferError,
    ModelLoadError,
    ResourceNotFoundError,
)
from .model_file import LoadedModel

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelSource:
    """Where a model came from: ``asset``, ``path``, ``file`` or ``buffer``."""

    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}:{self.name}"


class ModelHandle:
    """A loaded model plus the memory it was read from.

    Path and file sources are memory-mapped read-only; buffer sources are
    viewed in place. Either way the handle owns that memory and frees it
    exactly once, on ``release()`` or when leaving a ``with`` block.
    """

    def __init__(
        self,
        model: LoadedModel,
        source: ModelSource,
        engine: InferenceEngine,
        view: memoryview,
        mapping: mmap.mmap | None = None,
    ) -> None:
        self._model: LoadedModel | None = model
        self._source = source
        self._engine = engine
        self._view: memoryview | None = view
        self._mapping = mapping

    @classmethod
    def from_asset(
        cls,
        context: AssetContext,
        name: str,
        *,
        engine: InferenceEngine | None = None,
    ) -> ModelHandle:
        """Load a named asset resolved through ``context``."""

        path = context.resolve(name)
        with path.open("rb") as handle:
            return cls._from_fileno(handle.fileno(), ModelSource("asset", name), engine)

    @classmethod
    def from_path(cls, path: Path | str, *, engine: InferenceEngine | None = None) -> ModelHandle:
        model_path = Path(path).expanduser()
        if not model_path.is_file():
            raise ResourceNotFoundError(f"Model file not found: {model_path}")
        with model_path.open("rb") as handle:
            return cls._from_fileno(handle.fileno(), ModelSource("path", str(model_path)), engine)

    @classmethod
    def from_file(
        cls,
        file: int | BinaryIO,
        *,
        engine: InferenceEngine | None = None,
    ) -> ModelHandle:
        """Load from an open descriptor or binary file object.

        The whole file is mapped regardless of its current position, and the
        caller stays responsible for closing it.
        """

        fileno = _fileno(file)
        return cls._from_fileno(fileno, ModelSource("file", f"fd={fileno}"), engine)

    @classmethod
    def from_buffer(cls, buffer: Any, *, engine: InferenceEngine | None = None) -> ModelHandle:
        """Load from a C-contiguous object exporting the buffer protocol."""

        view = _byte_view(buffer)
        source = ModelSource("buffer", f"{type(buffer).__name__}[{view.nbytes}]")
        active_engine = engine or SklearnEngine()
        try:
            model = active_engine.load(view)
        except ModelLoadError as exc:
            view.release()
            if isinstance(exc, InvalidBufferError):
                raise
            raise InvalidBufferError(str(exc)) from exc
        except BaseException:
            view.release()
            raise
        return cls._created(model, source, active_engine, view)

    @classmethod
    def _from_fileno(
        cls,
        fileno: int,
        source: ModelSource,
        engine: InferenceEngine | None,
    ) -> ModelHandle:
        try:
            mapping = mmap.mmap(fileno, 0, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as exc:
            raise ModelLoadError(f"Cannot map model {source}: {exc}") from exc

        view = memoryview(mapping)
        active_engine = engine or SklearnEngine()
        try:
            model = active_engine.load(view)
        except BaseException:
            view.release()
            mapping.close()
            raise
        return cls._created(model, source, active_engine, view, mapping)

    @classmethod
    def _created(
        cls,
        model: LoadedModel,
        source: ModelSource,
        engine: InferenceEngine,
        view: memoryview,
        mapping: mmap.mmap | None = None,
    ) -> ModelHandle:
        LOGGER.info(
            "Loaded model %s (%d labels, engine=%s)", source, len(model.labels), engine.name
        )
        return cls(model, source, engine, view, mapping)

    @property
    def source(self) -> ModelSource:
        return self._source

    @property
    def engine(self) -> InferenceEngine:
        return self._engine

    @property
    def valid(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> LoadedModel:
        if self._model is None:
            raise ClassifierClosedError(f"Model handle {self._source} has been released.")
        return self._model

    def release(self) -> None:
        """Free the model memory. Further calls are no-ops."""

        if self._model is None:
            return
        self._model = None
        if self._view is not None:
            self._view.release()
            self._view = None
        if self._mapping is not None:
            self._mapping.close()
            self._mapping = None
        LOGGER.debug("Released model %s", self._source)

    def __enter__(self) -> ModelHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "valid" if self.valid else "released"
        return f"ModelHandle({self._source}, {state})"


def _fileno(file: int | BinaryIO) -> int:
    if isinstance(file, bool):
        raise ModelLoadError("A file descriptor or binary file object is required.")
    if isinstance(file, int):
        if file < 0:
            raise ModelLoadError(f"Invalid file descriptor: {file}")
        return file
    try:
        return int(file.fileno())
    except (AttributeError, OSError, ValueError) as exc:
        raise ModelLoadError(f"File object has no usable descriptor: {exc}") from exc


def _byte_view(buffer: Any) -> memoryview:
    try:
        raw = memoryview(buffer)
    except TypeError as exc:
        raise InvalidBufferError(
            f"{type(buffer).__name__} does not expose a memory buffer."
        ) from exc
    try:
        return raw.cast("B")
    except TypeError as exc:
        raise InvalidBufferError("Model buffer must be C-contiguous.") from exc
    finally:
        raw.release()


__all__ = ["ModelHandle", "ModelSource"]

"""Serialized model container: ``NLCM`` magic, version byte, pickled payload."""

from __future__ import annotations

import logging
import pickle
import re
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ModelLoadError
from .tokenizer import (
    CLASSIFICATION_TOKEN,
    DEFAULT_DELIMITER,
    SEPARATOR_TOKEN,
    RegexTokenizer,
)

LOGGER = logging.getLogger(__name__)

MAGIC = b"NLCM"
FORMAT_VERSION = 1
HEADER_SIZE = len(MAGIC) + 1
DEFAULT_MAX_SEQ_LEN = 128
REQUIRED_KEYS = ("estimator", "tokenizer", "max_seq_len")


@dataclass(frozen=True)
class LoadedModel:
    """Everything an engine needs to score text for one model."""

    estimator: Any
    labels: tuple[str, ...]
    tokenizer: RegexTokenizer
    max_seq_len: int | None
    start_token: str | None = CLASSIFICATION_TOKEN
    end_token: str | None = SEPARATOR_TOKEN
    lowercase: bool = True

    @property
    def is_dynamic(self) -> bool:
        return self.max_seq_len is None


def dump_model(
    estimator: Any,
    vocabulary: Iterable[str],
    labels: Iterable[str] | None = None,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    max_seq_len: int | None = DEFAULT_MAX_SEQ_LEN,
    start_token: str | None = CLASSIFICATION_TOKEN,
    end_token: str | None = SEPARATOR_TOKEN,
    lowercase: bool = True,
) -> bytes:
    """Serialize a fitted estimator and its tokenizer into model bytes."""

    payload = {
        "estimator": estimator,
        "labels": None if labels is None else [str(label) for label in labels],
        "tokenizer": {
            "delimiter": delimiter,
            "vocabulary": [str(token) for token in vocabulary],
            "start_token": start_token,
            "end_token": end_token,
            "lowercase": lowercase,
        },
        "max_seq_len": max_seq_len,
    }
    body = pickle.dumps(payload, protocol=pickle.HIGHEST_PROTOCOL)
    return MAGIC + bytes([FORMAT_VERSION]) + body


def write_model(path: Path, estimator: Any, vocabulary: Iterable[str], **kwargs: Any) -> Path:
    """Write model bytes to ``path`` atomically and return the path."""

    data = dump_model(estimator, vocabulary, **kwargs)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
    LOGGER.debug("Wrote model (%d bytes) to %s", len(data), path)
    return path


def parse_model(buffer: memoryview) -> LoadedModel:
    """Decode and validate model bytes. Raises ModelLoadError on any defect."""

    if buffer.nbytes < HEADER_SIZE:
        raise ModelLoadError(f"Model data is too small ({buffer.nbytes} bytes).")
    if bytes(buffer[: len(MAGIC)]) != MAGIC:
        raise ModelLoadError("Model data does not start with the NLCM header.")
    version = buffer[len(MAGIC)]
    if version != FORMAT_VERSION:
        raise ModelLoadError(f"Unsupported model format version: {version}")

    body = buffer[HEADER_SIZE:]
    try:
        payload = pickle.loads(body)
    except Exception as exc:
        raise ModelLoadError(f"Model payload could not be decoded: {exc}") from exc
    finally:
        # No slice of the buffer may outlive this call.
        body.release()

    if not isinstance(payload, Mapping):
        raise ModelLoadError("Model payload must be a mapping.")
    missing = [key for key in REQUIRED_KEYS if key not in payload]
    if missing:
        raise ModelLoadError(f"Model payload is missing keys: {', '.join(missing)}")

    estimator = payload["estimator"]
    class_count = _class_count(estimator)
    labels = _parse_labels(payload.get("labels"), class_count)
    tokenizer_section = _parse_tokenizer_section(payload["tokenizer"])
    tokenizer = tokenizer_section.pop("tokenizer")
    max_seq_len = _parse_max_seq_len(payload["max_seq_len"], tokenizer_section)

    expected_features = getattr(estimator, "n_features_in_", None)
    if expected_features is not None and int(expected_features) != tokenizer.vocabulary_size:
        raise ModelLoadError(
            f"Estimator expects {expected_features} features but the vocabulary has "
            f"{tokenizer.vocabulary_size} tokens."
        )

    return LoadedModel(
        estimator=estimator,
        labels=labels,
        tokenizer=tokenizer,
        max_seq_len=max_seq_len,
        **tokenizer_section,
    )


def _class_count(estimator: Any) -> int:
    if not callable(getattr(estimator, "predict_proba", None)):
        raise ModelLoadError("Model estimator does not provide predict_proba().")
    classes = getattr(estimator, "classes_", None)
    if classes is None:
        raise ModelLoadError("Model estimator is not fitted.")
    count = len(classes)
    if count < 1:
        raise ModelLoadError("Model estimator has no classes.")
    return count


def _parse_labels(value: Any, class_count: int) -> tuple[str, ...]:
    if value is None:
        return tuple(str(index) for index in range(class_count))
    if not isinstance(value, (list, tuple)):
        raise ModelLoadError("Model labels must be a list.")
    labels = tuple(str(label) for label in value)
    if len(labels) != class_count:
        raise ModelLoadError(
            f"Model has {len(labels)} labels but the estimator outputs {class_count} classes."
        )
    return labels


def _parse_tokenizer_section(value: Any) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise ModelLoadError("Model tokenizer section must be a mapping.")
    vocabulary = value.get("vocabulary")
    if not isinstance(vocabulary, (list, tuple)) or not vocabulary:
        raise ModelLoadError("Model tokenizer vocabulary must be a non-empty list.")
    delimiter = value.get("delimiter", DEFAULT_DELIMITER)
    try:
        tokenizer = RegexTokenizer(vocabulary, delimiter=str(delimiter))
    except re.error as exc:
        raise ModelLoadError(f"Invalid tokenizer delimiter {delimiter!r}: {exc}") from exc
    return {
        "tokenizer": tokenizer,
        "start_token": value.get("start_token", CLASSIFICATION_TOKEN),
        "end_token": value.get("end_token", SEPARATOR_TOKEN),
        "lowercase": bool(value.get("lowercase", True)),
    }


def _parse_max_seq_len(value: Any, tokenizer_section: Mapping[str, Any]) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ModelLoadError("Model max_seq_len must be an integer or null.")
    reserved = sum(
        1 for key in ("start_token", "end_token") if tokenizer_section.get(key) is not None
    )
    if value < max(reserved, 1):
        raise ModelLoadError(f"Model max_seq_len is too small: {value}")
    return value


__all__ = [
    "DEFAULT_MAX_SEQ_LEN",
    "FORMAT_VERSION",
    "LoadedModel",
    "MAGIC",
    "dump_model",
    "parse_model",
    "write_model",
]

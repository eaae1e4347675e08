"""Regex tokenizer and sequence encoding for classification models."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

DEFAULT_DELIMITER = r"[^\w']+"
START_TOKEN = "<START>"
PAD_TOKEN = "<PAD>"
UNKNOWN_TOKEN = "<UNKNOWN>"
CLASSIFICATION_TOKEN = "[CLS]"
SEPARATOR_TOKEN = "[SEP]"


class RegexTokenizer:
    """Splits text on a delimiter pattern and maps words to vocabulary ids.

    The vocabulary is an ordered collection of tokens; a token's position is
    its id.
    """

    def __init__(self, vocabulary: Iterable[str], delimiter: str = DEFAULT_DELIMITER) -> None:
        self._delimiter = delimiter
        self._pattern = re.compile(delimiter)
        self._index_to_token: list[str] = [str(token) for token in vocabulary]
        self._token_to_index: dict[str, int] = {}
        for index, token in enumerate(self._index_to_token):
            self._token_to_index.setdefault(token, index)

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @property
    def vocabulary_size(self) -> int:
        return len(self._index_to_token)

    def tokenize(self, text: str) -> list[str]:
        return [piece for piece in self._pattern.split(text) if piece]

    def lookup_id(self, token: str) -> int | None:
        return self._token_to_index.get(token)

    def lookup_word(self, token_id: int) -> str | None:
        if 0 <= token_id < len(self._index_to_token):
            return self._index_to_token[token_id]
        return None

    @property
    def start_id(self) -> int | None:
        return self.lookup_id(START_TOKEN)

    @property
    def pad_id(self) -> int | None:
        return self.lookup_id(PAD_TOKEN)

    @property
    def unknown_id(self) -> int | None:
        return self.lookup_id(UNKNOWN_TOKEN)


@dataclass(frozen=True)
class EncodedInput:
    """Model inputs for a single piece of text.

    ``ids`` holds vocabulary ids, ``mask`` is 1 for real tokens and 0 for
    padding, ``segment_ids`` is all zeros for single-sentence input.
    """

    ids: np.ndarray
    mask: np.ndarray
    segment_ids: np.ndarray

    @property
    def length(self) -> int:
        return int(self.ids.shape[0])

    @property
    def token_count(self) -> int:
        return int(self.mask.sum())


def encode(
    tokenizer: RegexTokenizer,
    text: str,
    max_seq_len: int | None,
    *,
    start_token: str | None = CLASSIFICATION_TOKEN,
    end_token: str | None = SEPARATOR_TOKEN,
    lowercase: bool = True,
) -> EncodedInput:
    """Encode text as ``[start] words... [end] pad...``.

    With a static ``max_seq_len`` the words are truncated so that the start
    and end tokens still fit and the arrays are padded to exactly
    ``max_seq_len``. With ``max_seq_len=None`` the arrays fit the input.
    """

    processed = text.lower() if lowercase else text
    words = tokenizer.tokenize(processed)
    reserved = int(start_token is not None) + int(end_token is not None)

    if max_seq_len is not None:
        if max_seq_len < reserved:
            raise ValueError(
                f"max_seq_len must be at least {reserved} to hold special tokens, got {max_seq_len}"
            )
        words = words[: max_seq_len - reserved]

    tokens: list[str] = []
    if start_token is not None:
        tokens.append(start_token)
    tokens.extend(words)
    if end_token is not None:
        tokens.append(end_token)

    length = max_seq_len if max_seq_len is not None else len(tokens)
    fallback_id = _fallback_id(tokenizer)
    ids = np.zeros(length, dtype=np.int32)
    mask = np.zeros(length, dtype=np.int32)
    for position, token in enumerate(tokens):
        token_id = tokenizer.lookup_id(token)
        ids[position] = fallback_id if token_id is None else token_id
        mask[position] = 1
    return EncodedInput(ids=ids, mask=mask, segment_ids=np.zeros(length, dtype=np.int32))


def _fallback_id(tokenizer: RegexTokenizer) -> int:
    unknown = tokenizer.unknown_id
    if unknown is not None:
        return unknown
    pad = tokenizer.pad_id
    return 0 if pad is None else pad


__all__ = [
    "CLASSIFICATION_TOKEN",
    "DEFAULT_DELIMITER",
    "EncodedInput",
    "PAD_TOKEN",
    "RegexTokenizer",
    "SEPARATOR_TOKEN",
    "START_TOKEN",
    "UNKNOWN_TOKEN",
    "encode",
]

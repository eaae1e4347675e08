from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import pytest
from scipy import sparse
from sklearn.naive_bayes import MultinomialNB

from nlclassifier.engine import bag_of_ids
from nlclassifier.model_file import DEFAULT_MAX_SEQ_LEN, write_model
from nlclassifier.tokenizer import (
    CLASSIFICATION_TOKEN,
    PAD_TOKEN,
    SEPARATOR_TOKEN,
    START_TOKEN,
    UNKNOWN_TOKEN,
    RegexTokenizer,
    encode,
)

MODEL_FILE = "bert_nl_classifier.nlcm"
LABELS = ("negative", "positive")
NEGATIVE_TEXT = "unflinchingly bleak and desperate"
POSITIVE_TEXT = "it's a charming and often affecting journey"

NEGATIVE_CORPUS = (
    "bleak and desperate",
    "a desperate dull mess",
    "bleak boring and painful",
    "tedious and desperate",
    "a dreary bleak slog",
    "it's a dull and lifeless film",
)
POSITIVE_CORPUS = (
    "a charming and often affecting journey",
    "charming warm and delightful",
    "an affecting and moving story",
    "a joyous journey full of wit",
    "funny charming and wonderful",
    "it's a beautiful and touching film",
)
SPECIAL_TOKENS = (PAD_TOKEN, START_TOKEN, UNKNOWN_TOKEN, CLASSIFICATION_TOKEN, SEPARATOR_TOKEN)


def build_vocabulary(corpus: Iterable[str]) -> list[str]:
    splitter = RegexTokenizer(SPECIAL_TOKENS)
    words = sorted({word for text in corpus for word in splitter.tokenize(text.lower())})
    return [*SPECIAL_TOKENS, *words]


def train_sentiment_model(max_seq_len: int | None = DEFAULT_MAX_SEQ_LEN):
    """Return (estimator, vocabulary) for a two-label sentiment model."""

    vocabulary = build_vocabulary(NEGATIVE_CORPUS + POSITIVE_CORPUS)
    tokenizer = RegexTokenizer(vocabulary)
    texts = NEGATIVE_CORPUS + POSITIVE_CORPUS
    rows = [bag_of_ids(encode(tokenizer, text, max_seq_len), len(vocabulary)) for text in texts]
    targets = [0] * len(NEGATIVE_CORPUS) + [1] * len(POSITIVE_CORPUS)
    estimator = MultinomialNB()
    estimator.fit(sparse.vstack(rows, format="csr"), targets)
    return estimator, vocabulary


@pytest.fixture(scope="session")
def sentiment_model():
    return train_sentiment_model()


@pytest.fixture(scope="session")
def asset_dir(tmp_path_factory: pytest.TempPathFactory, sentiment_model) -> Path:
    root = tmp_path_factory.mktemp("assets")
    estimator, vocabulary = sentiment_model
    write_model(root / MODEL_FILE, estimator, vocabulary, labels=LABELS)
    return root


@pytest.fixture(scope="session")
def model_path(asset_dir: Path) -> Path:
    return asset_dir / MODEL_FILE


@pytest.fixture(scope="session")
def model_bytes(model_path: Path) -> bytes:
    return model_path.read_bytes()


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("nlclassifier")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)

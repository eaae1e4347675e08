from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from nlclassifier import types as nl_types


def _result() -> nl_types.ClassificationResult:
    return nl_types.ClassificationResult.from_scores(
        ["negative", "neutral", "positive"], np.array([0.2, 0.5, 0.3], dtype=np.float32)
    )


def test_category_is_immutable() -> None:
    category = nl_types.Category(label="positive", score=0.9)

    with pytest.raises(FrozenInstanceError):
        category.score = 0.1  # type: ignore[misc]


def test_result_keeps_model_order() -> None:
    result = _result()

    assert [category.label for category in result] == ["negative", "neutral", "positive"]
    assert result[1].label == "neutral"
    assert len(result) == 3
    assert isinstance(result[0].score, float)


def test_find_and_top() -> None:
    result = _result()

    assert result.find("positive").score == pytest.approx(0.3)
    assert result.find("missing") is None
    assert result.top().label == "neutral"


def test_top_prefers_first_on_ties() -> None:
    result = nl_types.ClassificationResult.from_scores(["a", "b"], [0.5, 0.5])

    assert result.top().label == "a"


def test_top_on_empty_result_raises() -> None:
    with pytest.raises(LookupError):
        nl_types.ClassificationResult(()).top()


def test_as_dict() -> None:
    result = nl_types.ClassificationResult.from_scores(["a", "b"], [0.25, 0.75])

    assert result.as_dict() == {"a": 0.25, "b": 0.75}


def test_results_compare_by_value() -> None:
    assert _result() == _result()
    assert _result() != nl_types.ClassificationResult.from_scores(["a"], [1.0])


def test_from_scores_rejects_length_mismatch() -> None:
    with pytest.raises(ValueError, match="Expected 2 scores, got 1"):
        nl_types.ClassificationResult.from_scores(["a", "b"], [1.0])


def test_slice_returns_result() -> None:
    tail = _result()[1:]

    assert isinstance(tail, nl_types.ClassificationResult)
    assert [category.label for category in tail] == ["neutral", "positive"]
    assert tail.top().label == "neutral"

"""Immutable result types returned by text classification."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Category:
    """A single label with the score the model assigned to it."""

    label: str
    score: float


@dataclass(frozen=True)
class ClassificationResult(Sequence[Category]):
    """Ordered categories in the model's output order (not sorted by score)."""

    categories: tuple[Category, ...]

    @classmethod
    def from_scores(cls, labels: Iterable[str], scores: Iterable[float]) -> ClassificationResult:
        label_list = list(labels)
        score_list = [float(score) for score in scores]
        if len(label_list) != len(score_list):
            raise ValueError(
                f"Expected {len(label_list)} scores, got {len(score_list)}"
            )
        return cls(
            tuple(Category(label=label, score=score) for label, score in zip(label_list, score_list))
        )

    def __getitem__(self, index):  # type: ignore[override]
        if isinstance(index, slice):
            return ClassificationResult(self.categories[index])
        return self.categories[index]

    def __len__(self) -> int:
        return len(self.categories)

    def __iter__(self) -> Iterator[Category]:
        return iter(self.categories)

    def find(self, label: str) -> Category | None:
        """Return the category with the given label, if present."""

        for category in self.categories:
            if category.label == label:
                return category
        return None

    def top(self) -> Category:
        """Return the highest scoring category (first one wins on ties)."""

        if not self.categories:
            raise LookupError("Classification result is empty.")
        return max(self.categories, key=lambda category: category.score)

    def as_dict(self) -> dict[str, float]:
        return {category.label: category.score for category in self.categories}


__all__ = ["Category", "ClassificationResult"]

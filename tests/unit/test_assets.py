from __future__ import annotations

import re
from pathlib import Path

import pytest

from nlclassifier.assets import AssetContext
from nlclassifier.errors import ResourceNotFoundError


def test_resolve_prefers_first_root(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    for root in (first, second):
        (root / "models").mkdir(parents=True)
        (root / "models" / "model.nlcm").write_bytes(b"x")

    context = AssetContext([first, second])

    assert context.resolve("models/model.nlcm") == (first / "models" / "model.nlcm").resolve()


def test_resolve_falls_through_to_later_roots(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (second / "model.nlcm").write_bytes(b"x")

    context = AssetContext([first, second])

    assert context.exists("model.nlcm") is True
    assert context.resolve("model.nlcm").parent == second.resolve()


def test_missing_asset_lists_searched_roots(tmp_path: Path) -> None:
    context = AssetContext([tmp_path])

    with pytest.raises(ResourceNotFoundError, match=re.escape(str(tmp_path))):
        context.resolve("missing.nlcm")
    assert context.exists("missing.nlcm") is False


def test_directories_are_not_assets(tmp_path: Path) -> None:
    (tmp_path / "model.nlcm").mkdir()

    with pytest.raises(ResourceNotFoundError):
        AssetContext([tmp_path]).resolve("model.nlcm")


@pytest.mark.parametrize("name", ["", "   ", "../secret.nlcm", "/etc/passwd", "a/../../b"])
def test_names_cannot_escape_asset_directory(tmp_path: Path, name: str) -> None:
    root = tmp_path / "assets"
    root.mkdir()
    (tmp_path / "secret.nlcm").write_bytes(b"x")

    with pytest.raises(ResourceNotFoundError):
        AssetContext([root]).resolve(name)


def test_no_roots_reports_placeholder() -> None:
    with pytest.raises(ResourceNotFoundError, match="no asset directories"):
        AssetContext([]).resolve("model.nlcm")


def test_resource_not_found_is_a_file_not_found_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        AssetContext([tmp_path]).resolve("missing.nlcm")

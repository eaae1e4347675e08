"""Named model asset lookup across a set of asset directories."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from .errors import ResourceNotFoundError

LOGGER = logging.getLogger(__name__)


class AssetContext:
    """Resolves asset names (e.g. ``"sentiment/bert.nlcm"``) to files.

    Directories are searched in order and the first match wins. Names are
    always relative; they cannot escape their asset directory.
    """

    def __init__(self, roots: Iterable[Path | str]) -> None:
        self._roots = tuple(Path(root).expanduser() for root in roots)

    @property
    def roots(self) -> tuple[Path, ...]:
        return self._roots

    def resolve(self, name: str) -> Path:
        relative = _normalize_name(name)
        for root in self._roots:
            candidate = (root / relative).resolve()
            if not candidate.is_relative_to(root.resolve()):
                continue
            if candidate.is_file():
                LOGGER.debug("Resolved asset '%s' to %s", name, candidate)
                return candidate
        searched = ", ".join(str(root) for root in self._roots) or "<no asset directories>"
        raise ResourceNotFoundError(f"Asset '{name}' not found in: {searched}")

    def exists(self, name: str) -> bool:
        try:
            self.resolve(name)
        except ResourceNotFoundError:
            return False
        return True

    def __repr__(self) -> str:
        return f"AssetContext(roots={list(map(str, self._roots))!r})"


def _normalize_name(name: str) -> PurePosixPath:
    stripped = str(name).strip()
    if not stripped:
        raise ResourceNotFoundError("Asset name cannot be empty.")
    relative = PurePosixPath(stripped)
    if relative.is_absolute() or ".." in relative.parts:
        raise ResourceNotFoundError(f"Asset name must be a relative path inside the asset directory: {name}")
    return relative


__all__ = ["AssetContext"]

"""Ordered queue of image paths still waiting to be classified."""

from __future__ import annotations

import os
from collections import deque
from collections.abc import Iterable, Iterator
from pathlib import Path

from .errors import SourceDirectoryError

IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".bmp",
        ".webp",
        ".tif",
        ".tiff",
    }
)


def is_image_path(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


def find_images_in_dir(directory: Path) -> list[Path]:
    """Return top-level image files of ``directory`` in enumeration order.

    Subdirectories are not descended into and dotfiles are ignored.
    """
    images: list[Path] = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.name.startswith("."):
                    continue
                try:
                    if not entry.is_file():
                        continue
                except OSError:
                    continue
                path = Path(entry.path)
                if is_image_path(path):
                    images.append(path)
    except OSError as exc:
        raise SourceDirectoryError(f"cannot read dir {directory}: {exc.strerror or exc}") from exc
    return images


class WorkQueue:
    """Pending paths in a stable order; only the controller mutates it."""

    def __init__(self, paths: Iterable[Path] = ()) -> None:
        self._pending: deque[Path] = deque(paths)

    @classmethod
    def from_directory(cls, directory: Path) -> "WorkQueue":
        return cls(find_images_in_dir(directory))

    def pop_front(self) -> Path | None:
        if not self._pending:
            return None
        return self._pending.popleft()

    def push_front(self, path: Path) -> None:
        self._pending.appendleft(path)

    def peek(self) -> Path | None:
        return self._pending[0] if self._pending else None

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    def __iter__(self) -> Iterator[Path]:
        return iter(tuple(self._pending))

    def __contains__(self, path: object) -> bool:
        return path in self._pending


__all__ = ["IMAGE_EXTENSIONS", "is_image_path", "find_images_in_dir", "WorkQueue"]

"""Collision-safe file routing.

``route`` is the only place that mutates the filesystem (besides creating
destination directories). Existing targets are never overwritten, and a
failed move leaves the source where it was.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .config import Destination, MoveDestination, SkipDestination

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".imgtriage-partial"


class OutcomeKind(Enum):
    MOVED = "moved"
    SKIPPED = "skipped"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass(frozen=True)
class MoveOutcome:
    """Result of routing one file; drives the status line only."""

    kind: OutcomeKind
    source: Path
    target: Path | None = None
    detail: str = ""

    @property
    def message(self) -> str:
        name = self.source.name
        if self.kind is OutcomeKind.MOVED:
            destination = self.target.parent if self.target is not None else "?"
            return f"Moved {name} -> {destination}"
        if self.kind is OutcomeKind.SKIPPED:
            return f"Skipped {name}"
        if self.kind is OutcomeKind.CONFLICT:
            return f"Conflict: {name} already exists in {self.target.parent if self.target else '?'}"
        return f"Failed: {name} ({self.detail})" if self.detail else f"Failed: {name}"


def _describe_os_error(exc: OSError) -> str:
    return exc.strerror or exc.__class__.__name__


def _copy_then_replace(source: Path, target: Path) -> None:
    """Cross-device move: copy next to the target, verify, swap in, unlink source."""
    partial = target.with_name(f".{target.name}{PARTIAL_SUFFIX}")
    try:
        shutil.copy2(source, partial)
        if partial.stat().st_size != source.stat().st_size:
            raise OSError(errno.EIO, "copied size does not match source", str(partial))
        os.replace(partial, target)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    try:
        source.unlink()
    except OSError:
        # Keep exactly one copy: roll the target back so the source stays authoritative.
        target.unlink(missing_ok=True)
        raise


def move_file(source: Path, target: Path) -> None:
    try:
        os.rename(source, target)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
        _copy_then_replace(source, target)


def route(path: Path, destination: Destination) -> MoveOutcome:
    """Route ``path`` to ``destination`` and report what happened."""
    if isinstance(destination, SkipDestination):
        logger.info("skipped %s", path)
        return MoveOutcome(OutcomeKind.SKIPPED, path)
    if not isinstance(destination, MoveDestination):
        raise TypeError(f"unsupported destination: {destination!r}")

    target = destination.directory / path.name
    try:
        destination.directory.mkdir(parents=True, exist_ok=True)
        if target.exists() or target.is_symlink():
            logger.warning("conflict: %s already exists", target)
            return MoveOutcome(OutcomeKind.CONFLICT, path, target)
        move_file(path, target)
    except OSError as exc:
        detail = _describe_os_error(exc)
        logger.warning("failed to move %s -> %s: %s", path, target, detail)
        return MoveOutcome(OutcomeKind.FAILED, path, target, detail)

    logger.info("moved %s -> %s", path, target)
    return MoveOutcome(OutcomeKind.MOVED, path, target)


__all__ = ["OutcomeKind", "MoveOutcome", "move_file", "route"]

"""Tests for collision-safe routing.

Covers moves, skips, conflicts that must leave both files untouched, I/O
failures, and the copy-then-replace path used across filesystems.
"""

from __future__ import annotations

import errno
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from imgtriage.config import MoveDestination, SkipDestination
from imgtriage.router import PARTIAL_SUFFIX, MoveOutcome, OutcomeKind, route


class RouteTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.source_dir = self.root / "in"
        self.source_dir.mkdir()
        self.image = self.source_dir / "x.png"
        self.image.write_bytes(b"source-bytes")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_move_creates_destination_and_relocates_file(self) -> None:
        destination = self.root / "out" / "a"

        outcome = route(self.image, MoveDestination(destination))

        self.assertIs(outcome.kind, OutcomeKind.MOVED)
        self.assertFalse(self.image.exists())
        self.assertEqual((destination / "x.png").read_bytes(), b"source-bytes")
        self.assertEqual(outcome.target, destination / "x.png")
        self.assertTrue(outcome.message.startswith("Moved x.png"))

    def test_skip_leaves_filesystem_untouched(self) -> None:
        before = sorted(self.root.rglob("*"))

        outcome = route(self.image, SkipDestination())

        self.assertIs(outcome.kind, OutcomeKind.SKIPPED)
        self.assertEqual(self.image.read_bytes(), b"source-bytes")
        self.assertEqual(sorted(self.root.rglob("*")), before)
        self.assertEqual(outcome.message, "Skipped x.png")

    def test_conflict_keeps_both_files_byte_for_byte(self) -> None:
        destination = self.root / "out" / "a"
        destination.mkdir(parents=True)
        existing = destination / "x.png"
        existing.write_bytes(b"already-here")

        outcome = route(self.image, MoveDestination(destination))

        self.assertIs(outcome.kind, OutcomeKind.CONFLICT)
        self.assertEqual(self.image.read_bytes(), b"source-bytes")
        self.assertEqual(existing.read_bytes(), b"already-here")
        self.assertTrue(outcome.message.startswith("Conflict: x.png"))

    def test_os_error_during_move_reports_failure_and_keeps_source(self) -> None:
        destination = self.root / "out"
        with mock.patch(
            "imgtriage.router.os.rename",
            side_effect=PermissionError(errno.EACCES, "Permission denied"),
        ):
            outcome = route(self.image, MoveDestination(destination))

        self.assertIs(outcome.kind, OutcomeKind.FAILED)
        self.assertEqual(outcome.detail, "Permission denied")
        self.assertEqual(self.image.read_bytes(), b"source-bytes")
        self.assertFalse((destination / "x.png").exists())
        self.assertEqual(outcome.message, "Failed: x.png (Permission denied)")

    def test_destination_that_cannot_be_created_reports_failure(self) -> None:
        blocker = self.root / "blocker"
        blocker.write_bytes(b"file, not dir")

        outcome = route(self.image, MoveDestination(blocker / "sub"))

        self.assertIs(outcome.kind, OutcomeKind.FAILED)
        self.assertTrue(self.image.exists())

    def test_cross_device_move_copies_then_removes_source(self) -> None:
        destination = self.root / "other-fs"
        with mock.patch(
            "imgtriage.router.os.rename",
            side_effect=OSError(errno.EXDEV, "Invalid cross-device link"),
        ):
            outcome = route(self.image, MoveDestination(destination))

        self.assertIs(outcome.kind, OutcomeKind.MOVED)
        self.assertFalse(self.image.exists())
        self.assertEqual((destination / "x.png").read_bytes(), b"source-bytes")
        self.assertEqual([p.name for p in destination.iterdir()], ["x.png"])

    def test_cross_device_copy_failure_removes_partial_and_keeps_source(self) -> None:
        destination = self.root / "other-fs"

        def broken_copy(src, dst, *args, **kwargs):
            Path(dst).write_bytes(b"half")
            raise OSError(errno.ENOSPC, "No space left on device")

        with mock.patch(
            "imgtriage.router.os.rename",
            side_effect=OSError(errno.EXDEV, "Invalid cross-device link"),
        ), mock.patch("imgtriage.router.shutil.copy2", side_effect=broken_copy):
            outcome = route(self.image, MoveDestination(destination))

        self.assertIs(outcome.kind, OutcomeKind.FAILED)
        self.assertEqual(outcome.detail, "No space left on device")
        self.assertEqual(self.image.read_bytes(), b"source-bytes")
        self.assertEqual(list(destination.iterdir()), [])
        self.assertFalse(any(PARTIAL_SUFFIX in p.name for p in destination.iterdir()))


class MoveOutcomeMessageTests(unittest.TestCase):
    def test_failed_without_detail(self) -> None:
        outcome = MoveOutcome(OutcomeKind.FAILED, Path("/in/y.jpg"))
        self.assertEqual(outcome.message, "Failed: y.jpg")


if __name__ == "__main__":
    unittest.main()

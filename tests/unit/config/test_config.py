"""Tests for TOML config loading, validation and path resolution.

The terminate key must never be bindable, ``skip`` must become a tagged
destination, and malformed documents must fail with ``ConfigError``.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from imgtriage import config
from imgtriage.config import MoveDestination, SkipDestination
from imgtriage.errors import ConfigError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class ParseConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.source = self.root / "in"
        self.source.mkdir()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_bindings_become_tagged_destinations(self) -> None:
        loaded = config.parse_config(
            {"dir": str(self.source), "dests": {"a": "./out/a", "s": "skip", "S": "SKIP"}}
        )

        self.assertEqual(loaded.source_directory, self.source)
        self.assertEqual(loaded.key_bindings["a"], MoveDestination(Path("./out/a")))
        self.assertIsInstance(loaded.key_bindings["s"], SkipDestination)
        self.assertIsInstance(loaded.key_bindings["S"], SkipDestination)
        self.assertEqual(list(loaded.key_bindings), ["a", "s", "S"])

    def test_spec_style_key_names_are_accepted_as_aliases(self) -> None:
        loaded = config.parse_config(
            {"source_directory": str(self.source), "key_bindings": {"k": "keep"}}
        )
        self.assertEqual(loaded.destination_for("k"), MoveDestination(Path("keep")))
        self.assertIsNone(loaded.destination_for("x"))

    def test_terminate_key_binding_is_rejected(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            config.parse_config({"dir": str(self.source), "dests": {"q": "./out/q"}})
        self.assertIn("reserved", str(ctx.exception))

    def test_terminate_key_bound_to_skip_is_rejected_too(self) -> None:
        with self.assertRaises(ConfigError):
            config.parse_config({"dir": str(self.source), "dests": {"a": "x", "q": "skip"}})

    def test_missing_source_directory_is_rejected(self) -> None:
        with self.assertRaises(ConfigError):
            config.parse_config({"dests": {"a": "x"}})

    def test_source_that_is_not_a_directory_is_rejected(self) -> None:
        not_dir = _write(self.root / "file.txt", "x")
        with self.assertRaises(ConfigError):
            config.parse_config({"dir": str(not_dir), "dests": {"a": "x"}})
        with self.assertRaises(ConfigError):
            config.parse_config({"dir": str(self.root / "missing"), "dests": {"a": "x"}})

    def test_missing_or_malformed_bindings_are_rejected(self) -> None:
        with self.assertRaises(ConfigError):
            config.parse_config({"dir": str(self.source)})
        with self.assertRaises(ConfigError):
            config.parse_config({"dir": str(self.source), "dests": ["a"]})

    def test_keys_must_be_single_printable_characters(self) -> None:
        for bad_key in ("ab", "", " ", "\t"):
            with self.subTest(key=bad_key):
                with self.assertRaises(ConfigError):
                    config.parse_config({"dir": str(self.source), "dests": {bad_key: "x"}})

    def test_destinations_must_be_non_empty_strings(self) -> None:
        for bad_value in ("", "   ", 3, ["x"]):
            with self.subTest(value=bad_value):
                with self.assertRaises(ConfigError):
                    config.parse_config({"dir": str(self.source), "dests": {"a": bad_value}})

    def test_theme_must_be_a_string(self) -> None:
        loaded = config.parse_config({"dir": str(self.source), "dests": {"a": "x"}, "theme": "ocean"})
        self.assertEqual(loaded.theme, "ocean")
        with self.assertRaises(ConfigError):
            config.parse_config({"dir": str(self.source), "dests": {"a": "x"}, "theme": 7})


class LoadConfigTests(unittest.TestCase):
    def test_load_config_reads_toml_document(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "in").mkdir()
            config_path = _write(
                root / "config.toml",
                f'dir = "{(root / "in").as_posix()}"\n\n[dests]\na = "./out/a"\ns = "skip"\n',
            )

            loaded = config.load_config(config_path)

        self.assertEqual(loaded.config_path, config_path)
        self.assertEqual(set(loaded.key_bindings), {"a", "s"})

    def test_missing_file_raises_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError) as ctx:
                config.load_config(Path(tmp) / "nope.toml")
        self.assertIn("not found", str(ctx.exception))

    def test_invalid_toml_raises_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            broken = _write(Path(tmp) / "config.toml", "dir = [unterminated\n")
            with self.assertRaises(ConfigError) as ctx:
                config.load_config(broken)
        self.assertIn("not valid TOML", str(ctx.exception))

    def test_non_utf8_document_raises_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            broken = Path(tmp) / "config.toml"
            broken.write_bytes(b"dir = \"\xff\xfe\"\n")
            with self.assertRaises(ConfigError):
                config.load_config(broken)


class ResolveConfigPathTests(unittest.TestCase):
    def test_explicit_path_wins(self) -> None:
        explicit = Path("/somewhere/custom.toml")
        self.assertEqual(config.resolve_config_path(explicit), explicit)

    def test_local_config_preferred_over_user_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            local = _write(Path(tmp) / "config.toml", "")
            user = _write(Path(tmp) / "user.toml", "")
            with mock.patch("imgtriage.config.LOCAL_CONFIG_PATH", local), mock.patch(
                "imgtriage.config.USER_CONFIG_PATH", user
            ):
                self.assertEqual(config.resolve_config_path(), local)

    def test_falls_back_to_user_config_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            local = Path(tmp) / "config.toml"
            user = _write(Path(tmp) / "user.toml", "")
            with mock.patch("imgtriage.config.LOCAL_CONFIG_PATH", local), mock.patch(
                "imgtriage.config.USER_CONFIG_PATH", user
            ):
                self.assertEqual(config.resolve_config_path(), user)

    def test_reports_local_path_when_nothing_exists(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            local = Path(tmp) / "config.toml"
            user = Path(tmp) / "user.toml"
            with mock.patch("imgtriage.config.LOCAL_CONFIG_PATH", local), mock.patch(
                "imgtriage.config.USER_CONFIG_PATH", user
            ):
                self.assertEqual(config.resolve_config_path(), local)


if __name__ == "__main__":
    unittest.main()

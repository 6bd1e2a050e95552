"""Regression tests for raw-key decoding.

Covers the bounded wait, control-key tokens, and escape sequences whose
trailing bytes must never reach the controller as bound keys.
"""

import os
import time
import unittest

from imgtriage import input as input_mod


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()
        os.close(self.read_fd)
        os.close(self.write_fd)

    def _feed(self, data: bytes) -> None:
        os.write(self.write_fd, data)

    def test_timeout_returns_empty_token(self) -> None:
        started = time.monotonic()
        key = input_mod.read_key(self.read_fd, timeout_ms=20)
        elapsed = time.monotonic() - started

        self.assertEqual(key, "")
        self.assertLess(elapsed, 0.5)

    def test_printable_and_control_keys(self) -> None:
        self._feed(b"a\x03\r")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "a")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "CTRL_C")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "ENTER")

    def test_arrow_sequence_collapses_into_one_token(self) -> None:
        self._feed(b"\x1b[Aa")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "UP")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "a")

    def test_function_key_bytes_are_not_leaked(self) -> None:
        self._feed(b"\x1b[15~s")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "ESC_SEQUENCE")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "s")

    def test_lone_escape_does_not_wait_for_another_key(self) -> None:
        self._feed(b"\x1b")
        started = time.monotonic()
        key = input_mod.read_key(self.read_fd, timeout_ms=20)
        elapsed = time.monotonic() - started

        self.assertEqual(key, "ESC")
        self.assertLess(elapsed, 0.2)

    def test_alt_key_keeps_following_byte(self) -> None:
        self._feed(b"\x1ba")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "ESC")
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "a")

    def test_multibyte_utf8_character_is_one_key(self) -> None:
        self._feed("é".encode("utf-8"))
        self.assertEqual(input_mod.read_key(self.read_fd, timeout_ms=20), "é")


if __name__ == "__main__":
    unittest.main()

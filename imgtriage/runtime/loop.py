"""Main interactive event loop for the terminal UI.

Each iteration tracks terminal resizes, collects finished decodes, redraws
when state is dirty, and waits a bounded time for one key. The wait is short
while a decode is in flight so results show up promptly; it is never
unbounded, so the quit key always gets through.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from .state import TriagePhase, TriageState
from .terminal import TerminalController


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    loading_poll_ms: int = 20
    idle_poll_ms: int = 250


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    poll_decoder: Callable[[], bool]
    handle_key: Callable[[str], bool]
    discard_key: Callable[[str], bool]
    render: Callable[[int, int], None]


def _discard_pending_keys(stdin_fd: int, discard_key: Callable[[str], bool]) -> bool:
    """Drain keys already waiting on stdin; return ``True`` if one of them quits."""
    while True:
        try:
            key = read_key(stdin_fd, timeout_ms=0)
        except KeyboardInterrupt:
            key = "CTRL_C"
        if key == "":
            return False
        if discard_key(key):
            return True


def run_main_loop(
    state: TriageState,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
    callbacks: RuntimeLoopCallbacks,
) -> None:
    """Run the classification loop until a quit key is handled."""
    ops = callbacks
    last_size: tuple[int, int] | None = None

    with terminal.raw_mode():
        while state.phase is not TriagePhase.TERMINATED:
            term = shutil.get_terminal_size((80, 24))
            size = (term.columns, term.lines)
            if size != last_size:
                last_size = size
                state.dirty = True

            was_loading = state.phase is TriagePhase.LOADING
            if ops.poll_decoder():
                state.dirty = True
                if was_loading and state.phase is not TriagePhase.LOADING:
                    # Input that arrived before the image was on screen never reaches it.
                    if _discard_pending_keys(stdin_fd, ops.discard_key):
                        break

            if state.dirty:
                ops.render(term.columns, term.lines)
                state.dirty = False

            timeout_ms = timing.loading_poll_ms if state.phase is TriagePhase.LOADING else timing.idle_poll_ms
            try:
                key = read_key(stdin_fd, timeout_ms=timeout_ms)
            except KeyboardInterrupt:
                key = "CTRL_C"
            if key == "":
                continue
            if ops.handle_key(key):
                break


__all__ = ["RuntimeLoopTiming", "RuntimeLoopCallbacks", "run_main_loop"]

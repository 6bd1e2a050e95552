"""Classification state machine.

The controller owns the work queue and the current image, dispatches decode
requests, and turns bound key presses into routing calls. It never touches
the terminal, so every transition is testable with a fake decoder.

Phases: ``LOADING`` (decode in flight) → ``READY`` (awaiting a key) → back to
``LOADING`` for the next path, or ``EMPTY`` once the queue drains. The
terminate key moves any phase to ``TERMINATED``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from ..config import TERMINATE_KEY, ClassificationConfig, Destination
from ..decoder import DEFAULT_MAX_SIZE, DecodeResult
from ..router import MoveOutcome, route
from ..work_queue import WorkQueue
from .state import TriagePhase, TriageState

logger = logging.getLogger(__name__)

QUIT_KEYS = frozenset({TERMINATE_KEY, "CTRL_C"})


class Decoder(Protocol):
    def submit(self, path: Path, max_size: tuple[int, int] = ...) -> int: ...

    def poll(self) -> DecodeResult | None: ...


class TriageController:
    def __init__(
        self,
        config: ClassificationConfig,
        queue: WorkQueue,
        decoder: Decoder,
        *,
        router: Callable[[Path, Destination], MoveOutcome] = route,
        preview_size: Callable[[], tuple[int, int]] = lambda: DEFAULT_MAX_SIZE,
    ) -> None:
        self.config = config
        self.queue = queue
        self._decoder = decoder
        self._route = router
        self._preview_size = preview_size
        self.state = TriageState(total=len(queue))

    @property
    def remaining(self) -> int:
        """Files not yet routed, including the one on screen."""
        in_hand = 1 if self.state.current_path is not None else 0
        return len(self.queue) + in_hand

    def start(self) -> None:
        self._advance()

    def _advance(self) -> None:
        state = self.state
        state.current_image = None
        state.decode_error = None
        state.source_size = None
        path = self.queue.pop_front()
        if path is None:
            state.current_path = None
            state.request_id = 0
            state.phase = TriagePhase.EMPTY
            logger.info("queue drained after %d file(s)", state.processed)
        else:
            state.current_path = path
            state.phase = TriagePhase.LOADING
            state.request_id = self._decoder.submit(path, self._preview_size())
        state.dirty = True

    def poll_decoder(self) -> bool:
        """Consume a finished decode, if any; return whether state changed."""
        result = self._decoder.poll()
        if result is None:
            return False
        return self.accept_decode_result(result)

    def accept_decode_result(self, result: DecodeResult) -> bool:
        state = self.state
        if state.phase is not TriagePhase.LOADING or result.request_id != state.request_id:
            logger.debug("discarding stale decode result for %s", result.path)
            return False
        state.current_image = result.image
        state.source_size = result.source_size
        if result.image is None:
            state.decode_error = result.error or "unknown decode error"
        state.phase = TriagePhase.READY
        state.dirty = True
        return True

    def discard_key(self, key: str) -> bool:
        """Drop a key typed before the current image was shown; quit keys still quit."""
        state = self.state
        if key in QUIT_KEYS:
            state.phase = TriagePhase.TERMINATED
            state.dirty = True
            return True
        state.dropped_keys += 1
        logger.debug("dropped key %r while loading %s", key, state.current_path)
        return False

    def handle_key(self, key: str) -> bool:
        """Apply one key token; return ``True`` when the run should end."""
        state = self.state
        if key in QUIT_KEYS:
            state.phase = TriagePhase.TERMINATED
            state.dirty = True
            return True
        if state.phase is TriagePhase.LOADING:
            return self.discard_key(key)
        if state.phase is not TriagePhase.READY:
            return False
        destination = self.config.destination_for(key)
        if destination is None or state.current_path is None:
            return False

        outcome = self._route(state.current_path, destination)
        state.processed += 1
        state.last_action = outcome.message
        state.last_outcome = outcome.kind
        self._advance()
        return False


__all__ = ["QUIT_KEYS", "TriageController"]

"""Runtime composition for an interactive triage session.

Builds the work queue, decoder worker, controller and terminal, runs the main
loop, and always tears the worker down and restores the terminal on exit.
"""

from __future__ import annotations

import logging
import shutil
import sys

from ..config import ClassificationConfig
from ..decoder import DecodeWorker
from ..errors import TerminalError
from ..render import context_from_state, decode_box, render_frame
from ..ui_theme import resolve_theme
from ..work_queue import WorkQueue
from .controller import TriageController
from .loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from .state import TriageState
from .terminal import TerminalController

logger = logging.getLogger(__name__)

DEFAULT_TIMING = RuntimeLoopTiming()


def _current_decode_box() -> tuple[int, int]:
    term = shutil.get_terminal_size((80, 24))
    return decode_box(term.columns, term.lines)


def run_triage(
    config: ClassificationConfig,
    theme_name: str | None = None,
    no_color: bool = False,
    timing: RuntimeLoopTiming = DEFAULT_TIMING,
) -> TriageState:
    """Run one interactive session and return the final state.

    Raises ``TerminalError`` when stdin/stdout are not a terminal and
    ``SourceDirectoryError`` when the source directory cannot be listed; both
    happen before the controller exists.
    """
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise TerminalError("imgtriage needs an interactive terminal on stdin and stdout")

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    queue = WorkQueue.from_directory(config.source_directory)
    theme = resolve_theme(theme_name or config.theme, no_color=no_color)
    logger.info("starting triage of %d file(s) in %s", len(queue), config.source_directory)

    worker = DecodeWorker()
    worker.start()
    try:
        controller = TriageController(config, queue, worker, preview_size=_current_decode_box)

        def render(columns: int, lines: int) -> None:
            context = context_from_state(
                controller.state,
                key_bindings=config.key_bindings,
                remaining=controller.remaining,
                theme=theme,
                no_color=no_color,
                width=columns,
                height=lines,
            )
            render_frame(context, stdout_fd)

        controller.start()
        run_main_loop(
            state=controller.state,
            terminal=terminal,
            stdin_fd=stdin_fd,
            timing=timing,
            callbacks=RuntimeLoopCallbacks(
                poll_decoder=controller.poll_decoder,
                handle_key=controller.handle_key,
                discard_key=controller.discard_key,
                render=render,
            ),
        )
    finally:
        worker.close()

    state = controller.state
    logger.info(
        "session ended: %d of %d file(s) routed, %d remaining",
        state.processed,
        state.total,
        controller.remaining,
    )
    return state

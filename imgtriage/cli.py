"""Command-line front door for imgtriage.

Parses CLI options, configures logging, loads and validates the TOML config,
then dispatches into the interactive runtime. Fatal startup errors exit with
a message on stderr before any terminal state is touched.
"""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path

from .config import load_config
from .decoder import DecodeWorker
from .errors import DecodeError, TriageError
from .log_setup import configure_logging, resolve_level
from .preview import image_rows
from .runtime import run_triage
from .ui_theme import available_theme_names
from .version import get_version

PREVIEW_TIMEOUT_SECONDS = 30.0


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _log_level(value: str) -> int:
    try:
        return resolve_level(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def render_image_preview(path: Path, max_cols: int, max_rows: int, no_color: bool) -> str:
    """Decode ``path`` on the worker thread and return its terminal rendering."""
    worker = DecodeWorker()
    worker.start()
    try:
        worker.submit(path, (max_cols, max_rows * 2))
        result = worker.wait(timeout=PREVIEW_TIMEOUT_SECONDS)
    finally:
        worker.close()
    if result is None:
        raise DecodeError(f"timed out decoding {path.name}")
    if result.image is None:
        raise DecodeError(f"cannot preview {path.name}: {result.error}")
    rows = image_rows(result.image, max_cols, max_rows, no_color=no_color)
    return "".join(f"{row}\n" for row in rows)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgtriage",
        description="Sort the images of a directory into folders, one keystroke per image.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=None,
        type=Path,
        metavar="FILE",
        help="Path to config.toml. Defaults to ./config.toml, then the user config directory.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}). Overrides the config file.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument(
        "--log-level",
        type=_log_level,
        default="WARNING",
        help="Log level for the session log file (default: WARNING).",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Write the session log here.")
    parser.add_argument("--preview", metavar="IMAGE", type=Path, help="Print IMAGE to the terminal and exit.")
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --preview output (default: terminal width).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run a triage session or a one-shot preview."""
    args = build_parser().parse_args(argv)

    if args.preview is not None:
        if args.config is not None:
            raise SystemExit("imgtriage: cannot combine a config path with --preview")
        term = shutil.get_terminal_size((80, 24))
        max_cols = args.max_cols if args.max_cols is not None else max(1, term.columns)
        try:
            sys.stdout.write(render_image_preview(args.preview, max_cols, max(1, term.lines - 1), args.no_color))
        except TriageError as exc:
            raise SystemExit(f"imgtriage: {exc}") from exc
        return

    try:
        configure_logging(args.log_level, args.log_file)
    except OSError as exc:
        raise SystemExit(f"imgtriage: cannot open log file: {exc}") from exc

    try:
        config = load_config(args.config)
        state = run_triage(config, args.theme, args.no_color)
    except TriageError as exc:
        raise SystemExit(f"imgtriage: {exc}") from exc

    sys.stdout.write(f"Routed {state.processed} of {state.total} image(s).\n")


if __name__ == "__main__":
    main()

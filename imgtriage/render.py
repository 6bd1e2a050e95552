"""Rendering engine for the triage screen.

Composes one full ANSI frame from a ``RenderContext``: the image panel on the
left, keybinds/info/last-action on the right, and a reverse-video status row.
Building the frame is pure; only ``render_frame`` writes to the terminal.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from .ansi import clip_ansi_line, display_width, pad_ansi_line, wrap_plain_text
from .config import TERMINATE_KEY, Destination, SkipDestination
from .preview import image_rows, rows_width
from .router import OutcomeKind
from .runtime.state import TriagePhase, TriageState
from .ui_theme import UITheme

IMAGE_PANEL_PERCENT = 70
DONE_MESSAGE = "All images have been sorted!"
DIVIDER = "│"


@dataclass
class RenderContext:
    width: int
    height: int
    phase: TriagePhase
    current_path: Path | None
    image: Image.Image | None
    decode_error: str | None
    source_size: tuple[int, int] | None
    processed: int
    total: int
    remaining: int
    last_action: str
    last_outcome: OutcomeKind | None
    key_bindings: dict[str, Destination]
    theme: UITheme
    no_color: bool = False


def context_from_state(
    state: TriageState,
    *,
    key_bindings: dict[str, Destination],
    remaining: int,
    theme: UITheme,
    no_color: bool,
    width: int,
    height: int,
) -> RenderContext:
    return RenderContext(
        width=width,
        height=height,
        phase=state.phase,
        current_path=state.current_path,
        image=state.current_image,
        decode_error=state.decode_error,
        source_size=state.source_size,
        processed=state.processed,
        total=state.total,
        remaining=remaining,
        last_action=state.last_action,
        last_outcome=state.last_outcome,
        key_bindings=key_bindings,
        theme=theme,
        no_color=no_color,
    )


def panel_widths(width: int) -> tuple[int, int]:
    """Split ``width`` into image and side panel columns around a divider."""
    usable = max(2, width - 1)
    left = max(1, usable * IMAGE_PANEL_PERCENT // 100)
    right = max(0, usable - left - 1)
    return left, right


def image_panel_size(width: int, height: int) -> tuple[int, int]:
    """Cell box available to the image: (columns, rows)."""
    left, _ = panel_widths(width)
    return left, max(1, height - 1)


def decode_box(width: int, height: int) -> tuple[int, int]:
    """Pixel box worth decoding for a terminal of the given size."""
    cols, rows = image_panel_size(width, height)
    return cols, rows * 2


def build_status_line(left_text: str, width: int, right_text: str = "") -> str:
    usable = max(1, width - 1)
    right_width = display_width(right_text)
    if usable <= right_width:
        return clip_ansi_line(right_text, usable)
    left_limit = max(0, usable - right_width - 1)
    left = clip_ansi_line(left_text, left_limit)
    gap = " " * (usable - display_width(left) - right_width)
    return f"{left}{gap}{right_text}"


def _styled(text: str, style: str, theme: UITheme) -> str:
    if not style or not text:
        return text
    return f"{style}{text}{theme.reset}"


def _centered(lines: list[str], cols: int, rows: int) -> list[str]:
    """Center ``lines`` in a ``cols`` x ``rows`` box, clipping overflow."""
    lines = lines[:rows]
    top = max(0, (rows - len(lines)) // 2)
    out = [""] * top
    for line in lines:
        clipped = clip_ansi_line(line, cols)
        out.append(" " * max(0, (cols - display_width(clipped)) // 2) + clipped)
    out.extend([""] * (rows - len(out)))
    return out


def _outcome_style(kind: OutcomeKind | None, theme: UITheme) -> str:
    return {
        OutcomeKind.MOVED: theme.outcome_moved,
        OutcomeKind.SKIPPED: theme.outcome_skipped,
        OutcomeKind.CONFLICT: theme.outcome_conflict,
        OutcomeKind.FAILED: theme.outcome_failed,
    }.get(kind, "")


def image_panel_rows(context: RenderContext, cols: int, rows: int) -> list[str]:
    theme = context.theme
    name = context.current_path.name if context.current_path is not None else ""
    if context.phase is TriagePhase.EMPTY:
        return _centered([_styled(DONE_MESSAGE, theme.done, theme)], cols, rows)
    if context.phase is TriagePhase.LOADING:
        return _centered([_styled(f"Loading {name}…", theme.dim, theme)], cols, rows)
    if context.phase is TriagePhase.READY and context.image is not None:
        picture = image_rows(context.image, cols, rows, no_color=context.no_color)
        picture_width = rows_width(context.image, cols, rows, no_color=context.no_color)
        top = max(0, (rows - len(picture)) // 2)
        indent = " " * max(0, (cols - picture_width) // 2)
        out = [""] * top + [indent + line for line in picture]
        out.extend([""] * (rows - len(out)))
        return out[:rows]
    if context.phase is TriagePhase.READY:
        message = f"Cannot preview {name}: {context.decode_error or 'unknown error'}"
        wrapped = wrap_plain_text(message, max(1, cols - 2))
        body = [_styled(line, theme.placeholder, theme) for line in wrapped]
        body.append(_styled("Bound keys still route this file.", theme.dim, theme))
        return _centered(body, cols, rows)
    return [""] * rows


def side_panel_lines(context: RenderContext, cols: int) -> list[str]:
    theme = context.theme
    lines: list[str] = [_styled("Keybinds", theme.heading, theme)]
    for key, destination in context.key_bindings.items():
        dest_style = theme.dest_skip if isinstance(destination, SkipDestination) else theme.dest_move
        lines.append(
            f"{_styled(f'[{key}]', theme.key_label, theme)} -> {_styled(destination.describe(), dest_style, theme)}"
        )
    lines.append("---")
    lines.append(_styled(f"[{TERMINATE_KEY}] -> exit", theme.quit_key, theme))
    lines.append("")

    lines.append(_styled("Info", theme.heading, theme))
    name = context.current_path.name if context.current_path is not None else "-"
    lines.append(f"File: {name}")
    if context.source_size is not None:
        lines.append(f"Size: {context.source_size[0]}x{context.source_size[1]}")
    lines.append(f"Progress: {context.processed} / {context.total}")
    lines.append("")

    lines.append(_styled("Last action", theme.heading, theme))
    style = _outcome_style(context.last_outcome, theme)
    for row in wrap_plain_text(context.last_action or "-", max(1, cols)):
        lines.append(_styled(row, style, theme))
    return lines


def status_texts(context: RenderContext) -> tuple[str, str]:
    if context.last_action:
        left = context.last_action
    elif context.phase is TriagePhase.EMPTY:
        left = DONE_MESSAGE
    elif context.current_path is not None:
        left = context.current_path.name
    else:
        left = ""
    right = f"remaining {context.remaining} {DIVIDER} {TERMINATE_KEY} quit"
    return f" {left}", f"{right} "


def build_frame(context: RenderContext) -> str:
    width = max(2, context.width)
    content_rows = max(1, context.height - 1)
    left_width, right_width = panel_widths(width)
    theme = context.theme

    left_rows = image_panel_rows(context, left_width, content_rows)
    right_rows = side_panel_lines(context, right_width) if right_width > 0 else []

    out: list[str] = ["\033[H\033[J"]
    for row in range(content_rows):
        left_text = pad_ansi_line(left_rows[row], left_width)
        out.append(left_text)
        if "\033" in left_text:
            out.append("\033[0m")
        if right_width > 0:
            out.append(_styled(DIVIDER, theme.divider, theme))
            right_text = clip_ansi_line(right_rows[row], right_width) if row < len(right_rows) else ""
            out.append(right_text)
            if "\033" in right_text:
                out.append("\033[0m")
        out.append("\r\n")

    left_status, right_status = status_texts(context)
    out.append(theme.reverse)
    out.append(build_status_line(left_status, width, right_status))
    out.append(theme.reset)
    return "".join(out)


def render_frame(context: RenderContext, fd: int | None = None) -> None:
    target = sys.stdout.fileno() if fd is None else fd
    os.write(target, build_frame(context).encode("utf-8", errors="replace"))


__all__ = [
    "DONE_MESSAGE",
    "RenderContext",
    "context_from_state",
    "panel_widths",
    "image_panel_size",
    "decode_box",
    "build_status_line",
    "image_panel_rows",
    "side_panel_lines",
    "status_texts",
    "build_frame",
    "render_frame",
]

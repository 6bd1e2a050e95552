"""UI theme definitions and selection helpers.

Themes are ANSI palettes for panel chrome and status text. Image previews
carry their own truecolor cells and ignore the theme except in plain mode.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    divider: str
    reverse: str
    reset: str
    heading: str
    key_label: str
    dest_move: str
    dest_skip: str
    quit_key: str
    dim: str
    done: str
    placeholder: str
    outcome_moved: str
    outcome_skipped: str
    outcome_conflict: str
    outcome_failed: str


DEFAULT_THEME = UITheme(
    name="default",
    divider="\033[2m",
    reverse="\033[7m",
    reset="\033[0m",
    heading="\033[1;38;5;81m",
    key_label="\033[38;5;229m",
    dest_move="\033[36m",
    dest_skip="\033[33m",
    quit_key="\033[31m",
    dim="\033[2;38;5;250m",
    done="\033[1;32m",
    placeholder="\033[38;5;214m",
    outcome_moved="\033[32m",
    outcome_skipped="\033[33m",
    outcome_conflict="\033[38;5;214m",
    outcome_failed="\033[1;31m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    divider="\033[2;38;5;31m",
    reverse="\033[7m",
    reset="\033[0m",
    heading="\033[1;38;5;45m",
    key_label="\033[38;5;153m",
    dest_move="\033[38;5;117m",
    dest_skip="\033[38;5;215m",
    quit_key="\033[38;5;203m",
    dim="\033[2;38;5;110m",
    done="\033[1;38;5;84m",
    placeholder="\033[38;5;215m",
    outcome_moved="\033[38;5;84m",
    outcome_skipped="\033[38;5;153m",
    outcome_conflict="\033[38;5;215m",
    outcome_failed="\033[1;38;5;203m",
)

PLAIN_THEME = UITheme(
    name="plain",
    divider="",
    reverse="",
    reset="",
    heading="",
    key_label="",
    dest_move="",
    dest_skip="",
    quit_key="",
    dim="",
    done="",
    placeholder="",
    outcome_moved="",
    outcome_skipped="",
    outcome_conflict="",
    outcome_failed="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]

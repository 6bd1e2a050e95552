"""TOML configuration loading and validation.

Resolves the config document path, parses it with ``tomllib`` and returns an
immutable ``ClassificationConfig``. The ``"skip"`` sentinel is interpreted
here, so callers only ever see ``SkipDestination`` or ``MoveDestination``.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .errors import ConfigError

APP_NAME = "imgtriage"
CONFIG_FILENAME = "config.toml"
LOCAL_CONFIG_PATH = Path(CONFIG_FILENAME)
USER_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

TERMINATE_KEY = "q"
SKIP_SENTINEL = "skip"

_SOURCE_KEYS = ("dir", "source_directory")
_BINDING_KEYS = ("dests", "key_bindings")


@dataclass(frozen=True)
class SkipDestination:
    """Pass over the file without touching the filesystem."""

    def describe(self) -> str:
        return SKIP_SENTINEL


@dataclass(frozen=True)
class MoveDestination:
    """Move the file into ``directory``."""

    directory: Path

    def describe(self) -> str:
        return str(self.directory)


Destination = SkipDestination | MoveDestination


@dataclass(frozen=True)
class ClassificationConfig:
    source_directory: Path
    key_bindings: dict[str, Destination]
    theme: str | None = None
    config_path: Path | None = field(default=None, compare=False)

    def destination_for(self, key: str) -> Destination | None:
        return self.key_bindings.get(key)


def resolve_config_path(explicit: Path | None = None) -> Path:
    """Return the config path to load.

    An explicit path always wins. Otherwise ``./config.toml`` is preferred,
    then the per-user config directory. When neither exists the working
    directory path is returned so the missing-file error names it.
    """
    if explicit is not None:
        return explicit
    if LOCAL_CONFIG_PATH.exists():
        return LOCAL_CONFIG_PATH
    if USER_CONFIG_PATH.exists():
        return USER_CONFIG_PATH
    return LOCAL_CONFIG_PATH


def load_toml(path: Path) -> dict[str, object]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc.strerror or exc}") from exc
    try:
        return tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigError(f"config is not valid UTF-8: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"config is not valid TOML ({path}): {exc}") from exc


def _first_present(root: dict[str, object], names: tuple[str, ...]) -> object | None:
    for name in names:
        if name in root:
            return root[name]
    return None


def parse_destination(key: str, value: object) -> Destination:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"destination for key {key!r} must be a non-empty string")
    if value.strip().lower() == SKIP_SENTINEL:
        return SkipDestination()
    return MoveDestination(Path(value))


def _validate_key(key: object) -> str:
    if not isinstance(key, str) or len(key) != 1:
        raise ConfigError(f"binding keys must be single characters, got {key!r}")
    if not key.isprintable() or key.isspace():
        raise ConfigError(f"binding key {key!r} is not a printable character")
    if key == TERMINATE_KEY:
        raise ConfigError(f"key {TERMINATE_KEY!r} is reserved for quitting and cannot be bound")
    return key


def parse_config(root: dict[str, object], *, config_path: Path | None = None) -> ClassificationConfig:
    """Validate a decoded TOML document.

    Raises ``ConfigError`` for a missing or non-directory source, a missing
    bindings table, malformed keys or destinations, or a bound terminate key.
    """
    raw_source = _first_present(root, _SOURCE_KEYS)
    if raw_source is None:
        raise ConfigError("config is missing 'dir' (the source directory)")
    if not isinstance(raw_source, str) or not raw_source.strip():
        raise ConfigError("'dir' must be a non-empty string")
    source_directory = Path(raw_source)
    if not source_directory.is_dir():
        raise ConfigError(f"dir is not a directory: {source_directory}")

    raw_bindings = _first_present(root, _BINDING_KEYS)
    if raw_bindings is None:
        raise ConfigError("config is missing the [dests] table")
    if not isinstance(raw_bindings, dict):
        raise ConfigError("[dests] must be a table mapping keys to directories")

    key_bindings: dict[str, Destination] = {}
    for raw_key, raw_value in raw_bindings.items():
        key = _validate_key(raw_key)
        key_bindings[key] = parse_destination(key, raw_value)

    theme = root.get("theme")
    if theme is not None and not isinstance(theme, str):
        raise ConfigError("'theme' must be a string")

    return ClassificationConfig(
        source_directory=source_directory,
        key_bindings=key_bindings,
        theme=theme,
        config_path=config_path,
    )


def load_config(path: Path | None = None) -> ClassificationConfig:
    """Resolve, read and validate the configuration document."""
    config_path = resolve_config_path(path)
    return parse_config(load_toml(config_path), config_path=config_path)


__all__ = [
    "TERMINATE_KEY",
    "SKIP_SENTINEL",
    "SkipDestination",
    "MoveDestination",
    "Destination",
    "ClassificationConfig",
    "resolve_config_path",
    "load_toml",
    "parse_destination",
    "parse_config",
    "load_config",
]

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

DIST_NAME = "imgtriage"


def get_version() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        # Source checkout without an installed distribution.
        return "0.1.0"

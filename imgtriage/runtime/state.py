from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from PIL import Image

from ..router import OutcomeKind


class TriagePhase(Enum):
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    TERMINATED = "terminated"


@dataclass
class TriageState:
    total: int
    phase: TriagePhase = TriagePhase.LOADING
    current_path: Path | None = None
    current_image: Image.Image | None = None
    decode_error: str | None = None
    source_size: tuple[int, int] | None = None
    request_id: int = 0
    processed: int = 0
    last_action: str = ""
    last_outcome: OutcomeKind | None = None
    dirty: bool = True
    dropped_keys: int = 0

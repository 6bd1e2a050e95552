"""Background image decoding worker.

One long-lived thread decodes images with Pillow behind a single-slot
request/response handoff, so large files never stall key handling. At most
one request is outstanding; results carry the request id so the controller
can discard anything stale.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Full, Queue

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = (160, 96)


@dataclass(frozen=True)
class DecodeRequest:
    """One decode job."""

    request_id: int
    path: Path
    max_size: tuple[int, int]


@dataclass(frozen=True)
class DecodeResult:
    """Decoded pixels (or the reason there are none) for one request."""

    request_id: int
    path: Path
    image: Image.Image | None
    error: str | None = None
    source_size: tuple[int, int] | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None


def _describe_decode_error(exc: Exception) -> str:
    if isinstance(exc, UnidentifiedImageError):
        return "unrecognized or corrupt image data"
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    text = str(exc).strip()
    return text.splitlines()[0] if text else exc.__class__.__name__


def decode_image(path: Path, max_size: tuple[int, int]) -> tuple[Image.Image, tuple[int, int]]:
    """Load ``path`` as an RGB thumbnail bounded by ``max_size`` pixels.

    Returns the thumbnail and the original pixel dimensions. EXIF orientation
    is applied and transparency is flattened onto black.
    """
    with Image.open(path) as im:
        im.load()
        source_size = im.size
        im = ImageOps.exif_transpose(im)
        if im.mode in ("RGBA", "LA", "PA") or (im.mode == "P" and "transparency" in im.info):
            rgba = im.convert("RGBA")
            flattened = Image.new("RGB", rgba.size, (0, 0, 0))
            flattened.paste(rgba, mask=rgba.split()[-1])
            im = flattened
        else:
            im = im.convert("RGB")
    width = max(1, int(max_size[0]))
    height = max(1, int(max_size[1]))
    im.thumbnail((width, height), Image.Resampling.LANCZOS)
    return im, source_size


class DecodeWorker:
    """Single-thread decoder with one request slot and one result slot."""

    def __init__(self, decode=decode_image) -> None:
        self._decode = decode
        self._requests: Queue[DecodeRequest | None] = Queue(maxsize=1)
        self._results: Queue[DecodeResult] = Queue(maxsize=1)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._next_request_id = 1

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._worker,
            name="imgtriage-decoder",
            daemon=True,
        )
        self._thread.start()

    def _worker(self) -> None:
        while not self._stop.is_set():
            request = self._requests.get()
            if request is None:
                return
            try:
                image, source_size = self._decode(request.path, request.max_size)
                result = DecodeResult(
                    request_id=request.request_id,
                    path=request.path,
                    image=image,
                    source_size=source_size,
                )
            except Exception as exc:
                logger.info("cannot decode %s: %s", request.path, exc)
                result = DecodeResult(
                    request_id=request.request_id,
                    path=request.path,
                    image=None,
                    error=_describe_decode_error(exc),
                )
            self._publish(result)

    def _publish(self, result: DecodeResult) -> None:
        while not self._stop.is_set():
            try:
                self._results.put(result, timeout=0.05)
                return
            except Full:
                continue

    def _discard_result(self) -> None:
        try:
            stale = self._results.get_nowait()
        except Empty:
            return
        logger.debug("discarding unconsumed decode result for %s", stale.path)

    def submit(self, path: Path, max_size: tuple[int, int] = DEFAULT_MAX_SIZE) -> int:
        """Hand ``path`` to the worker and return its request id.

        Any result that was never consumed is discarded first. If the worker
        has not picked up the previous request yet, that request is replaced.
        """
        if not self.running:
            raise RuntimeError("decode worker is not running")
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
        self._discard_result()
        request = DecodeRequest(request_id=request_id, path=path, max_size=max_size)
        while True:
            try:
                self._requests.put_nowait(request)
                return request_id
            except Full:
                try:
                    replaced = self._requests.get_nowait()
                except Empty:
                    continue
                if replaced is not None:
                    logger.debug("replacing pending decode of %s", replaced.path)

    def poll(self) -> DecodeResult | None:
        try:
            return self._results.get_nowait()
        except Empty:
            return None

    def wait(self, timeout: float | None = None) -> DecodeResult | None:
        try:
            return self._results.get(timeout=timeout)
        except Empty:
            return None

    def close(self, timeout: float = 1.0) -> None:
        """Stop the worker, abandoning any in-flight decode."""
        self._stop.set()
        thread = self._thread
        if thread is None:
            return
        while True:
            try:
                self._requests.put_nowait(None)
                break
            except Full:
                try:
                    self._requests.get_nowait()
                except Empty:
                    continue
        self._discard_result()
        thread.join(timeout=timeout)
        self._thread = None


__all__ = [
    "DEFAULT_MAX_SIZE",
    "DecodeRequest",
    "DecodeResult",
    "DecodeWorker",
    "decode_image",
]

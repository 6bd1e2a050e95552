"""Convert decoded images into terminal rows.

Colour mode draws two pixels per cell with the upper-half block: foreground
is the top pixel, background the bottom one. Plain mode maps luminance onto
an ASCII ramp so previews still read without escape sequences.
"""

from __future__ import annotations

from PIL import Image

UPPER_HALF_BLOCK = "▀"
ASCII_RAMP = " .:-=+*#%@"
RESET = "\033[0m"


def fit_size(image_size: tuple[int, int], max_cols: int, max_rows: int, *, half_blocks: bool) -> tuple[int, int]:
    """Return the pixel size that fits ``image_size`` into a cell box.

    Half-block cells hold two vertical pixels. ASCII cells hold one pixel but
    terminal cells are roughly twice as tall as wide, so height is halved.
    Aspect ratio is kept and the image is never upscaled.
    """
    width, height = image_size
    if width <= 0 or height <= 0 or max_cols <= 0 or max_rows <= 0:
        return (0, 0)
    box_w = max_cols
    box_h = max_rows * 2
    scale = min(box_w / width, box_h / height, 1.0)
    fitted_w = max(1, int(width * scale))
    fitted_h = max(1, int(height * scale))
    if not half_blocks:
        fitted_h = max(1, fitted_h // 2)
    return (fitted_w, fitted_h)


def _resized(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    if image.size == size:
        return image
    return image.resize(size, Image.Resampling.BILINEAR)


def _sgr_pair(top: tuple[int, int, int], bottom: tuple[int, int, int] | None) -> str:
    fg = f"38;2;{top[0]};{top[1]};{top[2]}"
    if bottom is None:
        return f"\033[0;{fg}m"
    return f"\033[{fg};48;2;{bottom[0]};{bottom[1]};{bottom[2]}m"


def half_block_rows(image: Image.Image, max_cols: int, max_rows: int) -> list[str]:
    """Render ``image`` into at most ``max_rows`` truecolor rows."""
    size = fit_size(image.size, max_cols, max_rows, half_blocks=True)
    if size == (0, 0):
        return []
    scaled = _resized(image.convert("RGB"), size)
    width, height = scaled.size
    pixels = scaled.load()
    rows: list[str] = []
    for y in range(0, height, 2):
        out: list[str] = []
        last_sgr = ""
        for x in range(width):
            top = pixels[x, y]
            bottom = pixels[x, y + 1] if y + 1 < height else None
            sgr = _sgr_pair(top, bottom)
            if sgr != last_sgr:
                out.append(sgr)
                last_sgr = sgr
            out.append(UPPER_HALF_BLOCK)
        out.append(RESET)
        rows.append("".join(out))
    return rows


def ascii_rows(image: Image.Image, max_cols: int, max_rows: int) -> list[str]:
    """Render ``image`` as a luminance ramp without escape sequences."""
    size = fit_size(image.size, max_cols, max_rows, half_blocks=False)
    if size == (0, 0):
        return []
    gray = _resized(image.convert("L"), size)
    width, height = gray.size
    pixels = gray.load()
    last = len(ASCII_RAMP) - 1
    return [
        "".join(ASCII_RAMP[pixels[x, y] * last // 255] for x in range(width))
        for y in range(height)
    ]


def image_rows(image: Image.Image, max_cols: int, max_rows: int, *, no_color: bool = False) -> list[str]:
    if no_color:
        return ascii_rows(image, max_cols, max_rows)
    return half_block_rows(image, max_cols, max_rows)


def rows_width(image: Image.Image, max_cols: int, max_rows: int, *, no_color: bool = False) -> int:
    """Display width of the rows ``image_rows`` would produce."""
    return fit_size(image.size, max_cols, max_rows, half_blocks=not no_color)[0]


__all__ = [
    "UPPER_HALF_BLOCK",
    "ASCII_RAMP",
    "fit_size",
    "half_block_rows",
    "ascii_rows",
    "image_rows",
    "rows_width",
]

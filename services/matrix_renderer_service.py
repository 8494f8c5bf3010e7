"""
Label matrix rendering.

Draws a 21x21 QR-style pattern for a piece of label content:

- three 7x7 finder blocks (top-left, top-right, bottom-left), each an outer
  ring plus a 3x3 core, identical for every input
- data modules filled from a pseudo-random sequence seeded by a 32-bit hash
  of the content
- timing modules forced dark at even indexes 8-12 along row 6 and column 6

The output is deterministic for a given content string but it is NOT a
decodable QR symbol (no error-correction codewords). It is meant for on-screen
identification and test round-trips; scanner interoperability needs a real
QR encoder.
"""

import base64
import math
from io import BytesIO
from typing import Optional
import structlog
from PIL import Image, ImageDraw

from config import settings
from exceptions import RenderError, ValidationError

logger = structlog.get_logger(__name__)

MODULE_COUNT = 21
FINDER_SIZE = 7
TIMING_LINE = 6
TIMING_START = 8
TIMING_END = 12

Matrix = list[list[bool]]


def text_hash(text: str) -> int:
    """
    32-bit signed rolling hash (h = h * 31 + code) over UTF-16 code units.

    Characters outside the BMP contribute both surrogate halves.
    """
    data = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = (h * 31 + code) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def seeded_unit(seed: int) -> float:
    """Deterministic value in [0, 1) for a seed."""
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def _finder_origin(row: int, col: int) -> Optional[tuple[int, int]]:
    """Top-left corner of the finder block containing (row, col), if any."""
    far = MODULE_COUNT - FINDER_SIZE
    if row < FINDER_SIZE and col < FINDER_SIZE:
        return 0, 0
    if row < FINDER_SIZE and col >= far:
        return 0, far
    if row >= far and col < FINDER_SIZE:
        return far, 0
    return None


def _finder_module(local_row: int, local_col: int) -> bool:
    edge = FINDER_SIZE - 1
    on_ring = local_row in (0, edge) or local_col in (0, edge)
    in_core = 2 <= local_row <= 4 and 2 <= local_col <= 4
    return on_ring or in_core


def build_matrix(text: str, seed: Optional[int] = None) -> Matrix:
    """
    Compute the module grid for label content.

    Args:
        text: Label content
        seed: Base seed overriding the content hash

    Returns:
        21x21 grid, True = dark module
    """
    base = text_hash(text) if seed is None else seed
    matrix: Matrix = []

    for row in range(MODULE_COUNT):
        line = []
        for col in range(MODULE_COUNT):
            origin = _finder_origin(row, col)
            if origin is not None:
                line.append(_finder_module(row - origin[0], col - origin[1]))
            else:
                line.append(seeded_unit(base + row * MODULE_COUNT + col) > 0.5)
        matrix.append(line)

    for i in range(TIMING_START, TIMING_END + 1):
        if i % 2 == 0:
            matrix[TIMING_LINE][i] = True
            matrix[i][TIMING_LINE] = True

    return matrix


def render_image(
    text: str,
    size: Optional[int] = None,
    margin: Optional[int] = None,
    seed: Optional[int] = None,
) -> Image.Image:
    """
    Draw the matrix onto a square white canvas.

    Modules are whole pixels; leftover space is split evenly around the grid.

    Args:
        text: Label content
        size: Canvas width/height in pixels
        margin: Minimum quiet zone in pixels
        seed: Base seed overriding the content hash

    Returns:
        RGB image

    Raises:
        ValidationError: If size leaves less than one pixel per module
        RenderError: If the canvas cannot be created or drawn on
    """
    size = settings.label_size_px if size is None else size
    margin = settings.label_margin_px if margin is None else margin

    module_px = (size - 2 * margin) // MODULE_COUNT
    if module_px < 1:
        raise ValidationError(
            code="LABEL_SIZE_TOO_SMALL",
            message=f"Size {size}px with margin {margin}px cannot fit {MODULE_COUNT} modules",
            details={"size": size, "margin": margin, "min_size": 2 * margin + MODULE_COUNT}
        )

    matrix = build_matrix(text, seed=seed)
    offset = (size - module_px * MODULE_COUNT) // 2

    try:
        image = Image.new("RGB", (size, size), "white")
        draw = ImageDraw.Draw(image)

        for row, line in enumerate(matrix):
            for col, dark in enumerate(line):
                if dark:
                    x = offset + col * module_px
                    y = offset + row * module_px
                    draw.rectangle(
                        [x, y, x + module_px - 1, y + module_px - 1],
                        fill="black"
                    )
    except (OSError, ValueError, MemoryError) as e:
        logger.error("label_render_failed", size=size, error=str(e))
        raise RenderError("Unable to create drawing surface", details={"size": size}) from e

    logger.debug("label_rendered", size=size, module_px=module_px)
    return image


def render_png(
    text: str,
    size: Optional[int] = None,
    margin: Optional[int] = None,
) -> bytes:
    """Render label content as PNG bytes."""
    image = render_image(text, size=size, margin=margin)
    buffer = BytesIO()
    try:
        image.save(buffer, format="PNG")
    except OSError as e:
        logger.error("label_encode_failed", error=str(e))
        raise RenderError("Unable to encode label image") from e
    return buffer.getvalue()


def render_data_url(
    text: str,
    size: Optional[int] = None,
    margin: Optional[int] = None,
) -> str:
    """Render label content as a data:image/png;base64 URL for display."""
    png = render_png(text, size=size, margin=margin)
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")

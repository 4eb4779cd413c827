"""Image preparation for StarPRNT bit image printing.

Images are flattened onto a white background, reduced to black and white by
one of the dithering algorithms and packed into 24-dot high bands, three bytes
per column, the layout expected by ``ESC X``.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

ImageSource = Union[Image.Image, str, Path]

ALGORITHMS = ("threshold", "bayer", "floydsteinberg", "atkinson")

BAND_HEIGHT = 24

# ITU-R 601 weights in thousandths
_LUMINANCE = np.array([299, 587, 114])

_BAYER = np.array([
    [1, 9, 3, 11],
    [13, 5, 15, 7],
    [4, 12, 2, 10],
    [16, 8, 14, 6],
])

# (dx, dy) neighbours receiving 1/8 of the error each
_ATKINSON = ((1, 0), (2, 0), (-1, 1), (0, 1), (1, 1), (0, 2))


def flatten(image: Image.Image, background: Tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Composite ``image`` onto a solid background and return an RGB image."""
    rgba = image.convert("RGBA")
    canvas = Image.new("RGB", rgba.size, background)
    canvas.paste(rgba, mask=rgba.split()[3])
    return canvas


def _luminance(image: Image.Image) -> np.ndarray:
    return (np.asarray(image.convert("RGB"), dtype=np.int64) @ _LUMINANCE) / 1000


def _threshold(lum: np.ndarray, threshold: int) -> np.ndarray:
    return np.where(lum < threshold, 0, 255)


def _bayer(lum: np.ndarray, threshold: int) -> np.ndarray:
    height, width = lum.shape
    # Matrix is indexed [x % 4][y % 4]
    matrix = _BAYER[np.ix_(np.arange(width) % 4, np.arange(height) % 4)].T
    return np.where(np.floor((lum + matrix) / 2) < threshold, 0, 255)


def _floydsteinberg(lum: np.ndarray) -> np.ndarray:
    gray = Image.fromarray(np.clip(np.rint(lum), 0, 255).astype(np.uint8), "L")
    dithered = gray.convert("1", dither=Image.Dither.FLOYDSTEINBERG)
    return np.asarray(dithered.convert("L"), dtype=np.float64)


def _atkinson(lum: np.ndarray) -> np.ndarray:
    out = lum.copy()
    height, width = out.shape
    for y in range(height):
        for x in range(width):
            old = out[y, x]
            new = 0.0 if old < 129 else 255.0
            error = math.floor((old - new) / 8)
            out[y, x] = new
            for dx, dy in _ATKINSON:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and ny < height:
                    out[ny, nx] += error
    return out


def dither(image: Image.Image, algorithm: str = "threshold", threshold: int = 128) -> Image.Image:
    """Reduce ``image`` to pure black (0) and white (255), returned as mode ``L``."""

    lum = _luminance(image)

    if algorithm == "threshold":
        result = _threshold(lum, threshold)
    elif algorithm == "bayer":
        result = _bayer(lum, threshold)
    elif algorithm == "floydsteinberg":
        result = _floydsteinberg(lum)
    elif algorithm == "atkinson":
        result = _atkinson(lum)
    else:
        raise ValueError(f"Unknown dithering algorithm: {algorithm!r}")

    return Image.fromarray(result.astype(np.uint8), "L")


def pack_bands(image: Image.Image) -> List[bytes]:
    """Pack a black and white image into column-major bands of 24 dots.

    Each band holds three bytes per column: rows 0-7, 8-15 and 16-23, most
    significant bit on top. A set bit is a dark dot.
    """

    dark = np.asarray(image.convert("L")) == 0
    height, width = dark.shape

    bands: List[bytes] = []
    for y in range(0, height, BAND_HEIGHT):
        columns = dark[y:y + BAND_HEIGHT].T.reshape(width, 3, 8)
        bands.append(np.packbits(columns, axis=-1).tobytes())
    return bands


def rasterize(
    source: ImageSource,
    width: int,
    height: int,
    algorithm: str = "threshold",
    threshold: int = 128,
) -> List[bytes]:
    """Scale, flatten, dither and pack ``source`` into printer bands."""

    if algorithm not in ALGORITHMS:
        raise ValueError(f"Unknown dithering algorithm: {algorithm!r}")

    if isinstance(source, Image.Image):
        image = flatten(source)
    else:
        with Image.open(source) as opened:
            image = flatten(opened)

    if image.size != (width, height):
        image = image.resize((width, height), Image.Resampling.LANCZOS)

    logger.debug("Rasterizing %dx%d image with %s dithering", width, height, algorithm)
    return pack_bands(dither(image, algorithm, threshold))

"""Smooth-coloured images of the Mandelbrot set over a region of the complex plane."""

from __future__ import annotations

import numpy as np

__all__ = [
    "MAX_ITERS",
    "DIVERGENCE_LIMIT",
    "PALETTE",
    "how_mandel",
    "colour_for",
    "MandelbrotCalculator",
]

MAX_ITERS = 500
# Squared magnitude above which a point is taken to diverge.
DIVERGENCE_LIMIT = 256.0

PALETTE = np.array(
    [
        (66, 30, 15, 255),
        (25, 7, 26, 255),
        (9, 1, 47, 255),
        (4, 4, 73, 255),
        (0, 7, 100, 255),
        (12, 44, 138, 255),
        (24, 82, 177, 255),
        (57, 125, 209, 255),
        (134, 181, 229, 255),
        (211, 236, 248, 255),
        (241, 233, 191, 255),
        (248, 201, 95, 255),
        (255, 170, 0, 255),
        (204, 128, 0, 255),
        (153, 87, 0, 255),
        (106, 52, 3, 255),
    ],
    dtype=np.float64,
)

_LOG2 = np.log(2.0)


def _mandelness(re: np.ndarray, im: np.ndarray) -> np.ndarray:
    """Smoothed escape count for each point; 1.0 for points that never escape."""
    shape = np.shape(re)
    c_re = np.asarray(re, dtype=np.float64).ravel()
    c_im = np.asarray(im, dtype=np.float64).ravel()
    z_re = np.zeros_like(c_re)
    z_im = np.zeros_like(c_im)
    result = np.ones_like(c_re)
    active = np.ones(c_re.shape, dtype=bool)

    for i in range(MAX_ITERS):
        idx = np.flatnonzero(active)
        if idx.size == 0:
            break
        zr, zi = z_re[idx], z_im[idx]
        new_re = zr * zr - zi * zi + c_re[idx]
        new_im = 2.0 * zr * zi + c_im[idx]
        z_re[idx] = new_re
        z_im[idx] = new_im
        abs_sq = new_re * new_re + new_im * new_im

        escaped = abs_sq >= DIVERGENCE_LIMIT
        if escaped.any():
            log_zn = np.log(abs_sq[escaped]) / 2.0
            nu = np.log(log_zn / _LOG2) / _LOG2
            done = idx[escaped]
            result[done] = i + 1.0 - nu
            active[done] = False

    return result.reshape(shape)


def _colours(mandelness: np.ndarray) -> np.ndarray:
    """RGBA bytes interpolated between neighbouring palette entries."""
    m = np.asarray(mandelness, dtype=np.float64)
    whole = np.trunc(m)
    index = whole.astype(np.int64) % len(PALETTE)
    fract = (m - whole)[..., None]
    col_a = PALETTE[index]
    col_b = PALETTE[(index + 1) % len(PALETTE)]
    col = col_a * (1.0 - fract) + col_b * fract
    return np.clip(col, 0, 255).astype(np.uint8)


def how_mandel(re: float, im: float) -> float:
    """Smoothed number of iterations before ``re + i*im`` diverges.

    Points that stay bounded for ``MAX_ITERS`` iterations give 1.0.
    """
    return float(_mandelness(np.array([re]), np.array([im]))[0])


def colour_for(mandelness: float) -> tuple[int, int, int, int]:
    """RGBA colour for a mandelness value."""
    rgba = _colours(np.array([mandelness]))[0]
    return tuple(int(c) for c in rgba)


class MandelbrotCalculator:
    """Renders a view of the complex plane into an RGBA image."""

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"image dimensions must be non-negative, got {width}x{height}")
        self.width = width
        self.height = height
        self.min_x = -2.0
        self.max_x = 1.0
        self.min_y = -1.0
        self.max_y = 1.0
        self._img = np.zeros((height, width, 4), dtype=np.uint8)

    def set_bounds(self, min_x: float, max_x: float, min_y: float, max_y: float) -> None:
        """Set the viewed region; x is the real axis and y the imaginary one."""
        self.min_x = min_x
        self.max_x = max_x
        self.min_y = min_y
        self.max_y = max_y

    def calc(self) -> None:
        """Recompute the image for the current bounds."""
        xs = np.arange(self.width, dtype=np.float64) / self.width
        xs = xs * (self.max_x - self.min_x) + self.min_x
        ys = np.arange(self.height, dtype=np.float64) / self.height
        ys = ys * (self.max_y - self.min_y) + self.min_y
        re, im = np.meshgrid(xs, ys)
        self._img = _colours(_mandelness(re, im))

    def image(self) -> np.ndarray:
        """Copy of the image, shape ``(height, width, 4)``, indexed ``[row, column]``."""
        return self._img.copy()
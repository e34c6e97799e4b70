"""Conway's Game of Life on a wrapping grid, with per-cell "velocities" and an RGBA image."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from accelkit.doublebuf import DoubleBuffer

__all__ = ["CellState", "GameOfLifeSim"]

# Neighbour indices are computed with unsigned machine-word arithmetic, so
# stepping below zero wraps around 2**64 before being reduced by the grid size.
_WORD = 2**64

# (dx, dy, direction) for each of the eight neighbours of a cell.
_NEIGHBOURS = (
    (-1, 1, (-0.7, 0.7)),
    (0, 1, (0.0, 1.0)),
    (1, 1, (0.7, 0.7)),
    (-1, 0, (-1.0, 0.0)),
    (1, 0, (1.0, 0.0)),
    (-1, -1, (-0.7, -0.7)),
    (0, -1, (0.0, -1.0)),
    (1, -1, (0.7, -0.7)),
)


class CellState(IntEnum):
    """State of a single cell."""

    DEAD = 0
    LIVE = 1


@dataclass
class _Grid:
    cells: np.ndarray  # (width, height) cell states
    vels: np.ndarray  # (width, height, 2) float32 velocities
    img: np.ndarray  # (height, width, 4) uint8 RGBA, row-major by y

    @classmethod
    def empty(cls, width: int, height: int) -> "_Grid":
        return cls(
            cells=np.full((width, height), CellState.DEAD, dtype=np.uint32),
            vels=np.zeros((width, height, 2), dtype=np.float32),
            img=np.zeros((height, width, 4), dtype=np.uint8),
        )


def _wrapped_indices(size: int, delta: int) -> np.ndarray:
    """Indices ``(i + delta) mod size`` using unsigned word wraparound."""
    return np.array(
        [(i + delta) % _WORD % size for i in range(size)], dtype=np.intp
    )


def _to_uchar(values: np.ndarray) -> np.ndarray:
    return np.clip(values, 0, 255).astype(np.uint8)


class GameOfLifeSim:
    """A Game of Life simulation whose grid is double-buffered between steps."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._grid: DoubleBuffer[_Grid] = DoubleBuffer(
            lambda: _Grid.empty(width, height)
        )
        self._clicks: list[tuple[int, int, CellState]] = []
        self._xs = {d: _wrapped_indices(width, d) for d in (-1, 0, 1)}
        self._ys = {d: _wrapped_indices(height, d) for d in (-1, 0, 1)}

    def add_click(self, x: int, y: int, state: CellState) -> None:
        """Queue a cell to be set to ``state`` at the start of the next step."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"cell ({x}, {y}) is outside the {self.width}x{self.height} grid"
            )
        self._clicks.append((x, y, CellState(state)))

    def step(self) -> None:
        """Apply pending clicks and advance the simulation by one generation."""
        grid = self._grid.read()
        # Most recent clicks are applied first, so earlier ones win on conflict.
        while self._clicks:
            x, y, state = self._clicks.pop()
            grid.cells[x, y] = state

        live = grid.cells == CellState.LIVE
        count = np.zeros(live.shape, dtype=np.intp)
        push = np.zeros(live.shape + (2,), dtype=np.float32)
        for dx, dy, direction in _NEIGHBOURS:
            neighbour = live[np.ix_(self._xs[dx], self._ys[dy])]
            count += neighbour
            push += neighbour[..., None] * np.asarray(direction, dtype=np.float32)

        survives = (count >= 2) & (count < 4)
        new_live = np.where(live, survives, count == 3)
        new_state = new_live.astype(np.uint32)

        vel = -push / np.float32(8)
        new_vel = (grid.vels + vel) / np.float32(2)

        out = self._grid.write()
        out.cells[...] = new_state
        out.vels[...] = new_vel

        bright = np.abs(new_vel) * np.float32(5) + np.float32(0.2)
        scale = new_state.astype(np.float32) * np.float32(255)
        out.img[..., 0] = _to_uchar(scale * bright[..., 0]).T
        out.img[..., 1] = 0
        out.img[..., 2] = _to_uchar(scale * bright[..., 1]).T
        out.img[..., 3] = 255

        self._grid.swap()

    def cells(self) -> np.ndarray:
        """Copy of the current cell states, indexed ``[x, y]``."""
        return self._grid.read().cells.copy()

    def velocities(self) -> np.ndarray:
        """Copy of the current velocities, shape ``(width, height, 2)``."""
        return self._grid.read().vels.copy()

    def image(self) -> np.ndarray:
        """Copy of the current RGBA image, shape ``(height, width, 4)``."""
        return self._grid.read().img.copy()
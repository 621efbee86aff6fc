"""Board representation for the playfield."""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np
from numpy.typing import NDArray

from .tetromino import ActivePiece, BlockKind, Cell


# Dimensions of the standard board.  They never change during a game.
WIDTH = 10
HEIGHT = 20

Grid = NDArray[np.uint8]

# Mapping from ``BlockKind`` to the integer stored in the grid.  ``0`` is an
# empty cell.
PIECE_VALUES = {kind: i + 1 for i, kind in enumerate(BlockKind)}
VALUE_KINDS = {value: kind for kind, value in PIECE_VALUES.items()}


def create_empty_grid() -> Grid:
    """Return a new empty board grid filled with zeros."""

    return np.zeros((HEIGHT, WIDTH), dtype=np.uint8)


class Board:
    """Grid of settled cells, indexed as ``grid[y, x]``."""

    width: int = WIDTH
    height: int = HEIGHT

    def __init__(self) -> None:
        self.grid: Grid = create_empty_grid()

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Optional[BlockKind]:
        """Return the settled kind at ``(x, y)`` or ``None`` when empty.

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        if not self._in_bounds(x, y):
            raise IndexError("Cell out of bounds")
        value = int(self.grid[y, x])
        return VALUE_KINDS.get(value)

    def set_cell(self, x: int, y: int, kind: Optional[BlockKind]) -> None:
        """Overwrite ``(x, y)`` with ``kind`` (``None`` empties the cell).

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        if not self._in_bounds(x, y):
            raise IndexError("Cell out of bounds")
        self.grid[y, x] = np.uint8(PIECE_VALUES[kind] if kind is not None else 0)

    def is_empty(self, x: int, y: int) -> bool:
        """Return ``True`` if ``(x, y)`` holds no settled block.

        Coordinates outside the board count as occupied.
        """

        if self._in_bounds(x, y):
            return bool(self.grid[y, x] == 0)
        return False

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def rows(self) -> List[List[Optional[BlockKind]]]:
        """Return the board as rows of optional kinds, top row first."""

        return [[VALUE_KINDS.get(int(value)) for value in row] for row in self.grid]

    def check_collision(self, piece: ActivePiece, dx: int = 0, dy: int = 0) -> bool:
        """Return ``True`` if ``piece`` shifted by ``(dx, dy)`` would collide.

        Cells above the visible area (``y < 0``) are only checked against the
        side walls, so a freshly spawned piece may hang above row zero.
        """

        for x, y in piece.cells():
            nx = x + dx
            ny = y + dy
            if nx < 0 or nx >= self.width:
                return True
            if ny >= self.height:
                return True
            if ny >= 0 and self.grid[ny, nx] != 0:
                return True
        return False

    def lock(self, kind: BlockKind, cells: Iterable[Cell]) -> int:
        """Write ``kind`` into ``cells`` and return how many were stored.

        Cells outside the board, including those still above row zero, are
        dropped.
        """

        coordinates = np.asarray(list(cells), dtype=np.int16).reshape(-1, 2)
        if coordinates.size == 0:
            return 0

        xs, ys = coordinates.T
        inside = (ys >= 0) & (ys < self.height) & (xs >= 0) & (xs < self.width)
        self.grid[ys[inside], xs[inside]] = np.uint8(PIECE_VALUES[kind])
        return int(np.count_nonzero(inside))

    def clear_full_lines(self) -> int:
        """Remove every full row in one pass and return how many went.

        Surviving rows keep their top-to-bottom order and settle at the
        bottom; empty rows are inserted at the top.
        """

        full_rows = np.all(self.grid != 0, axis=1)
        cleared = int(np.count_nonzero(full_rows))
        if cleared:
            remaining = self.grid[~full_rows]
            new_rows = np.zeros((cleared, self.width), dtype=self.grid.dtype)
            self.grid = np.vstack((new_rows, remaining))
        return cleared

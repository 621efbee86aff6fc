"""Tetromino definitions and the falling piece.

Every kind ships a fixed, hand-authored list of rotation states.  Each state is
a 4x4 occupancy grid stored row-major, so a state is a 16 character string
where ``#`` marks a block.  The number of states differs per kind: the ``O``
piece has one, ``I``/``S``/``Z`` have two and ``T``/``J``/``L`` have four.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Tuple

Cell = Tuple[int, int]  # (x, y)
RotationGrid = Tuple[bool, ...]

GRID_SIZE = 4


class BlockKind(str, Enum):
    """Enumeration of the seven standard tetromino shapes."""

    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


# Colour names understood by the presentation layer.
BLOCK_COLORS: Dict[BlockKind, str] = {
    BlockKind.I: "cyan",
    BlockKind.O: "yellow",
    BlockKind.T: "magenta",
    BlockKind.S: "green",
    BlockKind.Z: "red",
    BlockKind.J: "blue",
    BlockKind.L: "orange",
}


def _grid(rows: str) -> RotationGrid:
    cells = rows.replace(" ", "")
    if len(cells) != GRID_SIZE * GRID_SIZE:
        raise ValueError(f"Rotation grid must hold 16 cells, got {len(cells)}")
    return tuple(ch == "#" for ch in cells)


# Rows are separated by spaces purely for readability.
ROTATIONS: Dict[BlockKind, Tuple[RotationGrid, ...]] = {
    BlockKind.I: (
        _grid(".... #### .... ...."),
        _grid("..#. ..#. ..#. ..#."),
    ),
    BlockKind.O: (
        _grid(".##. .##. .... ...."),
    ),
    BlockKind.T: (
        _grid(".#.. ###. .... ...."),
        _grid(".#.. .##. .#.. ...."),
        _grid(".... ###. .#.. ...."),
        _grid(".#.. ##.. .#.. ...."),
    ),
    BlockKind.S: (
        _grid(".##. ##.. .... ...."),
        _grid(".#.. .##. ..#. ...."),
    ),
    BlockKind.Z: (
        _grid("##.. .##. .... ...."),
        _grid("..#. .##. .#.. ...."),
    ),
    BlockKind.J: (
        _grid("#... ###. .... ...."),
        _grid(".##. .#.. .#.. ...."),
        _grid(".... ###. ..#. ...."),
        _grid(".#.. .#.. ##.. ...."),
    ),
    BlockKind.L: (
        _grid("..#. ###. .... ...."),
        _grid(".#.. .#.. .##. ...."),
        _grid(".... ###. #... ...."),
        _grid("##.. .#.. .#.. ...."),
    ),
}


def rotation_states(kind: BlockKind) -> Tuple[RotationGrid, ...]:
    """Return the ordered rotation grids for ``kind``."""

    return ROTATIONS[kind]


def shape_cells(kind: BlockKind, rotation: int) -> List[Cell]:
    """Return the ``(x, y)`` offsets occupied by ``kind`` at ``rotation``.

    Offsets are relative to the top-left corner of the 4x4 bounding box.
    ``rotation`` is wrapped so any integer is accepted.
    """

    states = ROTATIONS[kind]
    grid = states[rotation % len(states)]
    return [
        (index % GRID_SIZE, index // GRID_SIZE)
        for index, filled in enumerate(grid)
        if filled
    ]


def preview_grid(kind: BlockKind) -> List[List[bool]]:
    """Return the spawn orientation of ``kind`` as a 4x4 list of rows."""

    grid = ROTATIONS[kind][0]
    return [list(grid[row * GRID_SIZE:(row + 1) * GRID_SIZE]) for row in range(GRID_SIZE)]


@dataclass
class ActivePiece:
    """Falling piece: kind, rotation index and top-left board position."""

    kind: BlockKind
    rotation: int = 0
    x: int = 0
    y: int = 0

    @classmethod
    def spawn(cls, kind: BlockKind, board_width: int) -> "ActivePiece":
        """Create ``kind`` near the top centre, one row above the board."""

        return cls(kind, rotation=0, x=board_width // 2 - 2, y=-1)

    @property
    def rotation_count(self) -> int:
        return len(ROTATIONS[self.kind])

    def rotate_cw(self) -> None:
        self.rotation = (self.rotation + 1) % self.rotation_count

    def rotate_ccw(self) -> None:
        self.rotation = (self.rotation - 1) % self.rotation_count

    def copy(self) -> "ActivePiece":
        return replace(self)

    def moved(self, dx: int, dy: int) -> "ActivePiece":
        """Return a copy of the piece translated by ``(dx, dy)``."""

        return replace(self, x=self.x + dx, y=self.y + dy)

    def cells(self) -> List[Cell]:
        """Return the absolute board coordinates covered by the piece."""

        return [(self.x + dx, self.y + dy) for dx, dy in shape_cells(self.kind, self.rotation)]

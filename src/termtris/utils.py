"""Rule helpers shared by the engine and the renderers."""

from __future__ import annotations

from typing import List, Optional

from .board import Board
from .tetromino import ActivePiece, BlockKind


BASE_GRAVITY_MS = 700
GRAVITY_STEP_MS = 50
MIN_GRAVITY_MS = 60
LINES_PER_LEVEL = 10

# Points for clearing 1..4 rows at once, multiplied by the level.
LINE_CLEAR_POINTS = {1: 100, 2: 300, 3: 500, 4: 800}


def gravity_interval_ms(
    level: int,
    base_ms: int = BASE_GRAVITY_MS,
    step_ms: int = GRAVITY_STEP_MS,
    min_ms: int = MIN_GRAVITY_MS,
) -> int:
    """Return the fall interval in milliseconds for ``level``.

    Level one falls every 700ms and every further level is 50ms faster, with
    a floor of 60ms (first reached at level 14).
    """

    return max(base_ms - (level - 1) * step_ms, min_ms)


def level_for_lines(lines: int, lines_per_level: int = LINES_PER_LEVEL) -> int:
    return lines // lines_per_level + 1


def line_clear_points(cleared: int, level: int) -> int:
    """Return the award for clearing ``cleared`` rows in one lock."""

    if cleared <= 0:
        return 0
    return LINE_CLEAR_POINTS[min(cleared, 4)] * level


def render_grid(
    board: Board, active: Optional[ActivePiece] = None
) -> List[List[Optional[BlockKind]]]:
    """Return a copy of the board with the active piece overlaid.

    The board itself is not touched.  Cells of the piece that are still above
    the visible area are skipped.
    """

    grid = board.rows()
    if active is not None:
        for x, y in active.cells():
            if 0 <= y < board.height and 0 <= x < board.width:
                grid[y][x] = active.kind
    return grid


def format_duration(seconds: float) -> str:
    """Format ``seconds`` as ``MM:SS``."""

    total = int(max(seconds, 0))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"

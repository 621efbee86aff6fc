from termtris.board import Board
from termtris.tetromino import ActivePiece, BlockKind
from termtris.utils import (
    format_duration,
    gravity_interval_ms,
    level_for_lines,
    line_clear_points,
    render_grid,
)


def test_gravity_interval_by_level():
    assert gravity_interval_ms(1) == 700
    assert gravity_interval_ms(2) == 650
    assert gravity_interval_ms(12) == 150
    assert gravity_interval_ms(13) == 100
    assert gravity_interval_ms(14) == 60
    assert gravity_interval_ms(40) == 60


def test_level_from_lines():
    assert level_for_lines(0) == 1
    assert level_for_lines(9) == 1
    assert level_for_lines(10) == 2
    assert level_for_lines(35) == 4


def test_line_clear_points_table():
    assert [line_clear_points(n, 1) for n in range(6)] == [0, 100, 300, 500, 800, 800]
    assert line_clear_points(2, 4) == 1200


def test_render_grid_overlays_active_piece_without_touching_board():
    board = Board()
    board.set_cell(0, 19, BlockKind.Z)
    piece = ActivePiece(BlockKind.I, rotation=1, x=0, y=-2)  # column 2, rows -2..1
    grid = render_grid(board, piece)
    assert grid[19][0] is BlockKind.Z
    assert grid[0][2] is BlockKind.I
    assert grid[1][2] is BlockKind.I
    assert sum(cell is not None for row in grid for cell in row) == 3
    assert board.filled_count() == 1


def test_format_duration():
    assert format_duration(0) == "00:00"
    assert format_duration(65.9) == "01:05"
    assert format_duration(3600) == "60:00"

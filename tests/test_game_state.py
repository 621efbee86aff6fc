import itertools

import pytest

from termtris.board import Board
from termtris.game_state import GameState, Phase
from termtris.tetromino import ActivePiece, BlockKind


class FakeClock:
    def __init__(self) -> None:
        self.current = 0.0

    def advance(self, delta: float) -> None:
        self.current += delta

    def __call__(self) -> float:
        return self.current


class SequenceRng:
    """Return kinds from a fixed list, repeating the list forever."""

    def __init__(self, kinds) -> None:
        self._kinds = itertools.cycle(kinds)

    def choice(self, _seq):
        return next(self._kinds)


def make_state(*kinds: BlockKind, clock=None) -> GameState:
    return GameState(rng=SequenceRng(kinds or [BlockKind.O]), clock=clock or FakeClock())


def fill_row(board: Board, y: int, skip=()) -> None:
    for x in range(board.width):
        if x not in skip:
            board.set_cell(x, y, BlockKind.T)


def test_new_game_initial_values():
    state = make_state(BlockKind.T, BlockKind.L)
    assert state.active.kind is BlockKind.T
    assert state.next_kind is BlockKind.L
    assert (state.score, state.level, state.lines_cleared) == (0, 1, 0)
    assert state.gravity_interval_ms == 700
    assert state.phase is Phase.ACTIVE
    assert state.board.filled_count() == 0


def test_horizontal_moves_stop_at_walls():
    state = make_state(BlockKind.O)
    moves = 0
    while state.move_left():
        moves += 1
    assert moves == 4  # O spawns at x=3 with its blocks in columns 4-5
    assert min(x for x, _ in state.active.cells()) == 0
    assert state.move_left() is False

    while state.move_right():
        pass
    assert max(x for x, _ in state.active.cells()) == state.board.width - 1


def test_soft_drop_scores_and_moves():
    state = make_state(BlockKind.O)
    y = state.active.y
    assert state.move_down() is True
    assert state.active.y == y + 1
    assert state.score == 1


def test_soft_drop_into_floor_locks_and_spawns():
    state = make_state(BlockKind.O, BlockKind.L, BlockKind.S)
    state.active = ActivePiece(BlockKind.O, x=0, y=18)
    assert state.move_down() is False
    assert state.board.filled_count() == 4
    assert state.score == 0
    assert state.active.kind is BlockKind.L
    assert (state.active.rotation, state.active.x, state.active.y) == (0, 3, -1)
    assert state.next_kind is BlockKind.S


def test_hard_drop_lands_without_scoring():
    state = make_state(BlockKind.O)
    distance = state.hard_drop()
    assert distance == 19
    assert state.score == 0
    assert state.board.cell(4, 19) is BlockKind.O
    assert state.board.cell(5, 18) is BlockKind.O


def test_single_line_clear_scores_100():
    state = make_state(BlockKind.I, BlockKind.O)
    fill_row(state.board, 19, skip=range(3, 7))
    state.hard_drop()
    assert state.score == 100
    assert state.lines_cleared == 1
    assert state.board.filled_count() == 0


def test_four_line_clear_scores_800():
    state = make_state(BlockKind.I, BlockKind.O)
    for y in range(16, 20):
        fill_row(state.board, y, skip=(5,))
    assert state.rotate_cw() is True
    assert {x for x, _ in state.active.cells()} == {5}
    state.hard_drop()
    assert state.score == 800
    assert state.lines_cleared == 4
    assert state.board.filled_count() == 0


def test_line_clear_points_scale_with_level():
    state = make_state(BlockKind.I, BlockKind.O)
    state.level = 3
    state.lines_cleared = 20
    fill_row(state.board, 19, skip=range(3, 7))
    state.hard_drop()
    assert state.score == 300


def test_tenth_line_raises_level_and_speeds_gravity():
    state = make_state(BlockKind.I, BlockKind.O)
    state.lines_cleared = 9
    fill_row(state.board, 19, skip=range(3, 7))
    state.hard_drop()
    assert state.lines_cleared == 10
    assert state.level == 2
    assert state.gravity_interval_ms == 650
    assert state.score == 100


def test_gravity_waits_for_interval():
    clock = FakeClock()
    state = make_state(BlockKind.O, clock=clock)
    y = state.active.y
    assert state.step() is False
    clock.advance(0.5)
    assert state.step() is False
    assert state.active.y == y
    clock.advance(0.25)
    assert state.step() is True
    assert state.active.y == y + 1
    assert state.step() is False


def test_gravity_locks_resting_piece():
    clock = FakeClock()
    state = make_state(BlockKind.O, BlockKind.T, clock=clock)
    state.active = ActivePiece(BlockKind.O, x=0, y=18)
    clock.advance(1.0)
    assert state.step() is True
    assert state.board.filled_count() == 4
    assert state.active.kind is BlockKind.T


def test_soft_drop_restarts_gravity_timer():
    clock = FakeClock()
    state = make_state(BlockKind.O, clock=clock)
    clock.advance(0.6)
    state.move_down()
    clock.advance(0.2)
    assert state.step() is False


def test_rotation_kicks_away_from_wall():
    state = make_state(BlockKind.I)
    state.active = ActivePiece(BlockKind.I, rotation=1, x=-1, y=5)
    assert state.rotate_cw() is True
    assert state.active.rotation == 0
    assert state.active.x == 0
    assert state.active.y == 5


def test_rotation_rejected_when_every_kick_collides():
    state = make_state(BlockKind.I)
    state.active = ActivePiece(BlockKind.I, rotation=1, x=-2, y=5)
    assert state.rotate_ccw() is False
    assert (state.active.rotation, state.active.x, state.active.y) == (1, -2, 5)


def test_rotation_prefers_left_kick_over_right():
    state = make_state(BlockKind.T)
    state.active = ActivePiece(BlockKind.T, x=3, y=5)
    state.board.set_cell(4, 7, BlockKind.Z)  # blocks the in-place rotation only
    assert state.rotate_cw() is True
    assert (state.active.rotation, state.active.x, state.active.y) == (1, 2, 5)


def test_rotation_kicks_up_when_sideways_trials_collide():
    state = make_state(BlockKind.T)
    for x in (3, 4, 5):
        state.board.set_cell(x, 19, BlockKind.Z)
    state.active = ActivePiece(BlockKind.T, x=3, y=17)
    assert state.rotate_cw() is True
    assert (state.active.rotation, state.active.x, state.active.y) == (1, 3, 16)


def test_pause_blocks_gravity_and_moves():
    clock = FakeClock()
    state = make_state(BlockKind.O, clock=clock)
    before = state.active.copy()
    state.toggle_pause()
    assert state.phase is Phase.PAUSED
    clock.advance(10)
    assert state.step() is False
    assert state.move_left() is False
    assert state.move_down() is False
    assert state.hard_drop() == 0
    assert state.rotate_cw() is False
    assert state.active == before
    assert state.score == 0
    state.toggle_pause()
    assert state.phase is Phase.ACTIVE
    assert state.step() is True


def test_blocked_spawn_ends_game_and_freezes_play():
    clock = FakeClock()
    state = make_state(BlockKind.O, BlockKind.I, BlockKind.T, clock=clock)
    for x in range(3, 7):
        state.board.set_cell(x, 0, BlockKind.Z)
    state.active = ActivePiece(BlockKind.O, x=0, y=18)
    state.hard_drop()
    assert state.game_over is True
    assert state.phase is Phase.GAME_OVER

    frozen = state.active.copy()
    filled = state.board.filled_count()
    clock.advance(5)
    assert state.step() is False
    assert state.move_left() is False
    assert state.move_down() is False
    assert state.rotate_cw() is False
    assert state.hard_drop() == 0
    assert state.lock() == 0
    assert state.active == frozen
    assert state.board.filled_count() == filled


def test_reset_after_game_over_starts_fresh():
    clock = FakeClock()
    state = make_state(BlockKind.O, BlockKind.I, BlockKind.S, BlockKind.Z, clock=clock)
    state.score = 1234
    state.level = 5
    state.lines_cleared = 42
    state.gravity_interval_ms = 500
    state.game_over = True
    clock.advance(30)
    state.reset()
    assert (state.score, state.level, state.lines_cleared) == (0, 1, 0)
    assert state.gravity_interval_ms == 700
    assert state.game_over is False
    assert state.paused is False
    assert state.board.filled_count() == 0
    assert state.elapsed() == pytest.approx(0.0)
    assert (state.active.kind, state.next_kind) == (BlockKind.S, BlockKind.Z)


def test_elapsed_counts_from_game_start():
    clock = FakeClock()
    state = make_state(BlockKind.O, clock=clock)
    clock.advance(65.5)
    assert state.elapsed() == pytest.approx(65.5)


def test_default_rng_draws_valid_kinds():
    state = GameState()
    assert state.active.kind in set(BlockKind)
    assert state.next_kind in set(BlockKind)

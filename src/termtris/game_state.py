"""High level game state container and rules engine.

:class:`GameState` owns the board, the falling piece, the lookahead piece and
the score/level/timing counters.  It is not thread-safe: a single consumer
thread is expected to call its methods in event order.  No method blocks;
gravity only compares the injected clock against the stored interval.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Protocol, Sequence, TypeVar

from .board import Board
from .config import DEFAULT_CONFIG, GameConfig
from .tetromino import ActivePiece, BlockKind, preview_grid
from .utils import gravity_interval_ms, level_for_lines, line_clear_points


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Offsets tried in order when a rotation collides in place.
WALL_KICKS = ((0, 0), (-1, 0), (1, 0), (0, -1))

ALL_KINDS: Sequence[BlockKind] = tuple(BlockKind)


class Chooser(Protocol):
    """Anything offering ``random.Random.choice``."""

    def choice(self, seq: Sequence[T]) -> T: ...


class Phase(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass
class GameState:
    """Mutable state for one game session.

    ``rng`` picks piece kinds and ``clock`` returns seconds; both can be
    replaced for deterministic tests.  A fresh game is started on creation.
    """

    rng: Chooser = field(default_factory=random.Random, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    config: GameConfig = field(default=DEFAULT_CONFIG, repr=False)

    board: Board = field(init=False)
    active: ActivePiece = field(init=False)
    next_kind: BlockKind = field(init=False)
    score: int = field(init=False, default=0)
    level: int = field(init=False, default=1)
    lines_cleared: int = field(init=False, default=0)
    paused: bool = field(init=False, default=False)
    game_over: bool = field(init=False, default=False)
    gravity_interval_ms: int = field(init=False, default=0)
    started_at: float = field(init=False, default=0.0)
    last_drop: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        self.reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Discard everything and start a new game.

        Works from any phase.  The current piece is drawn before the next one.
        """

        self.board = Board()
        self.score = 0
        self.level = 1
        self.lines_cleared = 0
        self.paused = False
        self.game_over = False
        self.gravity_interval_ms = self._interval_for(self.level)
        now = self.clock()
        self.started_at = now
        self.last_drop = now
        current = self._random_kind()
        self.next_kind = self._random_kind()
        self.active = ActivePiece.spawn(current, self.board.width)
        LOGGER.info("New game: current=%s next=%s", current.value, self.next_kind.value)

    def toggle_pause(self) -> None:
        self.paused = not self.paused
        LOGGER.debug("Paused" if self.paused else "Resumed")

    # ------------------------------------------------------------------
    # Render contract
    # ------------------------------------------------------------------
    @property
    def phase(self) -> Phase:
        if self.game_over:
            return Phase.GAME_OVER
        if self.paused:
            return Phase.PAUSED
        return Phase.ACTIVE

    def elapsed(self) -> float:
        """Seconds since the game started, pauses included."""

        return self.clock() - self.started_at

    def next_preview(self) -> List[List[bool]]:
        return preview_grid(self.next_kind)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def move_left(self) -> bool:
        return self._shift(-1)

    def move_right(self) -> bool:
        return self._shift(1)

    def move_down(self) -> bool:
        """Soft drop one row.

        A successful descent scores one point and restarts the gravity timer.
        When the piece cannot descend it is locked immediately and ``False``
        is returned.
        """

        if not self._playing():
            return False
        if self.board.check_collision(self.active, 0, 1):
            self.lock()
            return False
        self.active.y += 1
        self.score += 1
        self.last_drop = self.clock()
        return True

    def hard_drop(self) -> int:
        """Drop the piece to its resting row, lock it and return rows fallen."""

        if not self._playing():
            return 0
        distance = 0
        while not self.board.check_collision(self.active, 0, 1):
            self.active.y += 1
            distance += 1
        self.lock()
        return distance

    def rotate_cw(self) -> bool:
        return self._rotate(clockwise=True)

    def rotate_ccw(self) -> bool:
        return self._rotate(clockwise=False)

    def step(self) -> bool:
        """Apply gravity if the interval has elapsed since the last drop.

        Returns ``True`` when a gravity drop (or lock) happened.
        """

        if not self._playing():
            return False
        now = self.clock()
        if (now - self.last_drop) * 1000.0 < self.gravity_interval_ms:
            return False
        if self.board.check_collision(self.active, 0, 1):
            self.lock()
        else:
            self.active.y += 1
        self.last_drop = now
        return True

    def lock(self) -> int:
        """Settle the active piece, score cleared rows and spawn the next one.

        Returns the number of rows cleared by this lock.
        """

        if not self._playing():
            return 0
        kind = self.active.kind
        stored = self.board.lock(kind, self.active.cells())
        LOGGER.debug("Locked %s at (%d, %d), %d cells stored", kind.value, self.active.x, self.active.y, stored)
        cleared = self.board.clear_full_lines()
        if cleared:
            self._award_lines(cleared)
        self._spawn_next()
        self.last_drop = self.clock()
        return cleared

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _playing(self) -> bool:
        return not (self.paused or self.game_over)

    def _random_kind(self) -> BlockKind:
        return self.rng.choice(ALL_KINDS)

    def _interval_for(self, level: int) -> int:
        return gravity_interval_ms(
            level,
            base_ms=self.config.base_gravity_ms,
            step_ms=self.config.gravity_step_ms,
            min_ms=self.config.min_gravity_ms,
        )

    def _shift(self, dx: int) -> bool:
        if not self._playing():
            return False
        if self.board.check_collision(self.active, dx, 0):
            return False
        self.active.x += dx
        return True

    def _rotate(self, clockwise: bool) -> bool:
        if not self._playing():
            return False
        trial = self.active.copy()
        if clockwise:
            trial.rotate_cw()
        else:
            trial.rotate_ccw()
        for dx, dy in WALL_KICKS:
            if not self.board.check_collision(trial, dx, dy):
                self.active = trial.moved(dx, dy)
                return True
        LOGGER.debug("Rotation of %s rejected", trial.kind.value)
        return False

    def _award_lines(self, cleared: int) -> None:
        points = line_clear_points(cleared, self.level)
        self.score += points
        self.lines_cleared += cleared
        LOGGER.info("Cleared %d row(s) for %d points. Score: %d", cleared, points, self.score)
        new_level = level_for_lines(self.lines_cleared, self.config.lines_per_level)
        if new_level != self.level:
            self.level = new_level
            self.gravity_interval_ms = self._interval_for(new_level)
            LOGGER.info("Level %d, gravity %dms", self.level, self.gravity_interval_ms)

    def _spawn_next(self) -> None:
        self.active = ActivePiece.spawn(self.next_kind, self.board.width)
        self.next_kind = self._random_kind()
        if self.board.check_collision(self.active, 0, 0):
            self.game_over = True
            LOGGER.info("Game over. Final score: %d", self.score)

"""curses front-end for the engine.

The module glues :class:`~termtris.game_state.GameState` to a terminal: it
maps keys to commands, starts the input and tick producers, and runs the
single consumer loop that drains events, draws one frame and paces itself.
Run with ``python -m termtris`` or the ``termtris`` console script.
"""

from __future__ import annotations

import curses
import logging
import queue
import select
import sys
import threading
from typing import Callable, Dict, Mapping, Optional, TextIO

from .board import Board
from .config import GameConfig, load_config
from .events import Command, Event, InputPoller, KeyReader, Ticker, drain
from .game_state import GameState
from .pacing import FramePacer
from .tetromino import BLOCK_COLORS, BlockKind
from .utils import format_duration, render_grid


LOGGER = logging.getLogger(__name__)

KEY_BINDINGS: Dict[int, Command] = {
    curses.KEY_LEFT: Command.MOVE_LEFT,
    curses.KEY_RIGHT: Command.MOVE_RIGHT,
    curses.KEY_DOWN: Command.SOFT_DROP,
    curses.KEY_UP: Command.ROTATE_CW,
    ord("z"): Command.ROTATE_CCW,
    ord("Z"): Command.ROTATE_CCW,
    ord(" "): Command.HARD_DROP,
    ord("p"): Command.PAUSE,
    ord("P"): Command.PAUSE,
    ord("r"): Command.RESET,
    ord("R"): Command.RESET,
    ord("q"): Command.QUIT,
    ord("Q"): Command.QUIT,
}

CONTROLS_HELP = (
    "<- -> : Move    v : Soft drop",
    "^ : Rotate CW   Z : Rotate CCW",
    "Space : Hard drop",
    "P : Pause  R : Restart  Q : Quit",
)

CELL = "[]"
EMPTY = "  "

# Layout, in terminal cells.
BOARD_TOP = 1
BOARD_LEFT = 1
BOARD_BOX_W = Board.width * 2 + 2
BOARD_BOX_H = Board.height + 2
PANEL_LEFT = BOARD_LEFT + BOARD_BOX_W + 2
PANEL_W = 36
NEXT_H = 6
STATS_H = 5
CONTROLS_H = 6
STATUS_H = 7
MIN_ROWS = BOARD_TOP + max(BOARD_BOX_H, NEXT_H + STATS_H + CONTROLS_H + STATUS_H)
MIN_COLS = PANEL_LEFT + PANEL_W

_CURSES_COLORS = {
    "cyan": curses.COLOR_CYAN,
    "yellow": curses.COLOR_YELLOW,
    "magenta": curses.COLOR_MAGENTA,
    "green": curses.COLOR_GREEN,
    "red": curses.COLOR_RED,
    "blue": curses.COLOR_BLUE,
}
_ORANGE_256 = 208

Palette = Mapping[BlockKind, int]


def init_palette() -> Dict[BlockKind, int]:
    """Register one colour pair per kind and return the attributes to use.

    Falls back to plain attributes when the terminal has no colour support.
    """

    if not curses.has_colors():
        return {kind: curses.A_REVERSE for kind in BlockKind}
    curses.start_color()
    curses.use_default_colors()
    palette: Dict[BlockKind, int] = {}
    for pair, kind in enumerate(BlockKind, start=1):
        name = BLOCK_COLORS[kind]
        if name == "orange":
            fg = _ORANGE_256 if curses.COLORS >= 256 else curses.COLOR_WHITE
        else:
            fg = _CURSES_COLORS[name]
        curses.init_pair(pair, fg, -1)
        palette[kind] = curses.color_pair(pair)
    return palette


def safe_addstr(win, y: int, x: int, text: str, attr: int = 0) -> None:
    """``addstr`` that ignores writes falling outside the window."""

    try:
        win.addstr(y, x, text, attr)
    except curses.error:
        pass


def draw_box(win, y: int, x: int, height: int, width: int, title: str = "") -> None:
    safe_addstr(win, y, x, "+" + "-" * (width - 2) + "+")
    for row in range(1, height - 1):
        safe_addstr(win, y + row, x, "|")
        safe_addstr(win, y + row, x + width - 1, "|")
    safe_addstr(win, y + height - 1, x, "+" + "-" * (width - 2) + "+")
    if title:
        safe_addstr(win, y, x + 2, title, curses.A_BOLD)


def draw_board(win, state: GameState, palette: Palette) -> None:
    """Render settled cells with the active piece overlaid."""

    draw_box(win, BOARD_TOP, BOARD_LEFT, BOARD_BOX_H, BOARD_BOX_W, " Tetris ")
    grid = render_grid(state.board, state.active)
    for y, row in enumerate(grid):
        for x, kind in enumerate(row):
            sy = BOARD_TOP + 1 + y
            sx = BOARD_LEFT + 1 + x * 2
            if kind is None:
                safe_addstr(win, sy, sx, EMPTY)
            else:
                safe_addstr(win, sy, sx, CELL, palette.get(kind, 0))


def draw_next(win, state: GameState, palette: Palette, top: int) -> None:
    draw_box(win, top, PANEL_LEFT, NEXT_H, PANEL_W, " Next ")
    attr = palette.get(state.next_kind, 0)
    for r, row in enumerate(state.next_preview()):
        for c, filled in enumerate(row):
            if filled:
                safe_addstr(win, top + 1 + r, PANEL_LEFT + 2 + c * 2, CELL, attr)


def draw_stats(win, state: GameState, top: int) -> None:
    draw_box(win, top, PANEL_LEFT, STATS_H, PANEL_W, " Stats ")
    safe_addstr(win, top + 1, PANEL_LEFT + 2, f"Score: {state.score}")
    safe_addstr(win, top + 2, PANEL_LEFT + 2, f"Level: {state.level}")
    safe_addstr(win, top + 3, PANEL_LEFT + 2, f"Lines: {state.lines_cleared}")


def draw_controls(win, top: int) -> None:
    draw_box(win, top, PANEL_LEFT, CONTROLS_H, PANEL_W, " Controls ")
    for i, line in enumerate(CONTROLS_HELP):
        safe_addstr(win, top + 1 + i, PANEL_LEFT + 2, line)


def draw_status(win, state: GameState, top: int) -> None:
    draw_box(win, top, PANEL_LEFT, STATUS_H, PANEL_W, " Status ")
    lines = [
        (f"Time: {format_duration(state.elapsed())}", 0),
        (f"Gravity: {state.gravity_interval_ms}ms", 0),
    ]
    if state.paused:
        lines.append((" PAUSED ", curses.A_BOLD))
    if state.game_over:
        lines.append((f" GAME OVER - Final score: {state.score} ", curses.A_BOLD))
        lines.append((" Press 'R' to restart or 'Q' to quit ", 0))
    for i, (text, attr) in enumerate(lines[: STATUS_H - 2]):
        safe_addstr(win, top + 1 + i, PANEL_LEFT + 2, text, attr)


def draw_frame(win, state: GameState, palette: Palette) -> None:
    """Draw one complete frame of ``state`` onto ``win``."""

    win.erase()
    rows, cols = win.getmaxyx()
    if rows < MIN_ROWS or cols < MIN_COLS:
        safe_addstr(win, 0, 0, f"Terminal too small: need {MIN_COLS}x{MIN_ROWS}")
        return
    draw_board(win, state, palette)
    top = BOARD_TOP
    draw_next(win, state, palette, top)
    top += NEXT_H
    draw_stats(win, state, top)
    top += STATS_H
    draw_controls(win, top)
    top += CONTROLS_H
    draw_status(win, state, top)


def curses_key_reader(
    win,
    lock: threading.Lock,
    *,
    stream: Optional[TextIO] = None,
    wait: Callable[..., tuple] = select.select,
) -> KeyReader:
    """Return a reader that waits on ``stream`` and then drains ``win``.

    The blocking wait happens outside curses; ``getch`` runs in nodelay mode
    and only while ``lock`` is held, the same lock that guards drawing.
    """

    source = stream if stream is not None else sys.stdin
    with lock:
        win.keypad(True)
        win.nodelay(True)

    def read_key(timeout: float) -> Optional[int]:
        ready, _, _ = wait([source], [], [], timeout)
        if not ready:
            return None
        with lock:
            key = win.getch()
        return None if key == -1 else key

    return read_key


class GameRunner:
    """Single consumer loop: drain events, draw, pace."""

    def __init__(
        self,
        screen,
        config: GameConfig,
        *,
        state: Optional[GameState] = None,
        read_key: Optional[KeyReader] = None,
        palette: Optional[Palette] = None,
        pacer: Optional[FramePacer] = None,
        screen_lock: Optional[threading.Lock] = None,
    ) -> None:
        self.screen = screen
        self.config = config
        self.state = state or GameState(config=config)
        self.palette: Palette = palette if palette is not None else {}
        self.events: "queue.Queue[Event]" = queue.Queue()
        self.pacer = pacer or FramePacer(config.frame_ms / 1000.0)
        self.screen_lock = screen_lock or threading.Lock()
        self._read_key = read_key
        self._input: Optional[InputPoller] = None
        self._ticker: Optional[Ticker] = None

    def start_producers(self) -> None:
        if self._read_key is None:
            raise RuntimeError("No key reader configured")
        self._input = InputPoller(
            self.events,
            self._read_key,
            KEY_BINDINGS,
            poll_timeout=self.config.input_poll_ms / 1000.0,
        )
        self._ticker = Ticker(self.events, self.config.tick_interval_ms / 1000.0)
        self._input.start()
        self._ticker.start()

    def stop_producers(self, timeout: float = 1.0) -> None:
        """Signal both producers and wait for them to exit."""

        producers = [p for p in (self._input, self._ticker) if p is not None]
        for producer in producers:
            producer.stop()
        for producer in producers:
            producer.join(timeout)
            if producer.is_alive():
                LOGGER.warning("Producer %s did not stop within %.1fs", producer.name, timeout)
        self._input = None
        self._ticker = None

    def render(self) -> None:
        with self.screen_lock:
            draw_frame(self.screen, self.state, self.palette)
            self.screen.refresh()

    def run_once(self) -> bool:
        """Process queued events and draw; ``False`` once quit was requested."""

        running = drain(self.events, self.state)
        if running:
            self.render()
        return running

    def run(self) -> None:
        self.start_producers()
        LOGGER.info("Game started")
        try:
            while self.run_once():
                self.pacer.wait()
        finally:
            self.stop_producers()
        LOGGER.info("Game stopped. Score: %d", self.state.score)


def _run(stdscr, config: GameConfig) -> None:
    curses.curs_set(0)
    palette = init_palette()
    # Keys are read from a dedicated 1x1 window so the input thread never
    # refreshes the main screen; curses calls on both threads share one lock.
    input_win = curses.newwin(1, 1, 0, 0)
    screen_lock = threading.Lock()
    runner = GameRunner(
        stdscr,
        config,
        read_key=curses_key_reader(input_win, screen_lock),
        palette=palette,
        screen_lock=screen_lock,
    )
    runner.run()


def configure_logging(config: GameConfig) -> None:
    """Send log records to ``config.log_path``; the terminal belongs to curses."""

    if config.log_path:
        logging.basicConfig(
            filename=config.log_path,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def main() -> None:
    config = load_config()
    configure_logging(config)
    curses.wrapper(_run, config)


if __name__ == "__main__":  # pragma: no cover - manual execution only
    main()

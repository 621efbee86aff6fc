"""Terminal falling-block puzzle game."""

import logging

from .board import Board
from .tetromino import ActivePiece, BlockKind, rotation_states, shape_cells
from .game_state import GameState, Phase
from .config import GameConfig, load_config
from .events import Command, InputEvent, TickEvent, dispatch
from .utils import gravity_interval_ms, line_clear_points, render_grid

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Board",
    "ActivePiece",
    "BlockKind",
    "GameState",
    "Phase",
    "GameConfig",
    "Command",
    "InputEvent",
    "TickEvent",
    "dispatch",
    "load_config",
    "gravity_interval_ms",
    "line_clear_points",
    "render_grid",
    "rotation_states",
    "shape_cells",
]

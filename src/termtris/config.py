"""Runtime tunables for the terminal game.

Defaults reproduce the classic feel; a few values may be overridden through
``TERMTRIS_*`` environment variables.  Board size is fixed and deliberately
not part of the configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .utils import BASE_GRAVITY_MS, GRAVITY_STEP_MS, LINES_PER_LEVEL, MIN_GRAVITY_MS


@dataclass(frozen=True)
class GameConfig:
    tick_interval_ms: int = 20
    input_poll_ms: int = 50
    frame_ms: int = 16
    base_gravity_ms: int = BASE_GRAVITY_MS
    gravity_step_ms: int = GRAVITY_STEP_MS
    min_gravity_ms: int = MIN_GRAVITY_MS
    lines_per_level: int = LINES_PER_LEVEL
    log_path: Optional[str] = None


DEFAULT_CONFIG = GameConfig()


def _positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> GameConfig:
    """Build a :class:`GameConfig` from ``environ`` (defaults to ``os.environ``).

    Recognised variables:

    ``TERMTRIS_TICK_MS``
        Period of the tick producer in milliseconds.
    ``TERMTRIS_FRAME_MS``
        Target frame period in milliseconds.
    ``TERMTRIS_LOG``
        Path of a log file.  Logging is disabled when unset.

    Raises:
        ValueError: If a numeric variable is not a positive integer.
    """

    env = os.environ if environ is None else environ
    return replace(
        DEFAULT_CONFIG,
        tick_interval_ms=_positive_int(env, "TERMTRIS_TICK_MS", DEFAULT_CONFIG.tick_interval_ms),
        frame_ms=_positive_int(env, "TERMTRIS_FRAME_MS", DEFAULT_CONFIG.frame_ms),
        log_path=env.get("TERMTRIS_LOG") or None,
    )

"""Input and tick producers feeding the single game-update queue.

Two daemon threads write into one :class:`queue.Queue`: :class:`InputPoller`
waits on a key reader with a short timeout and :class:`Ticker` emits a wake
signal at a fixed cadence.  Only the consumer loop touches the engine.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Union

from .game_state import GameState


LOGGER = logging.getLogger(__name__)


class Command(str, Enum):
    """Discrete player commands, independent of physical keys."""

    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    SOFT_DROP = "soft_drop"
    HARD_DROP = "hard_drop"
    ROTATE_CW = "rotate_cw"
    ROTATE_CCW = "rotate_ccw"
    PAUSE = "pause"
    RESET = "reset"
    QUIT = "quit"


@dataclass(frozen=True)
class InputEvent:
    command: Command


@dataclass(frozen=True)
class TickEvent:
    pass


Event = Union[InputEvent, TickEvent]

# A reader waits up to ``timeout`` seconds and returns a key code or ``None``.
KeyReader = Callable[[float], Optional[int]]


_HANDLERS: Dict[Command, Callable[[GameState], object]] = {
    Command.MOVE_LEFT: GameState.move_left,
    Command.MOVE_RIGHT: GameState.move_right,
    Command.SOFT_DROP: GameState.move_down,
    Command.HARD_DROP: GameState.hard_drop,
    Command.ROTATE_CW: GameState.rotate_cw,
    Command.ROTATE_CCW: GameState.rotate_ccw,
    Command.PAUSE: GameState.toggle_pause,
    Command.RESET: GameState.reset,
}


def dispatch(state: GameState, event: Event) -> bool:
    """Apply ``event`` to ``state``.

    Returns ``False`` when the event asks the loop to quit.
    """

    if isinstance(event, TickEvent):
        state.step()
        return True
    if event.command is Command.QUIT:
        return False
    _HANDLERS[event.command](state)
    return True


class InputPoller(threading.Thread):
    """Translate raw key codes from ``read_key`` into queued commands."""

    def __init__(
        self,
        events: "queue.Queue[Event]",
        read_key: KeyReader,
        bindings: Mapping[int, Command],
        *,
        poll_timeout: float = 0.05,
    ) -> None:
        super().__init__(name="termtris-input", daemon=True)
        self._events = events
        self._read_key = read_key
        self._bindings = bindings
        self._poll_timeout = poll_timeout
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def poll_once(self) -> Optional[Command]:
        """Wait for one key and enqueue its command if it is bound."""

        key = self._read_key(self._poll_timeout)
        if key is None:
            return None
        command = self._bindings.get(key)
        if command is None:
            LOGGER.debug("Ignoring unbound key %r", key)
            return None
        self._events.put(InputEvent(command))
        return command

    def run(self) -> None:
        while not self._stop_event.is_set():
            if self.poll_once() is Command.QUIT:
                break


class Ticker(threading.Thread):
    """Emit a :class:`TickEvent` every ``interval`` seconds until stopped."""

    def __init__(self, events: "queue.Queue[Event]", interval: float) -> None:
        super().__init__(name="termtris-tick", daemon=True)
        self._events = events
        self._interval = interval
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()

    def run(self) -> None:
        while not self._stop_event.is_set():
            self._events.put(TickEvent())
            self._stop_event.wait(self._interval)


def drain(events: "queue.Queue[Event]", state: GameState) -> bool:
    """Dispatch every event queued right now, in arrival order.

    Returns ``False`` as soon as a quit command is seen; later events are
    left in the queue.
    """

    while True:
        try:
            event = events.get_nowait()
        except queue.Empty:
            return True
        if not dispatch(state, event):
            return False

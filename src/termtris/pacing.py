"""Frame-period pacing for the render loop."""

from __future__ import annotations

import time
from typing import Callable, Optional


class FramePacer:
    """Sleep away whatever is left of a fixed frame period.

    Slack never accumulates: if a frame overruns its budget the next one
    starts immediately and the schedule restarts from that moment.
    """

    def __init__(
        self,
        frame_seconds: float,
        *,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        if frame_seconds <= 0:
            raise ValueError("frame_seconds must be positive")
        self.frame_seconds = frame_seconds
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._frame_start = self._clock()
        self.overruns = 0

    def wait(self) -> float:
        """Block until the current frame period ends; return seconds slept."""

        spent = self._clock() - self._frame_start
        remaining = self.frame_seconds - spent
        slept = 0.0
        if remaining > 0:
            self._sleep(remaining)
            slept = remaining
        else:
            self.overruns += 1
        self._frame_start = self._clock()
        return slept

"""
Countdown - Once-per-second ticker for time-attack runs.

The countdown never touches run state. It calls a tick callback with the
generation it was armed for; the engine applies the tick under its own
lock and ignores generations that are no longer current. stop() bumps the
generation, so a tick that already fired cannot reach a later run.
"""

from __future__ import annotations
import threading
from typing import Callable


class Countdown:
    """
    Re-arming one-second timer.

    Usage:
        countdown = Countdown(on_tick=engine._on_tick)
        generation = countdown.start()
        ...
        countdown.stop()
    """

    def __init__(self, on_tick: Callable[[int], bool], interval: float = 1.0):
        """
        Args:
            on_tick: Called with the generation; returns False to stop ticking
            interval: Seconds between ticks
        """
        self.on_tick = on_tick
        self.interval = interval
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._generation = 0
        self._running = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> int:
        """Stop any previous countdown and start a new one."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._running = True
            self._arm(self._generation)
            return self._generation

    def stop(self):
        """Stop ticking. Safe to call repeatedly and from the tick callback."""
        with self._lock:
            self._cancel_timer()
            if self._running:
                self._generation += 1
            self._running = False

    def _cancel_timer(self):
        if self._timer:
            self._timer.cancel()
            self._timer = None

    def _arm(self, generation: int):
        self._timer = threading.Timer(self.interval, self._fire, args=(generation,))
        self._timer.daemon = True
        self._timer.start()

    def _fire(self, generation: int):
        with self._lock:
            if not self._running or generation != self._generation:
                return

        keep_going = self.on_tick(generation)

        with self._lock:
            if keep_going and self._running and generation == self._generation:
                self._arm(generation)
            elif generation == self._generation:
                self._running = False
                self._timer = None

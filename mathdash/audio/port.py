"""
Audio Port - Injected sound collaborator.

Lifecycle:
- open() is lazy and runs at most once (first cue opens the port)
- close() is idempotent
- every play_* call is a pure notification; nothing is returned
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import logging
import sys
import threading
from typing import Iterable, TextIO

from .cues import SoundCue, CueName

logger = logging.getLogger(__name__)


class AudioPort(ABC):
    """
    Abstract sound output.

    Subclasses implement the play_* hooks. open()/close() may be
    overridden to acquire and release a device.
    """

    def __init__(self):
        self._opened = False
        self._closed = False
        self._lock = threading.Lock()

    def open(self):
        """Acquire the output device. Runs once; later calls do nothing."""
        with self._lock:
            if self._opened:
                return
            self._opened = True
            self._closed = False
            self._on_open()

    def close(self):
        """Release the output device. Safe to call repeatedly."""
        with self._lock:
            if not self._opened or self._closed:
                return
            self._closed = True
            self._opened = False
            self._on_close()

    def _on_open(self):
        pass

    def _on_close(self):
        pass

    @abstractmethod
    def play_correct(self): ...

    @abstractmethod
    def play_wrong(self): ...

    @abstractmethod
    def play_combo(self, level: int): ...

    @abstractmethod
    def play_shield(self): ...

    @abstractmethod
    def play_speed_star(self): ...

    @abstractmethod
    def play_finish(self): ...

    @abstractmethod
    def play_boss(self): ...

    def play(self, cue: SoundCue):
        """Dispatch a single cue to its hook."""
        self.open()
        if cue.name == CueName.COMBO:
            self.play_combo(cue.level)
            return
        handlers = {
            CueName.CORRECT: self.play_correct,
            CueName.WRONG: self.play_wrong,
            CueName.SHIELD: self.play_shield,
            CueName.SPEED_STAR: self.play_speed_star,
            CueName.FINISH: self.play_finish,
            CueName.BOSS: self.play_boss,
        }
        handler = handlers.get(cue.name)
        if handler:
            handler()


class NullAudio(AudioPort):
    """Silent port (server default)."""

    def play_correct(self):
        pass

    def play_wrong(self):
        pass

    def play_combo(self, level: int):
        pass

    def play_shield(self):
        pass

    def play_speed_star(self):
        pass

    def play_finish(self):
        pass

    def play_boss(self):
        pass


class BellAudio(NullAudio):
    """
    Terminal bell for the CLI.

    Only the events a player should notice without looking ring the bell.
    """

    def __init__(self, stream: TextIO | None = None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _ring(self, count: int = 1):
        self.stream.write("\a" * count)
        self.stream.flush()

    def play_wrong(self):
        self._ring()

    def play_boss(self):
        self._ring()

    def play_finish(self):
        self._ring(2)


def _safe_play(port: AudioPort, cue: SoundCue):
    try:
        port.play(cue)
    except Exception as e:
        logger.warning("Audio cue %s failed: %s", cue.name.value, e)


def play_cues(port: AudioPort | None, cues: Iterable[SoundCue]):
    """
    Fire-and-forget a batch of cues.

    Immediate cues play inline; delayed cues are scheduled on daemon timers.
    Failures are logged and ignored.
    """
    if port is None:
        return
    for cue in cues:
        if cue.delay_ms <= 0:
            _safe_play(port, cue)
            continue
        timer = threading.Timer(cue.delay_ms / 1000.0, _safe_play, args=(port, cue))
        timer.daemon = True
        timer.start()

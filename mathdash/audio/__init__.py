"""
Audio - Sound notifications for game events.

The engine never synthesizes sound itself. The reducer emits SoundCues,
and the engine hands them to an injected AudioPort. Audio is
fire-and-forget: failures are logged and never affect game state.
"""

from .cues import SoundCue, CueName
from .port import AudioPort, NullAudio, BellAudio, play_cues

__all__ = [
    "SoundCue",
    "CueName",
    "AudioPort",
    "NullAudio",
    "BellAudio",
    "play_cues",
]

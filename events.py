"""
events.py
Messages delivered to PlaybackController.dispatch()
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MediaOpened:
    """The engine opened a track; duration is None when unknown."""
    track_id: int
    duration: Optional[float]


@dataclass(frozen=True)
class MediaEnded:
    track_id: int


@dataclass(frozen=True)
class ProgressTick:
    pass


@dataclass(frozen=True)
class SeekStarted:
    pass


@dataclass(frozen=True)
class SeekMoved:
    position: float  # seconds


@dataclass(frozen=True)
class SeekReleased:
    position: float  # seconds


@dataclass(frozen=True)
class ScanFinished:
    generation: int
    folder: str
    files: tuple


@dataclass(frozen=True)
class ScanFailed:
    generation: int
    folder: str
    error: Exception

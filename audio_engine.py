"""
audio_engine.py
Playback engine for the player window, built on pygame.mixer
MP3 and WAV are handed to pygame directly; WMA is converted with pydub
"""

import io
import os
import time
from collections import deque

import pygame.mixer
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError
from mutagen import MutagenError
from mutagen.mp3 import MP3
from mutagen.asf import ASF
from mutagen.wave import WAVE

from events import MediaOpened, MediaEnded
from logging_config import get_logger, EngineError

logger = get_logger('engine')

# Formats pygame can open itself; anything else goes through pydub
NATIVE_FORMATS = {'.mp3', '.wav'}
# Formats pygame can start from an offset with play(start=...)
NATIVE_SEEK_FORMATS = {'.mp3'}

_DURATION_READERS = {
    '.mp3': MP3,
    '.wav': WAVE,
    '.wma': ASF,
}


def probe_duration(file_path):
    """Track length in seconds read from the file's headers, or None"""
    reader = _DURATION_READERS.get(os.path.splitext(file_path)[1].lower())
    if reader is None:
        return None
    try:
        length = reader(file_path).info.length
    except (MutagenError, OSError) as e:
        logger.warning(f"Cannot read duration of {file_path}: {e}")
        return None
    return length if length and length > 0 else None


def format_time(seconds):
    """Format seconds as M:SS"""
    seconds = max(0, seconds or 0)
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


class PygameEngine:
    """Media element used by PlaybackController.

    Notifications are queued and handed out by poll(), which the window
    calls from its timer, so MediaOpened for a track always comes out
    before its MediaEnded.
    """

    def __init__(self, clock=time.time, init_mixer=True):
        if init_mixer:
            pygame.mixer.init(frequency=44100, size=-16, channels=2, buffer=512)
        self._clock = clock
        self._events = deque()

        self.current_file = None
        self.track_id = None
        self.duration = None
        self.is_playing = False
        self.is_paused = False
        self._started = False
        self._ended = False
        self._segment = None  # decoded pydub audio for non-native formats
        self.play_start_time = 0.0
        self.pause_position = 0.0

    # ------------------------------------------------------------------
    # Source
    # ------------------------------------------------------------------

    def open(self, file_path, track_id):
        """Make file_path the current source. Raises EngineError."""
        self.stop()
        self.current_file = file_path
        self.track_id = track_id
        self._started = False
        self._ended = False
        self._segment = None
        self.duration = probe_duration(file_path)

        ext = os.path.splitext(file_path)[1].lower()
        try:
            if ext in NATIVE_FORMATS:
                pygame.mixer.music.load(file_path)
            else:
                self._segment = AudioSegment.from_file(file_path, format=ext.lstrip('.'))
                if self.duration is None:
                    self.duration = len(self._segment) / 1000
        except (pygame.error, CouldntDecodeError, OSError) as e:
            logger.error(f"Cannot open {file_path}: {e}")
            self.current_file = None
            raise EngineError(f"Cannot open {os.path.basename(file_path)}: {e}") from e

        logger.debug(f"Opened {file_path} ({format_time(self.duration)})")
        self._events.append(MediaOpened(track_id, self.duration))

    @staticmethod
    def _wav_buffer(segment):
        wav_io = io.BytesIO()
        segment.export(wav_io, format='wav')
        wav_io.seek(0)
        return wav_io

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def play(self):
        """Start the opened source, or resume it if paused"""
        if not self.current_file:
            return
        if self.is_paused:
            pygame.mixer.music.unpause()
            self.play_start_time = self._clock() - self.pause_position
        else:
            self._start_at(0.0)
        self.is_playing = True
        self.is_paused = False

    def pause(self):
        if self.is_playing:
            self.pause_position = self.position()
            pygame.mixer.music.pause()
            self.is_playing = False
            self.is_paused = True

    def stop(self):
        pygame.mixer.music.stop()
        self.is_playing = False
        self.is_paused = False
        self.pause_position = 0.0
        self.play_start_time = 0.0

    def seek(self, seconds):
        """Jump to seconds, keeping the paused/playing state"""
        if not self.current_file:
            return
        if self.duration:
            seconds = min(seconds, self.duration)
        seconds = max(0.0, seconds)
        was_paused = self.is_paused

        self._start_at(seconds)
        if was_paused:
            pygame.mixer.music.pause()
            self.pause_position = seconds
        else:
            self.is_playing = True
        logger.debug(f"Seeked to {seconds:.1f}s")

    def _start_at(self, seconds):
        ext = os.path.splitext(self.current_file)[1].lower()
        try:
            if seconds <= 0:
                if self._segment is not None:
                    pygame.mixer.music.load(self._wav_buffer(self._segment), 'wav')
                pygame.mixer.music.play()
            elif ext in NATIVE_SEEK_FORMATS:
                pygame.mixer.music.play(0, seconds)
            else:
                # Re-slice from the seek position for formats pygame can't seek
                if self._segment is None:
                    self._segment = AudioSegment.from_file(self.current_file, format=ext.lstrip('.'))
                audio_slice = self._segment[int(seconds * 1000):]
                pygame.mixer.music.load(self._wav_buffer(audio_slice), 'wav')
                pygame.mixer.music.play()
        except (pygame.error, CouldntDecodeError, OSError) as e:
            logger.error(f"Cannot play {self.current_file}: {e}")
            raise EngineError(f"Cannot play {os.path.basename(self.current_file)}: {e}") from e
        self.play_start_time = self._clock() - seconds
        self._started = True
        self._ended = False

    def position(self):
        """Current playback position in seconds"""
        if self.is_paused:
            return self.pause_position
        if self.is_playing:
            elapsed = self._clock() - self.play_start_time
            return min(elapsed, self.duration) if self.duration else elapsed
        return 0.0

    def set_volume(self, volume):
        """Set volume level (0.0 to 1.0)"""
        pygame.mixer.music.set_volume(max(0.0, min(1.0, volume)))

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def poll(self):
        """Drain queued notifications, adding MediaEnded once the mixer stops"""
        if (self.is_playing and self._started and not self._ended
                and not pygame.mixer.music.get_busy()):
            self._ended = True
            self.is_playing = False
            self._events.append(MediaEnded(self.track_id))
        drained = list(self._events)
        self._events.clear()
        return drained

    def close(self):
        self.stop()
        pygame.mixer.quit()

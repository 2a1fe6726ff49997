"""
controller.py
Playlist and playback state machine for the player window

PlaybackController owns all player state and talks to two collaborators:

* an engine (see audio_engine.PygameEngine): open(path, track_id), play(),
  pause(), seek(seconds), position(), set_volume(level)
* a view (see ui.PlayerWindow): the text, button, list and progress setters
  called below

Neither collaborator is imported here, so the controller runs headless.
Everything is expected to run on one thread; asynchronous results come in
through dispatch().
"""

import random
from dataclasses import dataclass, field
from enum import Enum

import events
from logging_config import get_logger, EngineError, FolderScanError
from playlist import AUDIO_EXTENSIONS, ShuffleQueue, scan_folder, shuffled, sort_key, track_title

logger = get_logger('controller')

NO_FILES_NOTICE = "No audio files found in this folder."
NO_FOLDER_TEXT = "No folder selected"
NOTHING_PLAYING_TEXT = "Now Playing: None"
LOADING_TEXT = "Loading..."


class ShufflePolicy(Enum):
    QUEUE = "queue"        # random draws without repeats, order untouched
    REORDER = "reorder"    # playlist itself is shuffled / re-sorted


class PlaybackStatus(Enum):
    NO_PLAYLIST = "no playlist"
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass
class PlayerState:
    """Per-window player state."""
    playlist: list[str] = field(default_factory=list)
    current_index: int = 0
    shuffle_enabled: bool = False
    is_playing: bool = False
    folder: str | None = None
    # Set once the engine has accepted the current file
    track_loaded: bool = False
    # Set once MediaOpened arrives for the current track
    track_opened: bool = False
    duration: float | None = None
    seeking: bool = False
    # Bumped on every folder request / track start
    generation: int = 0
    track_id: int = 0

    @property
    def current_track(self):
        if not self.playlist:
            return None
        return self.playlist[self.current_index]

    @property
    def status(self) -> PlaybackStatus:
        if not self.playlist:
            return PlaybackStatus.NO_PLAYLIST
        if self.is_playing:
            return PlaybackStatus.PLAYING
        if self.track_loaded:
            return PlaybackStatus.PAUSED
        return PlaybackStatus.STOPPED


class PlaybackController:
    def __init__(self, engine, view, shuffle_policy=ShufflePolicy.QUEUE,
                 extensions=AUDIO_EXTENSIONS, rng=None):
        self.engine = engine
        self.view = view
        self.shuffle_policy = ShufflePolicy(shuffle_policy)
        self.extensions = tuple(extensions)
        self.rng = rng or random.Random()
        self.state = PlayerState()
        self.shuffle_queue = ShuffleQueue(self.rng)

        self._handlers = {
            events.MediaOpened: self._on_media_opened,
            events.MediaEnded: self._on_media_ended,
            events.ProgressTick: self._on_progress_tick,
            events.SeekStarted: self._on_seek_started,
            events.SeekMoved: self._on_seek_moved,
            events.SeekReleased: self._on_seek_released,
            events.ScanFinished: self._on_scan_finished,
            events.ScanFailed: self._on_scan_failed,
        }

    # ------------------------------------------------------------------
    # Event intake
    # ------------------------------------------------------------------

    def dispatch(self, event):
        """Single entry point for engine, slider, timer and scan events."""
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event: {event!r}")
        handler(event)

    # ------------------------------------------------------------------
    # Folder loading
    # ------------------------------------------------------------------

    def request_folder(self, folder) -> int:
        """Start loading a folder; returns the generation its scan must carry.

        Any scan still outstanding from an earlier request is superseded.
        """
        self.state.generation += 1
        self.view.set_folder_text(f"Current folder: {folder}")
        self.view.set_now_playing_text(LOADING_TEXT)
        logger.debug(f"Folder request {self.state.generation}: {folder}")
        return self.state.generation

    def scan(self, folder):
        return scan_folder(folder, self.extensions)

    def load_folder(self, folder):
        """Scan a folder and apply the result without leaving this thread."""
        generation = self.request_folder(folder)
        try:
            files = self.scan(folder)
        except FolderScanError as e:
            self.dispatch(events.ScanFailed(generation, folder, e))
            return
        self.dispatch(events.ScanFinished(generation, folder, tuple(files)))

    def _on_scan_finished(self, event):
        if event.generation != self.state.generation:
            logger.debug(f"Dropping stale scan of {event.folder}")
            return
        self.state.playlist = list(event.files)
        self.state.current_index = 0
        self.view.set_tracks([track_title(p) for p in self.state.playlist])

        if not self.state.playlist:
            self.state.folder = None
            self.shuffle_queue.clear()
            self.state.duration = None
            self.state.seeking = False
            self.view.stop_progress_timer()
            logger.info(f"No audio files in {event.folder}")
            self.view.show_notice(NO_FILES_NOTICE)
            self.view.set_folder_text(NO_FOLDER_TEXT)
            self.view.set_now_playing_text(NOTHING_PLAYING_TEXT)
            return

        self.state.folder = event.folder
        logger.info(f"Loaded {len(self.state.playlist)} tracks from {event.folder}")
        if self.state.shuffle_enabled and self.shuffle_policy is ShufflePolicy.REORDER:
            self.state.playlist = shuffled(self.state.playlist, self.rng)
            self.view.set_tracks([track_title(p) for p in self.state.playlist])
        self.initialize_shuffle_queue()
        self.play_current_track()

    def _on_scan_failed(self, event):
        if event.generation != self.state.generation:
            return
        logger.error(f"Scan of {event.folder} failed: {event.error}")
        self.view.show_error(str(event.error))
        if self.state.folder:
            self.view.set_folder_text(f"Current folder: {self.state.folder}")
            self.update_now_playing()
        else:
            self.view.set_folder_text(NO_FOLDER_TEXT)
            self.view.set_now_playing_text(NOTHING_PLAYING_TEXT)

    # ------------------------------------------------------------------
    # Shuffle
    # ------------------------------------------------------------------

    def initialize_shuffle_queue(self):
        """Queue every index except the current one."""
        exclude = self.state.current_index if self.state.playlist else None
        self.shuffle_queue.refill(len(self.state.playlist), exclude)

    def _draw_shuffled_index(self):
        if not self.shuffle_queue:
            self.initialize_shuffle_queue()
        if not self.shuffle_queue:
            # Single-track playlist: nothing else to pick
            return self.state.current_index
        return self.shuffle_queue.draw()

    def set_shuffle(self, enabled):
        enabled = bool(enabled)
        if enabled == self.state.shuffle_enabled:
            return
        self.state.shuffle_enabled = enabled
        logger.debug(f"Shuffle {'on' if enabled else 'off'} ({self.shuffle_policy.value})")

        if self.shuffle_policy is ShufflePolicy.QUEUE:
            if enabled:
                self.initialize_shuffle_queue()
            return

        if not self.state.playlist:
            return
        if enabled:
            self.state.playlist = shuffled(self.state.playlist, self.rng)
        else:
            self.state.playlist = sorted(self.state.playlist, key=sort_key)
        self.state.current_index = 0
        self.view.set_tracks([track_title(p) for p in self.state.playlist])
        self.play_current_track()

    def _shuffle_draws(self):
        return self.state.shuffle_enabled and self.shuffle_policy is ShufflePolicy.QUEUE

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def play_current_track(self):
        track = self.state.current_track
        if track is None:
            return
        self.state.track_id += 1
        self.state.track_loaded = False
        self.state.track_opened = False
        self.state.duration = None
        self.state.seeking = False
        self.state.is_playing = False
        self.view.stop_progress_timer()

        logger.info(f"Playing {track}")
        try:
            self.engine.open(track, self.state.track_id)
        except EngineError:
            self.view.set_playing(False)
            raise
        self.state.track_loaded = True
        self.engine.play()
        self.state.is_playing = True
        self.view.set_playing(True)
        self.update_now_playing()

    def update_now_playing(self):
        track = self.state.current_track
        if track is None:
            self.view.set_now_playing_text(NOTHING_PLAYING_TEXT)
            return
        self.view.set_now_playing_text(f"Now Playing: {track_title(track)}")
        self.view.highlight_track(self.state.current_index)

    def toggle_play_pause(self):
        """Pause or resume; retries the current track if it never opened"""
        if not self.state.playlist:
            return
        if not self.state.track_loaded:
            self.play_current_track()
            return
        if self.state.is_playing:
            self.engine.pause()
            self.state.is_playing = False
        else:
            self.engine.play()
            self.state.is_playing = True
        self.view.set_playing(self.state.is_playing)

    def next_track(self):
        if not self.state.playlist:
            return
        if self._shuffle_draws():
            self.state.current_index = self._draw_shuffled_index()
        else:
            self.state.current_index = (self.state.current_index + 1) % len(self.state.playlist)
        self.play_current_track()

    def previous_track(self):
        """Step back one track.

        Shuffle draws have no history: with the queue policy this picks
        another random track, exactly like next_track().
        """
        if not self.state.playlist:
            return
        if self._shuffle_draws():
            self.state.current_index = self._draw_shuffled_index()
        else:
            self.state.current_index -= 1
            if self.state.current_index < 0:
                self.state.current_index = len(self.state.playlist) - 1
        self.play_current_track()

    def play_index(self, index):
        if not 0 <= index < len(self.state.playlist):
            return
        self.state.current_index = index
        self.shuffle_queue.discard(index)
        self.play_current_track()

    def set_volume(self, percent):
        """Mirror a 0-100 slider value into the engine's 0.0-1.0 volume"""
        percent = max(0, min(100, percent))
        self.engine.set_volume(percent / 100)

    # ------------------------------------------------------------------
    # Engine notifications
    # ------------------------------------------------------------------

    def _is_current(self, event):
        if event.track_id != self.state.track_id:
            logger.debug(f"Dropping {type(event).__name__} for stale track {event.track_id}")
            return False
        return True

    def _on_media_opened(self, event):
        if not self._is_current(event):
            return
        self.state.track_opened = True
        self.state.duration = event.duration
        if event.duration:
            self.view.set_progress_range(event.duration)
            self.view.set_progress(0.0)
            self.view.start_progress_timer()

    def _on_media_ended(self, event):
        if not self._is_current(event):
            return
        if not self.state.track_opened:
            logger.warning(f"Ignoring end of track {event.track_id} before it opened")
            return
        self.view.stop_progress_timer()
        self.next_track()

    # ------------------------------------------------------------------
    # Progress and seeking
    # ------------------------------------------------------------------

    def _on_progress_tick(self, event):
        if self.state.seeking or not self.state.duration:
            return
        self.view.set_progress(self.engine.position())

    def _on_seek_started(self, event):
        self.state.seeking = True

    def _on_seek_moved(self, event):
        if self.state.seeking and self.state.duration:
            self.engine.seek(event.position)

    def _on_seek_released(self, event):
        self.state.seeking = False
        if self.state.duration:
            self.engine.seek(event.position)

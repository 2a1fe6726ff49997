import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from controller import PlaybackController, ShufflePolicy
from logging_config import EngineError


class FakeEngine:
    """Records the commands PlaybackController sends to the engine."""

    def __init__(self):
        self.opened = []
        self.commands = []
        self.seeks = []
        self.volume = None
        self.current_position = 0.0
        self.fail_open = False

    def open(self, path, track_id):
        if self.fail_open:
            raise EngineError(f"Cannot open {path}")
        self.opened.append((path, track_id))

    def play(self):
        self.commands.append('play')

    def pause(self):
        self.commands.append('pause')

    def seek(self, seconds):
        self.seeks.append(seconds)

    def position(self):
        return self.current_position

    def set_volume(self, level):
        self.volume = level

    @property
    def last_opened(self):
        return self.opened[-1][0] if self.opened else None

    @property
    def last_track_id(self):
        return self.opened[-1][1] if self.opened else None


class FakeView:
    """Keeps the last value of every display the controller drives."""

    def __init__(self):
        self.folder_text = None
        self.now_playing = None
        self.playing = None
        self.tracks = []
        self.highlighted = None
        self.notices = []
        self.errors = []
        self.progress_range = None
        self.progress_updates = []
        self.timer_running = False

    def set_folder_text(self, text):
        self.folder_text = text

    def set_now_playing_text(self, text):
        self.now_playing = text

    def set_playing(self, playing):
        self.playing = playing

    def set_tracks(self, titles):
        self.tracks = list(titles)

    def highlight_track(self, index):
        self.highlighted = index

    def show_notice(self, text):
        self.notices.append(text)

    def show_error(self, text):
        self.errors.append(text)

    def set_progress_range(self, duration):
        self.progress_range = duration

    def set_progress(self, position):
        self.progress_updates.append(position)

    def start_progress_timer(self):
        self.timer_running = True

    def stop_progress_timer(self):
        self.timer_running = False


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def view():
    return FakeView()


@pytest.fixture
def make_controller(engine, view):
    def _make(policy=ShufflePolicy.QUEUE, seed=1234):
        return PlaybackController(engine, view, shuffle_policy=policy,
                                  rng=random.Random(seed))
    return _make


@pytest.fixture
def controller(make_controller):
    return make_controller()


@pytest.fixture
def music_dir(tmp_path):
    """A folder with three playable tracks, a text file and a nested track."""
    folder = tmp_path / "music"
    folder.mkdir()
    (folder / "b_second.MP3").touch()
    (folder / "a_first.wav").touch()
    (folder / "c_third.wma").touch()
    (folder / "notes.txt").touch()
    (folder / "cover.jpg").touch()
    (folder / "sub").mkdir()
    (folder / "sub" / "nested.mp3").touch()
    return folder


@pytest.fixture
def make_music_dir(tmp_path):
    def _make(names, name="tracks"):
        folder = tmp_path / name
        folder.mkdir()
        for n in names:
            (folder / n).touch()
        return folder
    return _make

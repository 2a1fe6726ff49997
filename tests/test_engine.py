import io

import pytest

import audio_engine
from audio_engine import PygameEngine, format_time
from events import MediaOpened, MediaEnded
from logging_config import EngineError


class FakeMusic:
    """Stands in for pygame.mixer.music."""

    def __init__(self):
        self.calls = []
        self.loaded = None
        self.busy = False
        self.volume = None
        self.fail_load = False

    def load(self, source, namehint=""):
        if self.fail_load:
            raise audio_engine.pygame.error("cannot open")
        self.loaded = source
        self.calls.append(('load', namehint))

    def play(self, loops=0, start=0.0):
        self.busy = True
        self.calls.append(('play', start))

    def pause(self):
        self.calls.append(('pause',))

    def unpause(self):
        self.calls.append(('unpause',))

    def stop(self):
        self.busy = False
        self.calls.append(('stop',))

    def set_volume(self, value):
        self.volume = value

    def get_busy(self):
        return self.busy


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeSegment:
    def __init__(self, length_ms=90000):
        self.length_ms = length_ms

    def __len__(self):
        return self.length_ms

    def __getitem__(self, item):
        return FakeSegment(self.length_ms - (item.start or 0))

    def export(self, out, format):
        out.write(b"RIFF")


@pytest.fixture
def music(monkeypatch):
    fake = FakeMusic()
    monkeypatch.setattr(audio_engine.pygame.mixer, "music", fake)
    return fake


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(music, clock, monkeypatch):
    monkeypatch.setattr(audio_engine, "probe_duration", lambda path: 120.0)
    return PygameEngine(clock=clock, init_mixer=False)


def test_open_queues_media_opened(engine, music):
    engine.open("/music/song.mp3", 7)

    assert music.loaded == "/music/song.mp3"
    assert engine.poll() == [MediaOpened(7, 120.0)]
    assert engine.poll() == []


def test_play_pause_and_position(engine, music, clock):
    engine.open("/music/song.mp3", 1)
    engine.play()
    clock.now += 10

    assert engine.position() == pytest.approx(10)

    engine.pause()
    clock.now += 5
    assert engine.position() == pytest.approx(10)
    assert ('pause',) in music.calls

    engine.play()
    clock.now += 2
    assert engine.position() == pytest.approx(12)
    assert ('unpause',) in music.calls


def test_position_is_capped_at_duration(engine, clock):
    engine.open("/music/song.mp3", 1)
    engine.play()
    clock.now += 500

    assert engine.position() == 120.0


def test_seek_mp3_uses_start_offset(engine, music, clock):
    engine.open("/music/song.mp3", 1)
    engine.play()

    engine.seek(30.5)

    assert music.calls[-1] == ('play', 30.5)
    assert engine.position() == pytest.approx(30.5)


def test_seek_is_clamped_to_track(engine, music):
    engine.open("/music/song.mp3", 1)
    engine.play()

    engine.seek(500)
    assert music.calls[-1] == ('play', 120.0)


def test_seek_while_paused_stays_paused(engine, music, clock):
    engine.open("/music/song.mp3", 1)
    engine.play()
    engine.pause()

    engine.seek(45)
    clock.now += 10

    assert music.calls[-1] == ('pause',)
    assert engine.is_paused
    assert engine.position() == 45


def test_wma_goes_through_pydub(engine, music, monkeypatch):
    requested = []

    def from_file(path, format=None):
        requested.append((path, format))
        return FakeSegment()

    monkeypatch.setattr(audio_engine.AudioSegment, "from_file", from_file)

    engine.open("/music/song.wma", 3)
    engine.play()

    assert requested == [("/music/song.wma", "wma")]
    assert isinstance(music.loaded, io.BytesIO)
    assert ('load', 'wav') in music.calls

    engine.seek(30)
    assert isinstance(music.loaded, io.BytesIO)
    assert music.calls[-1] == ('play', 0.0)


def test_open_failure_raises(engine, music):
    music.fail_load = True

    with pytest.raises(EngineError):
        engine.open("/music/broken.mp3", 1)
    assert engine.poll() == []


def test_poll_reports_end_once(engine, music):
    engine.open("/music/song.mp3", 4)
    engine.play()
    engine.poll()

    music.busy = False

    assert engine.poll() == [MediaEnded(4)]
    assert engine.poll() == []


def test_no_end_while_paused(engine, music):
    engine.open("/music/song.mp3", 4)
    engine.play()
    engine.pause()
    music.busy = False

    assert engine.poll() == [MediaOpened(4, 120.0)]


def test_set_volume_clamps(engine, music):
    engine.set_volume(0.5)
    assert music.volume == 0.5

    engine.set_volume(3)
    assert music.volume == 1.0


@pytest.mark.parametrize("seconds,text", [
    (0, "0:00"),
    (9.9, "0:09"),
    (75, "1:15"),
    (3600, "60:00"),
    (None, "0:00"),
])
def test_format_time(seconds, text):
    assert format_time(seconds) == text

import os
import random

import pytest

from logging_config import FolderScanError
from playlist import ShuffleQueue, scan_folder, shuffled, sort_key, track_title


class TestScanFolder:
    """Tests for scan_folder()."""

    def test_keeps_only_audio_files(self, music_dir):
        names = [os.path.basename(p) for p in scan_folder(music_dir)]

        assert names == ["a_first.wav", "b_second.MP3", "c_third.wma"]

    def test_does_not_descend_into_subfolders(self, music_dir):
        assert not any("nested" in p for p in scan_folder(music_dir))

    def test_returns_absolute_sorted_paths(self, music_dir):
        tracks = scan_folder(music_dir)

        assert tracks == sorted(tracks, key=sort_key)
        assert all(p.startswith(str(music_dir)) for p in tracks)

    def test_sorts_case_insensitively(self, make_music_dir):
        folder = make_music_dir(["Zebra.mp3", "apple.mp3", "Mango.mp3"])

        names = [os.path.basename(p) for p in scan_folder(folder)]

        assert names == ["apple.mp3", "Mango.mp3", "Zebra.mp3"]

    def test_only_non_audio_files(self, make_music_dir):
        folder = make_music_dir(["readme.txt", "cover.png"])

        assert scan_folder(folder) == []

    def test_custom_extensions(self, music_dir):
        tracks = scan_folder(music_dir, extensions=('.WAV',))

        assert [os.path.basename(p) for p in tracks] == ["a_first.wav"]

    def test_missing_folder_raises(self, tmp_path):
        with pytest.raises(FolderScanError):
            scan_folder(tmp_path / "does-not-exist")


def test_track_title_strips_directory_and_extension():
    assert track_title("/music/Artist - Song.mp3") == "Artist - Song"
    assert track_title("/music/archive.tar.wav") == "archive.tar"


def test_shuffled_returns_permutation_copy():
    tracks = ["a", "b", "c", "d"]
    result = shuffled(tracks, random.Random(3))

    assert sorted(result) == tracks
    assert tracks == ["a", "b", "c", "d"]


class TestShuffleQueue:
    """Tests for ShuffleQueue."""

    def test_refill_excludes_current(self):
        queue = ShuffleQueue(random.Random(0))
        queue.refill(4, exclude=2)

        assert sorted(queue) == [0, 1, 3]
        assert 2 not in queue

    def test_draw_removes_each_index_once(self):
        queue = ShuffleQueue(random.Random(0))
        queue.refill(5, exclude=0)

        drawn = [queue.draw() for _ in range(4)]

        assert sorted(drawn) == [1, 2, 3, 4]
        assert len(queue) == 0

    def test_draw_from_empty_queue_raises(self):
        queue = ShuffleQueue(random.Random(0))

        with pytest.raises(IndexError):
            queue.draw()

    def test_discard(self):
        queue = ShuffleQueue(random.Random(0))
        queue.refill(3)
        queue.discard(1)
        queue.discard(7)

        assert sorted(queue) == [0, 2]

    def test_clear(self):
        queue = ShuffleQueue()
        queue.refill(3)
        queue.clear()

        assert not queue

"""
playlist.py
Folder scanning and shuffle bookkeeping for the playback controller
"""

import os
import random

from logging_config import get_logger, FolderScanError

logger = get_logger('playlist')

AUDIO_EXTENSIONS = ('.mp3', '.wav', '.wma')


def sort_key(file_path):
    """Alphabetical ordering that ignores case; ties fall back to the raw path"""
    return (file_path.casefold(), file_path)


def scan_folder(folder_path, extensions=AUDIO_EXTENSIONS) -> list[str]:
    """Return the audio files directly inside folder_path in alphabetical order.

    Subfolders are not descended into. Extensions match case-insensitively.
    Raises FolderScanError when the folder cannot be listed.
    """
    wanted = {ext.lower() for ext in extensions}
    folder_path = os.path.abspath(folder_path)
    try:
        with os.scandir(folder_path) as entries:
            tracks = [
                entry.path
                for entry in entries
                if entry.is_file() and os.path.splitext(entry.name)[1].lower() in wanted
            ]
    except OSError as e:
        raise FolderScanError(f"Cannot read folder {folder_path}: {e}") from e

    tracks.sort(key=sort_key)
    logger.debug(f"Found {len(tracks)} tracks in {folder_path}")
    return tracks


def track_title(file_path):
    """File name without directory or extension"""
    return os.path.splitext(os.path.basename(file_path))[0]


def shuffled(tracks, rng=random):
    """Return a randomly reordered copy of tracks"""
    order = list(tracks)
    rng.shuffle(order)
    return order


class ShuffleQueue:
    """Indices not yet played in the current shuffle cycle.

    refill() loads every index except the one playing, draw() removes and
    returns a uniformly random index. An index is never held twice.
    """

    def __init__(self, rng=None):
        self._rng = rng or random.Random()
        self._pending: list[int] = []

    def refill(self, count, exclude=None):
        self._pending = [i for i in range(count) if i != exclude]

    def draw(self):
        if not self._pending:
            raise IndexError("draw from an empty shuffle queue")
        pos = self._rng.randrange(len(self._pending))
        return self._pending.pop(pos)

    def discard(self, index):
        if index in self._pending:
            self._pending.remove(index)

    def clear(self):
        self._pending = []

    def __len__(self):
        return len(self._pending)

    def __contains__(self, index):
        return index in self._pending

    def __iter__(self):
        return iter(list(self._pending))

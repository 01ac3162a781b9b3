"""
Navigation Engine

Decides which track plays next under the active playback modes. Skipped
sources are stepped over; a folder made only of skipped sources is left for
the next playable folder; a library made only of skipped sources falls back to
its first track. Every search is a loop bounded by the size of what it walks.

Owns the two derived projections navigation reads:
- shuffled: per-folder shuffled track order, regenerated on folder mutation
- liked: source -> (folder, track) of liked sources, built on liked-mode entry
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from models.playback import ExclusiveMode, PlaybackFlags
from models.track import Position, TrackType
from services.shuffler import build_shuffled_view, shuffle_folder, shuffle_liked_set

if TYPE_CHECKING:
    from services.music_manager import MusicManager

logger = logging.getLogger(__name__)

Location = Tuple[str, str]


def _index_of(names: Sequence[str], name: Optional[str]) -> int:
    try:
        return names.index(name)
    except ValueError:
        return -1


class Navigator:
    """Track and folder navigation over a manager's library and position."""

    def __init__(self, manager: MusicManager, rng: Optional[random.Random] = None):
        self.manager = manager
        self.library = manager.library
        self._rng = rng or random.Random()
        self.shuffled: Dict[str, Dict[str, str]] = build_shuffled_view(self.library.snapshot(), self._rng)
        self.liked: Dict[str, Location] = {}

    @property
    def flags(self) -> PlaybackFlags:
        return self.manager.flags

    @property
    def position(self) -> Position:
        return self.manager.position

    # ---------------- projections ----------------- #

    def shuffled_tracks(self, folder: str) -> Dict[str, str]:
        """Shuffled view of a folder, generated on first use."""
        if folder not in self.shuffled and self.library.tracks(folder):
            self.shuffled[folder] = shuffle_folder(self.library.tracks(folder), self._rng)
        return self.shuffled.get(folder, {})

    def refresh_folder(self, folder: str) -> None:
        """Regenerate one folder's shuffled view after it changed."""
        tracks = self.library.tracks(folder)
        if tracks:
            self.shuffled[folder] = shuffle_folder(tracks, self._rng)
        else:
            self.shuffled.pop(folder, None)

    def reshuffle(self) -> None:
        self.shuffled = build_shuffled_view(self.library.snapshot(), self._rng)
        logger.info("Library reshuffled")

    def build_liked_set(self) -> Dict[str, Location]:
        """Map every liked source to where it lives in the library.

        A source found in several places resolves to the last one.
        """
        liked: Dict[str, Location] = {}
        for src in self.library.sources_of_type(TrackType.LIKED):
            for location in self.library.locate(src):
                liked[src] = location
        return liked

    def enter_liked(self, liked: Dict[str, Location]) -> None:
        self.liked = shuffle_liked_set(liked, self._rng)

    def leave_liked(self) -> None:
        self.liked = {}

    def forget_location(self, folder: str, track: str) -> None:
        """Drop liked entries pointing at a removed track."""
        self.liked = {src: loc for src, loc in self.liked.items() if loc != (folder, track)}

    # ---------------- navigation ----------------- #

    def find_next_track(self, step: int = 1, has_checked_folder: bool = False) -> Position:
        """Move to the next playable track in the direction of ``step``.

        Args:
            step: +1 / -1 to move, 0 to re-resolve the current position.
            has_checked_folder: Skip the "whole folder is skipped" check.

        Returns:
            The committed position.
        """
        if self.flags.is_shuffling_all:
            folder, track = self._random_track()
            logger.debug(f"Shuffle-all drew {folder}/{track}")
            return self._commit(folder, track)

        if self.flags.is_playing_liked:
            return self._next_liked(step)

        if not has_checked_folder and self.library.is_folder_skipped(self.position.folder):
            logger.debug(f"Folder '{self.position.folder}' is entirely skipped")
            return self.find_next_folder(1)

        return self._walk_folder(step)

    def _walk_folder(self, step: int) -> Position:
        folder = self.position.folder
        view = self.shuffled_tracks(folder) if self.flags.is_shuffling else self.library.tracks(folder)
        names: List[str] = list(view)
        if not names:
            return self.find_next_folder(1)

        index = _index_of(names, self.position.track)
        for _ in range(len(names)):
            index += step
            if index >= len(names):
                index = 0
                logger.debug(f"Reached the end of '{folder}', pausing")
                self.manager.pause()
            if index < 0:
                index = len(names) - 1

            track = names[index]
            self.position.track = track
            if not self.library.is_skipped(view[track]):
                return self._commit(folder, track)
            step = step or 1

        logger.warning(f"No playable track left in '{folder}', moving to the next folder")
        return self.find_next_folder(1)

    def _next_liked(self, step: int) -> Position:
        sources = list(self.liked)
        if not sources:
            logger.warning("Liked set is empty, leaving liked mode")
            self.manager.toggle_liked_tracks()
            return self.position

        index = _index_of(sources, self.position.src) + step
        if index >= len(sources):
            index = 0
            logger.debug("Reached the end of the liked tracks, pausing")
            self.manager.pause()
        if index < 0:
            index = len(sources) - 1

        folder, track = self.liked[sources[index]]
        return self._commit(folder, track)

    def find_next_folder(self, step: int = 1, has_checked_all_folders: bool = False) -> Position:
        """Move to the next folder holding a playable track.

        Lands on the first playable track of that folder. When every folder is
        skipped, falls back to the first track of the library.
        """
        if not has_checked_all_folders and self.library.all_folders_skipped():
            logger.info("Every folder is skipped, falling back to the first track")
            return self._commit(*self.library.first_position())

        folders = self.library.folders()
        index = _index_of(folders, self.position.folder)
        for _ in range(len(folders)):
            index += step
            if index >= len(folders):
                index = 0
            if index < 0:
                index = len(folders) - 1

            folder = folders[index]
            if not self.library.is_folder_skipped(folder):
                self.position.folder = folder
                self.position.track = next(iter(self.library.tracks(folder)))
                return self.find_next_track(0, has_checked_folder=True)
            step = step or 1

        return self._commit(*self.library.first_position())

    def find_track(self, folder: str, track: str) -> Position:
        """Jump to a track, leaving every exclusive mode first.

        A skipped target lands on the nearest playable track after it.
        """
        if not self.library.has_track(folder, track):
            logger.warning(f"Unknown track {folder}/{track}")
            return self.position

        toggles = {
            ExclusiveMode.SHUFFLE: self.manager.toggle_shuffle,
            ExclusiveMode.SHUFFLE_ALL: self.manager.toggle_shuffle_all,
            ExclusiveMode.LIKED: self.manager.toggle_liked_tracks,
        }
        for mode in self.flags.active_modes():
            toggles[mode]()

        self.position.folder = folder
        self.position.track = track
        return self.find_next_track(0)

    def _random_track(self) -> Location:
        folders = self.library.folders()
        folder = folders[self._rng.randrange(len(folders))]
        tracks = list(self.library.tracks(folder))
        return folder, tracks[self._rng.randrange(len(tracks))]

    def _commit(self, folder: str, track: str) -> Position:
        self.position.folder = folder
        self.position.track = track
        return self.manager.switch_to_current_track()

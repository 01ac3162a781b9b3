"""
Music Manager

Playback session controller: mode flags and their transitions, transport
control delegated to the backend of the current source, and the public
operation surface of the player. Every state change is published on the
session's EventBus.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from models.playback import PlaybackFlags
from models.track import Filetype, Position, TrackType
from services.event_bus import Event, EventBus
from services.music_library import Library, LibraryStore
from services.navigator import Navigator
from services.player_backend import PlayerBackend
from services.source_classifier import classify

logger = logging.getLogger(__name__)

EMPTY_LIKED_MESSAGE = "Zero tracks have been liked. Like a track to get started!"
UNSUPPORTED_MESSAGE = "{filetype} sources cannot be played here"
LOAD_FAILED_MESSAGE = "Cannot play {track}"


class MusicManager:
    """Controls playback of a folder/track library across player backends."""

    def __init__(
        self,
        library: Mapping[str, Mapping[str, str]],
        track_types: Optional[Mapping[str, TrackType | str]] = None,
        backends: Optional[Iterable[PlayerBackend]] = None,
        bus: Optional[EventBus] = None,
        volume: float = 1.0,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the session on the first folder's first playable track.

        Args:
            library: Ordered mapping of folder -> ordered mapping of track -> source
            track_types: Mapping of source -> 'liked' / 'skipped'
            backends: One PlayerBackend per filetype; sources without one stay silent
            bus: Event bus to publish on; a private one is created otherwise
            volume: Initial volume from 0 to 1
            rng: Random source for shuffling, for reproducible sessions

        Raises:
            InvalidLibraryState: If the library or one of its folders is empty
        """
        self.bus = bus or EventBus()
        self.library = LibraryStore(library, track_types, self.bus)
        self.flags = PlaybackFlags()
        self.position = Position(*self.library.first_position())

        self.current_volume: float = max(0.0, min(1.0, volume))
        self.current_duration: float = 0.0
        self.current_time: float = 0.0

        self._backends: Dict[Filetype, PlayerBackend] = {}
        self._active: Optional[PlayerBackend] = None
        for backend in backends or []:
            self._backends[backend.filetype] = backend
            backend.registry.register(backend, self)
            backend.set_volume(self.current_volume)

        self.navigator = Navigator(self, rng)
        logger.info(f"MusicManager initialized: {len(self.library)} tracks in {len(self.library.folders())} folders")
        self.find_next_track(0)

    # ---------------- read-only state ----------------- #

    @property
    def is_playing(self) -> bool:
        return self.flags.is_playing

    @property
    def is_looping(self) -> bool:
        return self.flags.is_looping

    @property
    def is_shuffling(self) -> bool:
        return self.flags.is_shuffling

    @property
    def is_shuffling_all(self) -> bool:
        return self.flags.is_shuffling_all

    @property
    def is_playing_liked(self) -> bool:
        return self.flags.is_playing_liked

    @property
    def active_backend(self) -> Optional[PlayerBackend]:
        return self._active

    @property
    def backends(self) -> Dict[Filetype, PlayerBackend]:
        return dict(self._backends)

    def current_position(self) -> Position:
        return replace(self.position)

    # ---------------- notification bus ----------------- #

    def subscribe(self, event: Event | str, callback: Callable[..., Any], *args: Any):
        return self.bus.subscribe(event, callback, *args)

    def unsubscribe(self, event: Event | str, callback: Callable[..., Any]):
        return self.bus.unsubscribe(event, callback)

    # ---------------- transport ----------------- #

    def play(self) -> bool:
        """Play the current track and request its duration."""
        backend = self._active
        if backend is not None:
            backend.play()
            src = self.position.src
            backend.get_duration_async(lambda seconds: self._on_duration(src, seconds))
        self.flags.is_playing = True
        self.bus.publish(Event.PLAY, self.flags.is_playing)
        return self.flags.is_playing

    def pause(self) -> bool:
        if self._active is not None:
            self._active.pause()
        self.flags.is_playing = False
        self.bus.publish(Event.PAUSE, self.flags.is_playing)
        return self.flags.is_playing

    def toggle_play(self) -> bool:
        if self.flags.is_playing:
            self.pause()
        else:
            self.play()
        self.bus.publish(Event.TOGGLE_PLAY, self.flags.is_playing)
        return self.flags.is_playing

    def switch_to_current_track(self) -> Position:
        """Load the committed position into its backend.

        Stops the previous backend, resets duration and time, and resumes
        playback when it was running. A source with no backend, or one its
        backend fails to load, leaves the session paused with no active
        backend and publishes a NOTICE.
        """
        position = self.position
        src = self.library.source(position.folder, position.track)
        position.src = src
        position.filetype = classify(src)

        if self._active is not None:
            self._active.pause()
        self._active = None
        self._set_duration(0.0)
        self._update_time(0.0)

        backend = self._backends.get(position.filetype)
        if backend is None:
            logger.warning(f"No backend for {position.filetype.value} sources, {src} stays silent")
            self.bus.publish(Event.NOTICE, UNSUPPORTED_MESSAGE.format(filetype=position.filetype.value))
        else:
            try:
                backend.load(src)
            except Exception as e:
                logger.error(f"Failed to load {src}: {e}")
                self.bus.publish(Event.NOTICE, LOAD_FAILED_MESSAGE.format(track=position.track))
            else:
                self._active = backend

        if self._active is None:
            if self.flags.is_playing:
                self.pause()
        elif self.flags.is_playing:
            self.play()

        logger.info(f"Current track: {position.folder}/{position.track} ({position.filetype.value})")
        snapshot = replace(position)
        self.bus.publish(Event.SET_TRACK, snapshot)
        return snapshot

    def fast_forward(self, seconds: float) -> float:
        """Seek ``seconds`` forward (negative: backward) in the current track."""
        backend = self._active
        if backend is None:
            return self.current_time
        if backend.requires_duration_for_seek and not self.current_duration:
            logger.debug("Seek ignored until the duration is known")
            return self.current_time

        target = max(0.0, backend.get_current_time() + seconds)
        if self.current_duration:
            target = min(target, self.current_duration)
        backend.seek(target)
        return self._update_time(target)

    def change_volume(self, step: float, force: bool = False) -> float:
        """Change the volume by ``step``, or set it to ``step`` when forced."""
        volume = step if force else self.current_volume + step
        self.current_volume = max(0.0, min(1.0, volume))
        for backend in self._backends.values():
            backend.set_volume(self.current_volume)
        self.bus.publish(Event.CHANGE_VOLUME, self.current_volume)
        return self.current_volume

    def _on_duration(self, src: str, seconds: float) -> None:
        if src != self.position.src:
            logger.debug(f"Dropping stale duration for {src}")
            return
        self._set_duration(seconds)

    def _set_duration(self, seconds: float) -> float:
        self.current_duration = seconds
        self.bus.publish(Event.SET_DURATION, self.current_duration)
        return self.current_duration

    def _update_time(self, seconds: float) -> float:
        self.current_time = seconds
        self.bus.publish(Event.UPDATE_TIME, self.current_time)
        return self.current_time

    # ---------------- navigation ----------------- #

    def find_next_track(self, step: int = 1, has_checked_folder: bool = False) -> Position:
        return self.navigator.find_next_track(step, has_checked_folder)

    def find_next_folder(self, step: int = 1, has_checked_all_folders: bool = False) -> Position:
        return self.navigator.find_next_folder(step, has_checked_all_folders)

    def find_track(self, folder: str, track: str) -> Position:
        return self.navigator.find_track(folder, track)

    def next_track(self) -> Position:
        return self.find_next_track(1)

    def previous_track(self) -> Position:
        return self.find_next_track(-1)

    def next_folder(self) -> Position:
        return self.find_next_folder(1)

    def previous_folder(self) -> Position:
        return self.find_next_folder(-1)

    def reshuffle(self) -> None:
        self.navigator.reshuffle()

    def _reset_to_first_track(self) -> None:
        tracks = self.library.tracks(self.position.folder)
        if tracks:
            self.position.track = next(iter(tracks))
        else:
            self.position.folder, self.position.track = self.library.first_position()

    # ---------------- modes ----------------- #

    def toggle_loop(self) -> bool:
        self.flags.is_looping = not self.flags.is_looping
        logger.info(f"Loop {'on' if self.flags.is_looping else 'off'}")
        self.bus.publish(Event.TOGGLE_LOOP, self.flags.is_looping)
        return self.flags.is_looping

    def toggle_shuffle(self) -> bool:
        """Toggle shuffling within the current folder."""
        if self.flags.is_shuffling:
            self.flags.is_shuffling = False
            self._reset_to_first_track()
        else:
            if self.flags.is_shuffling_all:
                self.toggle_shuffle_all()
            if self.flags.is_playing_liked:
                self.toggle_liked_tracks()
            self.flags.is_shuffling = True
            view = self.navigator.shuffled_tracks(self.position.folder)
            if view:
                self.position.track = next(iter(view))
        self.find_next_track(0)

        logger.info(f"Shuffle {'on' if self.flags.is_shuffling else 'off'}")
        self.bus.publish(Event.TOGGLE_SHUFFLE, self.flags.is_shuffling)
        return self.flags.is_shuffling

    def toggle_shuffle_all(self) -> bool:
        """Toggle drawing tracks at random from the whole library."""
        if self.flags.is_shuffling_all:
            self.flags.is_shuffling_all = False
        else:
            if self.flags.is_shuffling:
                self.toggle_shuffle()
            if self.flags.is_playing_liked:
                self.toggle_liked_tracks()
            self.flags.is_shuffling_all = True
        self.find_next_track(0)

        logger.info(f"Shuffle all {'on' if self.flags.is_shuffling_all else 'off'}")
        self.bus.publish(Event.TOGGLE_SHUFFLE_ALL, self.flags.is_shuffling_all)
        return self.flags.is_shuffling_all

    def toggle_liked_tracks(self) -> bool:
        """Toggle playing liked tracks only, in a fresh shuffled order.

        With nothing liked the mode stays off and a NOTICE is published.
        """
        if self.flags.is_playing_liked:
            self.flags.is_playing_liked = False
            self.navigator.leave_liked()
            self._reset_to_first_track()
            self.find_next_track(0)
        else:
            liked = self.navigator.build_liked_set()
            if not liked:
                logger.warning("Liked mode requested with no liked tracks")
                self.bus.publish(Event.NOTICE, EMPTY_LIKED_MESSAGE)
                self.bus.publish(Event.TOGGLE_LIKED_TRACKS, self.flags.is_playing_liked)
                return self.flags.is_playing_liked

            if self.flags.is_shuffling_all:
                self.toggle_shuffle_all()
            if self.flags.is_shuffling:
                self.toggle_shuffle()
            self.navigator.enter_liked(liked)
            self.flags.is_playing_liked = True
            self.position.src = next(iter(self.navigator.liked))
            self.find_next_track(0, has_checked_folder=True)

        logger.info(f"Liked tracks {'on' if self.flags.is_playing_liked else 'off'}")
        self.bus.publish(Event.TOGGLE_LIKED_TRACKS, self.flags.is_playing_liked)
        return self.flags.is_playing_liked

    # ---------------- library ----------------- #

    def add_track(self, folder: str, track: str, src: str) -> Library:
        snapshot = self.library.add_track(folder, track, src)
        self.navigator.refresh_folder(folder)
        if folder == self.position.folder and track == self.position.track and src != self.position.src:
            self.switch_to_current_track()
        return snapshot

    def remove_track(self, folder: str, track: str) -> Library:
        """Remove a track; the current track moves on to its successor.

        Raises:
            InvalidLibraryState: If the track is the last one in the library.
        """
        was_current = folder == self.position.folder and track == self.position.track
        if was_current:
            track_index = list(self.library.tracks(folder)).index(track)
            folder_index = self.library.folders().index(folder)

        snapshot = self.library.remove_track(folder, track)
        self.navigator.refresh_folder(folder)
        self.navigator.forget_location(folder, track)

        if was_current:
            remaining = list(self.library.tracks(folder))
            if remaining:
                self.position.track = remaining[track_index % len(remaining)]
            else:
                folders = self.library.folders()
                self.position.folder = folders[folder_index % len(folders)]
                self.position.track = next(iter(self.library.tracks(self.position.folder)))

        if self.flags.is_playing_liked and not self.navigator.liked:
            logger.info("Last liked track removed, leaving liked mode")
            self.toggle_liked_tracks()
        elif was_current:
            self.find_next_track(0)
        return snapshot

    def set_track_type(self, track_type: TrackType | str, force: bool = False, src: Optional[str] = None) -> Dict[str, str]:
        """Toggle a source's classification, defaulting to the current source.

        Skipping the current source moves playback forward.
        """
        src = self.position.src if src is None else src
        track_type = TrackType.parse(track_type)
        snapshot = self.library.set_track_type(track_type, src, force)
        if (
            track_type is TrackType.SKIPPED
            and self.library.type_of(src) is TrackType.SKIPPED
            and src == self.position.src
        ):
            self.find_next_track(1)
        return snapshot

    def reset_tracks_by_type(self, track_type: Optional[TrackType | str] = None) -> Dict[str, str]:
        return self.library.reset_tracks_by_type(track_type)

    # ---------------- backend events ----------------- #

    def on_backend_ended(self, backend: PlayerBackend) -> None:
        if backend is not self._active:
            logger.debug(f"Ignoring ended event from inactive {backend!r}")
            return
        if not self.flags.is_looping:
            self.find_next_track(1)
        elif self.flags.is_playing:
            self.play()
        else:
            self.find_next_track(0)

    def on_backend_time_update(self, backend: PlayerBackend, seconds: float) -> None:
        if backend is self._active:
            self._update_time(seconds)

    def on_backend_ready(self, backend: PlayerBackend) -> None:
        if backend.filetype is self.position.filetype:
            self.find_next_track(0)

    def poll(self) -> None:
        """Let the active backend report elapsed time and end of track."""
        if self._active is not None:
            self._active.poll()

    def shutdown(self) -> None:
        for backend in self._backends.values():
            backend.shutdown()
        self._active = None
        logger.info("MusicManager shut down")

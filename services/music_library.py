from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from mutagen import File as MutagenFile

from models.track import TrackType
from services.event_bus import Event, EventBus

logger = logging.getLogger(__name__)

Library = Dict[str, Dict[str, str]]


class InvalidLibraryState(Exception):
    """Raised when the library would have no folder or an empty folder."""
    pass


class LibraryStore:
    """Owns the folder -> track -> source data and the source classification."""

    SUPPORTED_EXTENSIONS = {'.mp3', '.flac', '.wav', '.ogg', '.m4a'}

    def __init__(
        self,
        library: Mapping[str, Mapping[str, str]],
        track_types: Optional[Mapping[str, TrackType | str]] = None,
        bus: Optional[EventBus] = None,
    ):
        """Initialize the store with a library and optional classification.

        Args:
            library: Ordered mapping of folder -> ordered mapping of track -> source.
            track_types: Mapping of source -> 'liked' / 'skipped'.
            bus: Event bus mutations are published on.

        Raises:
            InvalidLibraryState: If the library or one of its folders is empty.
            ValueError: If a classification value is unknown.
        """
        self.bus = bus or EventBus()
        self._data: Library = {folder: dict(tracks) for folder, tracks in library.items()}
        self._types: Dict[str, TrackType] = {
            src: TrackType.parse(value) for src, value in (track_types or {}).items()
        }
        self._validate()

    def _validate(self) -> None:
        if not self._data:
            raise InvalidLibraryState("Library must contain at least one folder")
        for folder, tracks in self._data.items():
            if not tracks:
                raise InvalidLibraryState(f"Folder '{folder}' has no tracks")

    # ---------------- queries ----------------- #

    def folders(self) -> List[str]:
        return list(self._data)

    def tracks(self, folder: str) -> Dict[str, str]:
        """Return the track mapping of a folder (empty if unknown)."""
        return self._data.get(folder, {})

    def has_track(self, folder: str, track: str) -> bool:
        return track in self._data.get(folder, {})

    def source(self, folder: str, track: str) -> Optional[str]:
        return self._data.get(folder, {}).get(track)

    def first_position(self) -> Tuple[str, str]:
        """Return the first folder and its first track."""
        folder = next(iter(self._data))
        return folder, next(iter(self._data[folder]))

    def type_of(self, src: str) -> Optional[TrackType]:
        return self._types.get(src)

    def is_skipped(self, src: str) -> bool:
        return self._types.get(src) is TrackType.SKIPPED

    def is_folder_skipped(self, folder: str) -> bool:
        """True when every track of the folder has a skipped source."""
        return all(self.is_skipped(src) for src in self._data.get(folder, {}).values())

    def all_folders_skipped(self) -> bool:
        return all(self.is_folder_skipped(folder) for folder in self._data)

    def locate(self, src: str) -> Iterator[Tuple[str, str]]:
        """Yield every (folder, track) holding ``src``, in library order."""
        for folder, tracks in self._data.items():
            for track, candidate in tracks.items():
                if candidate == src:
                    yield folder, track

    def sources_of_type(self, track_type: TrackType) -> List[str]:
        return [src for src, value in self._types.items() if value is track_type]

    def snapshot(self) -> Library:
        return copy.deepcopy(self._data)

    def classification_snapshot(self) -> Dict[str, str]:
        return {src: value.value for src, value in self._types.items()}

    def __len__(self) -> int:
        return sum(len(tracks) for tracks in self._data.values())

    # ---------------- mutators ----------------- #

    def add_track(self, folder: str, track: str, src: str) -> Library:
        """Insert or overwrite a track, creating its folder if needed."""
        self._data.setdefault(folder, {})[track] = src
        logger.debug(f"Added track {folder}/{track} -> {src}")
        snapshot = self.snapshot()
        self.bus.publish(Event.ADD_TRACK, snapshot)
        return snapshot

    def remove_track(self, folder: str, track: str) -> Library:
        """Delete a track, and its folder once empty.

        Unknown folders or tracks leave the library untouched.

        Raises:
            InvalidLibraryState: If the track is the last one in the library.
        """
        tracks = self._data.get(folder)
        if tracks is None or track not in tracks:
            logger.debug(f"Nothing to remove at {folder}/{track}")
            return self.snapshot()

        if len(self._data) == 1 and len(tracks) == 1:
            raise InvalidLibraryState("Cannot remove the last track of the library")

        del tracks[track]
        if not tracks:
            del self._data[folder]
            logger.info(f"Folder '{folder}' removed (no tracks left)")

        snapshot = self.snapshot()
        self.bus.publish(Event.REMOVE_TRACK, snapshot)
        return snapshot

    def set_track_type(self, track_type: TrackType | str, src: str, force: bool = False) -> Dict[str, str]:
        """Toggle a source's classification.

        Setting the type a source already has clears it, unless ``force``.
        """
        track_type = TrackType.parse(track_type)
        if self._types.get(src) is track_type and not force:
            del self._types[src]
            logger.debug(f"Cleared classification of {src}")
        else:
            self._types[src] = track_type
            logger.debug(f"Classified {src} as {track_type.value}")

        snapshot = self.classification_snapshot()
        self.bus.publish(Event.SET_TRACK_TYPE, snapshot)
        return snapshot

    def reset_tracks_by_type(self, track_type: Optional[TrackType | str] = None) -> Dict[str, str]:
        """Clear every classification of ``track_type``, or all of them."""
        if track_type is None:
            self._types.clear()
        else:
            track_type = TrackType.parse(track_type)
            self._types = {src: value for src, value in self._types.items() if value is not track_type}

        snapshot = self.classification_snapshot()
        self.bus.publish(Event.RESET_TRACKS_BY_TYPE, snapshot)
        return snapshot

    # ---------------- construction helpers ----------------- #

    @classmethod
    def scan_directory(cls, music_dir: Path) -> Library:
        """Build a library from a music directory.

        Every directory holding audio files becomes a folder named by its path
        relative to ``music_dir``; files directly in ``music_dir`` go to a
        folder named after it. Tracks are ordered by file name and named by
        their title tag, falling back to the file stem.

        Args:
            music_dir: Root directory to scan.

        Returns:
            Library mapping, empty if nothing playable was found.
        """
        library: Library = {}
        if not music_dir.exists():
            logger.warning(f"Music directory not found: {music_dir}")
            return library

        audio_files = [
            path for path in music_dir.rglob("*")
            if path.is_file() and path.suffix.lower() in cls.SUPPORTED_EXTENSIONS
        ]
        audio_files.sort(key=lambda p: (str(p.parent.relative_to(music_dir)).lower(), p.name.lower()))

        for file_path in audio_files:
            relative = file_path.parent.relative_to(music_dir)
            folder = relative.as_posix() if relative.parts else music_dir.name
            try:
                title = cls._extract_title(file_path)
            except Exception as e:
                logger.warning(f"Skipping unreadable file {file_path}: {e}")
                continue

            tracks = library.setdefault(folder, {})
            name = title
            suffix = 2
            while name in tracks:
                name = f"{title} ({suffix})"
                suffix += 1
            tracks[name] = str(file_path)

        logger.info(f"Scanned {sum(len(t) for t in library.values())} tracks in {len(library)} folders")
        return library

    @staticmethod
    def _extract_title(file_path: Path) -> str:
        """Read the title tag with mutagen.

        Raises:
            ValueError: If mutagen cannot read the file.
        """
        audio = MutagenFile(file_path, easy=True)
        if audio is None:
            raise ValueError(f"Could not read audio file: {file_path}")

        if audio.tags and 'title' in audio.tags:
            title = audio.tags['title']
            title = title[0] if isinstance(title, list) else title
            if str(title).strip():
                return str(title).strip()
        return file_path.stem

    @staticmethod
    def load_library_file(path: Path) -> Tuple[Library, Dict[str, str]]:
        """Read a JSON library document.

        Accepts ``{"library": {...}, "track_types": {...}}`` or a bare library
        mapping.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the document is not valid JSON or has the wrong shape.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Library file must hold a JSON object: {path}")

        if "library" in data:
            library = data["library"]
            track_types = data.get("track_types") or {}
        else:
            library, track_types = data, {}

        if not isinstance(library, dict) or not all(isinstance(t, dict) for t in library.values()):
            raise ValueError(f"Library must map folders to track mappings: {path}")
        if not isinstance(track_types, dict):
            raise ValueError(f"track_types must be a mapping: {path}")

        return library, track_types

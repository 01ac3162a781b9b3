from dataclasses import dataclass
from enum import Enum


class PlaybackState(Enum):
    """Transport state of a single player backend."""
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


class ExclusiveMode(Enum):
    """Modes of which at most one may be active at a time."""
    SHUFFLE = "shuffle"
    SHUFFLE_ALL = "shuffle_all"
    LIKED = "liked"


@dataclass
class PlaybackFlags:
    """Mode flags of a playback session.

    Attributes:
        is_playing: Playback requested (survives track switches)
        is_looping: Replay the current track when it ends
        is_shuffling: Walk the current folder in shuffled order
        is_shuffling_all: Draw tracks at random from the whole library
        is_playing_liked: Walk the shuffled liked set only
    """
    is_playing: bool = False
    is_looping: bool = False
    is_shuffling: bool = False
    is_shuffling_all: bool = False
    is_playing_liked: bool = False

    def active_modes(self) -> list[ExclusiveMode]:
        """Return the exclusive modes currently switched on."""
        active = []
        if self.is_shuffling:
            active.append(ExclusiveMode.SHUFFLE)
        if self.is_shuffling_all:
            active.append(ExclusiveMode.SHUFFLE_ALL)
        if self.is_playing_liked:
            active.append(ExclusiveMode.LIKED)
        return active

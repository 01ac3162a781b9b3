from .track import Filetype, TrackType, Position, format_time
from .playback import PlaybackState, PlaybackFlags, ExclusiveMode

__all__ = [
    "Filetype",
    "TrackType",
    "Position",
    "format_time",
    "PlaybackState",
    "PlaybackFlags",
    "ExclusiveMode",
]

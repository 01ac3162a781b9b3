from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Filetype(Enum):
    """Backend family that can play a source."""
    HTML = "HTML"
    SC = "SC"
    YT = "YT"


class TrackType(Enum):
    """Per-source classification. A source with no entry is unset."""
    LIKED = "liked"
    SKIPPED = "skipped"

    @classmethod
    def parse(cls, value: TrackType | str) -> TrackType:
        """Accept an enum member or its string value.

        Raises:
            ValueError: If the value names no classification.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


@dataclass
class Position:
    """The single active track: where it lives and how to play it."""
    folder: str
    track: str
    src: str = ""
    filetype: Filetype = Filetype.HTML


def format_time(seconds: float) -> str:
    """Format seconds as M:SS."""
    if seconds is None or seconds < 0:
        seconds = 0
    minutes = int(seconds) // 60
    secs = int(seconds) % 60
    return f"{minutes}:{secs:02d}"

"""
Embedded widget backends.

SoundCloud and YouTube sources are played by third-party widgets that only
accept commands after a ready handshake. These adapters keep the widget-side
state (cued source, clock-driven position, 0-100 volume) and queue every
command issued before ``attach()`` completes the handshake.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from models.playback import PlaybackState
from models.track import Filetype
from services.player_backend import BackendRegistry, PlayerBackend
from services.source_classifier import extract_video_id

logger = logging.getLogger(__name__)

DurationResolver = Callable[[str], Optional[float]]

# Keeps the SoundCloud widget from loading artwork, comments and the rest.
SC_WIDGET_PARAMS = (
    "&auto_play=false&buying=false&liking=false&download=false&sharing=false"
    "&show_artwork=false&show_comments=false&show_playcount=false&show_user=false"
    "&hide_related=false&visual=false&start_track=0&callback=true"
)


class EmbeddedWidgetBackend(PlayerBackend):
    """Common handshake, queueing and clock for widget backends."""

    VOLUME_SCALE = 100

    def __init__(
        self,
        registry: Optional[BackendRegistry] = None,
        duration_resolver: Optional[DurationResolver] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(registry)
        self._duration_resolver = duration_resolver
        self._clock = clock
        self._ready = False
        self._pending: list[Callable[[], None]] = []

        self.cued: Optional[str] = None
        self.widget_volume: float = self.VOLUME_SCALE
        self._src: Optional[str] = None
        self._duration: float = 0.0
        self._state = PlaybackState.STOPPED
        self._offset: float = 0.0
        self._started_at: float = 0.0

    @property
    def is_ready(self) -> bool:
        return self._ready

    def attach(self) -> None:
        """Complete the ready handshake and flush queued commands."""
        if self._ready:
            return
        self._ready = True
        pending, self._pending = self._pending, []
        for command in pending:
            command()
        logger.info(f"{self!r} is ready")
        self._emit_ready()

    def _when_ready(self, command: Callable[[], None]) -> None:
        if self._ready:
            command()
        else:
            self._pending.append(command)

    def _widget_source(self, src: str) -> str:
        return src

    def load(self, src: str) -> None:
        self._src = src
        self._when_ready(lambda: self._cue(src))

    def _cue(self, src: str) -> None:
        self.cued = self._widget_source(src)
        self._state = PlaybackState.STOPPED
        self._offset = 0.0
        self._duration = 0.0
        if self._duration_resolver is not None:
            self._duration = self._duration_resolver(src) or 0.0

    def play(self) -> None:
        self._when_ready(self._start)

    def _start(self) -> None:
        if self.cued is None or self._state == PlaybackState.PLAYING:
            return
        self._started_at = self._clock()
        self._state = PlaybackState.PLAYING

    def pause(self) -> None:
        self._when_ready(self._stop_clock)

    def _stop_clock(self) -> None:
        if self._state == PlaybackState.PLAYING:
            self._offset = self.get_current_time()
            self._state = PlaybackState.PAUSED

    def seek(self, seconds: float) -> None:
        self._when_ready(lambda: self._seek(seconds))

    def _seek(self, seconds: float) -> None:
        seconds = max(0.0, seconds)
        if self._duration:
            seconds = min(seconds, self._duration)
        self._offset = seconds
        self._started_at = self._clock()

    def set_volume(self, level: float) -> None:
        level = max(0.0, min(1.0, level))
        self._when_ready(lambda: setattr(self, "widget_volume", level * self.VOLUME_SCALE))

    def get_duration_async(self, callback: Callable[[float], None]) -> None:
        def report() -> None:
            if self._duration:
                callback(self._duration)
        self._when_ready(report)

    def get_current_time(self) -> float:
        if self._state == PlaybackState.PLAYING:
            return self._offset + (self._clock() - self._started_at)
        return self._offset

    def get_state(self) -> PlaybackState:
        return self._state

    def poll(self) -> None:
        if self._state != PlaybackState.PLAYING:
            return
        position = self.get_current_time()
        if self._duration and position >= self._duration:
            self._offset = 0.0
            self._state = PlaybackState.STOPPED
            self._emit_ended()
            return
        self._emit_time_update(position)


class SoundCloudBackend(EmbeddedWidgetBackend):
    """SoundCloud widget. Positions are whole milliseconds on the widget side."""

    filetype = Filetype.SC

    def _widget_source(self, src: str) -> str:
        return src + SC_WIDGET_PARAMS

    def _seek(self, seconds: float) -> None:
        super()._seek(round(seconds * 1000) / 1000)


class YouTubeBackend(EmbeddedWidgetBackend):
    """YouTube iframe widget. Cues by video id; cannot seek before the duration is known."""

    filetype = Filetype.YT
    requires_duration_for_seek = True

    def _widget_source(self, src: str) -> str:
        return extract_video_id(src)

    def _seek(self, seconds: float) -> None:
        if not self._duration:
            logger.debug("Ignoring seek before the video duration is known")
            return
        super()._seek(seconds)

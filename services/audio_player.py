import logging
import time
from pathlib import Path
from typing import Callable, Optional

import pygame
from mutagen import File as MutagenFile

from models.playback import PlaybackState
from models.track import Filetype
from services.player_backend import BackendRegistry, PlayerBackend

logger = logging.getLogger(__name__)


class AudioPlayer(PlayerBackend):
    """HTML-audio backend: local files through the pygame mixer."""

    filetype = Filetype.HTML

    def __init__(self, registry: Optional[BackendRegistry] = None):
        super().__init__(registry)
        if not pygame.mixer.get_init():
            pygame.mixer.init(frequency=44100, size=-16, channels=2, buffer=512)

        self._src: Optional[str] = None
        self._volume: float = 1.0
        self._state: PlaybackState = PlaybackState.STOPPED
        self._start_time: float = 0
        self._pause_position: float = 0

        pygame.mixer.music.set_volume(self._volume)

    def load(self, src: str) -> None:
        """Load an audio file, leaving it stopped at 0:00."""
        try:
            pygame.mixer.music.load(src)
        except Exception:
            self._state = PlaybackState.STOPPED
            self._src = None
            raise
        self._src = src
        self._state = PlaybackState.STOPPED
        self._start_time = 0
        self._pause_position = 0

    def play(self) -> None:
        """Start or resume the loaded file."""
        if self._src is None:
            return
        if self._state == PlaybackState.PAUSED:
            pygame.mixer.music.unpause()
            self._start_time = time.time() - self._pause_position
        elif self._state == PlaybackState.STOPPED:
            pygame.mixer.music.play()
            self._start_time = time.time()
            self._pause_position = 0
        self._state = PlaybackState.PLAYING

    def pause(self) -> None:
        """Pause playback."""
        if self._state == PlaybackState.PLAYING:
            pygame.mixer.music.pause()
            self._state = PlaybackState.PAUSED
            self._pause_position = time.time() - self._start_time

    def seek(self, seconds: float) -> None:
        """Restart the loaded file at ``seconds``, keeping the paused state."""
        if self._src is None:
            return
        seconds = max(0.0, seconds)
        was_playing = self._state == PlaybackState.PLAYING
        pygame.mixer.music.play(start=seconds)
        self._start_time = time.time() - seconds
        self._state = PlaybackState.PLAYING
        if not was_playing:
            self.pause()
            self._pause_position = seconds

    def set_volume(self, level: float) -> None:
        """Set volume level (0.0 to 1.0)."""
        self._volume = max(0.0, min(1.0, level))
        pygame.mixer.music.set_volume(self._volume)

    def get_duration_async(self, callback: Callable[[float], None]) -> None:
        """Read the duration with mutagen and report it right away."""
        if self._src is None:
            return
        try:
            audio = MutagenFile(Path(self._src))
        except Exception as e:
            logger.warning(f"Could not read duration of {self._src}: {e}")
            return
        if audio is not None and audio.info and hasattr(audio.info, 'length'):
            callback(float(audio.info.length))

    def get_current_time(self) -> float:
        """Return current playback position in seconds."""
        if self._state == PlaybackState.STOPPED:
            return 0.0
        elif self._state == PlaybackState.PAUSED:
            return self._pause_position
        return time.time() - self._start_time

    def get_state(self) -> PlaybackState:
        return self._state

    def poll(self) -> None:
        """Report elapsed time, or the end of the track once the mixer stops."""
        if self._state != PlaybackState.PLAYING:
            return
        if not pygame.mixer.music.get_busy():
            self._state = PlaybackState.STOPPED
            logger.debug(f"Track ended naturally: {self._src}")
            self._emit_ended()
            return
        self._emit_time_update(self.get_current_time())

    def shutdown(self) -> None:
        super().shutdown()
        pygame.mixer.music.stop()
        self._state = PlaybackState.STOPPED

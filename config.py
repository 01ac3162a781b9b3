"""Environment-driven settings for FOLDPLAY."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)

DEFAULT_MUSIC_DIR = Path.home() / "Music"
DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "foldplay"


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using {default}")
        return default


@dataclass
class PlayerConfig:
    """Settings for one FOLDPLAY run.

    Attributes:
        music_dir: Directory scanned for folders of tracks
        library_file: Optional JSON library document, used instead of scanning
        volume: Initial volume from 0 to 1
        log_level: Name of the logging level
        log_dir: Directory holding foldplay.log
        seek_step: Seconds skipped by the seek bindings
        volume_step: Volume change of the volume bindings
    """
    music_dir: Path = DEFAULT_MUSIC_DIR
    library_file: Path | None = None
    volume: float = 1.0
    log_level: str = "INFO"
    log_dir: Path = DEFAULT_LOG_DIR
    seek_step: float = 5.0
    volume_step: float = 0.05

    @property
    def log_file(self) -> Path:
        return self.log_dir / "foldplay.log"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> PlayerConfig:
        """Build settings from FOLDPLAY_* environment variables."""
        env = os.environ if env is None else env

        library_file = env.get("FOLDPLAY_LIBRARY_FILE")
        log_level = env.get("FOLDPLAY_LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            logger.warning(f"Unknown log level {log_level!r}, using INFO")
            log_level = "INFO"

        volume = _float_env(env, "FOLDPLAY_VOLUME", 1.0)
        return cls(
            music_dir=Path(env.get("FOLDPLAY_MUSIC_DIR") or DEFAULT_MUSIC_DIR).expanduser(),
            library_file=Path(library_file).expanduser() if library_file else None,
            volume=max(0.0, min(1.0, volume)),
            log_level=log_level,
            log_dir=Path(env.get("FOLDPLAY_LOG_DIR") or DEFAULT_LOG_DIR).expanduser(),
            seek_step=_float_env(env, "FOLDPLAY_SEEK_STEP", 5.0),
            volume_step=_float_env(env, "FOLDPLAY_VOLUME_STEP", 0.05),
        )

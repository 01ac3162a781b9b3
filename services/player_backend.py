"""
Player Backend capability.

Every source family (HTML audio, SoundCloud widget, YouTube widget) is played
through one adapter implementing PlayerBackend. Adapters report end-of-track,
elapsed time and readiness through a BackendRegistry, which maps a backend to
the controller that owns it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Protocol

from models.track import Filetype

logger = logging.getLogger(__name__)


class BackendListener(Protocol):
    """What a controller exposes to the backends it owns."""

    def on_backend_ended(self, backend: PlayerBackend) -> None: ...

    def on_backend_time_update(self, backend: PlayerBackend, seconds: float) -> None: ...

    def on_backend_ready(self, backend: PlayerBackend) -> None: ...


class BackendRegistry:
    """Table from backend identity to its controller."""

    def __init__(self) -> None:
        self._owners: dict[int, BackendListener] = {}

    def register(self, backend: PlayerBackend, owner: BackendListener) -> None:
        self._owners[id(backend)] = owner

    def unregister(self, backend: PlayerBackend) -> None:
        self._owners.pop(id(backend), None)

    def owner_of(self, backend: PlayerBackend) -> Optional[BackendListener]:
        return self._owners.get(id(backend))

    def ended(self, backend: PlayerBackend) -> None:
        owner = self.owner_of(backend)
        if owner is None:
            logger.debug(f"Dropping ended event from unregistered {backend!r}")
            return
        owner.on_backend_ended(backend)

    def time_update(self, backend: PlayerBackend, seconds: float) -> None:
        owner = self.owner_of(backend)
        if owner is None:
            return
        owner.on_backend_time_update(backend, seconds)

    def ready(self, backend: PlayerBackend) -> None:
        owner = self.owner_of(backend)
        if owner is None:
            logger.debug(f"Dropping ready event from unregistered {backend!r}")
            return
        owner.on_backend_ready(backend)


backend_registry = BackendRegistry()


class PlayerBackend(ABC):
    """Capability every source family adapter implements."""

    filetype: Filetype
    requires_duration_for_seek: bool = False

    def __init__(self, registry: Optional[BackendRegistry] = None):
        self.registry = registry or backend_registry

    @abstractmethod
    def load(self, src: str) -> None:
        """Cue a source without starting it."""

    @abstractmethod
    def play(self) -> None:
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def seek(self, seconds: float) -> None:
        ...

    @abstractmethod
    def set_volume(self, level: float) -> None:
        """Set volume level (0.0 to 1.0)."""

    @abstractmethod
    def get_duration_async(self, callback: Callable[[float], None]) -> None:
        """Call ``callback(seconds)`` once the loaded source's duration is known."""

    @abstractmethod
    def get_current_time(self) -> float:
        ...

    def poll(self) -> None:
        """Report elapsed time and end of track. Called from the UI loop."""

    def shutdown(self) -> None:
        self.registry.unregister(self)

    def _emit_ended(self) -> None:
        self.registry.ended(self)

    def _emit_time_update(self, seconds: float) -> None:
        self.registry.time_update(self, seconds)

    def _emit_ready(self) -> None:
        self.registry.ready(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.filetype.value})"

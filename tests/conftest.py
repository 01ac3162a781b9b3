from __future__ import annotations

import copy
import random
from typing import Callable

import pytest

from models.track import Filetype
from services.event_bus import Event
from services.music_manager import MusicManager
from services.player_backend import BackendRegistry, PlayerBackend

LIBRARY = {
    "A": {"t1": "s1", "t2": "s2"},
    "B": {"t3": "s3"},
}


class FakeBackend(PlayerBackend):
    """Backend recording every call, with a settable clock position."""

    def __init__(self, filetype: Filetype, registry: BackendRegistry):
        super().__init__(registry)
        self.filetype = filetype
        self.calls: list[tuple] = []
        self.loaded: str | None = None
        self.position: float = 0.0
        self.volume: float | None = None
        self.duration_callbacks: list[Callable[[float], None]] = []
        self.unloadable: set[str] = set()

    def load(self, src: str) -> None:
        self.calls.append(("load", src))
        if src in self.unloadable:
            raise RuntimeError(f"Unable to open {src}")
        self.loaded = src
        self.position = 0.0

    def play(self) -> None:
        self.calls.append(("play",))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def seek(self, seconds: float) -> None:
        self.calls.append(("seek", seconds))
        self.position = seconds

    def set_volume(self, level: float) -> None:
        self.calls.append(("set_volume", level))
        self.volume = level

    def get_duration_async(self, callback: Callable[[float], None]) -> None:
        self.duration_callbacks.append(callback)

    def get_current_time(self) -> float:
        return self.position

    def resolve_duration(self, seconds: float) -> None:
        pending, self.duration_callbacks = self.duration_callbacks, []
        for callback in pending:
            callback(seconds)

    def finish(self) -> None:
        self._emit_ended()

    def tick(self, seconds: float) -> None:
        self.position = seconds
        self._emit_time_update(seconds)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def registry() -> BackendRegistry:
    return BackendRegistry()


@pytest.fixture
def make_manager(registry):
    """Factory for a MusicManager wired to one FakeBackend per filetype."""

    def factory(library=None, track_types=None, seed: int = 7, unloadable=(), filetypes=tuple(Filetype), **kwargs) -> MusicManager:
        backends = [FakeBackend(filetype, registry) for filetype in filetypes]
        for backend in backends:
            backend.unloadable.update(unloadable)
        return MusicManager(
            copy.deepcopy(LIBRARY) if library is None else library,
            track_types,
            backends=backends,
            rng=random.Random(seed),
            **kwargs,
        )

    return factory


@pytest.fixture
def recorder():
    """Collect (event, payload) pairs published on a manager's bus."""

    class Recorder:
        def __init__(self):
            self.events: list[tuple[Event, object]] = []

        def attach(self, manager: MusicManager, *events: Event) -> None:
            for event in events or tuple(Event):
                manager.subscribe(event, self._record, event)

        def _record(self, payload, event) -> None:
            self.events.append((event, payload))

        def of(self, event: Event) -> list:
            return [payload for recorded, payload in self.events if recorded is event]

    return Recorder()


def location(manager: MusicManager) -> tuple[str, str]:
    return manager.position.folder, manager.position.track

"""
Event Bus Service

Publish/subscribe hub for every observable change of a playback session.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Event(Enum):
    """One identifier per state-changing operation."""
    PLAY = "play"
    PAUSE = "pause"
    TOGGLE_PLAY = "toggle_play"
    SET_TRACK = "set_track"
    SET_DURATION = "set_duration"
    UPDATE_TIME = "update_time"
    CHANGE_VOLUME = "change_volume"
    TOGGLE_LOOP = "toggle_loop"
    TOGGLE_SHUFFLE = "toggle_shuffle"
    TOGGLE_SHUFFLE_ALL = "toggle_shuffle_all"
    TOGGLE_LIKED_TRACKS = "toggle_liked_tracks"
    ADD_TRACK = "add_track"
    REMOVE_TRACK = "remove_track"
    SET_TRACK_TYPE = "set_track_type"
    RESET_TRACKS_BY_TYPE = "reset_tracks_by_type"
    NOTICE = "notice"


Subscription = tuple[Callable[..., Any], tuple]


class EventBus:
    """Ordered subscriber table keyed by Event."""

    def __init__(self) -> None:
        self._subscribers: dict[Event, list[Subscription]] = {}

    @staticmethod
    def _key(event: Event | str) -> Event:
        if isinstance(event, Event):
            return event
        return Event(event)

    def subscribe(self, event: Event | str, callback: Callable[..., Any], *args: Any) -> dict[Event, list[Subscription]]:
        """Register a callback for an event.

        Args:
            event: Event member or its string value.
            callback: Called as ``callback(payload, *args)`` on publish.
            *args: Extra arguments bound to this registration.

        Returns:
            The full subscriber table.
        """
        key = self._key(event)
        self._subscribers.setdefault(key, []).append((callback, args))
        return self._subscribers

    def unsubscribe(self, event: Event | str, callback: Callable[..., Any]) -> list[Subscription]:
        """Remove the first registration of ``callback`` for ``event``.

        Returns:
            The registrations left for that event.
        """
        key = self._key(event)
        registrations = self._subscribers.get(key, [])
        for index, (registered, _) in enumerate(registrations):
            if registered == callback:
                del registrations[index]
                break
        return registrations

    def publish(self, event: Event | str, payload: Any = None) -> None:
        """Invoke every callback registered for ``event`` in order.

        A failing subscriber is logged and does not stop the others.
        """
        key = self._key(event)
        for callback, args in list(self._subscribers.get(key, [])):
            try:
                callback(payload, *args)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed handling {key.value}")

    def subscribers(self, event: Event | str) -> list[Subscription]:
        return list(self._subscribers.get(self._key(event), []))

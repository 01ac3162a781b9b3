import logging

import pytest

from services.event_bus import Event, EventBus


def test_publish_calls_subscribers_in_registration_order():
    bus = EventBus()
    calls = []
    bus.subscribe(Event.PLAY, lambda payload: calls.append(("first", payload)))
    bus.subscribe(Event.PLAY, lambda payload: calls.append(("second", payload)))

    bus.publish(Event.PLAY, True)

    assert calls == [("first", True), ("second", True)]


def test_bound_arguments_follow_the_payload():
    bus = EventBus()
    calls = []
    bus.subscribe(Event.CHANGE_VOLUME, lambda payload, *args: calls.append((payload, args)), "header", 2)

    bus.publish(Event.CHANGE_VOLUME, 0.5)

    assert calls == [(0.5, ("header", 2))]


def test_publish_without_subscribers_is_a_no_op():
    EventBus().publish(Event.NOTICE, "nobody listens")


def test_string_aliases_resolve_to_events():
    bus = EventBus()
    calls = []
    bus.subscribe("toggle_loop", calls.append)

    bus.publish(Event.TOGGLE_LOOP, True)

    assert calls == [True]
    assert len(bus.subscribers(Event.TOGGLE_LOOP)) == 1


def test_unknown_event_name_is_rejected():
    with pytest.raises(ValueError):
        EventBus().subscribe("rewind", print)


def test_unsubscribe_removes_only_the_first_registration():
    bus = EventBus()
    calls = []
    bus.subscribe(Event.PAUSE, calls.append)
    bus.subscribe(Event.PAUSE, calls.append)

    remaining = bus.unsubscribe(Event.PAUSE, calls.append)
    bus.publish(Event.PAUSE, False)

    assert len(remaining) == 1
    assert calls == [False]


def test_unsubscribe_unknown_callback_keeps_table():
    bus = EventBus()
    bus.subscribe(Event.PAUSE, print)

    remaining = bus.unsubscribe(Event.PAUSE, repr)

    assert [callback for callback, _ in remaining] == [print]


def test_failing_subscriber_does_not_stop_the_others(caplog):
    bus = EventBus()
    calls = []

    def broken(_payload):
        raise RuntimeError("boom")

    bus.subscribe(Event.SET_TRACK, broken)
    bus.subscribe(Event.SET_TRACK, calls.append)

    with caplog.at_level(logging.ERROR, logger="services.event_bus"):
        bus.publish(Event.SET_TRACK, "payload")

    assert calls == ["payload"]
    assert "set_track" in caplog.text


def test_subscribe_during_publish_waits_for_next_publish():
    bus = EventBus()
    calls = []

    def late(payload):
        calls.append(("late", payload))

    def first(payload):
        calls.append(("first", payload))
        bus.subscribe(Event.PLAY, late)

    bus.subscribe(Event.PLAY, first)
    bus.publish(Event.PLAY, 1)

    assert calls == [("first", 1)]

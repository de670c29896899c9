import gc

import pytest

from dialogue_engine.core.errors import InvalidSessionStateError
from dialogue_engine.core.events import EventBus, Event, DialogueEvent


def test_event_bus_subscribe_publish(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(DialogueEvent.LINE_CHANGED, handler)
    event_bus.publish(DialogueEvent.LINE_CHANGED, line="hello")

    assert len(received) == 1
    assert received[0].type == DialogueEvent.LINE_CHANGED
    assert received[0]["line"] == "hello"

def test_event_bus_unsubscribe(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(DialogueEvent.DIALOGUE_STARTED, handler)
    event_bus.unsubscribe(DialogueEvent.DIALOGUE_STARTED, handler)
    event_bus.publish(DialogueEvent.DIALOGUE_STARTED)

    assert received == []

def test_event_priority(event_bus):
    order = []

    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: order.append("low"), priority=1, weak=False)
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: order.append("high"), priority=10, weak=False)
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: order.append("normal"), priority=5, weak=False)
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: order.append("normal2"), priority=5, weak=False)

    event_bus.publish(DialogueEvent.LINE_CHANGED)

    assert order == ["high", "normal", "normal2", "low"]

def test_every_handler_receives_event(event_bus):
    received = []

    def first(event):
        received.append("first")

    def second(event):
        received.append("second")

    event_bus.subscribe(DialogueEvent.DIALOGUE_ENDED, first, priority=10)
    event_bus.subscribe(DialogueEvent.DIALOGUE_ENDED, second, priority=5)

    event = event_bus.publish(DialogueEvent.DIALOGUE_ENDED, session="s")

    assert received == ["first", "second"]
    assert event["session"] == "s"

def test_one_shot_handler(event_bus):
    calls = []
    event_bus.subscribe(DialogueEvent.DIALOGUE_STARTED, lambda e: calls.append(1), one_shot=True, weak=False)

    event_bus.publish(DialogueEvent.DIALOGUE_STARTED)
    event_bus.publish(DialogueEvent.DIALOGUE_STARTED)

    assert calls == [1]
    assert event_bus.handler_count(DialogueEvent.DIALOGUE_STARTED) == 0

def test_weak_handler_removed_when_collected(event_bus):
    class Listener:
        def __init__(self):
            self.calls = 0

        def handle(self, event):
            self.calls += 1

    listener = Listener()
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, listener.handle)
    assert event_bus.handler_count(DialogueEvent.LINE_CHANGED) == 1

    del listener
    gc.collect()

    assert event_bus.handler_count(DialogueEvent.LINE_CHANGED) == 0
    event_bus.publish(DialogueEvent.LINE_CHANGED)

def test_handler_error_does_not_stop_delivery(event_bus, caplog):
    received = []

    def broken(event):
        raise ValueError("boom")

    event_bus.subscribe(DialogueEvent.LINE_CHANGED, broken, priority=10)
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: received.append(e), weak=False)

    event_bus.publish(DialogueEvent.LINE_CHANGED)

    assert len(received) == 1
    assert "Error in event handler" in caplog.text

def test_nested_publish_is_queued_in_order(event_bus):
    order = []

    def on_start(event):
        order.append("start-begin")
        event_bus.publish(DialogueEvent.LINE_CHANGED)
        order.append("start-end")

    event_bus.subscribe(DialogueEvent.DIALOGUE_STARTED, on_start)
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: order.append("line"), weak=False)

    event_bus.publish(DialogueEvent.DIALOGUE_STARTED)

    assert order == ["start-begin", "start-end", "line"]

def test_clear(event_bus):
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: None, weak=False)
    event_bus.subscribe(DialogueEvent.DIALOGUE_ENDED, lambda e: None, weak=False)

    event_bus.clear(DialogueEvent.LINE_CHANGED)
    assert event_bus.handler_count(DialogueEvent.LINE_CHANGED) == 0
    assert event_bus.handler_count(DialogueEvent.DIALOGUE_ENDED) == 1

    event_bus.clear()
    assert event_bus.handler_count(DialogueEvent.DIALOGUE_ENDED) == 0

def test_event_get_default():
    event = Event(type=DialogueEvent.DIALOGUE_STARTED, data={"session": None})
    assert event.get("missing", 3) == 3
    assert event["session"] is None

def test_engine_error_in_handler_propagates(event_bus):
    received = []

    def misuse(event):
        raise InvalidSessionStateError("no current line")

    event_bus.subscribe(DialogueEvent.DIALOGUE_ENDED, misuse, priority=10)
    event_bus.subscribe(DialogueEvent.DIALOGUE_ENDED, lambda e: received.append("late"), weak=False)

    with pytest.raises(InvalidSessionStateError):
        event_bus.publish(DialogueEvent.DIALOGUE_ENDED)
    assert received == []

    # The bus is usable again afterwards.
    event_bus.unsubscribe(DialogueEvent.DIALOGUE_ENDED, misuse)
    event_bus.publish(DialogueEvent.DIALOGUE_ENDED)
    assert received == ["late"]

def test_queued_events_dropped_after_engine_error(event_bus):
    lines = []

    def on_start(event):
        event_bus.publish(DialogueEvent.LINE_CHANGED)
        raise InvalidSessionStateError("bad state")

    event_bus.subscribe(DialogueEvent.DIALOGUE_STARTED, on_start)
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: lines.append(e), weak=False)

    with pytest.raises(InvalidSessionStateError):
        event_bus.publish(DialogueEvent.DIALOGUE_STARTED)

    event_bus.publish(DialogueEvent.DIALOGUE_ENDED)
    assert lines == []

def test_unsubscribe_during_dispatch_keeps_one_shot_cleanup(event_bus):
    calls = []

    def remover(event):
        calls.append("remover")
        event_bus.unsubscribe(DialogueEvent.LINE_CHANGED, remover)

    event_bus.subscribe(DialogueEvent.LINE_CHANGED, remover, priority=10)
    event_bus.subscribe(DialogueEvent.LINE_CHANGED, lambda e: calls.append("once"), one_shot=True, weak=False)

    event_bus.publish(DialogueEvent.LINE_CHANGED)
    event_bus.publish(DialogueEvent.LINE_CHANGED)

    assert calls == ["remover", "once"]
    assert event_bus.handler_count(DialogueEvent.LINE_CHANGED) == 0

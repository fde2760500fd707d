"""
test_event_manager.py
---------------------
Unit tests for the EventManager pub-sub dispatcher.
"""

from unittest.mock import MagicMock

from stagecraft.core.event_manager import (
    EventManager,
    ScopeDestroyedEvent,
    ScopeSettledEvent,
    get_events,
    reset_events,
)


def test_dispatch_reaches_only_matching_subscribers(events):
    destroyed = MagicMock()
    settled = MagicMock()
    events.subscribe(ScopeDestroyedEvent, destroyed)
    events.subscribe(ScopeSettledEvent, settled)

    events.dispatch(ScopeDestroyedEvent("scope-1"))
    destroyed.assert_called_once_with(ScopeDestroyedEvent("scope-1"))
    settled.assert_not_called()


def test_subscribe_is_idempotent_and_unsubscribe_removes(events):
    callback = MagicMock()
    events.subscribe(ScopeDestroyedEvent, callback)
    events.subscribe(ScopeDestroyedEvent, callback)
    assert events.get_subscriber_count(ScopeDestroyedEvent) == 1

    events.unsubscribe(ScopeDestroyedEvent, callback)
    events.unsubscribe(ScopeDestroyedEvent, callback)
    assert events.get_subscriber_count() == 0


def test_failing_listener_does_not_stop_others(events):
    after = MagicMock()
    events.subscribe(ScopeDestroyedEvent, MagicMock(side_effect=RuntimeError("boom")))
    events.subscribe(ScopeDestroyedEvent, after)

    events.dispatch(ScopeDestroyedEvent("scope-1"))
    after.assert_called_once()


def test_singleton_reset():
    first = get_events()
    assert get_events() is first
    reset_events()
    assert get_events() is not first
    assert isinstance(get_events(), EventManager)

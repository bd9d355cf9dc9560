"""Unit tests for the Event signal."""

import gc

import pytest

from scopewire.domain.events import Event


class Listener:
    def __init__(self):
        self.calls = []

    def on_event(self, sender, *args):
        self.calls.append((sender, args))


class TestEventSubscription:
    """Test cases for subscribing and firing."""

    def test_fire_invokes_subscribers_in_order(self):
        """Test that subscribers receive the sender and arguments in subscription order."""
        event = Event()
        received = []
        event.subscribe(lambda sender, value: received.append(("first", sender, value)))
        event.subscribe(lambda sender, value: received.append(("second", sender, value)))

        event.fire("host", 42)

        assert received == [("first", "host", 42), ("second", "host", 42)]

    def test_subscribing_same_handler_twice_is_ignored(self):
        """Test that a handler is subscribed at most once."""
        event = Event()
        listener = Listener()
        event.subscribe(listener.on_event)
        event.subscribe(listener.on_event)

        event.fire("host")

        assert len(event) == 1
        assert listener.calls == [("host", ())]

    def test_unsubscribe(self):
        """Test that unsubscribed handlers are not invoked."""
        event = Event()
        listener = Listener()
        event.subscribe(listener.on_event)

        assert event.unsubscribe(listener.on_event) is True
        assert event.unsubscribe(listener.on_event) is False
        event.fire("host")

        assert listener.calls == []

    def test_fire_without_subscribers(self):
        """Test that firing an empty event does nothing."""
        event = Event("empty")
        event.fire(None)
        assert len(event) == 0

    def test_handler_exception_propagates(self):
        """Test that subscriber errors reach the caller of fire."""
        event = Event()

        def failing(sender):
            raise RuntimeError("boom")

        event.subscribe(failing)
        with pytest.raises(RuntimeError, match="boom"):
            event.fire(None)


class TestWeakSubscription:
    """Test cases for weakly held subscribers."""

    def test_weak_subscriber_is_invoked_while_alive(self):
        """Test that a weak subscriber receives the event."""
        event = Event()
        listener = Listener()
        event.subscribe(listener.on_event, weak=True)

        event.fire("host", 1)

        assert listener.calls == [("host", (1,))]

    def test_weak_subscriber_does_not_keep_owner_alive(self):
        """Test that a collected subscriber is pruned."""
        event = Event()
        listener = Listener()
        event.subscribe(listener.on_event, weak=True)
        assert len(event) == 1

        del listener
        gc.collect()

        assert len(event) == 0
        event.fire("host")

    def test_weak_subscription_requires_bound_method(self):
        """Test that plain functions cannot be held weakly."""
        event = Event()
        with pytest.raises(TypeError):
            event.subscribe(lambda sender: None, weak=True)

    def test_unsubscribe_weak_subscriber(self):
        """Test that weak subscribers can be removed explicitly."""
        event = Event()
        listener = Listener()
        event.subscribe(listener.on_event, weak=True)

        assert event.unsubscribe(listener.on_event) is True
        assert len(event) == 0

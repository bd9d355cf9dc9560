import logging
import threading
import weakref
from typing import Any, Callable, List, Union

logger = logging.getLogger(__name__)

_Subscriber = Union[Callable[..., Any], "weakref.WeakMethod"]


class Event:
    """Ordered, synchronously fired notification.

    Subscribers are invoked with ``(sender, *args)`` in subscription order.
    Bound methods may be held weakly so the event does not extend the lifetime
    of the subscriber's owner; dead weak subscribers are pruned on fire.
    """

    def __init__(self, name: str = "event") -> None:
        self.name = name
        self._subscribers: List[_Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Callable[..., Any], weak: bool = False) -> None:
        """Add a subscriber.

        Args:
            handler: Callable invoked with the sender and the fired arguments.
            weak: Hold a bound-method handler through ``weakref.WeakMethod``.

        Raises:
            TypeError: If ``weak`` is requested for something other than a bound method.
        """
        subscriber: _Subscriber = weakref.WeakMethod(handler) if weak else handler
        with self._lock:
            if self._index_of(handler) is None:
                self._subscribers.append(subscriber)

    def unsubscribe(self, handler: Callable[..., Any]) -> bool:
        """Remove a subscriber. Returns whether it was subscribed."""
        with self._lock:
            index = self._index_of(handler)
            if index is None:
                return False
            del self._subscribers[index]
            return True

    def fire(self, sender: Any, *args: Any) -> None:
        with self._lock:
            handlers = []
            alive = []
            for subscriber in self._subscribers:
                handler = subscriber() if isinstance(subscriber, weakref.WeakMethod) else subscriber
                if handler is None:
                    continue
                alive.append(subscriber)
                handlers.append(handler)
            self._subscribers = alive
        logger.debug("Firing %s to %d subscriber(s)", self.name, len(handlers))
        for handler in handlers:
            handler(sender, *args)

    def _index_of(self, handler: Callable[..., Any]):
        for index, subscriber in enumerate(self._subscribers):
            current = subscriber() if isinstance(subscriber, weakref.WeakMethod) else subscriber
            if current is not None and current == handler:
                return index
        return None

    def __len__(self) -> int:
        with self._lock:
            return sum(
                1
                for subscriber in self._subscribers
                if not isinstance(subscriber, weakref.WeakMethod) or subscriber() is not None
            )

"""
Event system for deckdraw.

This module provides the publish/subscribe layer that carries session state
changes to presentation layers. Subscribers only ever receive immutable
snapshots and plain event data; they cannot reach back into the session.
"""

import itertools
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger("deckdraw.events")


class EventPriority(Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


@dataclass(frozen=True)
class _Subscription:
    callback: Callable
    priority: int
    # Registration order, breaks ties within a priority
    seq: int = field(compare=False)

    @property
    def sort_key(self):
        return (-self.priority, self.seq)


def _event_name(event_type: Union[str, Enum]) -> str:
    return event_type.name if isinstance(event_type, Enum) else event_type


class EventEmitter:
    """
    Event emitter with priority-based subscriptions.

    Handlers run in priority order, first registered first within the same
    priority. A handler that raises is logged and skipped; the emitting code
    never sees the exception.
    """

    def __init__(self):
        self._subscriptions: Dict[str, List[_Subscription]] = defaultdict(list)
        self._lock = threading.RLock()
        self._counter = itertools.count()

    def on(
        self,
        event_type: Union[str, Enum],
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to subscribe to (string or enum)
            callback: Function to call when event occurs, signature: fn(event_data)
            priority: Priority level for this handler

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        return self._add(_event_name(event_type), callback, priority)

    def once(
        self,
        event_type: Union[str, Enum],
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Subscribe to an event type for a single occurrence.

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        unsubscribe = None

        def one_time_handler(event_data):
            unsubscribe()
            callback(event_data)

        unsubscribe = self.on(event_type, one_time_handler, priority)
        return unsubscribe

    def emit(self, event_type: Union[str, Enum], data: Dict[str, Any]) -> None:
        """
        Emit an event to all registered listeners.

        Args:
            event_type: The type of event to emit
            data: The data to include with the event
        """
        name = _event_name(event_type)
        with self._lock:
            subscriptions = list(self._subscriptions.get(name, ()))

        # Handlers may subscribe or unsubscribe, so they run outside the lock
        for sub in subscriptions:
            try:
                sub.callback(data)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)

    def listener_count(self, event_type: Optional[Union[str, Enum]] = None) -> int:
        """
        Count registered listeners.

        Args:
            event_type: Optional event type. If None, counts every listener.
        """
        with self._lock:
            if event_type is None:
                return sum(len(subs) for subs in self._subscriptions.values())
            return len(self._subscriptions.get(_event_name(event_type), ()))

    def _add(self, name: str, callback: Callable, priority: EventPriority) -> Callable:
        subscription = _Subscription(callback, priority.value, next(self._counter))

        with self._lock:
            subs = self._subscriptions[name]
            subs.append(subscription)
            subs.sort(key=lambda sub: sub.sort_key)

        def unsubscribe():
            with self._lock:
                subs = self._subscriptions.get(name)
                if subs is None:
                    return
                for i, existing in enumerate(subs):
                    if existing is subscription:
                        del subs[i]
                        break
                if not subs:
                    del self._subscriptions[name]

        return unsubscribe


class EventBus:
    """
    Process-wide event bus.

    ``get_instance`` returns the shared EventEmitter, creating it on first use.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class SessionEventType(Enum):
    """Event types published by a deck session."""

    SESSION_STARTED = "session_started"
    SESSION_CLOSED = "session_closed"

    DECK_CREATED = "deck_created"
    CARD_DRAWN = "card_drawn"
    DECK_DEPLETED = "deck_depleted"
    DECK_SHUFFLED = "deck_shuffled"

    OPERATION_FAILED = "operation_failed"
    OPERATION_REJECTED = "operation_rejected"

    # Emitted after every state change, carrying the new snapshot
    SNAPSHOT_UPDATED = "snapshot_updated"

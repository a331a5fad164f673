"""
Event-driven flow control for the deckdraw API.

This module lets callers await session events, e.g. the next snapshot with a
given status, instead of polling the session.
"""

import asyncio
import uuid
from typing import Any, Callable, Dict, Optional, Tuple, Union

from deckdraw.events import EventBus, EventEmitter, SessionEventType

# Type for event data
EventData = Dict[str, Any]
# Type for event predicate functions
EventPredicate = Callable[[str, EventData], bool]


class EventWaiter:
    """
    Utility for waiting for specific events or conditions.

    Example:
        ```python
        waiter = EventWaiter()
        event, data = await waiter.wait_for(
            SessionEventType.SNAPSHOT_UPDATED,
            lambda evt, data: data["snapshot"]["status"] == "READY",
            timeout=5.0,
        )
        ```
    """

    def __init__(self, event_bus: Optional[EventEmitter] = None):
        """
        Initialize a new event waiter.

        Args:
            event_bus: Event bus to use. If None, the global instance will be used.
        """
        self.event_bus = event_bus or EventBus.get_instance()
        self._waiters = {}

    @property
    def pending(self) -> int:
        """Number of waits that have not resolved yet."""
        return len(self._waiters)

    async def wait_for(
        self,
        event_type: Union[str, SessionEventType],
        condition: Optional[EventPredicate] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[Union[str, SessionEventType], EventData]:
        """
        Wait for a specific event with an optional condition.

        Args:
            event_type: The event type to wait for
            condition: Optional predicate function to check event data
            timeout: Optional timeout in seconds

        Returns:
            Tuple of (event_type, event_data)

        Raises:
            asyncio.TimeoutError: If the timeout is reached
        """
        future = asyncio.get_running_loop().create_future()
        waiter_id = str(uuid.uuid4())
        self._waiters[waiter_id] = future

        def event_handler(data):
            if waiter_id not in self._waiters:
                return
            if condition and not condition(event_type, data):
                return
            if not future.done():
                future.set_result((event_type, data))
            self._waiters.pop(waiter_id, None)

        unsubscribe = self.event_bus.on(event_type, event_handler)

        try:
            if timeout is not None:
                return await asyncio.wait_for(future, timeout)
            return await future
        finally:
            self._waiters.pop(waiter_id, None)
            unsubscribe()

"""
Deck session API for deckdraw.

This module provides ``DeckSession``, the single owner of one remote deck
handle and of the cards drawn from it. The session serializes draw and
shuffle against the remote deck: while a call is outstanding it sits in
LOADING or BUSY and rejects every other operation without touching the
network.
"""

import asyncio
import logging
import threading
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from deckdraw.adapters import PlatformAdapter
from deckdraw.api.flow import EventPredicate, EventWaiter
from deckdraw.client import Depleted, Ok, RemoteDeckClient, TransportError
from deckdraw.client.results import DeckResult
from deckdraw.constants import build_config
from deckdraw.errors import SessionClosedError
from deckdraw.events import EventBus, EventPriority, SessionEventType
from deckdraw.state import (
    ErrorInfo,
    PendingOperation,
    SessionSnapshot,
    SessionState,
    SessionTransitions,
)

logger = logging.getLogger("deckdraw.session")


class DeckSession:
    """
    Session over one remote deck.

    The session is the only writer of its ``SessionState``. Every operation
    returns the resulting ``SessionSnapshot`` and publishes it as a
    ``SNAPSHOT_UPDATED`` event, and to the adapter if one is attached.

    Attributes:
        client: Remote deck client used for all provider calls
        adapter: Optional presentation adapter that receives snapshots
        config: Effective configuration
        event_bus: The event bus session events are published on
        event_handlers: Unsubscribe functions registered through ``on``/``once``
        session_id: Unique identifier attached to every event
    """

    def __init__(
        self,
        client: Optional[RemoteDeckClient] = None,
        adapter: Optional[PlatformAdapter] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a new session.

        Args:
            client: Remote deck client. If None, one is created from ``config``
                    and closed by ``shutdown``.
            adapter: Optional presentation adapter
            config: Configuration overrides merged over the defaults
        """
        self.config = build_config(config)
        self.client = client or RemoteDeckClient(self.config)
        self._owns_client = client is None
        self.adapter = adapter
        self.event_bus = EventBus.get_instance()
        self.event_handlers = {}
        self.session_id = str(uuid.uuid4())

        self._state = SessionState()
        self._closed = False
        self._loop = None  # Event loop for the sync wrappers
        self._async_lock = threading.Lock()

        self.event_waiter = EventWaiter(self.event_bus)

    async def __aenter__(self) -> "DeckSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    @property
    def state(self) -> SessionState:
        """The current immutable session state."""
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def current_snapshot(self) -> SessionSnapshot:
        """
        Get a read-only view of the session.

        Returns:
            Snapshot of the current state; no side effects
        """
        return self._state.to_snapshot()

    async def initialize(self) -> SessionSnapshot:
        """
        Create a new shuffled deck.

        Permitted from UNINITIALIZED, or FAILED after a failed initialize.

        Returns:
            Snapshot after the call: READY on success, FAILED otherwise
        """
        self._check_open()
        started = SessionTransitions.begin_initialize(self._state)
        if started is self._state:
            return await self._reject("initialize")

        self._state = started
        await self._emit(SessionEventType.SESSION_STARTED, {})
        await self._publish()

        result = await self._call("initialize", self.client.create_shuffled_deck)
        if self._closed:
            return self._discard_late_result("initialize")

        match result:
            case Ok(payload=deck):
                self._state = SessionTransitions.deck_created(self._state, deck)
                await self._emit(
                    SessionEventType.DECK_CREATED,
                    {"deck_id": deck.id, "remaining": deck.remaining},
                )
            case _:
                await self._fail("initialize", result)

        return await self._publish()

    async def draw(self) -> SessionSnapshot:
        """
        Draw one card from the deck.

        Permitted from READY, or FAILED holding a READY state.

        Returns:
            Snapshot after the call: READY with one more card, EXHAUSTED with
            the history unchanged, or FAILED with the history preserved
        """
        self._check_open()
        started = SessionTransitions.begin_operation(self._state, PendingOperation.DRAW)
        if started is self._state:
            return await self._reject("draw")

        self._state = started
        await self._publish()

        deck_id = started.deck.id
        result = await self._call("draw", lambda: self.client.draw_one(deck_id))
        if self._closed:
            return self._discard_late_result("draw")

        match result:
            case Ok(payload=drawn):
                self._state = SessionTransitions.card_drawn(
                    self._state, drawn.card, drawn.remaining
                )
                await self._emit(
                    SessionEventType.CARD_DRAWN,
                    {
                        **drawn.card.to_view().to_dict(),
                        "remaining": drawn.remaining,
                        "drawn": len(self._state.history),
                    },
                )
            case Depleted():
                self._state = SessionTransitions.deck_depleted(self._state)
                await self._emit(
                    SessionEventType.DECK_DEPLETED,
                    {"deck_id": deck_id, "drawn": len(self._state.history)},
                )
            case _:
                await self._fail("draw", result)

        return await self._publish()

    async def reshuffle(self) -> SessionSnapshot:
        """
        Return every card to the deck and shuffle it.

        Permitted from READY or EXHAUSTED, or FAILED holding either. The
        history is cleared only once the provider confirms the shuffle.

        Returns:
            Snapshot after the call: READY with an empty history, or FAILED
            with the history preserved
        """
        self._check_open()
        started = SessionTransitions.begin_operation(
            self._state, PendingOperation.SHUFFLE
        )
        if started is self._state:
            return await self._reject("reshuffle")

        self._state = started
        await self._publish()

        deck_id = started.deck.id
        result = await self._call("reshuffle", lambda: self.client.shuffle(deck_id))
        if self._closed:
            return self._discard_late_result("reshuffle")

        match result:
            case Ok(payload=deck):
                cleared = len(self._state.history)
                self._state = SessionTransitions.deck_reshuffled(self._state, deck)
                await self._emit(
                    SessionEventType.DECK_SHUFFLED,
                    {"deck_id": deck.id, "remaining": deck.remaining, "cleared": cleared},
                )
            case _:
                await self._fail("reshuffle", result)

        return await self._publish()

    async def retry(self) -> SessionSnapshot:
        """
        Repeat the operation that put the session into FAILED.

        Returns:
            Snapshot after the retried operation, or the unchanged snapshot
            if the session is not FAILED
        """
        error = self._state.error
        if error is None:
            return await self._reject("retry")

        operations = {
            "initialize": self.initialize,
            "draw": self.draw,
            "reshuffle": self.reshuffle,
        }
        return await operations[error.operation]()

    async def shutdown(self) -> None:
        """
        Close the session.

        Unsubscribes handlers registered through ``on``/``once``, closes the
        client if the session created it and shuts the adapter down. A reply
        to an operation still in flight is dropped when it arrives.
        """
        if self._closed:
            return
        self._closed = True

        await self._emit(SessionEventType.SESSION_CLOSED, {})

        for unsubscribe_funcs in self.event_handlers.values():
            for unsubscribe in unsubscribe_funcs:
                unsubscribe()
        self.event_handlers.clear()

        if self._owns_client:
            await self.client.close()
        if self.adapter:
            await self.adapter.shutdown()

        logger.debug(f"Session {self.session_id} closed")

    def on(
        self,
        event_type: Union[str, SessionEventType],
        handler: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Register an event handler.

        Handlers receive the event data dictionary. Events from other
        sessions sharing the bus are filtered out.

        Args:
            event_type: Type of event to listen for
            handler: Event handler function
            priority: Priority level for the handler

        Returns:
            Function to call to unsubscribe the handler
        """
        return self._subscribe(event_type, handler, priority)

    def once(
        self,
        event_type: Union[str, SessionEventType],
        handler: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Register an event handler that will be called only once.

        Args:
            event_type: Type of event to listen for
            handler: Event handler function
            priority: Priority level for the handler

        Returns:
            Function to call to unsubscribe the handler
        """
        return self._subscribe(event_type, handler, priority, once=True)

    async def wait_for_event(
        self,
        event_type: Union[str, SessionEventType],
        condition: Optional[EventPredicate] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[Union[str, SessionEventType], Dict[str, Any]]:
        """
        Wait for an event published by this session.

        Args:
            event_type: Type of event to wait for
            condition: Optional condition to check event data
            timeout: Optional timeout in seconds

        Returns:
            Tuple of (event_type, event_data)

        Raises:
            asyncio.TimeoutError: If the timeout is reached
        """

        def own_event(evt, data):
            if data.get("session_id") != self.session_id:
                return False
            return condition is None or condition(evt, data)

        return await self.event_waiter.wait_for(event_type, own_event, timeout)

    # Synchronous API wrappers

    def initialize_sync(self) -> SessionSnapshot:
        """
        Synchronous wrapper for initialize method.
        """
        return self._run_async(self.initialize())

    def draw_sync(self) -> SessionSnapshot:
        """
        Synchronous wrapper for draw method.
        """
        return self._run_async(self.draw())

    def reshuffle_sync(self) -> SessionSnapshot:
        """
        Synchronous wrapper for reshuffle method.
        """
        return self._run_async(self.reshuffle())

    def shutdown_sync(self) -> None:
        """
        Synchronous wrapper for shutdown method.
        """
        return self._run_async(self.shutdown())

    # Internals

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError(f"Session {self.session_id} has been shut down")

    def _subscribe(
        self,
        event_type: Union[str, SessionEventType],
        handler: Callable,
        priority: EventPriority,
        once: bool = False,
    ) -> Callable:
        if isinstance(event_type, str):
            try:
                event_type = SessionEventType[event_type.upper()]
            except KeyError:
                # Keep as string if not a known enum value
                pass

        unsubscribe_ref = []

        def session_handler(data):
            if data.get("session_id") != self.session_id:
                return
            # Only this session's events count towards a once subscription
            if once:
                unsubscribe_ref[0]()
            handler(data)

        unsubscribe_ref.append(self.event_bus.on(event_type, session_handler, priority))
        self.event_handlers.setdefault(event_type, []).append(unsubscribe_ref[0])
        return unsubscribe_ref[0]

    async def _call(
        self, operation: str, request: Callable[[], Awaitable[DeckResult]]
    ) -> DeckResult:
        """
        Issue one remote call, applying the optional operation timeout.

        An unexpected exception (or cancellation) still moves the session out
        of LOADING/BUSY before it propagates.
        """
        timeout = self.config.get("operation_timeout")
        logger.debug(f"{operation}: remote call started ({self._state.status.name})")
        try:
            if timeout:
                return await asyncio.wait_for(request(), timeout)
            return await request()
        except asyncio.TimeoutError:
            return TransportError(f"{operation} timed out after {timeout}s")
        except asyncio.CancelledError:
            if not self._closed:
                await self._fail(operation, TransportError(f"{operation} was cancelled"))
                await self._publish()
            raise
        except Exception as e:
            logger.error(f"{operation}: unexpected client failure: {e}", exc_info=True)
            if not self._closed:
                await self._fail(operation, TransportError(str(e) or type(e).__name__))
                await self._publish()
            raise

    def _discard_late_result(self, operation: str) -> SessionSnapshot:
        # shutdown() ran while the call was outstanding; the reply is dropped
        logger.debug(f"{operation}: reply arrived after shutdown, ignored")
        return self.current_snapshot()

    async def _fail(self, operation: str, result: DeckResult) -> None:
        error: ErrorInfo = result.to_error_info(operation)
        self._state = SessionTransitions.operation_failed(self._state, error)
        logger.warning(f"{operation} failed: {error}")
        await self._emit(
            SessionEventType.OPERATION_FAILED,
            {"operation": operation, "kind": error.kind.value, "detail": error.detail},
        )

    async def _reject(self, operation: str) -> SessionSnapshot:
        logger.warning(
            f"{operation} rejected while session is {self._state.status.name}"
        )
        await self._emit(
            SessionEventType.OPERATION_REJECTED,
            {"operation": operation, "status": self._state.status.name},
        )
        return self.current_snapshot()

    async def _emit(self, event_type: SessionEventType, data: Dict[str, Any]) -> None:
        data = {**data, "session_id": self.session_id, "timestamp": time.time()}
        self.event_bus.emit(event_type, data)
        if self.adapter:
            await self._notify_adapter(
                self.adapter.notify_session_event, event_type.name, event_type, data
            )

    async def _publish(self) -> SessionSnapshot:
        snapshot = self.current_snapshot()
        snapshot_dict = snapshot.to_dict()
        await self._emit(SessionEventType.SNAPSHOT_UPDATED, {"snapshot": snapshot_dict})
        if self.adapter:
            await self._notify_adapter(
                self.adapter.render_snapshot, "render_snapshot", snapshot_dict
            )
        return snapshot

    async def _notify_adapter(self, method: Callable, what: str, *args) -> None:
        """Call an adapter hook; its exceptions are logged, never raised."""
        try:
            await method(*args)
        except Exception as e:
            logger.error(f"Adapter failed during {what}: {e}", exc_info=True)

    def _run_async(self, coro):
        """
        Run an async coroutine from a synchronous context.

        Args:
            coro: Coroutine to run

        Returns:
            Result of the coroutine
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            coro.close()
            raise RuntimeError(
                "Attempting to use synchronous method inside a running event loop. "
                "Use the async version of this method instead."
            )

        with self._async_lock:
            if self._loop is None or self._loop.is_closed():
                self._loop = asyncio.new_event_loop()
            return self._loop.run_until_complete(coro)

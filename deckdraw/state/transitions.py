"""
State transition functions for a deck session.

This module provides pure functions for moving a session between states,
without modifying the original state objects. A transition that is not
permitted from the given state returns that state unchanged, which is how
callers detect a rejected operation.
"""

from dataclasses import replace
from typing import Optional

from deckdraw.common.card import Card
from deckdraw.state.models import (
    DeckState,
    ErrorInfo,
    PendingOperation,
    SessionState,
    SessionStatus,
)


class SessionTransitions:
    """
    Pure functions for session state transitions.

    This class contains static methods that implement the deck session state
    machine. Each method takes a state and returns a new state, without
    modifying the original.
    """

    @staticmethod
    def begin_initialize(state: SessionState) -> SessionState:
        """
        Enter LOADING to create a deck.

        Args:
            state: Current session state

        Returns:
            LOADING state, or ``state`` unchanged if initialize is not permitted
        """
        if state.is_busy or not state.can_initialize:
            return state
        return SessionState(status=SessionStatus.LOADING)

    @staticmethod
    def deck_created(state: SessionState, deck: DeckState) -> SessionState:
        """
        Apply a successful create-shuffled-deck reply.

        Args:
            state: Current session state, expected to be LOADING
            deck: The deck returned by the provider

        Returns:
            READY state with an empty history
        """
        if state.status is not SessionStatus.LOADING:
            return state
        return SessionState(status=SessionStatus.READY, deck=deck)

    @staticmethod
    def begin_operation(
        state: SessionState, operation: PendingOperation
    ) -> SessionState:
        """
        Enter BUSY for a draw or shuffle.

        A FAILED state resumes from the state it holds, so the operation is
        evaluated exactly as it would have been before the failure.

        Args:
            state: Current session state
            operation: The operation about to be issued

        Returns:
            BUSY state, or ``state`` unchanged if the operation is not permitted
        """
        if state.is_busy:
            return state

        if operation is PendingOperation.DRAW and not state.can_draw:
            return state
        if operation is PendingOperation.SHUFFLE and not state.can_shuffle:
            return state

        base = state.effective
        return replace(
            base,
            status=SessionStatus.BUSY,
            pending_op=operation,
            last_good=base,
            error=None,
        )

    @staticmethod
    def card_drawn(state: SessionState, card: Card, remaining: int) -> SessionState:
        """
        Apply a successful draw.

        Args:
            state: Current session state, expected to be BUSY(DRAW)
            card: The card returned by the provider
            remaining: Remaining count reported alongside the card

        Returns:
            READY state with the card appended to the history
        """
        if not _is_pending(state, PendingOperation.DRAW):
            return state

        return SessionState(
            status=SessionStatus.READY,
            deck=replace(state.deck, remaining=remaining),
            history=state.history + (card,),
        )

    @staticmethod
    def deck_depleted(state: SessionState) -> SessionState:
        """
        Apply a draw reply that reported no remaining cards.

        Args:
            state: Current session state, expected to be BUSY(DRAW)

        Returns:
            EXHAUSTED state with the history unchanged
        """
        if not _is_pending(state, PendingOperation.DRAW):
            return state

        return SessionState(
            status=SessionStatus.EXHAUSTED,
            deck=replace(state.deck, remaining=0),
            history=state.history,
        )

    @staticmethod
    def deck_reshuffled(state: SessionState, deck: DeckState) -> SessionState:
        """
        Apply a successful shuffle.

        Args:
            state: Current session state, expected to be BUSY(SHUFFLE)
            deck: Deck as reported by the shuffle reply

        Returns:
            READY state with a cleared history
        """
        if not _is_pending(state, PendingOperation.SHUFFLE):
            return state
        return SessionState(status=SessionStatus.READY, deck=deck)

    @staticmethod
    def operation_failed(state: SessionState, error: ErrorInfo) -> SessionState:
        """
        Record a failed remote call.

        Args:
            state: Current session state, expected to be LOADING or BUSY
            error: Description of the failure

        Returns:
            FAILED state holding the last good state
        """
        if not state.is_busy:
            return state

        last_good: Optional[SessionState]
        if state.status is SessionStatus.LOADING:
            last_good = SessionState(status=SessionStatus.UNINITIALIZED)
        else:
            last_good = state.last_good

        return SessionState(
            status=SessionStatus.FAILED,
            last_good=last_good,
            error=error,
        )


def _is_pending(state: SessionState, operation: PendingOperation) -> bool:
    return state.status is SessionStatus.BUSY and state.pending_op is operation

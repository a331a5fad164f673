"""
Immutable state management for deckdraw.

This package provides immutable state classes and pure transition functions
for managing a deck session in a predictable and testable way.
"""

from deckdraw.state.models import (
    DeckState,
    ErrorInfo,
    ErrorKind,
    PendingOperation,
    SessionSnapshot,
    SessionState,
    SessionStatus,
)

from deckdraw.state.transitions import SessionTransitions

__all__ = [
    "DeckState",
    "ErrorInfo",
    "ErrorKind",
    "PendingOperation",
    "SessionSnapshot",
    "SessionState",
    "SessionStatus",
    "SessionTransitions",
]

"""
Immutable state models for a deck session.

This module provides dataclasses for representing the state of one remote
deck session in an immutable manner. These classes are designed to be used
with the pure transition functions in ``deckdraw.state.transitions``, which
create new state instances rather than modifying existing ones.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from enum import Enum, auto
import time

from deckdraw.common.card import Card, CardView


class SessionStatus(Enum):
    """
    Tag of the session state variant.
    """

    UNINITIALIZED = auto()
    LOADING = auto()
    READY = auto()
    BUSY = auto()
    EXHAUSTED = auto()
    FAILED = auto()


class PendingOperation(Enum):
    """Mutating remote operation a BUSY session is waiting on."""

    DRAW = auto()
    SHUFFLE = auto()


class ErrorKind(Enum):
    """
    Classification of remote outcomes that are not plain successes.

    DEPLETED is listed for completeness of the taxonomy; it never produces a
    FAILED state.
    """

    DEPLETED = "depleted"
    TRANSPORT = "transport"
    REMOTE = "remote"
    PROTOCOL = "protocol"


@dataclass(frozen=True)
class ErrorInfo:
    """
    Description of the failure that put a session into FAILED.

    Attributes:
        kind: Error classification
        detail: Human readable detail from the transport or provider
        operation: Name of the operation that failed
    """

    kind: ErrorKind
    detail: str
    operation: str = ""

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}"


@dataclass(frozen=True)
class DeckState:
    """
    Immutable representation of one remote deck.

    Attributes:
        id: Opaque deck handle assigned by the provider
        remaining: Last known number of undrawn cards (advisory only)
    """

    id: str
    remaining: int = 0


@dataclass(frozen=True)
class SessionState:
    """
    Immutable tagged state of a deck session.

    Which fields are meaningful depends on ``status``:

    - UNINITIALIZED, LOADING: none
    - READY, EXHAUSTED: deck, history
    - BUSY: deck, history, pending_op
    - FAILED: last_good, error

    Attributes:
        status: Variant tag
        deck: The remote deck handle, once created
        history: Cards drawn from this deck, in draw order
        pending_op: Operation outstanding while BUSY
        last_good: State to resume from when FAILED
        error: Failure description when FAILED
        timestamp: Time when this state was created
    """

    status: SessionStatus = SessionStatus.UNINITIALIZED
    deck: Optional[DeckState] = None
    history: Tuple[Card, ...] = ()
    pending_op: Optional[PendingOperation] = None
    last_good: Optional["SessionState"] = None
    error: Optional[ErrorInfo] = None
    timestamp: float = field(default_factory=time.time, compare=False)

    @property
    def effective(self) -> "SessionState":
        """The state that operations are evaluated against."""
        if self.status is SessionStatus.FAILED and self.last_good is not None:
            return self.last_good
        return self

    @property
    def is_busy(self) -> bool:
        """Whether a remote call is outstanding."""
        return self.status in (SessionStatus.LOADING, SessionStatus.BUSY)

    @property
    def can_initialize(self) -> bool:
        return self.effective.status is SessionStatus.UNINITIALIZED

    @property
    def can_draw(self) -> bool:
        return self.effective.status is SessionStatus.READY

    @property
    def can_shuffle(self) -> bool:
        return self.effective.status in (SessionStatus.READY, SessionStatus.EXHAUSTED)

    def to_snapshot(self) -> "SessionSnapshot":
        """Build the read-only presentation view of this state."""
        base = self.effective
        return SessionSnapshot(
            status=self.status,
            history=tuple(card.to_view() for card in base.history),
            can_draw=self.can_draw,
            can_shuffle=self.can_shuffle,
            last_error=str(self.error) if self.error else None,
            deck_id=base.deck.id if base.deck else None,
            remaining=base.deck.remaining if base.deck else None,
            pending_op=self.pending_op,
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Immutable view of a session handed to presentation layers.

    ``can_draw`` and ``can_shuffle`` are derived from the state the session
    would resume from, so a FAILED session reports what a retry may do.

    Attributes:
        status: Current status tag
        history: Drawn cards, in draw order
        can_draw: Whether draw() would issue a remote call
        can_shuffle: Whether reshuffle() would issue a remote call
        last_error: Text of the last failure, if the session is FAILED
        deck_id: Handle of the current deck, if any
        remaining: Last known remaining count, if any
        pending_op: Operation in flight while BUSY
    """

    status: SessionStatus
    history: Tuple[CardView, ...] = ()
    can_draw: bool = False
    can_shuffle: bool = False
    last_error: Optional[str] = None
    deck_id: Optional[str] = None
    remaining: Optional[int] = None
    pending_op: Optional[PendingOperation] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the snapshot to a JSON friendly dictionary."""
        return {
            "status": self.status.name,
            "history": [card.to_dict() for card in self.history],
            "can_draw": self.can_draw,
            "can_shuffle": self.can_shuffle,
            "last_error": self.last_error,
            "deck_id": self.deck_id,
            "remaining": self.remaining,
            "pending_op": self.pending_op.name if self.pending_op else None,
        }

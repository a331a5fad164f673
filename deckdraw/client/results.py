"""
Result vocabulary returned by the remote deck client.

Every client call resolves to exactly one of ``Ok``, ``Depleted``,
``TransportError`` or ``RemoteError``. Callers dispatch on the type instead
of catching exceptions, so an exhausted deck can never be mistaken for a
failed call.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from deckdraw.common.card import Card
from deckdraw.state.models import ErrorInfo, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """The provider accepted the call; ``payload`` holds the parsed reply."""

    payload: T


@dataclass(frozen=True)
class Depleted:
    """The provider answered a draw but the deck has no cards left."""

    remaining: int = 0


@dataclass(frozen=True)
class TransportError:
    """The call never produced a provider answer (network, timeout)."""

    detail: str

    def to_error_info(self, operation: str = "") -> ErrorInfo:
        return ErrorInfo(ErrorKind.TRANSPORT, self.detail, operation)


@dataclass(frozen=True)
class RemoteError:
    """
    The provider answered with a failure, or with a reply that could not be
    understood. ``kind`` is PROTOCOL for the latter.
    """

    detail: str
    kind: ErrorKind = ErrorKind.REMOTE

    def to_error_info(self, operation: str = "") -> ErrorInfo:
        return ErrorInfo(self.kind, self.detail, operation)


@dataclass(frozen=True)
class DrawResult:
    """Parsed payload of a successful draw."""

    card: Card
    remaining: int


Failure = Union[TransportError, RemoteError]
DeckResult = Union[Ok[Any], Depleted, TransportError, RemoteError]

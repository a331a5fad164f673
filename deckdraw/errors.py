"""
Exception types for deckdraw.

Expected remote outcomes (a depleted deck, a dropped connection, a provider
refusal) are never raised across the session boundary; they travel as
results. The exceptions here cover malformed provider replies, which the
client converts into results, and misuse of a closed session.
"""


class DeckdrawError(Exception):
    """Base class for all deckdraw exceptions."""


class ProtocolError(DeckdrawError):
    """Raised when a provider reply does not have the expected shape."""

    def __init__(self, message: str, payload=None):
        super().__init__(message)
        self.payload = payload


class SessionError(DeckdrawError):
    """Base class for session misuse."""


class SessionClosedError(SessionError):
    """Raised when an operation is invoked on a session that was shut down."""

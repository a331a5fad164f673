"""
Remote deck client for deckdraw.

This package wraps the card provider's HTTP API and reports every outcome
through a closed set of result types.
"""

from deckdraw.client.remote import RemoteDeckClient
from deckdraw.client.results import (
    DeckResult,
    Depleted,
    DrawResult,
    Ok,
    RemoteError,
    TransportError,
)

__all__ = [
    "RemoteDeckClient",
    "DeckResult",
    "Depleted",
    "DrawResult",
    "Ok",
    "RemoteError",
    "TransportError",
]

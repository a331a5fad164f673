"""
API module for deckdraw.

This module provides the deck session API, usable from both asynchronous
and synchronous code.
"""

from deckdraw.api.session import DeckSession
from deckdraw.api.flow import EventWaiter

__all__ = ["DeckSession", "EventWaiter"]

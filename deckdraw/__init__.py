"""
deckdraw: a session manager for a remote shuffled deck of cards.
"""

__version__ = "0.1.0"

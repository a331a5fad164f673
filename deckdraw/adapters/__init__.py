"""
Presentation adapters for deckdraw.

This package provides adapters that render deck session snapshots on a
concrete platform (console, tests).
"""

from deckdraw.adapters.base import PlatformAdapter, UserCommand, valid_commands_for
from deckdraw.adapters.cli import CLIAdapter
from deckdraw.adapters.dummy import DummyAdapter

__all__ = [
    "PlatformAdapter",
    "UserCommand",
    "valid_commands_for",
    "CLIAdapter",
    "DummyAdapter",
]

"""
Event system for deckdraw.

This package provides the event emitter and bus used to publish session
snapshots to presentation layers.
"""

from deckdraw.events.emitter import (
    EventEmitter,
    EventBus,
    EventPriority,
    SessionEventType,
)

__all__ = ["EventEmitter", "EventBus", "EventPriority", "SessionEventType"]

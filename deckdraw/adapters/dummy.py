"""
Dummy adapter for deckdraw, used for testing and scripted runs.

This module provides a non-interactive adapter that records every snapshot
and event it receives and answers command requests from a script.
"""

from typing import Any, Dict, List, Optional, Union
from enum import Enum

from deckdraw.adapters.base import PlatformAdapter, UserCommand


class DummyAdapter(PlatformAdapter):
    """
    Dummy adapter for testing.

    This adapter doesn't interact with any real platform. Commands are taken
    from ``script`` in order; when the script runs out, or the next scripted
    command is not currently valid, QUIT is returned.
    """

    def __init__(
        self, script: Optional[List[UserCommand]] = None, verbose: bool = False
    ):
        """
        Initialize the dummy adapter.

        Args:
            script: Commands to return from request_command, in order
            verbose: Whether to print events to stdout (useful for debugging)
        """
        self.script = list(script or [])
        self.verbose = verbose

        self.events = []
        self.rendered_snapshots = []
        self.initialized = False
        self.shut_down = False

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.shut_down = True

    async def render_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """
        Store the snapshot for later inspection.

        Args:
            snapshot: Snapshot dictionary
        """
        self.rendered_snapshots.append(snapshot)

        if self.verbose:
            labels = [card["label"] for card in snapshot.get("history", [])]
            print(f"[{snapshot.get('status')}] {labels}")

    async def notify_session_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Store the event for later inspection.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        event_type_str = event_type.name if isinstance(event_type, Enum) else event_type
        self.events.append((event_type_str, data))

        if self.verbose:
            print(f"Event: {event_type_str} {data}")

    async def request_command(
        self,
        valid_commands: List[UserCommand],
        timeout_seconds: Optional[float] = None,
    ) -> UserCommand:
        """
        Return the next scripted command.

        Args:
            valid_commands: Commands the session currently allows
            timeout_seconds: Ignored

        Returns:
            The next scripted command, or QUIT
        """
        if not self.script:
            return UserCommand.QUIT

        command = self.script.pop(0)
        if command not in valid_commands:
            return UserCommand.QUIT
        return command

    def get_events_by_type(self, event_type: Union[str, Enum]) -> List[Dict[str, Any]]:
        """
        Get all events of a specific type.

        Args:
            event_type: The type of events to retrieve

        Returns:
            A list of event data dictionaries
        """
        event_type_str = event_type.name if isinstance(event_type, Enum) else event_type
        return [data for typ, data in self.events if typ == event_type_str]

    @property
    def last_snapshot(self) -> Optional[Dict[str, Any]]:
        return self.rendered_snapshots[-1] if self.rendered_snapshots else None

    def clear(self) -> None:
        """Clear all stored events and snapshots."""
        self.events.clear()
        self.rendered_snapshots.clear()

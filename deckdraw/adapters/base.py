"""
Base adapter interface for deckdraw.

This module defines the interface that presentation adapters implement to
show deck session snapshots and collect user intent.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union
from enum import Enum, auto


class UserCommand(Enum):
    """User intents a presentation layer can forward to a session."""

    DRAW = auto()
    SHUFFLE = auto()
    RETRY = auto()
    QUIT = auto()


class PlatformAdapter(ABC):
    """
    Base interface for presentation adapters.

    Adapters receive snapshot dictionaries (``SessionSnapshot.to_dict()``)
    and session events. They never hold a reference to session internals, so
    rendering cannot desynchronize from the session's own state.
    """

    @abstractmethod
    async def render_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """
        Render the current session snapshot.

        Args:
            snapshot: Snapshot dictionary (status, history, can_draw, ...)
        """
        pass

    @abstractmethod
    async def notify_session_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Notify the platform of a session event.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        pass

    @abstractmethod
    async def request_command(
        self,
        valid_commands: List[UserCommand],
        timeout_seconds: Optional[float] = None,
    ) -> UserCommand:
        """
        Ask the user what to do next.

        Args:
            valid_commands: Commands the session currently allows
            timeout_seconds: Optional timeout for the decision

        Returns:
            The chosen command

        Raises:
            asyncio.TimeoutError: If no command arrives within the timeout
        """
        pass

    async def initialize(self) -> None:
        """
        Initialize the adapter.

        Called before the first snapshot is rendered.
        """
        pass

    async def shutdown(self) -> None:
        """
        Shutdown the adapter.

        Called when the presentation loop ends.
        """
        pass


def valid_commands_for(snapshot: Dict[str, Any]) -> List[UserCommand]:
    """
    Derive the commands a user may issue from a snapshot dictionary.

    Args:
        snapshot: Snapshot dictionary

    Returns:
        Allowed commands, QUIT always last
    """
    commands = []
    if snapshot.get("can_draw"):
        commands.append(UserCommand.DRAW)
    if snapshot.get("can_shuffle"):
        commands.append(UserCommand.SHUFFLE)
    if snapshot.get("status") == "FAILED" and not commands:
        commands.append(UserCommand.RETRY)
    commands.append(UserCommand.QUIT)
    return commands

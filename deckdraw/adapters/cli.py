"""
Command-line interface adapter for deckdraw.

This module provides an adapter for console-based interaction with a deck
session: it prints snapshots as a list of drawn cards and reads commands
from standard input without blocking the event loop.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Union
from enum import Enum

from deckdraw.adapters.base import PlatformAdapter, UserCommand

logger = logging.getLogger("deckdraw.adapters.cli")

# Single-letter shortcuts accepted at the prompt
COMMAND_ALIASES = {
    "d": UserCommand.DRAW,
    "s": UserCommand.SHUFFLE,
    "r": UserCommand.RETRY,
    "q": UserCommand.QUIT,
}


class CLIAdapter(PlatformAdapter):
    """
    Command-line interface adapter.

    Output goes through ``output`` (``print`` by default) and input through
    ``input_func`` (``input`` by default), which makes the adapter easy to
    drive from tests.
    """

    def __init__(
        self,
        output: Optional[Callable[[str], None]] = None,
        input_func: Optional[Callable[[str], str]] = None,
        show_images: bool = False,
    ):
        """
        Initialize the CLI adapter.

        Args:
            output: Function used to write a line
            input_func: Function used to read a line, given a prompt
            show_images: Whether to print each card's image URL
        """
        self.output = output or print
        self.input_func = input_func or input
        self.show_images = show_images

    async def render_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """
        Print the snapshot.

        Args:
            snapshot: Snapshot dictionary
        """
        self.output("\n=== Deck ===")

        deck_id = snapshot.get("deck_id")
        if deck_id:
            self.output(f"Deck {deck_id}: {snapshot.get('remaining')} cards remaining")
        self.output(f"Status: {snapshot.get('status')}")

        history = snapshot.get("history", [])
        if history:
            self.output(f"Drawn ({len(history)}):")
            for i, card in enumerate(history):
                line = f"  {i + 1:>2}. {card['label']} [{card['id']}]"
                if self.show_images and card.get("image_ref"):
                    line += f" {card['image_ref']}"
                self.output(line)
        else:
            self.output("No cards drawn.")

        if snapshot.get("status") == "EXHAUSTED":
            self.output("The deck is empty. Shuffle to start over.")

        # Errors are a notice only; the prompt that follows shows what is allowed
        if snapshot.get("last_error"):
            self.output(f"! {snapshot['last_error']}")

        self.output("============")

    async def notify_session_event(
        self, event_type: Union[str, Enum], data: Dict[str, Any]
    ) -> None:
        """
        Print a one-line message for events worth announcing.

        Args:
            event_type: The type of event that occurred
            data: Data associated with the event
        """
        if isinstance(event_type, Enum):
            event_type = event_type.name

        message = self._format_event_message(event_type, data)
        if message:
            self.output(message)

    def _format_event_message(
        self, event_type: str, data: Dict[str, Any]
    ) -> Optional[str]:
        """
        Format an event message based on the event type.

        Returns:
            Formatted message string or None if no message needed
        """
        if event_type == "CARD_DRAWN":
            return f"Drew {data.get('label', 'a card')}"
        elif event_type == "DECK_DEPLETED":
            return "No cards remaining!"
        elif event_type == "DECK_SHUFFLED":
            return "Deck shuffled."
        elif event_type == "OPERATION_REJECTED":
            return f"Cannot {data.get('operation', 'do that')} right now."
        return None

    async def request_command(
        self,
        valid_commands: List[UserCommand],
        timeout_seconds: Optional[float] = None,
    ) -> UserCommand:
        """
        Prompt until the user enters one of ``valid_commands``.

        Commands can be entered by number, by name, or by first letter.

        Args:
            valid_commands: Commands the session currently allows
            timeout_seconds: Optional timeout for each prompt

        Returns:
            The chosen command
        """
        command_map = {str(i + 1): cmd for i, cmd in enumerate(valid_commands)}
        for cmd in valid_commands:
            command_map[cmd.name.lower()] = cmd
        for alias, cmd in COMMAND_ALIASES.items():
            if cmd in valid_commands:
                command_map[alias] = cmd

        options = ", ".join(
            f"{i + 1}: {cmd.name}" for i, cmd in enumerate(valid_commands)
        )

        while True:
            self.output(f"Options - {options}")
            choice = await self._read_line("> ", timeout_seconds)
            if choice is None:
                # End of input behaves like quitting
                return UserCommand.QUIT

            choice = choice.strip().lower()
            if choice in command_map:
                return command_map[choice]
            self.output("Invalid choice. Please try again.")

    async def _read_line(
        self, prompt: str, timeout_seconds: Optional[float]
    ) -> Optional[str]:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, self.input_func, prompt)
        try:
            if timeout_seconds:
                return await asyncio.wait_for(future, timeout_seconds)
            return await future
        except EOFError:
            logger.debug("Input closed")
            return None

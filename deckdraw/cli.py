"""
Console front end for deckdraw.

Creates a deck, then reads draw/shuffle commands until the user quits.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from deckdraw.adapters import CLIAdapter, PlatformAdapter, UserCommand, valid_commands_for
from deckdraw.api import DeckSession

logger = logging.getLogger("deckdraw.cli")


async def run_session(session: DeckSession, adapter: PlatformAdapter) -> int:
    """
    Drive a session from adapter commands until QUIT.

    Args:
        session: The session to drive; shut down on return
        adapter: Adapter supplying commands

    Returns:
        Number of commands executed, QUIT excluded
    """
    executed = 0
    await adapter.initialize()
    try:
        snapshot = await session.initialize()

        while True:
            command = await adapter.request_command(
                valid_commands_for(snapshot.to_dict())
            )
            if command is UserCommand.QUIT:
                break

            if command is UserCommand.DRAW:
                snapshot = await session.draw()
            elif command is UserCommand.SHUFFLE:
                snapshot = await session.reshuffle()
            elif command is UserCommand.RETRY:
                snapshot = await session.retry()
            executed += 1
    finally:
        await session.shutdown()

    return executed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deckdraw", description="Draw cards from a remote shuffled deck"
    )
    parser.add_argument("--base-url", help="Card provider base URL")
    parser.add_argument(
        "-n", "--deck-count", type=int, help="Number of decks to shuffle together"
    )
    parser.add_argument(
        "-t", "--timeout", type=float, help="Seconds to wait for each remote call"
    )
    parser.add_argument(
        "--images", action="store_true", help="Print image URLs of drawn cards"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = {
        "base_url": args.base_url,
        "deck_count": args.deck_count,
        "operation_timeout": args.timeout,
    }

    adapter = CLIAdapter(show_images=args.images)
    try:
        session = DeckSession(adapter=adapter, config=config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    try:
        asyncio.run(run_session(session, adapter))
    except KeyboardInterrupt:
        print("\nInterrupted. Exiting...")
    return 0


if __name__ == "__main__":
    sys.exit(main())

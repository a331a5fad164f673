"""
Tests for the console front end.
"""

import pytest

from deckdraw.adapters import DummyAdapter, UserCommand
from deckdraw.api import DeckSession
from deckdraw.cli import build_parser, main, run_session
from deckdraw.client import Depleted, Ok, TransportError
from deckdraw.state import DeckState


@pytest.mark.asyncio
async def test_run_session_scripted(make_client, draw_ok):
    """Test a scripted draw/shuffle session from start to QUIT."""
    client = make_client(
        draws=[draw_ok("AS"), Depleted()],
        shuffles=[Ok(DeckState("abc", 52))],
    )
    adapter = DummyAdapter(
        script=[UserCommand.DRAW, UserCommand.DRAW, UserCommand.SHUFFLE, UserCommand.QUIT]
    )
    session = DeckSession(client=client, adapter=adapter)

    executed = await run_session(session, adapter)

    assert executed == 3
    assert client.calls == [
        ("create",),
        ("draw", "abc"),
        ("draw", "abc"),
        ("shuffle", "abc"),
    ]
    assert adapter.initialized and adapter.shut_down
    assert session.closed
    assert adapter.last_snapshot["status"] == "READY"
    assert adapter.last_snapshot["history"] == []


@pytest.mark.asyncio
async def test_run_session_retries_failed_setup(make_client):
    """Test that RETRY is offered, and works, after a failed initialize."""
    client = make_client(create=[TransportError("offline"), Ok(DeckState("abc", 52))])
    adapter = DummyAdapter(script=[UserCommand.RETRY, UserCommand.QUIT])
    session = DeckSession(client=client, adapter=adapter)

    executed = await run_session(session, adapter)

    assert executed == 1
    assert client.count("create") == 2
    assert adapter.last_snapshot["status"] == "READY"


@pytest.mark.asyncio
async def test_run_session_stops_on_disallowed_command(make_client):
    """Test that a command the snapshot does not allow ends the run."""
    client = make_client(draws=[Depleted()])
    adapter = DummyAdapter(script=[UserCommand.DRAW, UserCommand.DRAW])
    session = DeckSession(client=client, adapter=adapter)

    executed = await run_session(session, adapter)

    # The second DRAW is not offered once EXHAUSTED, so the adapter quits
    assert executed == 1
    assert client.count("draw") == 1


def test_build_parser():
    """Test the command-line options."""
    args = build_parser().parse_args(
        ["--base-url", "http://localhost:8000/api/deck", "-n", "2", "-t", "5", "--images"]
    )
    assert args.base_url == "http://localhost:8000/api/deck"
    assert args.deck_count == 2
    assert args.timeout == 5.0
    assert args.images
    assert not args.verbose


def test_build_parser_defaults():
    """Test that unset options stay None so configuration defaults apply."""
    args = build_parser().parse_args([])
    assert args.base_url is None
    assert args.deck_count is None
    assert args.timeout is None


def test_main_rejects_invalid_deck_count(capsys):
    """Test that an invalid configuration exits with status 2."""
    assert main(["--deck-count", "0"]) == 2
    assert "Invalid configuration" in capsys.readouterr().err

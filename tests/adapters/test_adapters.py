"""
Tests for the presentation adapters.
"""

import pytest

from deckdraw.adapters import (
    CLIAdapter,
    DummyAdapter,
    UserCommand,
    valid_commands_for,
)
from deckdraw.events import SessionEventType


def snapshot_dict(status="READY", history=None, **overrides):
    snapshot = {
        "status": status,
        "history": history or [],
        "can_draw": status == "READY",
        "can_shuffle": status in ("READY", "EXHAUSTED"),
        "last_error": None,
        "deck_id": "abc",
        "remaining": 52,
        "pending_op": None,
    }
    snapshot.update(overrides)
    return snapshot


ACE = {"id": "AS", "label": "SPADES ACE", "image_ref": "https://x/AS.png"}
KING = {"id": "KH", "label": "HEARTS KING", "image_ref": "https://x/KH.png"}


class ScriptedInput:
    """input() replacement returning scripted lines, then raising EOFError."""

    def __init__(self, *lines):
        self.lines = list(lines)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


@pytest.fixture
def cli():
    """CLI adapter writing into a list."""
    lines = []
    adapter = CLIAdapter(output=lines.append)
    return adapter, lines


@pytest.mark.parametrize(
    "snapshot, expected",
    [
        (snapshot_dict("READY"), [UserCommand.DRAW, UserCommand.SHUFFLE, UserCommand.QUIT]),
        (snapshot_dict("EXHAUSTED"), [UserCommand.SHUFFLE, UserCommand.QUIT]),
        (snapshot_dict("BUSY"), [UserCommand.QUIT]),
        (snapshot_dict("LOADING"), [UserCommand.QUIT]),
        (snapshot_dict("FAILED"), [UserCommand.RETRY, UserCommand.QUIT]),
        (
            snapshot_dict("FAILED", can_draw=True, can_shuffle=True),
            [UserCommand.DRAW, UserCommand.SHUFFLE, UserCommand.QUIT],
        ),
    ],
)
def test_valid_commands_for(snapshot, expected):
    """Test that commands follow the snapshot's permissions."""
    assert valid_commands_for(snapshot) == expected


@pytest.mark.asyncio
async def test_cli_renders_history(cli):
    """Test that drawn cards are listed in order."""
    adapter, lines = cli
    await adapter.render_snapshot(snapshot_dict(history=[ACE, KING], remaining=50))

    assert "Deck abc: 50 cards remaining" in lines
    assert "Status: READY" in lines
    assert "Drawn (2):" in lines
    assert lines.index("   1. SPADES ACE [AS]") < lines.index("   2. HEARTS KING [KH]")
    assert not any("https://" in line for line in lines)


@pytest.mark.asyncio
async def test_cli_renders_images_when_enabled():
    """Test that image URLs are shown only on request."""
    lines = []
    adapter = CLIAdapter(output=lines.append, show_images=True)
    await adapter.render_snapshot(snapshot_dict(history=[ACE]))
    assert "   1. SPADES ACE [AS] https://x/AS.png" in lines


@pytest.mark.asyncio
async def test_cli_renders_empty_and_exhausted(cli):
    """Test the empty history and the exhausted notice."""
    adapter, lines = cli
    await adapter.render_snapshot(snapshot_dict("EXHAUSTED", remaining=0))

    assert "No cards drawn." in lines
    assert "The deck is empty. Shuffle to start over." in lines


@pytest.mark.asyncio
async def test_cli_renders_error_notice(cli):
    """Test that the last error is shown with the snapshot."""
    adapter, lines = cli
    await adapter.render_snapshot(
        snapshot_dict("FAILED", history=[ACE], last_error="transport: connection reset")
    )
    assert "! transport: connection reset" in lines
    assert "Drawn (1):" in lines


@pytest.mark.asyncio
async def test_cli_event_messages(cli):
    """Test the one-line messages printed for session events."""
    adapter, lines = cli

    await adapter.notify_session_event(SessionEventType.CARD_DRAWN, dict(ACE))
    await adapter.notify_session_event("DECK_DEPLETED", {})
    await adapter.notify_session_event(SessionEventType.DECK_SHUFFLED, {"cleared": 3})
    await adapter.notify_session_event(
        SessionEventType.OPERATION_REJECTED, {"operation": "draw"}
    )
    await adapter.notify_session_event(SessionEventType.SNAPSHOT_UPDATED, {})

    assert lines == [
        "Drew SPADES ACE",
        "No cards remaining!",
        "Deck shuffled.",
        "Cannot draw right now.",
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "entry, expected",
    [
        ("1", UserCommand.DRAW),
        ("2", UserCommand.SHUFFLE),
        ("draw", UserCommand.DRAW),
        ("  SHUFFLE ", UserCommand.SHUFFLE),
        ("d", UserCommand.DRAW),
        ("s", UserCommand.SHUFFLE),
        ("q", UserCommand.QUIT),
    ],
)
async def test_cli_request_command(entry, expected):
    """Test that commands are accepted by number, name and alias."""
    lines = []
    adapter = CLIAdapter(output=lines.append, input_func=ScriptedInput(entry))

    command = await adapter.request_command(
        [UserCommand.DRAW, UserCommand.SHUFFLE, UserCommand.QUIT]
    )

    assert command is expected
    assert lines[0] == "Options - 1: DRAW, 2: SHUFFLE, 3: QUIT"


@pytest.mark.asyncio
async def test_cli_request_command_reprompts_on_invalid_input():
    """Test that a disallowed command is refused and the prompt repeats."""
    lines = []
    scripted = ScriptedInput("d", "draw", "7", "s")
    adapter = CLIAdapter(output=lines.append, input_func=scripted)

    command = await adapter.request_command([UserCommand.SHUFFLE, UserCommand.QUIT])

    assert command is UserCommand.SHUFFLE
    assert lines.count("Invalid choice. Please try again.") == 3
    assert scripted.prompts == ["> "] * 4


@pytest.mark.asyncio
async def test_cli_end_of_input_quits():
    """Test that EOF on stdin is treated as QUIT."""
    adapter = CLIAdapter(output=lambda line: None, input_func=ScriptedInput())
    command = await adapter.request_command([UserCommand.DRAW, UserCommand.QUIT])
    assert command is UserCommand.QUIT


@pytest.mark.asyncio
async def test_dummy_adapter_records_everything():
    """Test that the dummy adapter stores snapshots and events."""
    adapter = DummyAdapter()
    await adapter.initialize()
    await adapter.render_snapshot(snapshot_dict(history=[ACE]))
    await adapter.notify_session_event(SessionEventType.CARD_DRAWN, dict(ACE))
    await adapter.notify_session_event("DECK_SHUFFLED", {"cleared": 1})
    await adapter.shutdown()

    assert adapter.initialized and adapter.shut_down
    assert adapter.last_snapshot["history"] == [ACE]
    assert adapter.get_events_by_type("CARD_DRAWN") == [ACE]
    assert adapter.get_events_by_type(SessionEventType.DECK_SHUFFLED) == [{"cleared": 1}]

    adapter.clear()
    assert adapter.events == []
    assert adapter.last_snapshot is None


@pytest.mark.asyncio
async def test_dummy_adapter_follows_script():
    """Test scripted commands, falling back to QUIT."""
    adapter = DummyAdapter(script=[UserCommand.DRAW, UserCommand.SHUFFLE, UserCommand.DRAW])
    valid = [UserCommand.DRAW, UserCommand.QUIT]

    assert await adapter.request_command(valid) is UserCommand.DRAW
    # SHUFFLE is not allowed here
    assert await adapter.request_command(valid) is UserCommand.QUIT
    assert await adapter.request_command(valid) is UserCommand.DRAW
    assert await adapter.request_command(valid) is UserCommand.QUIT

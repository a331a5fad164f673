"""
Pytest configuration for deckdraw tests.

This module contains the fixtures shared by the test suite: a scripted
stand-in for the remote deck client, a fake aiohttp session, and the event
bus reset.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from deckdraw.client import DrawResult, Ok
from deckdraw.common.card import Card
from deckdraw.constants import BASE_URL_ENV_VAR
from deckdraw.events import EventBus
from deckdraw.state import DeckState


# Reset event bus before each test
@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


@pytest.fixture(autouse=True)
def clear_base_url_env(monkeypatch):
    """Keep a developer's DECKDRAW_API_URL out of the tests."""
    monkeypatch.delenv(BASE_URL_ENV_VAR, raising=False)


def make_card(code: str = "AS", suit: str = "SPADES", value: str = "ACE") -> Card:
    return Card(
        code=code,
        suit=suit,
        value=value,
        image_ref=f"https://deckofcardsapi.com/static/img/{code}.png",
    )


def ok_draw(code: str = "AS", suit: str = "SPADES", value: str = "ACE", remaining: int = 51):
    return Ok(DrawResult(card=make_card(code, suit, value), remaining=remaining))


class FakeDeckClient:
    """
    Scripted replacement for RemoteDeckClient.

    Each method pops its next result from a queue. A queued exception is
    raised instead of returned. When ``gate`` is set to an asyncio.Event,
    every call waits on it, which keeps the call in flight.
    """

    def __init__(self, create=None, draws=None, shuffles=None):
        self.create_results = list(create or [Ok(DeckState("abc", 52))])
        self.draw_results = list(draws or [])
        self.shuffle_results = list(shuffles or [])
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    async def _next(self, call: tuple, queue: list):
        self.calls.append(call)
        if self.gate is not None:
            await self.gate.wait()
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def create_shuffled_deck(self):
        return await self._next(("create",), self.create_results)

    async def draw_one(self, deck_id: str):
        return await self._next(("draw", deck_id), self.draw_results)

    async def shuffle(self, deck_id: str):
        return await self._next(("shuffle", deck_id), self.shuffle_results)

    async def close(self):
        self.closed = True

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def fake_client():
    """A fake client whose create call returns deck "abc" with 52 cards."""
    return FakeDeckClient()


class FakeResponse:
    """Minimal aiohttp response stand-in usable as an async context manager."""

    def __init__(self, body: Any = None, status: int = 200, reason: str = "OK"):
        self.body = body
        self.status = status
        self.reason = reason

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type: Optional[str] = "application/json"):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


class FakeHTTPSession:
    """
    Minimal aiohttp.ClientSession stand-in.

    ``responses`` holds FakeResponse objects or exceptions, consumed in
    order; an exception is raised from ``get`` the way aiohttp raises
    connection errors.
    """

    def __init__(self, responses: list):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, params: Optional[Dict[str, str]] = None):
        self.requests.append({"url": url, "params": params})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True


@pytest.fixture
def make_client():
    """Factory for FakeDeckClient with scripted results."""
    return FakeDeckClient


@pytest.fixture
def draw_ok():
    """Factory for a successful draw result."""
    return ok_draw


@pytest.fixture
def card_factory():
    """Factory for Card objects with provider-style image URLs."""
    return make_card


@pytest.fixture
def http_session():
    """Factory for FakeHTTPSession loaded with responses."""
    return FakeHTTPSession


@pytest.fixture
def response():
    """Factory for FakeResponse."""
    return FakeResponse

"""
HTTP client for the remote card provider.

This module talks to a deckofcardsapi.com compatible service with aiohttp and
normalizes every outcome into the result vocabulary of
``deckdraw.client.results``. Nothing in here raises for an expected outcome:
network failures, provider refusals, malformed replies and an exhausted deck
all come back as values.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union
from urllib.parse import quote, urljoin

import aiohttp

from deckdraw.common.card import Card
from deckdraw.constants import (
    DRAW_PATH,
    NEW_SHUFFLED_DECK_PATH,
    SHUFFLE_PATH,
    build_config,
)
from deckdraw.errors import ProtocolError
from deckdraw.state.models import DeckState, ErrorKind
from deckdraw.client.results import (
    Depleted,
    DrawResult,
    Failure,
    Ok,
    RemoteError,
    TransportError,
)

logger = logging.getLogger("deckdraw.client")


class RemoteDeckClient:
    """
    Client for the three remote deck operations.

    The client owns an ``aiohttp.ClientSession`` created on first use, unless
    one is supplied, in which case the caller remains responsible for closing
    it.

    Attributes:
        config: Effective configuration (see ``deckdraw.constants``)
        base_url: Provider base URL, always ending with "/"
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Configuration overrides merged over the defaults
            session: Optional externally managed aiohttp session
        """
        self.config = build_config(config)
        self.base_url = self.config["base_url"]
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "RemoteDeckClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _client_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config["request_timeout"]),
                headers={"User-Agent": self.config["user_agent"]},
            )
            self._owns_session = True
        return self._session

    async def create_shuffled_deck(self) -> Union[Ok[DeckState], Failure]:
        """
        Create a new shuffled deck.

        Returns:
            Ok(DeckState), TransportError or RemoteError
        """
        body = await self._get(
            "create-shuffled-deck",
            NEW_SHUFFLED_DECK_PATH,
            {"deck_count": str(self.config["deck_count"])},
        )
        if not isinstance(body, dict):
            return body

        if body.get("success") is False:
            return self._refused("create-shuffled-deck", body)

        try:
            deck = _parse_deck(body)
        except ProtocolError as e:
            return _protocol_failure("create-shuffled-deck", e)

        logger.info(f"Created deck {deck.id} with {deck.remaining} cards")
        return Ok(deck)

    async def draw_one(
        self, deck_id: str
    ) -> Union[Ok[DrawResult], Depleted, Failure]:
        """
        Draw a single card.

        A reply reporting zero remaining cards is ``Depleted``; that check
        runs before the card list is looked at.

        Args:
            deck_id: Handle of the deck to draw from

        Returns:
            Ok(DrawResult), Depleted, TransportError or RemoteError
        """
        body = await self._get(
            "draw-one", DRAW_PATH.format(deck_id=quote(deck_id, safe="")), {"count": "1"}
        )
        if not isinstance(body, dict):
            return body

        try:
            remaining = _parse_remaining(body)
        except ProtocolError as e:
            if body.get("success") is False:
                return self._refused("draw-one", body)
            return _protocol_failure("draw-one", e)

        if remaining == 0:
            logger.info(f"Deck {deck_id} is depleted")
            return Depleted()

        if body.get("success") is False:
            return self._refused("draw-one", body)

        try:
            cards = body.get("cards")
            if not isinstance(cards, list) or not cards:
                raise ProtocolError("Draw reply carries no cards", body)
            card = Card.from_payload(cards[0])
        except ProtocolError as e:
            return _protocol_failure("draw-one", e)

        logger.debug(f"Drew {card.code} from deck {deck_id}, {remaining} remaining")
        return Ok(DrawResult(card=card, remaining=remaining))

    async def shuffle(self, deck_id: str) -> Union[Ok[DeckState], Failure]:
        """
        Return all cards to the deck and shuffle it.

        Args:
            deck_id: Handle of the deck to shuffle

        Returns:
            Ok(DeckState), TransportError or RemoteError
        """
        body = await self._get(
            "shuffle", SHUFFLE_PATH.format(deck_id=quote(deck_id, safe=""))
        )
        if not isinstance(body, dict):
            return body

        if body.get("success") is False:
            return self._refused("shuffle", body)

        try:
            deck = DeckState(
                id=_parse_deck_id(body, default=deck_id),
                remaining=_parse_remaining(body),
            )
        except ProtocolError as e:
            return _protocol_failure("shuffle", e)

        logger.info(f"Shuffled deck {deck.id}, {deck.remaining} cards remaining")
        return Ok(deck)

    async def _get(
        self, operation: str, path: str, params: Optional[Dict[str, str]] = None
    ) -> Union[Dict[str, Any], Failure]:
        """
        Issue a GET request and decode its JSON body.

        Returns:
            The decoded body, or a failure result
        """
        url = urljoin(self.base_url, path)
        logger.debug(f"{operation}: GET {url} {params or ''}")

        try:
            async with self._client_session().get(url, params=params) as resp:
                if resp.status >= 400:
                    detail = f"HTTP {resp.status}: {resp.reason}"
                    logger.warning(f"{operation} rejected by provider: {detail}")
                    return RemoteError(detail)
                body = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            detail = f"{operation} timed out after {self.config['request_timeout']}s"
            logger.warning(detail)
            return TransportError(detail)
        except aiohttp.ClientError as e:
            detail = str(e) or type(e).__name__
            logger.warning(f"{operation} transport failure: {detail}")
            return TransportError(detail)
        except ValueError as e:
            return _protocol_failure(operation, ProtocolError(f"Invalid JSON: {e}"))

        if not isinstance(body, dict):
            return _protocol_failure(
                operation, ProtocolError("Reply is not a JSON object", body)
            )
        return body

    @staticmethod
    def _refused(operation: str, body: Dict[str, Any]) -> RemoteError:
        detail = body.get("error") or f"{operation} was refused by the provider"
        logger.warning(f"{operation} refused: {detail}")
        return RemoteError(str(detail))


def _protocol_failure(operation: str, error: ProtocolError) -> RemoteError:
    logger.error(f"{operation}: malformed provider reply: {error}")
    return RemoteError(str(error), kind=ErrorKind.PROTOCOL)


def _parse_remaining(body: Dict[str, Any]) -> int:
    remaining = body.get("remaining")
    if isinstance(remaining, bool) or not isinstance(remaining, int) or remaining < 0:
        raise ProtocolError(f"Invalid 'remaining' value: {remaining!r}", body)
    return remaining


def _parse_deck_id(body: Dict[str, Any], default: Optional[str] = None) -> str:
    deck_id = body.get("deck_id", default)
    if not isinstance(deck_id, str) or not deck_id:
        raise ProtocolError(f"Invalid 'deck_id' value: {deck_id!r}", body)
    return deck_id


def _parse_deck(body: Dict[str, Any]) -> DeckState:
    return DeckState(id=_parse_deck_id(body), remaining=_parse_remaining(body))

"""
This module defines the `Card` and `CardView` classes.

- `Card`: one card drawn from a remote deck, built from the provider's card
object. Cards are immutable once created.

- `CardView`: the presentation-facing projection of a card, carrying only the
fields a display layer needs: id, label and image reference.
"""

from dataclasses import dataclass
from typing import Any, Dict

from deckdraw.errors import ProtocolError


@dataclass(frozen=True)
class Card:
    """
    A card drawn from a remote deck.

    >>> card = Card(code="AS", suit="SPADES", value="ACE", image_ref="https://x/AS.png")
    >>> card.label
    'SPADES ACE'

    Attributes:
        code: Provider identifier, e.g. "AS" or "0H"
        suit: Provider suit name, e.g. "SPADES"
        value: Provider rank name, e.g. "ACE" or "10"
        image_ref: URL of the card image, passed through untouched
    """

    code: str
    suit: str
    value: str
    image_ref: str = ""

    @property
    def label(self) -> str:
        """Human readable suit and rank."""
        return f"{self.suit} {self.value}"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Card":
        """
        Build a card from a provider card object.

        :param payload: One entry of the provider's ``cards`` list
        :return: The parsed card
        :raises ProtocolError: If a required field is missing or not a string
        """
        if not isinstance(payload, dict):
            raise ProtocolError(f"Card entry is not an object: {payload!r}", payload)

        fields = {}
        for name in ("code", "suit", "value"):
            value = payload.get(name)
            if not isinstance(value, str) or not value:
                raise ProtocolError(f"Card entry has no valid '{name}'", payload)
            fields[name] = value

        image = payload.get("image") or payload.get("imageRef") or ""
        if not isinstance(image, str):
            raise ProtocolError("Card entry has a non-string 'image'", payload)

        return cls(image_ref=image, **fields)

    def to_view(self) -> "CardView":
        """Project this card for display."""
        return CardView(id=self.code, label=self.label, image_ref=self.image_ref)

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class CardView:
    """
    Display projection of a drawn card.

    Attributes:
        id: The card code, used as the stable display key
        label: Human readable suit and rank
        image_ref: URL of the card image
    """

    id: str
    label: str
    image_ref: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "label": self.label, "image_ref": self.image_ref}

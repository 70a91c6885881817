"""
flashdeck.deck
---------

This module defines the Deck class.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TypedDict
from uuid import uuid4
from typing_extensions import NotRequired, Self

DEFAULT_FOLDER = "General"


class DeckDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Deck object.
    """

    id: str
    name: str
    description: NotRequired[str]
    folder: NotRequired[str | None]


@dataclass(init=False)
class Deck:
    """
    A named collection of cards.

    Cards point at their deck through `Card.deck_id`; the deck itself holds no card list.

    Attributes:
        deck_id: The id of the deck. Defaults to a random UUID.
        name: The display name of the deck.
        description: Optional free-form description.
        folder: The folder the deck is grouped under.
    """

    deck_id: str
    name: str
    description: str
    folder: str

    def __init__(
        self,
        name: str,
        deck_id: str | None = None,
        description: str = "",
        folder: str | None = DEFAULT_FOLDER,
    ) -> None:
        if deck_id is None:
            deck_id = str(uuid4())
        self.deck_id = deck_id

        self.name = name
        self.description = description
        self.folder = folder or DEFAULT_FOLDER

    def to_dict(self) -> DeckDict:
        return {
            "id": self.deck_id,
            "name": self.name,
            "description": self.description,
            "folder": self.folder,
        }

    @classmethod
    def from_dict(cls, source_dict: DeckDict) -> Self:
        # older backups carry a cardIds list, which is derived from the cards instead
        return cls(
            deck_id=str(source_dict["id"]),
            name=source_dict["name"],
            description=source_dict.get("description") or "",
            folder=source_dict.get("folder"),
        )


__all__ = ["Deck", "DEFAULT_FOLDER"]

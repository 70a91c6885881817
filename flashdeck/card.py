"""
flashdeck.card
---------

This module defines the Card class and the epoch-millisecond helpers used to serialize it.

Classes:
    Card: Represents a flashcard and its spaced-repetition memory state.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
import json
from typing import TypedDict
from uuid import uuid4
from typing_extensions import NotRequired, Self
from flashdeck.status import Status

DEFAULT_INITIAL_EASE = 2.5

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    """
    Converts a timezone-aware datetime into epoch milliseconds.
    """

    return (value - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(value: int | float) -> datetime:
    """
    Converts epoch milliseconds into a UTC datetime.
    """

    return EPOCH + timedelta(milliseconds=value)


class CardDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Card object.

    Timestamps are epoch milliseconds. `tags` and `createdAt` may be absent in older backups.
    """

    id: str
    deckId: str | None
    front: str
    back: str
    tags: NotRequired[list[str]]
    createdAt: NotRequired[int]
    dueDate: int
    interval: float
    ease: float
    status: str


@dataclass(init=False)
class Card:
    """
    Represents a flashcard.

    Attributes:
        card_id: The id of the card. Defaults to a random UUID.
        deck_id: The id of the deck the card belongs to, or None for a loose card.
        front: The prompt side of the card.
        back: The answer side of the card.
        tags: Free-form labels attached to the card.
        created_at: The date and time when the card was created.
        interval: Number of days between the last review and the next one.
        ease: Multiplier controlling how fast the interval grows once the card is in review.
        status: The card's current learning status.
        due: The date and time when the card is due next.
    """

    card_id: str
    deck_id: str | None
    front: str
    back: str
    tags: list[str]
    created_at: datetime
    interval: float
    ease: float
    status: Status
    due: datetime

    def __init__(
        self,
        card_id: str | None = None,
        deck_id: str | None = None,
        front: str = "",
        back: str = "",
        tags: list[str] | None = None,
        created_at: datetime | None = None,
        interval: float = 0,
        ease: float = DEFAULT_INITIAL_EASE,
        status: Status = Status.New,
        due: datetime | None = None,
    ) -> None:
        if card_id is None:
            card_id = str(uuid4())
        self.card_id = card_id

        self.deck_id = deck_id
        self.front = front
        self.back = back
        self.tags = list(tags) if tags is not None else []

        if created_at is None:
            created_at = datetime.now(timezone.utc)
        self.created_at = created_at

        self.interval = interval
        self.ease = ease
        self.status = status

        # new cards are due immediately
        if due is None:
            due = created_at
        self.due = due

    def to_dict(self) -> CardDict:
        """
        Returns a JSON-serializable dictionary representation of the Card object.

        Keys follow the camelCase backup format, with timestamps as epoch milliseconds.

        Returns:
            A dictionary representation of the Card object.
        """

        return {
            "id": self.card_id,
            "deckId": self.deck_id,
            "front": self.front,
            "back": self.back,
            "tags": list(self.tags),
            "createdAt": to_epoch_ms(self.created_at),
            "dueDate": to_epoch_ms(self.due),
            "interval": self.interval,
            "ease": self.ease,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, source_dict: CardDict) -> Self:
        """
        Creates a Card object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Card object.

        Returns:
            A Card object created from the provided dictionary.
        """

        due = from_epoch_ms(source_dict["dueDate"])

        return cls(
            card_id=str(source_dict["id"]),
            deck_id=source_dict.get("deckId"),
            front=source_dict["front"],
            back=source_dict["back"],
            tags=source_dict.get("tags", []),
            created_at=(
                from_epoch_ms(source_dict["createdAt"])
                if source_dict.get("createdAt") is not None
                else due
            ),
            interval=source_dict["interval"],
            ease=float(source_dict["ease"]),
            status=Status(source_dict["status"]),
            due=due,
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Card object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Card object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Card object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Card object.

        Returns:
            Self: A Card object created from the JSON string.
        """

        source_dict: CardDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["Card", "DEFAULT_INITIAL_EASE"]

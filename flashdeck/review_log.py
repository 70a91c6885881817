"""
flashdeck.review_log
---------

This module defines the ReviewLog class, the record of one rating given to one card.

A store keeps its review logs so that cards can be replayed through a differently
configured Scheduler later on.

Classes:
    ReviewLog: One rating of one card at one point in time.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict
import json
from typing_extensions import Self
from flashdeck.rating import Rating


class ReviewLogDict(TypedDict):
    """
    Wire format of a ReviewLog: the rating by name and the review time as an ISO 8601 string.
    """

    card_id: str
    rating: str
    review_datetime: str
    review_duration: int | None


@dataclass
class ReviewLog:
    """
    One rating of one card.

    Attributes:
        card_id: Id of the rated card.
        rating: Again, Hard, Good or Easy.
        review_datetime: When the card was rated, in UTC.
        review_duration: Milliseconds spent on the card, if the caller measured it.
    """

    card_id: str
    rating: Rating
    review_datetime: datetime
    review_duration: int | None = None

    def to_dict(self) -> ReviewLogDict:
        return {
            "card_id": self.card_id,
            "rating": self.rating.value,
            "review_datetime": self.review_datetime.isoformat(),
            "review_duration": self.review_duration,
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewLogDict) -> Self:
        """
        Reads a ReviewLog back from its wire format.

        The rating is matched by name ignoring case, and `review_duration` may be missing.

        Raises:
            InvalidArgumentError: If the stored rating is not one of the four ratings.
        """

        return cls(
            card_id=str(source_dict["card_id"]),
            rating=Rating.from_value(source_dict["rating"]),
            review_datetime=datetime.fromisoformat(source_dict["review_datetime"]),
            review_duration=source_dict.get("review_duration"),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        source_dict: ReviewLogDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["ReviewLog"]

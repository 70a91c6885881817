"""
flashdeck.rating
---------

This module defines the Rating enum and the error raised for ratings outside of it.

Classes:
    Rating: Enum representing the four possible ratings when reviewing a card.
    InvalidArgumentError: Raised when a value is not one of the four ratings.
"""

from __future__ import annotations
from enum import Enum


class InvalidArgumentError(ValueError):
    """
    Raised when a caller passes a rating that is not one of the four defined ratings.
    """


class Rating(str, Enum):
    """
    Enum representing the four possible ratings when reviewing a card.
    """

    Again = "again"
    Hard = "hard"
    Good = "good"
    Easy = "easy"

    @classmethod
    def from_value(cls, value: Rating | str) -> Rating:
        """
        Converts a Rating or its string value into a Rating.

        Args:
            value: A Rating, or a string such as "good" (case-insensitive).

        Returns:
            Rating: The matching rating.

        Raises:
            InvalidArgumentError: If the value does not name one of the four ratings.
        """

        if isinstance(value, cls):
            return value

        if isinstance(value, str):
            normalized_value = value.strip().lower()
            for rating in cls:
                if rating.value == normalized_value:
                    return rating

        raise InvalidArgumentError(
            f"{value!r} is not a valid rating, expected one of: "
            + ", ".join(rating.value for rating in cls)
        )


__all__ = ["Rating", "InvalidArgumentError"]

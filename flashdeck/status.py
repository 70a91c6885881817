"""
flashdeck.status
---------

This module defines the Status enum, the stage of learning a card is in.

Classes:
    Status: Enum of the learning statuses New, Learning and Review.
"""

from enum import Enum


class Status(str, Enum):
    """
    Enum representing the learning status of a Card object.

    A card starts as New and never returns to it once reviewed.
    """

    New = "new"
    Learning = "learning"
    Review = "review"


__all__ = ["Status"]

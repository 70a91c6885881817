"""
flashdeck
-------

Flashdeck is a personal flashcard library built around an SM-2 style spaced-repetition scheduler.
"""

from flashdeck.scheduler import Scheduler, schedule_card
from flashdeck.status import Status
from flashdeck.card import Card
from flashdeck.deck import Deck
from flashdeck.rating import Rating, InvalidArgumentError
from flashdeck.review_log import ReviewLog
from flashdeck.store import CardStore, DeckStats
from flashdeck.session import StudySession

__all__ = [
    "Scheduler",
    "schedule_card",
    "Card",
    "Deck",
    "Rating",
    "InvalidArgumentError",
    "ReviewLog",
    "Status",
    "CardStore",
    "DeckStats",
    "StudySession",
]

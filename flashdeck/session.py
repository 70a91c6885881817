"""
flashdeck.session
---------

This module defines the StudySession class, which walks a deck's due cards one at a time.
"""

from __future__ import annotations
from datetime import datetime, timezone
import logging
from flashdeck.card import Card
from flashdeck.rating import Rating
from flashdeck.review_log import ReviewLog
from flashdeck.scheduler import Scheduler
from flashdeck.store import CardStore

logger = logging.getLogger(__name__)


class StudySession:
    """
    A single pass over the cards of a deck that are due.

    The queue is fixed when the session starts. Cards are presented strictly one after another,
    so at most one rating is ever in flight per card.

    Attributes:
        store: The store holding the deck's cards. Ratings are written back into it.
        deck_id: The id of the deck being studied.
        scheduler: The scheduler used to rate cards.
        queue: Ids of the due cards, the longest-overdue first.
        index: Position of the current card in the queue.
        is_flipped: Whether the back of the current card is showing.
    """

    def __init__(
        self,
        store: CardStore,
        deck_id: str,
        scheduler: Scheduler | None = None,
        now: datetime | None = None,
    ) -> None:
        store.get_deck(deck_id)

        if scheduler is None:
            scheduler = Scheduler()

        if now is None:
            now = datetime.now(timezone.utc)

        self.store = store
        self.deck_id = deck_id
        self.scheduler = scheduler
        self.queue = [card.card_id for card in store.due_cards(deck_id=deck_id, now=now)]
        self.index = 0
        self.is_flipped = False

        if self.queue:
            logger.info(
                "Started study session on deck %s with %d due cards",
                deck_id,
                len(self.queue),
            )
        else:
            logger.info("No cards due in deck %s", deck_id)

    @property
    def is_finished(self) -> bool:
        return self.index >= len(self.queue)

    @property
    def remaining(self) -> int:
        return len(self.queue) - self.index

    @property
    def current_card(self) -> Card | None:
        if self.is_finished:
            return None

        return self.store.get_card(self.queue[self.index])

    def flip(self) -> None:
        self.is_flipped = not self.is_flipped

    def rate(
        self,
        rating: Rating | str,
        review_datetime: datetime | None = None,
        review_duration: int | None = None,
    ) -> ReviewLog:
        """
        Rates the current card and moves on to the next one.

        Args:
            rating: The chosen rating for the current card.
            review_datetime: The date and time of the review.
            review_duration: The number of milliseconds it took to review the card or None if unspecified.

        Returns:
            ReviewLog: The log entry of the review.

        Raises:
            ValueError: If every card of the session has already been rated.
        """

        if self.is_finished:
            raise ValueError("Study session is already finished")

        review_log = self.store.record_review(
            card_id=self.queue[self.index],
            rating=rating,
            scheduler=self.scheduler,
            review_datetime=review_datetime,
            review_duration=review_duration,
        )

        self.index += 1
        self.is_flipped = False

        if self.is_finished:
            logger.info(
                "Finished study session on deck %s after %d cards",
                self.deck_id,
                len(self.queue),
            )

        return review_log


__all__ = ["StudySession"]

"""
flashdeck.store
---------

This module defines the CardStore class, the in-memory container of decks, cards and review logs.

Classes:
    CardStore: Holds every deck, card and review log of one user.
    DeckStats: Card counts of a single deck.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import NamedTuple, TypedDict
from typing_extensions import NotRequired, Self
from flashdeck.card import Card, CardDict
from flashdeck.deck import DEFAULT_FOLDER, Deck, DeckDict
from flashdeck.rating import Rating
from flashdeck.review_log import ReviewLog, ReviewLogDict
from flashdeck.scheduler import Scheduler
from flashdeck.status import Status

logger = logging.getLogger(__name__)


class CardStoreDict(TypedDict):
    """
    JSON-serializable dictionary representation of a CardStore object.
    """

    decks: dict[str, DeckDict]
    cards: dict[str, CardDict]
    reviewLogs: NotRequired[list[ReviewLogDict]]


class DeckStats(NamedTuple):
    total: int
    due: int
    new: int
    learning: int
    review: int


@dataclass
class CardStore:
    """
    Holds every deck, card and review log.

    The store is passed explicitly to whatever needs it. The scheduler never sees it:
    `record_review` hands the scheduler a single card and stores the card it returns.

    Attributes:
        decks: Decks keyed by deck id.
        cards: Cards keyed by card id.
        review_logs: Every review recorded through the store, in the order they happened.
    """

    decks: dict[str, Deck] = field(default_factory=dict)
    cards: dict[str, Card] = field(default_factory=dict)
    review_logs: list[ReviewLog] = field(default_factory=list)

    def get_deck(self, deck_id: str) -> Deck:
        try:
            return self.decks[deck_id]
        except KeyError:
            raise KeyError(f"Deck {deck_id!r} does not exist") from None

    def get_card(self, card_id: str) -> Card:
        try:
            return self.cards[card_id]
        except KeyError:
            raise KeyError(f"Card {card_id!r} does not exist") from None

    def create_deck(
        self, name: str, folder: str | None = DEFAULT_FOLDER, description: str = ""
    ) -> Deck:
        """
        Creates a new, empty deck.

        Raises:
            ValueError: If the name is empty or blank.
        """

        if not name or not name.strip():
            raise ValueError("Deck name must not be empty")

        deck = Deck(name=name, folder=folder, description=description)
        self.decks[deck.deck_id] = deck

        logger.debug("Created deck %s (%s)", deck.deck_id, deck.name)

        return deck

    def update_deck(
        self,
        deck_id: str,
        name: str | None = None,
        folder: str | None = None,
        description: str | None = None,
    ) -> Deck:
        """
        Renames a deck, moves it to another folder or changes its description.

        Arguments left as None are unchanged. A blank folder moves the deck back to the default folder.
        """

        deck = self.get_deck(deck_id)

        if name is not None:
            if not name.strip():
                raise ValueError("Deck name must not be empty")
            deck.name = name

        if folder is not None:
            deck.folder = folder.strip() or DEFAULT_FOLDER

        if description is not None:
            deck.description = description

        return deck

    def delete_deck(self, deck_id: str) -> int:
        """
        Deletes a deck together with all of its cards and their review logs.

        Returns:
            int: The number of cards deleted.
        """

        self.get_deck(deck_id)
        del self.decks[deck_id]

        card_ids = {
            card_id for card_id, card in self.cards.items() if card.deck_id == deck_id
        }
        for card_id in card_ids:
            del self.cards[card_id]

        self.review_logs = [
            review_log
            for review_log in self.review_logs
            if review_log.card_id not in card_ids
        ]

        logger.debug("Deleted deck %s and %d cards", deck_id, len(card_ids))

        return len(card_ids)

    def add_card(
        self,
        deck_id: str,
        front: str,
        back: str,
        tags: list[str] | None = None,
        now: datetime | None = None,
    ) -> Card:
        """
        Adds a new card to a deck. The card starts New and is due immediately.

        Raises:
            KeyError: If the deck does not exist.
            ValueError: If either side of the card is empty.
        """

        self.get_deck(deck_id)

        if not front or not back:
            raise ValueError("Both sides of a card must be filled in")

        if now is None:
            now = datetime.now(timezone.utc)

        card = Card(deck_id=deck_id, front=front, back=back, tags=tags, created_at=now)
        self.cards[card.card_id] = card

        return card

    def edit_card(
        self,
        card_id: str,
        front: str | None = None,
        back: str | None = None,
        tags: list[str] | None = None,
    ) -> Card:
        """
        Changes the content of a card. Its scheduling state is left untouched.
        """

        card = self.get_card(card_id)

        if front is not None:
            if not front:
                raise ValueError("Both sides of a card must be filled in")
            card.front = front

        if back is not None:
            if not back:
                raise ValueError("Both sides of a card must be filled in")
            card.back = back

        if tags is not None:
            card.tags = list(tags)

        return card

    def delete_card(self, card_id: str) -> None:
        self.get_card(card_id)
        del self.cards[card_id]

        self.review_logs = [
            review_log
            for review_log in self.review_logs
            if review_log.card_id != card_id
        ]

    def cards_in_deck(self, deck_id: str) -> list[Card]:
        return [card for card in self.cards.values() if card.deck_id == deck_id]

    def folders(self) -> list[str]:
        return sorted({deck.folder for deck in self.decks.values()})

    def due_cards(
        self, deck_id: str | None = None, now: datetime | None = None
    ) -> list[Card]:
        """
        Returns the cards that are due for study, the longest-overdue first.

        Args:
            deck_id: Only return cards of this deck, or cards of every deck if None.
            now: The date and time to compare due dates against. Defaults to the current UTC time.
        """

        if now is None:
            now = datetime.now(timezone.utc)

        cards = (
            self.cards.values() if deck_id is None else self.cards_in_deck(deck_id)
        )

        return sorted(
            (card for card in cards if card.due <= now), key=lambda card: card.due
        )

    def search(self, term: str) -> list[Card]:
        """
        Returns the cards whose front or back contains the term, ignoring case.
        """

        if not term.strip():
            return []

        term = term.lower()

        return [
            card
            for card in self.cards.values()
            if term in card.front.lower() or term in card.back.lower()
        ]

    def deck_stats(self, deck_id: str, now: datetime | None = None) -> DeckStats:
        if now is None:
            now = datetime.now(timezone.utc)

        cards = self.cards_in_deck(deck_id)

        return DeckStats(
            total=len(cards),
            due=sum(1 for card in cards if card.due <= now),
            new=sum(1 for card in cards if card.status == Status.New),
            learning=sum(1 for card in cards if card.status == Status.Learning),
            review=sum(1 for card in cards if card.status == Status.Review),
        )

    def record_review(
        self,
        card_id: str,
        rating: Rating | str,
        scheduler: Scheduler | None = None,
        review_datetime: datetime | None = None,
        review_duration: int | None = None,
    ) -> ReviewLog:
        """
        Reviews a stored card and replaces it with the rescheduled card.

        Args:
            card_id: The id of the card being reviewed.
            rating: The chosen rating for the card being reviewed.
            scheduler: The scheduler to use. Defaults to a default-configured Scheduler.
            review_datetime: The date and time of the review.
            review_duration: The number of milliseconds it took to review the card or None if unspecified.

        Returns:
            ReviewLog: The log entry of the review, also appended to `review_logs`.
        """

        if scheduler is None:
            scheduler = Scheduler()

        card = self.get_card(card_id)

        updated_card, review_log = scheduler.review_card(
            card=card,
            rating=rating,
            review_datetime=review_datetime,
            review_duration=review_duration,
        )

        self.cards[card_id] = updated_card
        self.review_logs.append(review_log)

        logger.debug(
            "Reviewed card %s as %s: %s, interval %s, ease %.2f",
            card_id,
            review_log.rating.value,
            updated_card.status.value,
            updated_card.interval,
            updated_card.ease,
        )

        return review_log

    def reschedule_all(self, scheduler: Scheduler) -> None:
        """
        Replays the review logs of every card with the given scheduler.

        Cards without review logs are left as they are.
        """

        logs_by_card: dict[str, list[ReviewLog]] = {}
        for review_log in self.review_logs:
            logs_by_card.setdefault(review_log.card_id, []).append(review_log)

        for card_id, review_logs in logs_by_card.items():
            card = self.cards.get(card_id)
            if card is None:
                continue
            self.cards[card_id] = scheduler.reschedule_card(card, review_logs)

        logger.info("Rescheduled %d cards", len(logs_by_card))

    def merge(self, other: CardStore) -> None:
        """
        Merges another store into this one. Decks and cards of `other` replace those with the same id.

        Review logs already held by this store are not added a second time, so merging a backup
        of this store leaves its history unchanged.
        """

        self.decks.update(other.decks)
        self.cards.update(other.cards)

        known_reviews = {
            (review_log.card_id, review_log.review_datetime, review_log.rating)
            for review_log in self.review_logs
        }
        for review_log in other.review_logs:
            key = (review_log.card_id, review_log.review_datetime, review_log.rating)
            if key in known_reviews:
                continue
            known_reviews.add(key)
            self.review_logs.append(review_log)

    def to_dict(self) -> CardStoreDict:
        """
        Returns a JSON-serializable dictionary representation of the CardStore object.
        """

        return {
            "decks": {deck_id: deck.to_dict() for deck_id, deck in self.decks.items()},
            "cards": {card_id: card.to_dict() for card_id, card in self.cards.items()},
            "reviewLogs": [review_log.to_dict() for review_log in self.review_logs],
        }

    @classmethod
    def from_dict(cls, source_dict: CardStoreDict) -> Self:
        """
        Creates a CardStore object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing CardStore object.

        Returns:
            Self: A CardStore object created from the provided dictionary.

        Raises:
            ValueError: If `decks` or `cards` is not a mapping keyed by id.
        """

        for key in ("decks", "cards"):
            if not isinstance(source_dict[key], dict):
                raise ValueError(f"{key} must be an object keyed by id")

        return cls(
            decks={
                deck_id: Deck.from_dict(deck_dict)
                for deck_id, deck_dict in source_dict["decks"].items()
            },
            cards={
                card_id: Card.from_dict(card_dict)
                for card_id, card_dict in source_dict["cards"].items()
            },
            review_logs=[
                ReviewLog.from_dict(review_log_dict)
                for review_log_dict in source_dict.get("reviewLogs", [])
            ],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        source_dict: CardStoreDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)

    def save(self, path: str | Path) -> None:
        """
        Writes the whole store to a JSON file, replacing its previous contents.
        """

        path = Path(path)
        path.write_text(self.to_json(), encoding="utf-8")

        logger.info(
            "Saved %d decks and %d cards to %s", len(self.decks), len(self.cards), path
        )

    @classmethod
    def load(cls, path: str | Path) -> Self:
        """
        Reads a store from a JSON file written by `save`.

        A missing file yields an empty store.

        Raises:
            ValueError: If the file exists but does not hold a valid store.
        """

        path = Path(path)

        if not path.exists():
            logger.info("No store at %s, starting empty", path)
            return cls()

        try:
            store = cls.from_json(path.read_text(encoding="utf-8"))
        except (ValueError, KeyError, TypeError) as e:
            raise ValueError(f"Failed to load store from {path}: {e}") from e

        logger.info(
            "Loaded %d decks and %d cards from %s",
            len(store.decks),
            len(store.cards),
            path,
        )

        return store


__all__ = ["CardStore", "DeckStats"]

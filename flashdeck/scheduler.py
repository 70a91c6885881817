"""
flashdeck.scheduler
---------

This module defines the Scheduler class as well as the various constants used in its calculations.

Classes:
    Scheduler: The SM-2 style spaced-repetition scheduler.

Functions:
    schedule_card: Schedules a single card with the default Scheduler.
"""

from __future__ import annotations
from collections.abc import Sequence
import math
from datetime import datetime, timezone, timedelta
from copy import copy
import json
from dataclasses import dataclass
from flashdeck.status import Status
from flashdeck.card import Card
from flashdeck.rating import Rating
from flashdeck.review_log import ReviewLog
from typing import TypedDict
from typing_extensions import Self

ONE_DAY = timedelta(days=1)

MINIMUM_EASE = 1.3
AGAIN_EASE_PENALTY = 0.2
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15

HARD_INTERVAL_MULTIPLIER = 1.2
EASY_BONUS = 1.3

# indexed by position in RECALL_RATINGS
NEW_CARD_INTERVALS = (1, 2, 4)
LEARNING_MULTIPLIERS = (1.2, 1.5, 2.0)

RECALL_RATINGS = (Rating.Hard, Rating.Good, Rating.Easy)


class SchedulerDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Scheduler object.
    """

    minimum_ease: float
    maximum_ease: float | None
    again_ease_penalty: float
    hard_ease_penalty: float
    easy_ease_bonus: float
    hard_interval_multiplier: float
    easy_bonus: float
    new_card_intervals: list[float]
    learning_multipliers: list[float]
    round_intervals: bool


@dataclass(init=False)
class Scheduler:
    """
    The spaced-repetition scheduler.

    Computes a card's next interval, ease, status and due date from its current state and a rating.
    Reviewing never mutates the card passed in and never touches any other card.

    Attributes:
        minimum_ease: Floor applied every time a card's ease decreases.
        maximum_ease: Ceiling applied when ease increases, or None for no ceiling.
        again_ease_penalty: Ease lost on an Again rating.
        hard_ease_penalty: Ease lost on a Hard rating of a Review card.
        easy_ease_bonus: Ease gained on an Easy rating of a Review card.
        hard_interval_multiplier: Interval growth of a Review card rated Hard.
        easy_bonus: Extra interval growth, on top of ease, of a Review card rated Easy.
        new_card_intervals: First intervals in days of a New card rated Hard, Good and Easy.
        learning_multipliers: Interval multipliers of a Learning card rated Hard, Good and Easy.
        round_intervals: Whether intervals are rounded up to whole days.
    """

    minimum_ease: float
    maximum_ease: float | None
    again_ease_penalty: float
    hard_ease_penalty: float
    easy_ease_bonus: float
    hard_interval_multiplier: float
    easy_bonus: float
    new_card_intervals: tuple[float, ...]
    learning_multipliers: tuple[float, ...]
    round_intervals: bool

    def __init__(
        self,
        minimum_ease: float = MINIMUM_EASE,
        maximum_ease: float | None = None,
        again_ease_penalty: float = AGAIN_EASE_PENALTY,
        hard_ease_penalty: float = HARD_EASE_PENALTY,
        easy_ease_bonus: float = EASY_EASE_BONUS,
        hard_interval_multiplier: float = HARD_INTERVAL_MULTIPLIER,
        easy_bonus: float = EASY_BONUS,
        new_card_intervals: Sequence[float] = NEW_CARD_INTERVALS,
        learning_multipliers: Sequence[float] = LEARNING_MULTIPLIERS,
        round_intervals: bool = True,
    ) -> None:
        self.minimum_ease = minimum_ease
        self.maximum_ease = maximum_ease
        self.again_ease_penalty = again_ease_penalty
        self.hard_ease_penalty = hard_ease_penalty
        self.easy_ease_bonus = easy_ease_bonus
        self.hard_interval_multiplier = hard_interval_multiplier
        self.easy_bonus = easy_bonus
        self.new_card_intervals = tuple(new_card_intervals)
        self.learning_multipliers = tuple(learning_multipliers)
        self.round_intervals = round_intervals

        self._validate_parameters()

    def _validate_parameters(self) -> None:
        error_messages = []

        if not self.minimum_ease > 0:
            error_messages.append(
                f"minimum_ease = {self.minimum_ease} must be greater than 0"
            )

        if self.maximum_ease is not None and self.maximum_ease < self.minimum_ease:
            error_messages.append(
                f"maximum_ease = {self.maximum_ease} must not be lower than minimum_ease = {self.minimum_ease}"
            )

        for name in ("again_ease_penalty", "hard_ease_penalty", "easy_ease_bonus"):
            value = getattr(self, name)
            if not value >= 0:
                error_messages.append(f"{name} = {value} must not be negative")

        for name in ("hard_interval_multiplier", "easy_bonus"):
            value = getattr(self, name)
            if not value > 0:
                error_messages.append(f"{name} = {value} must be greater than 0")

        for name in ("new_card_intervals", "learning_multipliers"):
            values = getattr(self, name)
            if len(values) != len(RECALL_RATINGS):
                error_messages.append(
                    f"Expected {len(RECALL_RATINGS)} {name} (hard, good, easy), got {len(values)}"
                )
            for index, value in enumerate(values):
                if not value > 0:
                    error_messages.append(
                        f"{name}[{index}] = {value} must be greater than 0"
                    )

        if len(error_messages) > 0:
            raise ValueError(
                "One or more scheduler parameters are invalid:\n"
                + "\n".join(error_messages)
            )

    def is_due(self, card: Card, current_datetime: datetime | None = None) -> bool:
        """
        Returns whether a card is eligible for study at the given date and time.
        """

        if current_datetime is None:
            current_datetime = datetime.now(timezone.utc)

        return card.due <= current_datetime

    def review_card(
        self,
        card: Card,
        rating: Rating | str,
        review_datetime: datetime | None = None,
        review_duration: int | None = None,
    ) -> tuple[Card, ReviewLog]:
        """
        Reviews a card with a given rating at a given time for a specified duration.

        Again always sends the card back to Learning with a zero interval.
        Otherwise a New card gets a fixed first interval, a Learning card graduates to Review,
        and a Review card's interval grows with its ease.

        Args:
            card: The card being reviewed.
            rating: The chosen rating for the card being reviewed.
            review_datetime: The date and time of the review.
            review_duration: The number of milliseconds it took to review the card or None if unspecified.

        Returns:
            tuple[Card,ReviewLog]: A tuple containing the updated, reviewed card and its corresponding review log.

        Raises:
            InvalidArgumentError: If `rating` is not one of the four ratings.
            ValueError: If the `review_datetime` argument is not timezone-aware and set to UTC.
        """

        rating = Rating.from_value(rating)

        if review_datetime is not None and (
            (review_datetime.tzinfo is None) or (review_datetime.tzinfo != timezone.utc)
        ):
            raise ValueError("datetime must be timezone-aware and set to UTC")

        card = copy(card)
        card.tags = list(card.tags)

        if review_datetime is None:
            review_datetime = datetime.now(timezone.utc)

        if rating == Rating.Again:
            card.interval = 0
            card.ease = self._decrease_ease(
                ease=card.ease, penalty=self.again_ease_penalty
            )
            card.status = Status.Learning

        else:
            recall_index = RECALL_RATINGS.index(rating)

            match card.status:
                case Status.New:
                    card.interval = self.new_card_intervals[recall_index]
                    card.status = Status.Learning

                case Status.Learning:
                    card.interval = max(
                        1,
                        self._round_interval(
                            interval=card.interval
                            * self.learning_multipliers[recall_index]
                        ),
                    )
                    card.status = Status.Review

                case Status.Review:
                    match rating:
                        case Rating.Hard:
                            card.ease = self._decrease_ease(
                                ease=card.ease, penalty=self.hard_ease_penalty
                            )
                            card.interval = max(
                                1,
                                self._round_interval(
                                    interval=card.interval
                                    * self.hard_interval_multiplier
                                ),
                            )

                        case Rating.Good:
                            card.interval = self._round_interval(
                                interval=card.interval * card.ease
                            )

                        case Rating.Easy:
                            card.ease = self._increase_ease(
                                ease=card.ease, bonus=self.easy_ease_bonus
                            )
                            card.interval = self._round_interval(
                                interval=card.interval * card.ease * self.easy_bonus
                            )

        # recomputed from the review time, never incremented from the old due date
        card.due = review_datetime + card.interval * ONE_DAY

        review_log = ReviewLog(
            card_id=card.card_id,
            rating=rating,
            review_datetime=review_datetime,
            review_duration=review_duration,
        )

        return card, review_log

    def reschedule_card(self, card: Card, review_logs: list[ReviewLog]) -> Card:
        """
        Reschedules/updates the given card with the current scheduler provided that card's review logs.

        The card is replayed from a fresh New state, so a card reviewed under a differently configured
        scheduler ends up as if it had always been scheduled with this one. Content fields are kept.

        Args:
            card: The card to be rescheduled/updated.
            review_logs: A list of that card's review logs (order doesn't matter).

        Returns:
            Card: A new card that has been rescheduled/updated with this current scheduler.

        Raises:
            ValueError: If any of the review logs are for a card other than the one specified, this will raise an error.
        """

        for review_log in review_logs:
            if review_log.card_id != card.card_id:
                raise ValueError(
                    f"ReviewLog card_id {review_log.card_id} does not match Card card_id {card.card_id}"
                )

        review_logs = sorted(review_logs, key=lambda log: log.review_datetime)

        rescheduled_card = Card(
            card_id=card.card_id,
            deck_id=card.deck_id,
            front=card.front,
            back=card.back,
            tags=card.tags,
            created_at=card.created_at,
        )

        for review_log in review_logs:
            rescheduled_card, _ = self.review_card(
                card=rescheduled_card,
                rating=review_log.rating,
                review_datetime=review_log.review_datetime,
            )

        return rescheduled_card

    def to_dict(
        self,
    ) -> SchedulerDict:
        """
        Returns a dictionary representation of the Scheduler object.

        Returns:
            SchedulerDict: A dictionary representation of the Scheduler object.
        """

        return {
            "minimum_ease": self.minimum_ease,
            "maximum_ease": self.maximum_ease,
            "again_ease_penalty": self.again_ease_penalty,
            "hard_ease_penalty": self.hard_ease_penalty,
            "easy_ease_bonus": self.easy_ease_bonus,
            "hard_interval_multiplier": self.hard_interval_multiplier,
            "easy_bonus": self.easy_bonus,
            "new_card_intervals": list(self.new_card_intervals),
            "learning_multipliers": list(self.learning_multipliers),
            "round_intervals": self.round_intervals,
        }

    @classmethod
    def from_dict(cls, source_dict: SchedulerDict) -> Self:
        """
        Creates a Scheduler object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the provided dictionary.
        """

        return cls(
            minimum_ease=source_dict["minimum_ease"],
            maximum_ease=source_dict["maximum_ease"],
            again_ease_penalty=source_dict["again_ease_penalty"],
            hard_ease_penalty=source_dict["hard_ease_penalty"],
            easy_ease_bonus=source_dict["easy_ease_bonus"],
            hard_interval_multiplier=source_dict["hard_interval_multiplier"],
            easy_bonus=source_dict["easy_bonus"],
            new_card_intervals=source_dict["new_card_intervals"],
            learning_multipliers=source_dict["learning_multipliers"],
            round_intervals=source_dict["round_intervals"],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Scheduler object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Scheduler object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Scheduler object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the JSON string.
        """

        source_dict: SchedulerDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)

    def _round_interval(self, *, interval: float) -> float:
        if self.round_intervals:
            return math.ceil(interval)  # intervals are full days

        return interval

    def _decrease_ease(self, *, ease: float, penalty: float) -> float:
        return max(self.minimum_ease, ease - penalty)

    def _increase_ease(self, *, ease: float, bonus: float) -> float:
        ease = ease + bonus

        if self.maximum_ease is not None:
            ease = min(ease, self.maximum_ease)

        return ease


def schedule_card(
    card: Card, rating: Rating | str, now: datetime | None = None
) -> Card:
    """
    Returns the next state of a card after a single review, using the default Scheduler.

    Args:
        card: The card being reviewed. It is not modified.
        rating: The chosen rating for the card being reviewed.
        now: The date and time of the review. Defaults to the current UTC time.

    Returns:
        Card: A copy of the card with its interval, ease, status and due date updated.
    """

    scheduled_card, _ = Scheduler().review_card(
        card=card, rating=rating, review_datetime=now
    )

    return scheduled_card


__all__ = ["Scheduler", "schedule_card", "ONE_DAY", "MINIMUM_EASE"]

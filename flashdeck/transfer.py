"""
flashdeck.transfer
---------

This module imports cards into and exports cards out of a CardStore.

Backups are the store's JSON blob. Plain-text decks are TSV: one card per line, front and back
separated by a tab.
"""

from __future__ import annotations
from datetime import datetime, timezone
import json
import logging
from typing import NamedTuple
from flashdeck.store import CardStore

logger = logging.getLogger(__name__)

IMPORTED_FOLDER = "Imported"


class ImportResult(NamedTuple):
    """
    Summary of a single import.

    Attributes:
        decks: Number of decks added or replaced.
        cards: Number of cards added or replaced.
        deck_id: The id of the deck created by a TSV import, or None for a JSON import.
    """

    decks: int
    cards: int
    deck_id: str | None = None


def backup_filename(now: datetime | None = None) -> str:
    if now is None:
        now = datetime.now(timezone.utc)

    return f"flashdeck_backup_{now.date().isoformat()}.json"


def export_json(store: CardStore, indent: int | str | None = None) -> str:
    return store.to_json(indent=indent)


def import_data(store: CardStore, raw: str, source_name: str) -> ImportResult:
    """
    Imports a backup or a TSV file into the store.

    The text is first read as a JSON backup, which is merged into the store. Text that is not JSON
    is read as TSV into a new deck named after the source.

    Args:
        store: The store to import into.
        raw: The contents of the file.
        source_name: The name of the file, used to name the deck of a TSV import.

    Returns:
        ImportResult: What was imported.
    """

    try:
        source_dict = json.loads(raw)
    except json.JSONDecodeError:
        return import_tsv(store, raw, deck_name=f"Imported {source_name}")

    if not (
        isinstance(source_dict, dict)
        and "decks" in source_dict
        and "cards" in source_dict
    ):
        logger.warning("%s is JSON but holds no decks and cards, nothing imported", source_name)
        return ImportResult(decks=0, cards=0)

    imported = CardStore.from_dict(source_dict)
    store.merge(imported)

    logger.info(
        "Imported %d decks and %d cards from %s",
        len(imported.decks),
        len(imported.cards),
        source_name,
    )

    return ImportResult(decks=len(imported.decks), cards=len(imported.cards))


def import_tsv(
    store: CardStore, raw: str, deck_name: str, folder: str = IMPORTED_FOLDER
) -> ImportResult:
    """
    Imports tab-separated front/back pairs into a new deck.

    Lines with fewer than two fields are skipped. Fields after the second are ignored.
    """

    deck = store.create_deck(name=deck_name, folder=folder)

    now = datetime.now(timezone.utc)
    card_count = 0
    skipped = 0

    for line in raw.splitlines():
        fields = line.split("\t")
        if len(fields) < 2 or not fields[0] or not fields[1]:
            if line.strip():
                skipped += 1
            continue

        store.add_card(deck.deck_id, front=fields[0], back=fields[1], now=now)
        card_count += 1

    if skipped:
        logger.warning("Skipped %d lines without a front and a back", skipped)

    logger.info("Imported %d cards into deck %s", card_count, deck.name)

    return ImportResult(decks=1, cards=card_count, deck_id=deck.deck_id)


def export_tsv(store: CardStore, deck_id: str) -> str:
    """
    Exports a deck's cards as TSV, one `front<TAB>back` line per card.

    Tabs and line breaks inside a field are replaced with spaces.
    """

    store.get_deck(deck_id)

    def _clean(field: str) -> str:
        return " ".join(field.replace("\t", " ").splitlines())

    return "".join(
        f"{_clean(card.front)}\t{_clean(card.back)}\n"
        for card in store.cards_in_deck(deck_id)
    )


__all__ = [
    "ImportResult",
    "backup_filename",
    "export_json",
    "import_data",
    "import_tsv",
    "export_tsv",
]

from flashdeck.store import CardStore, DeckStats
from flashdeck.scheduler import Scheduler
from flashdeck.rating import Rating, InvalidArgumentError
from flashdeck.status import Status

from datetime import datetime, timedelta, timezone
import json
import pytest

NOW = datetime(2022, 11, 29, 12, 30, 0, 0, timezone.utc)


@pytest.fixture
def store():
    return CardStore()


@pytest.fixture
def deck(store):
    return store.create_deck("Spanish", folder="Languages")


class TestCardStore:
    def test_create_deck(self, store):
        deck = store.create_deck("Spanish")

        assert store.get_deck(deck.deck_id) is deck
        assert deck.folder == "General"
        assert deck.description == ""

        with pytest.raises(ValueError):
            store.create_deck("   ")

    def test_update_deck(self, store, deck):
        store.update_deck(deck.deck_id, name="Español", description="verbs")

        assert deck.name == "Español"
        assert deck.folder == "Languages"
        assert deck.description == "verbs"

        store.update_deck(deck.deck_id, folder="")
        assert deck.folder == "General"

        with pytest.raises(ValueError):
            store.update_deck(deck.deck_id, name="")

    def test_folders(self, store, deck):
        store.create_deck("French", folder="Languages")
        store.create_deck("Chemistry", folder="Science")
        store.create_deck("Misc")

        assert store.folders() == ["General", "Languages", "Science"]

    def test_unknown_ids(self, store):
        with pytest.raises(KeyError):
            store.get_deck("missing")

        with pytest.raises(KeyError):
            store.get_card("missing")

        with pytest.raises(KeyError):
            store.add_card("missing", front="a", back="b")

    def test_add_card(self, store, deck):
        card = store.add_card(deck.deck_id, front="hola", back="hello", tags=["greeting"], now=NOW)

        assert store.get_card(card.card_id) is card
        assert card.deck_id == deck.deck_id
        assert card.status == Status.New
        assert card.interval == 0
        assert card.ease == 2.5
        assert card.due == NOW
        assert card.tags == ["greeting"]

        with pytest.raises(ValueError):
            store.add_card(deck.deck_id, front="hola", back="")

    def test_edit_card_keeps_schedule(self, store, deck):
        card = store.add_card(deck.deck_id, front="hola", back="hello", now=NOW)
        store.record_review(card.card_id, Rating.Good, review_datetime=NOW)

        edited_card = store.edit_card(card.card_id, back="hi", tags=["informal"])

        assert edited_card.front == "hola"
        assert edited_card.back == "hi"
        assert edited_card.tags == ["informal"]
        assert edited_card.status == Status.Learning
        assert edited_card.interval == 2

        with pytest.raises(ValueError):
            store.edit_card(card.card_id, front="")

    def test_delete_card(self, store, deck):
        card = store.add_card(deck.deck_id, front="a", back="b", now=NOW)
        other_card = store.add_card(deck.deck_id, front="c", back="d", now=NOW)
        store.record_review(card.card_id, Rating.Good, review_datetime=NOW)
        store.record_review(other_card.card_id, Rating.Good, review_datetime=NOW)

        store.delete_card(card.card_id)

        assert card.card_id not in store.cards
        assert [log.card_id for log in store.review_logs] == [other_card.card_id]

        with pytest.raises(KeyError):
            store.delete_card(card.card_id)

    def test_delete_deck_removes_its_cards(self, store, deck):
        other_deck = store.create_deck("French")
        store.add_card(deck.deck_id, front="a", back="b", now=NOW)
        store.add_card(deck.deck_id, front="c", back="d", now=NOW)
        kept_card = store.add_card(other_deck.deck_id, front="e", back="f", now=NOW)

        assert store.delete_deck(deck.deck_id) == 2

        assert deck.deck_id not in store.decks
        assert list(store.cards) == [kept_card.card_id]

    def test_due_cards(self, store, deck):
        other_deck = store.create_deck("French")
        first = store.add_card(deck.deck_id, front="a", back="b", now=NOW - timedelta(days=2))
        second = store.add_card(deck.deck_id, front="c", back="d", now=NOW - timedelta(days=1))
        later = store.add_card(deck.deck_id, front="e", back="f", now=NOW + timedelta(hours=1))
        elsewhere = store.add_card(other_deck.deck_id, front="g", back="h", now=NOW)

        assert store.due_cards(deck.deck_id, now=NOW) == [first, second]
        assert store.due_cards(now=NOW) == [first, second, elsewhere]
        assert later in store.due_cards(deck.deck_id, now=NOW + timedelta(hours=1))

        # a card due exactly now is due
        assert store.due_cards(other_deck.deck_id, now=NOW) == [elsewhere]

    def test_search(self, store, deck):
        greeting = store.add_card(deck.deck_id, front="Hola", back="Hello", now=NOW)
        farewell = store.add_card(deck.deck_id, front="Adiós", back="Goodbye", now=NOW)

        assert store.search("hola") == [greeting]
        assert store.search("BYE") == [farewell]
        assert store.search("o") == [greeting, farewell]
        assert store.search("  ") == []

    def test_deck_stats(self, store, deck):
        cards = [
            store.add_card(deck.deck_id, front=str(i), back=str(i), now=NOW) for i in range(4)
        ]
        store.record_review(cards[0].card_id, Rating.Again, review_datetime=NOW)
        store.record_review(cards[1].card_id, Rating.Good, review_datetime=NOW)
        store.record_review(cards[1].card_id, Rating.Good, review_datetime=NOW)

        assert store.deck_stats(deck.deck_id, now=NOW) == DeckStats(
            total=4, due=3, new=2, learning=1, review=1
        )

    def test_record_review(self, store, deck):
        card = store.add_card(deck.deck_id, front="a", back="b", now=NOW)

        review_log = store.record_review(card.card_id, "easy", review_datetime=NOW, review_duration=900)

        stored_card = store.get_card(card.card_id)
        assert stored_card is not card
        assert stored_card.interval == 4
        assert stored_card.status == Status.Learning
        assert review_log.rating == Rating.Easy
        assert store.review_logs == [review_log]

        # the card originally added is left as it was
        assert card.status == Status.New

        with pytest.raises(InvalidArgumentError):
            store.record_review(card.card_id, "perfect", review_datetime=NOW)

        assert store.get_card(card.card_id) is stored_card
        assert store.review_logs == [review_log]

    def test_reschedule_all(self, store, deck):
        card = store.add_card(deck.deck_id, front="a", back="b", now=NOW)
        untouched = store.add_card(deck.deck_id, front="c", back="d", now=NOW)

        review_datetime = NOW
        for rating in (Rating.Good, Rating.Good, Rating.Again, Rating.Good):
            store.record_review(card.card_id, rating, review_datetime=review_datetime)
            review_datetime = store.get_card(card.card_id).due + timedelta(hours=1)

        assert store.get_card(card.card_id).ease == pytest.approx(2.3)

        store.reschedule_all(Scheduler(again_ease_penalty=0.5))

        assert store.get_card(card.card_id).ease == pytest.approx(2.0)
        assert store.get_card(untouched.card_id) is untouched

    def test_merge(self, store, deck):
        card = store.add_card(deck.deck_id, front="a", back="b", now=NOW)

        other = CardStore()
        other_deck = other.create_deck("French")
        other.add_card(other_deck.deck_id, front="c", back="d", now=NOW)

        replacement = CardStore.from_dict(store.to_dict())
        replacement.edit_card(card.card_id, front="changed")

        store.merge(other)
        store.merge(replacement)

        assert set(store.decks) == {deck.deck_id, other_deck.deck_id}
        assert len(store.cards) == 2
        assert store.get_card(card.card_id).front == "changed"

    def test_CardStore_json_serialize(self, store, deck):
        card = store.add_card(deck.deck_id, front="a", back="b", now=NOW)
        store.record_review(card.card_id, Rating.Good, review_datetime=NOW)

        store_dict = json.loads(store.to_json())
        assert set(store_dict) == {"decks", "cards", "reviewLogs"}
        assert store_dict["cards"][card.card_id]["deckId"] == deck.deck_id

        copied_store = CardStore.from_json(store.to_json())
        assert copied_store == store

    def test_CardStore_from_dict_without_review_logs(self):
        store = CardStore.from_dict(
            {
                "decks": {"d1": {"id": "d1", "name": "Deck", "description": "", "folder": "General"}},
                "cards": {
                    "c1": {
                        "id": "c1",
                        "deckId": "d1",
                        "front": "a",
                        "back": "b",
                        "dueDate": 1669725000000,
                        "interval": 0,
                        "ease": 2.5,
                        "status": "new",
                    }
                },
            }
        )

        assert store.review_logs == []
        assert store.cards_in_deck("d1")[0].due == NOW

    def test_save_and_load(self, store, deck, tmp_path):
        card = store.add_card(deck.deck_id, front="a", back="b", now=NOW)
        store.record_review(card.card_id, Rating.Good, review_datetime=NOW)

        path = tmp_path / "store.json"
        store.save(path)

        assert CardStore.load(path) == store

    def test_load_missing_file(self, tmp_path):
        assert CardStore.load(tmp_path / "missing.json") == CardStore()

    def test_load_corrupt_file(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="Failed to load store"):
            CardStore.load(path)

    @pytest.mark.parametrize(
        "contents",
        [
            '{"decks": [], "cards": {}}',
            '{"decks": {}, "cards": ["c1"]}',
            '{"decks": {}}',
            "[]",
        ],
    )
    def test_load_file_with_wrong_structure(self, tmp_path, contents):
        path = tmp_path / "store.json"
        path.write_text(contents, encoding="utf-8")

        with pytest.raises(ValueError, match="Failed to load store"):
            CardStore.load(path)

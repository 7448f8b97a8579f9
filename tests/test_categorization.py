"""Tests for the categorization engine."""

import pytest

from smsledger.domain.categorization import (
    DEFAULT_CATEGORIES,
    CategorizationEngine,
    normalize_merchant,
)
from smsledger.domain.errors import NotFoundError, ValidationError


def test_default_category_order():
    """Test the table order keyword matching relies on."""
    assert [c.id for c in DEFAULT_CATEGORIES] == [
        "food", "shopping", "transport", "bills", "entertainment",
        "health", "transfer", "atm", "other",
    ]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Swiggy™️  ", "swiggy"),
        ("SWIGGY", "swiggy"),
        ("Pizza-Hut!!", "pizza hut"),
        ("big_bazaar", "big bazaar"),
        ("™️", ""),
        (None, ""),
    ],
)
def test_normalize_merchant(raw, expected):
    """Test the mapping key normalization."""
    assert normalize_merchant(raw) == expected


def test_keyword_match(engine, make_transaction):
    """Test whole-word keyword matching over merchant and body."""
    uber = make_transaction(1, merchant="Uber India", raw_body="Rs.300 paid to Uber India")
    assert engine.categorize(uber) == "transport"

    # "ola" must not match inside "Olam"
    olam = make_transaction(2, merchant="Olam Traders", raw_body="Rs.300 debited at Olam Traders")
    assert engine.categorize(olam) == "other"


def test_keyword_match_follows_table_order(engine, make_transaction):
    """Test that the first matching category in table order wins."""
    txn = make_transaction(1, merchant="Uber", raw_body="Rs.300 paid to Uber via Amazon Pay")
    assert engine.categorize(txn) == "shopping"


def test_override_beats_mapping(temp_db, engine, make_transaction):
    """Test that a per-transaction override wins over the merchant mapping."""
    txn = make_transaction(1, merchant="Swiggy", raw_body="Rs.300 paid to Swiggy")
    temp_db.save_transaction(txn)
    engine.learn_merchant("Swiggy", "entertainment")
    engine.set_override(1, "shopping")

    assert engine.categorize(txn) == "shopping"


def test_mapping_lookup_is_normalized(engine, make_transaction):
    """Test that a mapping learned for a noisy name matches every spelling."""
    engine.learn_merchant("  Swiggy™️  ", "entertainment")

    for merchant in ("swiggy", "SWIGGY", "Swiggy"):
        txn = make_transaction(1, merchant=merchant, raw_body="Rs.300 paid")
        assert engine.categorize(txn) == "entertainment"


def test_override_with_merchant_learns_mapping(temp_db, engine, make_transaction):
    """Test that a correction with a merchant recategorizes that merchant's other transactions."""
    temp_db.save_transaction(make_transaction(2, merchant="Pizza Hut", raw_body="Rs.450 spent at Pizza Hut"))
    engine.set_override(transaction_id=2, category_id="food", merchant="Pizza Hut")

    later = make_transaction(3, merchant="pizza hut", raw_body="Rs.800 spent at pizza hut, Phoenix mall")
    assert engine.categorize(later) == "food"
    assert temp_db.get_merchant_mapping("pizza hut") == "food"


def test_mapping_beats_keyword(engine, make_transaction):
    """Test that a learned merchant wins over keyword matches in the body."""
    engine.learn_merchant("Croma", "entertainment")
    txn = make_transaction(1, merchant="Croma", raw_body="Rs.9,999 spent at Croma, Phoenix mall")
    assert engine.categorize(txn) == "entertainment"


def test_blank_merchant_skips_mapping(engine, make_transaction):
    """Test that transactions without a merchant fall through to keywords."""
    txn = make_transaction(1, merchant=None, raw_body="Rs.500 withdrawn at ATM")
    assert engine.categorize(txn) == "atm"


def test_set_override_unknown_category(temp_db, engine, make_transaction):
    """Test that unknown categories are rejected."""
    temp_db.save_transaction(make_transaction(1))
    with pytest.raises(ValidationError):
        engine.set_override(1, "groceries")
    assert temp_db.get_override(1) is None


def test_set_override_unknown_transaction(engine):
    """Test that overriding a missing transaction fails."""
    with pytest.raises(NotFoundError):
        engine.set_override(999, "food")


def test_set_override_unnormalizable_merchant_writes_nothing(temp_db, engine, make_transaction):
    """Test that a merchant made only of symbols is rejected before any write."""
    temp_db.save_transaction(make_transaction(1))
    with pytest.raises(ValidationError):
        engine.set_override(1, "food", merchant="™️")
    assert temp_db.get_override(1) is None
    assert temp_db.get_all_merchant_mappings() == []


def test_set_override_blank_merchant_learns_nothing(temp_db, engine, make_transaction):
    """Test that a blank merchant only sets the override."""
    temp_db.save_transaction(make_transaction(1))
    engine.set_override(1, "food", merchant="   ")
    assert temp_db.get_override(1) == "food"
    assert temp_db.get_all_merchant_mappings() == []


def test_learn_merchant_rejects_blank(engine):
    """Test the learn request boundary check."""
    with pytest.raises(ValidationError):
        engine.learn_merchant("  ", "food")
    with pytest.raises(ValidationError):
        engine.learn_merchant("Swiggy", "nope")


def test_last_mapping_wins(engine, make_transaction):
    """Test that relearning a merchant replaces the earlier category."""
    engine.learn_merchant("Croma", "entertainment")
    engine.learn_merchant("CROMA", "bills")
    txn = make_transaction(1, merchant="Croma", raw_body="Rs.10 paid")
    assert engine.categorize(txn) == "bills"
    assert len(engine.list_merchant_mappings()) == 1


def test_mapping_cache_sees_other_writers(temp_db, make_transaction):
    """Test that reload_mappings picks up mappings written by another engine."""
    first = CategorizationEngine(temp_db)
    second = CategorizationEngine(temp_db)
    txn = make_transaction(1, merchant="Croma", raw_body="Rs.10 paid")
    assert first.categorize(txn) == "other"

    second.learn_merchant("Croma", "entertainment")
    assert first.categorize(txn) == "other"

    first.reload_mappings()
    assert first.categorize(txn) == "entertainment"


def test_reset_mappings_keeps_overrides(temp_db, engine, make_transaction):
    """Test that resetting mappings leaves overrides alone."""
    txn = make_transaction(1, merchant="Croma", raw_body="Rs.10 paid")
    temp_db.save_transaction(txn)
    engine.set_override(1, "bills", merchant="Croma")
    engine.learn_merchant("Reliance Digital", "entertainment")

    assert engine.reset_all_merchant_mappings() == 2

    assert temp_db.get_all_merchant_mappings() == []
    assert engine.categorize(txn) == "bills"
    other = make_transaction(2, merchant="Croma", raw_body="Rs.10 paid")
    assert engine.categorize(other) == "other"


def test_remove_override(temp_db, engine, make_transaction):
    """Test removing an override falls back to the next resolver."""
    txn = make_transaction(1, merchant="Swiggy", raw_body="Rs.300 paid to Swiggy")
    temp_db.save_transaction(txn)
    engine.set_override(1, "bills", merchant=None)

    assert engine.remove_override(1) is True
    assert engine.remove_override(1) is False
    assert engine.categorize(txn) == "food"


def test_categorize_all(engine, make_transaction):
    """Test categorizing several transactions at once."""
    result = engine.categorize_all([
        make_transaction(1, merchant="Netflix", raw_body="Rs.649 paid to Netflix"),
        make_transaction(2, merchant="Apollo Pharmacy", raw_body="Rs.120 spent at Apollo Pharmacy"),
    ])
    assert result == {1: "entertainment", 2: "health"}


def test_keyword_prefix_match(engine, make_transaction):
    """Test that longer keywords also match run-together merchant names."""
    txn = make_transaction(1, merchant="AMAZONPAY", raw_body="Rs.10 debited to AMAZONPAY")
    assert engine.categorize(txn) == "shopping"

    # Short keywords stay whole words
    assert engine.categorize(make_transaction(2, merchant="Olam", raw_body="Rs.10 paid to Olam")) == "other"


def test_mapping_learned_during_reset_is_kept(temp_db, engine, make_transaction, monkeypatch):
    """Test that the cache agrees with the store when a mapping is learned while resetting."""
    engine.learn_merchant("Croma", "bills")
    txn = make_transaction(1, merchant="Reliance Digital", raw_body="Rs.10 paid")
    engine.categorize(txn)
    original_clear = temp_db.clear_all_merchant_mappings

    def _clear_then_learn():
        count = original_clear()
        engine.learn_merchant("Reliance Digital", "entertainment")
        return count

    monkeypatch.setattr(temp_db, "clear_all_merchant_mappings", _clear_then_learn)
    engine.reset_all_merchant_mappings()

    assert temp_db.get_merchant_mapping("reliance digital") == "entertainment"
    assert engine.categorize(txn) == "entertainment"

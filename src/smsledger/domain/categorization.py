"""Categorization engine.

A transaction's category is resolved by trying, in order:

1. the user's override for that transaction,
2. the category learned for its merchant,
3. the first category whose keywords appear in the merchant or body,
4. the default category.

Categories are computed on read and never stored with the transaction, so
changing a mapping re-categorizes every past transaction of that merchant.
"""

import logging
import re
import threading
from typing import Callable, Iterable, Optional

from smsledger.database.base import Database
from smsledger.domain.entities import Category, MerchantMapping, ParsedTransaction
from smsledger.domain.errors import (
    NotFoundError,
    ValidationError,
    blank_merchant,
    category_not_found,
    transaction_not_found,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_ID = "other"

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category("food", "Food & Dining", (
        "swiggy", "zomato", "restaurant", "cafe", "food", "dining", "pizza", "burger",
        "biryani", "dominos", "kfc", "mcdonalds", "starbucks", "chaayos",
    )),
    Category("shopping", "Shopping", (
        "amazon", "flipkart", "myntra", "ajio", "shop", "store", "mall", "mart",
        "reliance", "dmart", "bigbasket", "grofers", "blinkit", "zepto",
    )),
    Category("transport", "Transport", (
        "uber", "ola", "rapido", "metro", "fuel", "petrol", "diesel", "iocl", "bpcl",
        "hpcl", "parking", "fastag", "toll",
    )),
    Category("bills", "Bills & Utilities", (
        "electricity", "water", "gas", "broadband", "mobile", "recharge", "airtel", "jio",
        "vi", "bsnl", "tata", "adani", "bescom", "bill",
    )),
    Category("entertainment", "Entertainment", (
        "netflix", "prime", "spotify", "hotstar", "movie", "game", "pvr", "inox",
        "bookmyshow", "youtube", "disney",
    )),
    Category("health", "Health", (
        "pharmacy", "hospital", "doctor", "medical", "apollo", "medplus", "netmeds",
        "pharmeasy", "practo", "clinic", "diagnostic",
    )),
    Category("transfer", "Transfers", (
        "transfer", "sent to", "received from", "upi", "imps", "neft", "rtgs",
    )),
    Category("atm", "ATM & Cash", ("atm", "withdrawal", "cash", "withdraw")),
    Category(DEFAULT_CATEGORY_ID, "Other"),
)


def normalize_merchant(merchant: Optional[str]) -> str:
    """Normalize a merchant name into its mapping key.

    Case is folded and every run of characters that are not letters or
    digits (punctuation, symbols, emoji, underscores) becomes one space.

    Examples:
        >>> normalize_merchant("  Swiggy™️  ")
        'swiggy'
        >>> normalize_merchant("PIZZA-HUT")
        'pizza hut'
    """
    if not merchant:
        return ""
    return re.sub(r"[\W_]+", " ", merchant.casefold()).strip()


PREFIX_MATCH_LENGTH = 4


def _keyword_pattern(keywords: Iterable[str]) -> Optional[re.Pattern]:
    # Longer single words also match as a prefix ("amazon" in "AMAZONPAY");
    # short ones and phrases only as whole words, so "ola" misses "Olam"
    words = []
    for kw in keywords:
        parts = kw.split()
        word = r"\s+".join(re.escape(part) for part in parts)
        if len(parts) > 1 or len(kw) < PREFIX_MATCH_LENGTH:
            word += r"\b"
        words.append(word)
    if not words:
        return None
    return re.compile(r"\b(?:" + "|".join(words) + ")", re.IGNORECASE)


Resolver = Callable[[ParsedTransaction], Optional[str]]


class CategorizationEngine:
    """Assign categories to transactions and learn from user corrections."""

    def __init__(self, db: Database, categories: Iterable[Category] = DEFAULT_CATEGORIES):
        """Initialize the engine.

        Args:
            db: Store holding overrides and merchant mappings
            categories: Category table; keyword matching follows its order
        """
        self.db = db
        self.categories = tuple(categories)
        self._by_id = {c.id: c for c in self.categories}
        self._keyword_rules = []
        for category in self.categories:
            pattern = _keyword_pattern(category.keywords)
            if pattern is not None:
                self._keyword_rules.append((category.id, pattern))
        self._lock = threading.RLock()
        self._mappings: Optional[dict[str, str]] = None

        # Tried in order, first non-None wins
        self.resolvers: list[Resolver] = [
            self._from_override,
            self._from_merchant_mapping,
            self._from_keywords,
        ]

    def get_category(self, category_id: str) -> Optional[Category]:
        """Look up a category by ID."""
        return self._by_id.get(category_id)

    def categorize(self, transaction: ParsedTransaction) -> str:
        """Return the category ID for a transaction."""
        for resolver in self.resolvers:
            category_id = resolver(transaction)
            if category_id is not None:
                return category_id
        return DEFAULT_CATEGORY_ID

    def categorize_all(self, transactions: Iterable[ParsedTransaction]) -> dict[int, str]:
        """Categorize several transactions, keyed by source ID."""
        return {txn.source_id: self.categorize(txn) for txn in transactions}

    def _from_override(self, transaction: ParsedTransaction) -> Optional[str]:
        return self.db.get_override(transaction.source_id)

    def _from_merchant_mapping(self, transaction: ParsedTransaction) -> Optional[str]:
        key = normalize_merchant(transaction.merchant)
        if not key:
            return None
        with self._lock:
            return self._load_mappings().get(key)

    def _from_keywords(self, transaction: ParsedTransaction) -> Optional[str]:
        text = " ".join(filter(None, [transaction.merchant, transaction.raw_body]))
        for category_id, pattern in self._keyword_rules:
            if pattern.search(text):
                return category_id
        return None

    def _load_mappings(self) -> dict[str, str]:
        # Caller holds the lock
        if self._mappings is None:
            self._mappings = {m.merchant: m.category_id for m in self.db.get_all_merchant_mappings()}
            logger.debug("Loaded %d merchant mappings", len(self._mappings))
        return self._mappings

    def reload_mappings(self) -> None:
        """Drop the mapping cache so the next lookup reads the store."""
        with self._lock:
            self._mappings = None

    def _require_category(self, category_id: str) -> None:
        if category_id not in self._by_id:
            raise ValidationError(category_not_found(category_id))

    def set_override(
        self, transaction_id: int, category_id: str, merchant: Optional[str] = None
    ) -> None:
        """Pin a transaction to a category, optionally learning its merchant.

        Args:
            transaction_id: Source ID of the transaction
            category_id: Category to assign
            merchant: When given and not blank, future transactions from this
                merchant get the same category

        Raises:
            ValidationError: If the category is unknown or the merchant is
                non-blank but normalizes to nothing
            NotFoundError: If the transaction doesn't exist
        """
        self._require_category(category_id)
        key = None
        if merchant is not None and merchant.strip():
            key = normalize_merchant(merchant)
            if not key:
                raise ValidationError(blank_merchant(merchant))
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        self.db.set_override(transaction_id, category_id)
        if key:
            self._store_mapping(key, category_id)

    def remove_override(self, transaction_id: int) -> bool:
        """Remove a transaction's override. Returns True if one existed."""
        return self.db.remove_override(transaction_id)

    def learn_merchant(self, merchant: str, category_id: str) -> str:
        """Map a merchant to a category for all of its transactions.

        Returns:
            The normalized merchant key

        Raises:
            ValidationError: If the category is unknown or the merchant is blank
        """
        self._require_category(category_id)
        key = normalize_merchant(merchant)
        if not key:
            raise ValidationError(blank_merchant(merchant))
        self._store_mapping(key, category_id)
        return key

    def _store_mapping(self, key: str, category_id: str) -> None:
        # Store first so the cache never holds a mapping the store lacks
        with self._lock:
            self.db.set_merchant_mapping(key, category_id)
            if self._mappings is not None:
                self._mappings[key] = category_id
        logger.info("Learned merchant '%s' -> %s", key, category_id)

    def list_merchant_mappings(self) -> list[MerchantMapping]:
        """All learned mappings, ordered by merchant."""
        return self.db.get_all_merchant_mappings()

    def reset_all_merchant_mappings(self) -> int:
        """Forget every learned mapping; overrides are kept.

        Returns:
            Number of mappings removed
        """
        with self._lock:
            count = self.db.clear_all_merchant_mappings()
            # Reload on next lookup rather than assume the store is empty
            self._mappings = None
        logger.info("Cleared %d merchant mappings", count)
        return count

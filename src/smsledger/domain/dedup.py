"""Duplicate alert detection.

Banks often deliver the same transaction more than once: a retried SMS, a
card alert followed by a UPI alert, or two sender IDs for one event. A
shared reference number is authoritative. Without one, matching falls back
to amount, direction and arrival time, and refuses to merge alerts that name
different accounts or different balances.
"""

import logging
from typing import Iterable

from smsledger.database.base import Database
from smsledger.domain.entities import ParsedTransaction

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_MS = 120_000


def _conflicts(a, b) -> bool:
    return a is not None and b is not None and a != b


class Deduplicator:
    """Collapse alerts describing the same real-world transaction."""

    def __init__(self, window_ms: int = DEFAULT_WINDOW_MS):
        """Initialize the deduplicator.

        Args:
            window_ms: Maximum arrival gap for alerts without a reference
        """
        self.window_ms = window_ms

    def is_same_event(self, a: ParsedTransaction, b: ParsedTransaction) -> bool:
        """Return True when both transactions describe the same event."""
        if a.reference and b.reference:
            return a.reference == b.reference
        if a.amount != b.amount or a.direction != b.direction:
            return False
        if abs(a.received_at - b.received_at) > self.window_ms:
            return False
        return not (_conflicts(a.account, b.account) or _conflicts(a.balance, b.balance))

    def collapse_batch(
        self, transactions: Iterable[ParsedTransaction]
    ) -> tuple[list[ParsedTransaction], list[ParsedTransaction]]:
        """Collapse duplicates inside one batch, keeping the earliest arrival.

        Returns:
            Tuple of (kept, dropped), each in arrival order
        """
        ordered = sorted(transactions, key=lambda t: (t.received_at, t.source_id))
        kept: list[ParsedTransaction] = []
        dropped: list[ParsedTransaction] = []
        seen_ids: set[int] = set()
        for txn in ordered:
            if txn.source_id in seen_ids or any(self.is_same_event(k, txn) for k in kept):
                dropped.append(txn)
                continue
            seen_ids.add(txn.source_id)
            kept.append(txn)
        return kept, dropped

    def dedupe(
        self,
        transactions: Iterable[ParsedTransaction],
        already_stored: Iterable[ParsedTransaction] = (),
    ) -> list[ParsedTransaction]:
        """Return the transactions that are neither batch nor stored duplicates."""
        stored = list(already_stored)
        stored_ids = {t.source_id for t in stored}
        kept, _ = self.collapse_batch(transactions)
        return [
            txn
            for txn in kept
            if txn.source_id not in stored_ids
            and not any(self.is_same_event(s, txn) for s in stored)
        ]

    def dedupe_against_store(
        self, transactions: Iterable[ParsedTransaction], db: Database
    ) -> tuple[list[ParsedTransaction], list[ParsedTransaction]]:
        """Collapse a batch, then drop anything the store already holds.

        Stored transactions are matched by source message ID first and then by
        reference or by amount, direction and arrival window.

        Args:
            transactions: Freshly extracted transactions
            db: Store to check against

        Returns:
            Tuple of (new, dropped)

        Raises:
            StoreError: If the store lookup fails
        """
        kept, dropped = self.collapse_batch(transactions)
        fresh: list[ParsedTransaction] = []
        for txn in kept:
            if db.transaction_exists(txn.source_id):
                logger.debug("Transaction %s already stored", txn.source_id)
                dropped.append(txn)
                continue
            candidates = db.find_by_reference_and_window(
                reference=txn.reference,
                amount=txn.amount,
                direction=txn.direction,
                start=txn.received_at - self.window_ms,
                end=txn.received_at + self.window_ms,
            )
            match = next((c for c in candidates if self.is_same_event(c, txn)), None)
            if match is not None:
                logger.debug("Transaction %s duplicates stored %s", txn.source_id, match.source_id)
                dropped.append(txn)
                continue
            fresh.append(txn)
        return fresh, dropped

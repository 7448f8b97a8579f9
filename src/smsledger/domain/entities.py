"""Domain model entities for smsledger.

These are pure data classes representing business concepts, independent of
database schema. The SQLAlchemy models in ``smsledger.database.models`` are
converted to and from these by ``smsledger.database.mappers``.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class Direction(str, Enum):
    """Whether money left or entered the account."""

    DEBIT = "debit"
    CREDIT = "credit"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RawMessage:
    """A message as read from the inbox. Never mutated by the pipeline."""

    id: int
    sender: str
    body: str
    timestamp: int
    is_read: bool = False


@dataclass(frozen=True)
class ExtractionRuleSet:
    """Bank-specific override patterns.

    Each rule is optional and must capture the bare value in group 1. A
    missing rule means the generic rule for that field is used.
    """

    amount: Optional[re.Pattern] = None
    balance: Optional[re.Pattern] = None
    merchant: Optional[re.Pattern] = None
    reference: Optional[re.Pattern] = None


@dataclass(frozen=True)
class BankProfile:
    """Bank or fintech institution with its known sender IDs."""

    name: str
    display_name: str
    sender_ids: frozenset[str]
    rules: Optional[ExtractionRuleSet] = None


@dataclass(frozen=True)
class ParsedTransaction:
    """Transaction extracted from a single message.

    ``source_id`` is the ID of the message it came from and is the stable
    identity of the transaction. ``date`` is the transaction date (arrival
    time unless the body names a date) while ``received_at`` is always the
    arrival time of the message.
    """

    source_id: int
    amount: Decimal
    direction: Direction
    date: int
    received_at: int
    raw_body: str
    sender: str
    merchant: Optional[str] = None
    account: Optional[str] = None
    reference: Optional[str] = None
    balance: Optional[Decimal] = None
    location: Optional[str] = None
    upi_id: Optional[str] = None
    payment_method: Optional[str] = None
    bank_name: Optional[str] = None


@dataclass(frozen=True)
class Category:
    """Spending category with the keywords used for automatic matching."""

    id: str
    name: str
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class MerchantMapping:
    """Learned association between a normalized merchant and a category."""

    merchant: str
    category_id: str
    updated_at: int


class SyncState(str, Enum):
    """Lifecycle of the sync coordinator."""

    IDLE = "idle"
    RUNNING = "running"
    FAILED = "failed"


class SyncOutcome(str, Enum):
    """How a sync run ended."""

    SUCCESS = "success"
    CANCELLED = "cancelled"
    SOURCE_UNAVAILABLE = "source_unavailable"
    PERSISTENCE_FAILED = "persistence_failed"


@dataclass(frozen=True)
class SyncSummary:
    """Result of one sync run."""

    outcome: SyncOutcome
    incremental: bool
    completed_at: int
    window_start: Optional[int] = None
    messages_read: int = 0
    transactional: int = 0
    saved: int = 0
    duplicates: int = 0
    extraction_failures: int = 0
    skipped_records: int = 0
    categories: dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        """True when the run completed or was cancelled cleanly."""
        return self.outcome in (SyncOutcome.SUCCESS, SyncOutcome.CANCELLED)

"""Abstract database interface."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from smsledger.domain.entities import Direction, MerchantMapping, ParsedTransaction


class Database(ABC):
    """Abstract database interface for smsledger.

    One store holds the transactions, the category overrides and merchant
    mappings, and the sync cursor.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction operations
    @abstractmethod
    def transaction_exists(self, source_id: int) -> bool:
        """Check if a transaction from the given message is stored."""
        pass

    @abstractmethod
    def save_transaction(self, transaction: ParsedTransaction) -> None:
        """Store a transaction, replacing one with the same source ID."""
        pass

    @abstractmethod
    def save_batch(self, transactions: Iterable[ParsedTransaction]) -> int:
        """Store several transactions in one commit. Returns the count saved."""
        pass

    @abstractmethod
    def get_transaction(self, source_id: int) -> Optional[ParsedTransaction]:
        """Get transaction by source ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        direction: Optional[Direction] = None,
    ) -> list[ParsedTransaction]:
        """List transactions, newest first, with optional date (epoch millis) filters."""
        pass

    @abstractmethod
    def find_by_reference_and_window(
        self,
        reference: Optional[str],
        amount: Decimal,
        direction: Direction,
        start: int,
        end: int,
    ) -> list[ParsedTransaction]:
        """Find stored transactions that may describe the same event.

        Returns transactions with the given non-empty reference, plus those with
        the same amount and direction that arrived between ``start`` and ``end``.
        """
        pass

    @abstractmethod
    def delete_transaction(self, source_id: int) -> bool:
        """Delete a transaction and its override. Returns True if it existed."""
        pass

    # Category override operations
    @abstractmethod
    def get_override(self, transaction_id: int) -> Optional[str]:
        """Get the category ID a transaction is pinned to."""
        pass

    @abstractmethod
    def set_override(self, transaction_id: int, category_id: str) -> None:
        """Pin a transaction to a category."""
        pass

    @abstractmethod
    def remove_override(self, transaction_id: int) -> bool:
        """Remove an override. Returns True if one existed."""
        pass

    # Merchant mapping operations
    @abstractmethod
    def get_merchant_mapping(self, merchant: str) -> Optional[str]:
        """Get the category ID learned for a normalized merchant."""
        pass

    @abstractmethod
    def set_merchant_mapping(self, merchant: str, category_id: str) -> None:
        """Learn a category for a normalized merchant (last write wins)."""
        pass

    @abstractmethod
    def get_all_merchant_mappings(self) -> list[MerchantMapping]:
        """List all learned mappings ordered by merchant."""
        pass

    @abstractmethod
    def clear_all_merchant_mappings(self) -> int:
        """Delete all learned mappings. Returns the count deleted."""
        pass

    # Sync cursor operations
    @abstractmethod
    def get_last_sync_timestamp(self) -> Optional[int]:
        """Get the cursor timestamp (epoch millis)."""
        pass

    @abstractmethod
    def set_last_sync_timestamp(self, timestamp: int) -> None:
        """Set the cursor timestamp (epoch millis)."""
        pass

    @abstractmethod
    def get_last_processed_id(self) -> Optional[int]:
        """Get the ID of the last processed message."""
        pass

    @abstractmethod
    def set_last_processed_id(self, message_id: int) -> None:
        """Set the ID of the last processed message."""
        pass

    @abstractmethod
    def clear_sync_cursor(self) -> None:
        """Forget the cursor so the next sync uses the full lookback window."""
        pass

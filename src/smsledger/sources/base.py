"""Abstract message source interface."""

from abc import ABC, abstractmethod
from typing import Optional

from smsledger.domain.entities import RawMessage


class MessageSource(ABC):
    """Read-only view of an SMS inbox.

    Implementations raise ``MessageSourceError`` when the inbox cannot be
    read at all. Individual records that cannot be decoded are skipped and
    counted in ``skipped_records`` for the most recent call.
    """

    def __init__(self):
        self.skipped_records = 0

    @abstractmethod
    def list_messages(
        self, since_timestamp: Optional[int] = None, lookback_days: int = 30
    ) -> list[RawMessage]:
        """List inbox messages in the sync window.

        Args:
            since_timestamp: When given, only messages at or after this epoch
                millis timestamp are returned
            lookback_days: Window used when ``since_timestamp`` is None

        Returns:
            Messages in any order

        Raises:
            MessageSourceError: If the inbox cannot be read
        """
        pass

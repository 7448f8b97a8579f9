"""Inbox read from a CSV export.

Android SMS backup tools export the inbox with one row per message and the
columns ``id``, ``address``, ``body``, ``date`` (epoch millis) and ``read``.
"""

import csv
import logging
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional

from smsledger.domain.entities import RawMessage
from smsledger.domain.errors import MessageSourceError
from smsledger.sources.base import MessageSource
from smsledger.utils.date_parser import from_millis, now_millis

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"id", "address", "body", "date"}
TRUE_VALUES = {"1", "true", "yes"}
DAY_MS = int(timedelta(days=1).total_seconds() * 1000)


class CsvMessageSource(MessageSource):
    """Message source backed by a CSV inbox export."""

    def __init__(self, csv_file_path: str, clock: Callable[[], int] = now_millis):
        """Initialize the source.

        Args:
            csv_file_path: Path to the CSV export
            clock: Returns the current time in epoch millis
        """
        super().__init__()
        self.csv_path = Path(csv_file_path)
        self.clock = clock

    def list_messages(
        self, since_timestamp: Optional[int] = None, lookback_days: int = 30
    ) -> list[RawMessage]:
        """List messages in the sync window, in file order."""
        if since_timestamp is None:
            since_timestamp = self.clock() - lookback_days * DAY_MS

        self.skipped_records = 0
        messages = []
        try:
            with open(self.csv_path, "r", encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f)
                columns = set(reader.fieldnames or [])
                missing = REQUIRED_COLUMNS - columns
                if missing:
                    raise MessageSourceError(
                        f"Inbox export {self.csv_path} is missing columns: {', '.join(sorted(missing))}"
                    )

                # Row 1 is the header
                for row_num, row in enumerate(reader, start=2):
                    message = self._parse_row(row, row_num)
                    if message is None:
                        self.skipped_records += 1
                        continue
                    if message.timestamp >= since_timestamp:
                        messages.append(message)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise MessageSourceError(f"Cannot read inbox export {self.csv_path}: {e}") from e

        logger.debug("Read %d messages from %s", len(messages), self.csv_path)
        return messages

    def _parse_row(self, row: dict, row_num: int) -> Optional[RawMessage]:
        try:
            message_id = int(row["id"])
            timestamp = int(row["date"])
            # Rejects timestamps outside the datetime range
            from_millis(timestamp)
        except (TypeError, ValueError, OverflowError, OSError):
            logger.warning("Row %d: skipping record with invalid id or date", row_num)
            return None

        sender = (row.get("address") or "").strip()
        body = row.get("body")
        if not sender or body is None:
            logger.warning("Row %d: skipping record without sender or body", row_num)
            return None

        return RawMessage(
            id=message_id,
            sender=sender,
            body=body,
            timestamp=timestamp,
            is_read=(row.get("read") or "").strip().lower() in TRUE_VALUES,
        )

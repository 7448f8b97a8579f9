"""Shared pytest fixtures for smsledger tests."""

import csv
import tempfile
import os
from datetime import datetime, timezone
from decimal import Decimal
import pytest

from smsledger.database.factories import create_sqlite_database
from smsledger.domain.categorization import CategorizationEngine
from smsledger.domain.entities import Direction, ParsedTransaction, RawMessage
from smsledger.sources.base import MessageSource
from smsledger.utils.date_parser import to_millis

# 2026-01-05 12:00 UTC
NOW = to_millis(datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc))
MINUTE = 60_000
HOUR = 60 * MINUTE
DAY = 24 * HOUR


class InMemorySource(MessageSource):
    """Message source over a list, recording the windows it was asked for."""

    def __init__(self, messages=(), error=None):
        super().__init__()
        self.messages = list(messages)
        self.error = error
        self.calls = []

    def list_messages(self, since_timestamp=None, lookback_days=30):
        self.calls.append(since_timestamp)
        if self.error is not None:
            raise self.error
        return [m for m in self.messages if since_timestamp is None or m.timestamp >= since_timestamp]


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def engine(temp_db):
    """Create a CategorizationEngine with a temporary database."""
    return CategorizationEngine(temp_db)


@pytest.fixture
def make_message():
    """Factory for RawMessage with sensible defaults."""

    def _make(id, body, sender="VM-HDFCBK", timestamp=NOW - HOUR, is_read=False):
        return RawMessage(id=id, sender=sender, body=body, timestamp=timestamp, is_read=is_read)

    return _make


@pytest.fixture
def make_transaction():
    """Factory for ParsedTransaction with sensible defaults."""

    def _make(source_id, amount="100.00", direction=Direction.DEBIT, received_at=NOW - HOUR, **fields):
        fields.setdefault("raw_body", f"Rs.{amount} debited")
        fields.setdefault("sender", "VM-HDFCBK")
        return ParsedTransaction(
            source_id=source_id,
            amount=Decimal(amount),
            direction=direction,
            date=fields.pop("date", received_at),
            received_at=received_at,
            **fields,
        )

    return _make


@pytest.fixture
def write_inbox(tmp_path):
    """Write rows to an inbox CSV export and return its path."""

    def _write(rows, name="inbox.csv", columns=("id", "address", "body", "date", "read")):
        path = tmp_path / name
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(columns)
            writer.writerows(rows)
        return str(path)

    return _write


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

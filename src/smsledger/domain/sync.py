"""Incremental sync of the inbox into the transaction store.

A run reads the messages after the stored cursor (or, on a first or full
run, a lookback window), keeps the transactional ones, extracts and
deduplicates them, saves the survivors and only then advances the cursor.
A run that dies before the save leaves the cursor where it was, so the next
run reads the same window again and deduplication against the store keeps
it from saving anything twice.
"""

import logging
import threading
from collections import Counter
from datetime import timedelta
from typing import Callable, Optional

from smsledger.database.base import Database
from smsledger.domain.banks import BankRegistry
from smsledger.domain.categorization import CategorizationEngine
from smsledger.domain.classifier import MessageClassifier
from smsledger.domain.dedup import Deduplicator
from smsledger.domain.entities import RawMessage, SyncOutcome, SyncState, SyncSummary
from smsledger.domain.errors import (
    MessageSourceError,
    StoreError,
    SyncInProgressError,
    sync_already_running,
)
from smsledger.domain.extractor import FieldExtractor
from smsledger.sources.base import MessageSource
from smsledger.utils.date_parser import now_millis

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 30
DAY_MS = int(timedelta(days=1).total_seconds() * 1000)


class SyncCoordinator:
    """Run the classify, extract, dedupe and save pipeline, one run at a time."""

    def __init__(
        self,
        source: MessageSource,
        db: Database,
        engine: CategorizationEngine,
        registry: Optional[BankRegistry] = None,
        classifier: Optional[MessageClassifier] = None,
        extractor: Optional[FieldExtractor] = None,
        deduplicator: Optional[Deduplicator] = None,
        default_lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        clock: Callable[[], int] = now_millis,
    ):
        """Initialize the coordinator.

        Args:
            source: Inbox to read
            db: Transaction and cursor store
            engine: Categorization engine used for the run summary
            registry: Bank profiles; defaults to the built-in table
            classifier: Transaction message classifier
            extractor: Field extractor
            deduplicator: Duplicate detector
            default_lookback_days: Window for runs without a cursor
            clock: Returns the current time in epoch millis
        """
        self.source = source
        self.db = db
        self.engine = engine
        self.registry = registry or BankRegistry()
        self.classifier = classifier or MessageClassifier()
        self.extractor = extractor or FieldExtractor()
        self.deduplicator = deduplicator or Deduplicator()
        self.default_lookback_days = default_lookback_days
        self.clock = clock

        self._run_lock = threading.Lock()
        self._cancel = threading.Event()
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        """Current lifecycle state."""
        return self._state

    def sync_incremental(self) -> SyncSummary:
        """Sync from the cursor, or the default window when there is none."""
        return self.sync()

    def sync_full(self, days_ago: Optional[int] = None) -> SyncSummary:
        """Ignore the cursor and re-read the whole lookback window."""
        return self.sync(days_ago=days_ago, full=True)

    def cancel(self) -> None:
        """Ask the running sync to stop before its next message."""
        self._cancel.set()

    def sync(self, days_ago: Optional[int] = None, full: bool = False) -> SyncSummary:
        """Run one sync.

        Args:
            days_ago: Lookback window in days when no cursor applies
            full: Ignore the cursor

        Returns:
            Summary of the run; store failures are reported in it rather than
            raised

        Raises:
            SyncInProgressError: If another sync is running
        """
        if not self._run_lock.acquire(blocking=False):
            raise SyncInProgressError(sync_already_running())
        try:
            if self._state == SyncState.FAILED:
                logger.info("Recovering from failed sync")
                self._state = SyncState.IDLE
            self._state = SyncState.RUNNING
            self._cancel.clear()
            try:
                summary = self._run(days_ago, full)
            except Exception:
                self._state = SyncState.FAILED
                raise
            self._state = (
                SyncState.FAILED if summary.outcome == SyncOutcome.PERSISTENCE_FAILED else SyncState.IDLE
            )
            return summary
        finally:
            self._run_lock.release()

    def _run(self, days_ago: Optional[int], full: bool) -> SyncSummary:
        started = self.clock()
        lookback = days_ago if days_ago is not None else self.default_lookback_days

        try:
            cursor_ts = None if full else self.db.get_last_sync_timestamp()
            last_id = None if full else self.db.get_last_processed_id()
        except StoreError as e:
            return self._failed(False, None, str(e))

        incremental = cursor_ts is not None
        window_start = cursor_ts if incremental else started - lookback * DAY_MS
        logger.info(
            "Starting %s sync from %d", "incremental" if incremental else "full-window", window_start
        )

        try:
            messages = self.source.list_messages(since_timestamp=window_start, lookback_days=lookback)
        except MessageSourceError as e:
            logger.warning("Message source unavailable: %s", e)
            return SyncSummary(
                outcome=SyncOutcome.SOURCE_UNAVAILABLE,
                incremental=incremental,
                completed_at=self.clock(),
                window_start=window_start,
                error=str(e),
            )

        skipped = self.source.skipped_records
        messages = sorted(
            (m for m in messages if self._in_window(m, window_start, last_id if incremental else None)),
            key=lambda m: (m.timestamp, m.id),
        )

        transactions = []
        last_processed: Optional[RawMessage] = None
        read = 0
        transactional = 0
        failures = 0
        cancelled = False
        for message in messages:
            if self._cancel.is_set():
                cancelled = True
                logger.info("Sync cancelled after %s", last_processed.id if last_processed else "no messages")
                break
            read += 1
            try:
                is_transaction = self.classifier.is_transaction_message(message.body)
                txn = (
                    self.extractor.extract(message, self.registry.resolve(message.sender))
                    if is_transaction
                    else None
                )
            except (ValueError, OverflowError, OSError) as e:
                # Undecodable record; the cursor does not move onto it
                logger.warning("Skipping message %s: %s", message.id, e)
                skipped += 1
                continue
            last_processed = message
            if not is_transaction:
                continue
            transactional += 1
            if txn is None:
                failures += 1
                continue
            transactions.append(txn)

        try:
            fresh, dropped = self.deduplicator.dedupe_against_store(transactions, self.db)
            saved = self.db.save_batch(fresh)
            # Cursor moves only once the batch is safely stored
            if last_processed is not None:
                self.db.set_last_sync_timestamp(last_processed.timestamp)
                self.db.set_last_processed_id(last_processed.id)
            elif not cancelled and read == 0:
                self.db.set_last_sync_timestamp(started)
        except StoreError as e:
            return self._failed(incremental, window_start, str(e))

        try:
            categories = Counter(self.engine.categorize(txn) for txn in fresh)
        except StoreError as e:
            # Transactions and cursor are already stored; only the breakdown is lost
            logger.warning("Could not categorize synced transactions: %s", e)
            categories = Counter()

        summary = SyncSummary(
            outcome=SyncOutcome.CANCELLED if cancelled else SyncOutcome.SUCCESS,
            incremental=incremental,
            completed_at=self.clock(),
            window_start=window_start,
            messages_read=read,
            transactional=transactional,
            saved=saved,
            duplicates=len(dropped),
            extraction_failures=failures,
            skipped_records=skipped,
            categories=dict(categories),
        )
        logger.info(
            "Sync %s: read %d, transactional %d, saved %d, duplicates %d",
            summary.outcome.value,
            summary.messages_read,
            summary.transactional,
            summary.saved,
            summary.duplicates,
        )
        return summary

    @staticmethod
    def _in_window(message: RawMessage, window_start: int, last_id: Optional[int]) -> bool:
        if message.timestamp < window_start:
            return False
        # Messages sharing the cursor timestamp were processed up to last_id
        if last_id is not None and message.timestamp == window_start and message.id <= last_id:
            return False
        return True

    def _failed(self, incremental: bool, window_start: Optional[int], error: str) -> SyncSummary:
        logger.error("Sync failed, cursor not advanced: %s", error)
        return SyncSummary(
            outcome=SyncOutcome.PERSISTENCE_FAILED,
            incremental=incremental,
            completed_at=self.clock(),
            window_start=window_start,
            error=error,
        )

"""SQLAlchemy models for smsledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Transaction(Base):
    """Transaction extracted from one message.

    Timestamps are epoch milliseconds, as delivered by the message source.
    """

    __tablename__ = "transactions"

    source_id = Column(BigInteger, primary_key=True, autoincrement=False)
    amount = Column(Numeric(12, 2), nullable=False)
    direction = Column(String, nullable=False)
    date = Column(BigInteger, nullable=False, index=True)
    received_at = Column(BigInteger, nullable=False, index=True)
    raw_body = Column(Text, nullable=False)
    sender = Column(String, nullable=False)
    merchant = Column(String, nullable=True)
    account = Column(String, nullable=True)
    reference = Column(String, nullable=True, index=True)
    balance = Column(Numeric(14, 2), nullable=True)
    location = Column(String, nullable=True)
    upi_id = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    override = relationship(
        "CategoryOverride", back_populates="transaction", uselist=False, cascade="all, delete-orphan"
    )


class CategoryOverride(Base):
    """User-chosen category for a single transaction."""

    __tablename__ = "category_overrides"

    transaction_id = Column(
        BigInteger, ForeignKey("transactions.source_id", ondelete="CASCADE"), primary_key=True
    )
    category_id = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transaction = relationship("Transaction", back_populates="override")


class MerchantCategoryMapping(Base):
    """Category learned for a normalized merchant name."""

    __tablename__ = "merchant_category_mappings"

    merchant = Column(String, primary_key=True)
    category_id = Column(String, nullable=False)
    updated_at = Column(BigInteger, nullable=False)


class SyncMetadata(Base):
    """Key/value rows holding the sync cursor."""

    __tablename__ = "sync_metadata"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
    updated_at = Column(BigInteger, nullable=True)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

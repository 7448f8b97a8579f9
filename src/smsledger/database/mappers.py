"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the table layout can change
without touching the pipeline.
"""

from decimal import Decimal

from smsledger.domain import entities as domain
from smsledger.database.models import (
    MerchantCategoryMapping as ORMMerchantCategoryMapping,
    Transaction as ORMTransaction,
)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.ParsedTransaction:
    """Convert SQLAlchemy Transaction model to domain ParsedTransaction entity."""
    return domain.ParsedTransaction(
        source_id=orm_transaction.source_id,
        amount=Decimal(orm_transaction.amount),
        direction=domain.Direction(orm_transaction.direction),
        date=orm_transaction.date,
        received_at=orm_transaction.received_at,
        raw_body=orm_transaction.raw_body,
        sender=orm_transaction.sender,
        merchant=orm_transaction.merchant,
        account=orm_transaction.account,
        reference=orm_transaction.reference,
        balance=Decimal(orm_transaction.balance) if orm_transaction.balance is not None else None,
        location=orm_transaction.location,
        upi_id=orm_transaction.upi_id,
        payment_method=orm_transaction.payment_method,
        bank_name=orm_transaction.bank_name,
    )


def transaction_to_orm(transaction: domain.ParsedTransaction) -> ORMTransaction:
    """Build a SQLAlchemy Transaction row from a domain ParsedTransaction."""
    return ORMTransaction(
        source_id=transaction.source_id,
        amount=transaction.amount,
        direction=transaction.direction.value,
        date=transaction.date,
        received_at=transaction.received_at,
        raw_body=transaction.raw_body,
        sender=transaction.sender,
        merchant=transaction.merchant,
        account=transaction.account,
        reference=transaction.reference,
        balance=transaction.balance,
        location=transaction.location,
        upi_id=transaction.upi_id,
        payment_method=transaction.payment_method,
        bank_name=transaction.bank_name,
    )


def merchant_mapping_to_domain(orm_mapping: ORMMerchantCategoryMapping) -> domain.MerchantMapping:
    """Convert SQLAlchemy MerchantCategoryMapping model to domain MerchantMapping entity."""
    return domain.MerchantMapping(
        merchant=orm_mapping.merchant,
        category_id=orm_mapping.category_id,
        updated_at=orm_mapping.updated_at,
    )

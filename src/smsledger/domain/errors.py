"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as a concurrent operation."""


class SyncInProgressError(ConflictError):
    """A sync was requested while another one is still running."""


class MessageSourceError(DomainError):
    """The message inbox could not be read (missing, unreadable, no permission)."""


class StoreError(DomainError):
    """A read or write against the persistent store failed."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for unknown category ID."""
    return f"Category '{category_id}' not found"


def blank_merchant(merchant: str) -> str:
    """Return message for a merchant name that normalizes to nothing."""
    return f"Merchant name '{merchant}' is blank after normalization"


def sync_already_running() -> str:
    """Return message when a sync is requested during another sync."""
    return "A sync is already running; try again when it has finished"

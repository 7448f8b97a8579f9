"""Field extraction from transaction messages.

For each of amount, balance, merchant and reference the bank profile's
override rule is tried first and the generic rule second. The amount is
mandatory; every other field is best effort.
"""

import logging
import re
from decimal import Decimal
from typing import Optional

from smsledger.domain.entities import (
    BankProfile,
    Direction,
    ExtractionRuleSet,
    ParsedTransaction,
    RawMessage,
)
from smsledger.utils.amount_parser import parse_amount, parse_positive_amount
from smsledger.utils.date_parser import MESSAGE_TZ, combine_with_arrival_time, find_message_date

logger = logging.getLogger(__name__)

MAX_MERCHANT_LENGTH = 50

# Generic rules; each captures the bare value in group 1
AMOUNT_RULE = re.compile(r"(?:\bRs\.?|\bINR|₹)\s*(-?\s?\d[\d,]*(?:\.\d{1,2})?)(?!\d)", re.IGNORECASE)

BALANCE_RULE = re.compile(
    r"(?:\bAvl\.?\s*Bal(?:ance)?|\bAvailable\s+Bal(?:ance)?|\bBal(?:ance)?)\b"
    r"[\s.:-]*(?:is\s*)?(?:Rs\.?|INR|₹)?\s*(\d[\d,]*(?:\.\d{1,2})?)(?!\d)",
    re.IGNORECASE,
)

REFERENCE_RULE = re.compile(
    r"(?<![A-Za-z])(?:UPI\s*Ref(?:erence)?|Ref(?:erence)?|UTR|RRN|Txn\s*ID|Transaction\s*ID|UPI(?=:))"
    r"(?:\s*No)?\.?(?![A-Za-z])[\s:#.-]*([A-Za-z0-9]*\d[A-Za-z0-9]*)",
    re.IGNORECASE,
)

# "at", "to", "for" and friends, followed by the merchant
MERCHANT_LEAD = re.compile(
    r"\b(?i:via\s+UPI\s+to|paid\s+to|sent\s+to|received\s+from|at|to|for|from)\s+"
)

VPA_RULE = re.compile(r"\b([A-Za-z0-9][A-Za-z0-9._-]{2,}@[A-Za-z][A-Za-z0-9]+)\b")

ACCOUNT_RULE = re.compile(
    r"(?:\bAcct|\bAccount|\bA/?c|\bCard|\bending)\b\.?(?:\s*no\.?)?[\s:]*([Xx*]*\d{3,})",
    re.IGNORECASE,
)

LOCATION_RULE = re.compile(r"\b[Aa]t\s+([A-Za-z0-9 ]+?)\s+[Oo]n\s+\d")
CASH_WORDS = re.compile(r"\bATM\b|withdrawn|withdrawal|\bcash\b", re.IGNORECASE)

# An amount preceded by one of these is the balance or limit, not the transaction
BALANCE_PREFIX = re.compile(r"(?:\bBal(?:ance)?|\bLimit)\.?\s*(?:is)?[\s:-]*$", re.IGNORECASE)

DEBIT_VERBS = r"debited|withdrawn|spent|paid|sent|purchased?|transferred|deducted"
CREDIT_VERBS = r"credited|received|deposited|refunded|reversed"
DIRECTION_VERB = re.compile(rf"\b(?:(?P<debit>{DEBIT_VERBS})|(?P<credit>{CREDIT_VERBS}))\b", re.IGNORECASE)

MERCHANT_STOP_WORDS = {
    "on", "ref", "utr", "rrn", "avl", "bal", "balance", "available", "upi", "rs", "inr",
    "a/c", "ac", "info", "via", "from", "is", "has", "was", "not", "call", "txn",
    "transaction", "using", "dt", "date", "by", "with", "vpa", "and",
}
ACCOUNT_WORDS = {"a/c", "ac", "acct", "account", "your", "card", "vpa", "a", "the"}
MASKED_ACCOUNT = re.compile(r"^[Xx*]+\d+$")
MERCHANT_SUFFIX = re.compile(r"\s+(?:PVT\.?\s*LTD\.?|PVT\.?|LTD\.?|LIMITED|INC\.?|CORP\.?|CO\.?)\s*$", re.IGNORECASE)
MAX_MERCHANT_TOKENS = 6

PAYMENT_METHODS = (
    ("UPI", re.compile(r"\bUPI\b|@", re.IGNORECASE)),
    ("ATM", re.compile(r"\bATM\b", re.IGNORECASE)),
    ("CARD", re.compile(r"\bcard\b", re.IGNORECASE)),
    ("NETBANKING", re.compile(r"\b(?:NEFT|IMPS|RTGS)\b|net\s*banking", re.IGNORECASE)),
)


class FieldExtractor:
    """Turn a transactional message into a ParsedTransaction."""

    def __init__(self, tzinfo=MESSAGE_TZ):
        """Initialize the extractor.

        Args:
            tzinfo: Time zone of the dates banks write in their alerts
        """
        self.tzinfo = tzinfo

    def extract(
        self, message: RawMessage, profile: Optional[BankProfile] = None
    ) -> Optional[ParsedTransaction]:
        """Extract a transaction from a message.

        Args:
            message: Message already classified as transactional
            profile: Bank profile resolved from the sender, if any

        Returns:
            ParsedTransaction, or None when no positive amount can be found
        """
        body = message.body
        rules = profile.rules if profile is not None and profile.rules is not None else ExtractionRuleSet()

        amount_text = _apply_rule(rules.amount, body) or find_amount(body)
        if amount_text is None:
            logger.debug("Message %s: no amount found", message.id)
            return None
        try:
            amount = parse_positive_amount(amount_text)
        except ValueError as e:
            logger.debug("Message %s: rejected amount: %s", message.id, e)
            return None

        upi_id = find_vpa(body)
        merchant = clean_merchant(_apply_rule(rules.merchant, body)) or find_merchant(body)
        if merchant is None and upi_id is not None:
            merchant = merchant_from_vpa(upi_id)

        explicit_date = find_message_date(body, message.timestamp, self.tzinfo)
        txn_date = (
            combine_with_arrival_time(explicit_date, message.timestamp, self.tzinfo)
            if explicit_date is not None
            else message.timestamp
        )

        return ParsedTransaction(
            source_id=message.id,
            amount=amount,
            direction=find_direction(body),
            date=txn_date,
            received_at=message.timestamp,
            raw_body=body,
            sender=message.sender,
            merchant=merchant,
            account=find_account(body),
            reference=_apply_rule(rules.reference, body) or find_reference(body),
            balance=_to_decimal(_apply_rule(rules.balance, body) or find_balance(body)),
            location=find_location(body),
            upi_id=upi_id,
            payment_method=find_payment_method(body, upi_id),
            bank_name=profile.name if profile is not None else None,
        )


def _apply_rule(rule: Optional[re.Pattern], body: str) -> Optional[str]:
    if rule is None:
        return None
    match = rule.search(body)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


def _to_decimal(value: Optional[str]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError:
        return None


def find_amount(body: str) -> Optional[str]:
    """Return the first currency amount that is not a balance or limit."""
    for match in AMOUNT_RULE.finditer(body):
        prefix = body[max(0, match.start() - 20):match.start()]
        if BALANCE_PREFIX.search(prefix):
            continue
        return match.group(1).replace(" ", "")
    return None


def find_balance(body: str) -> Optional[str]:
    """Return the balance after the transaction, if the message states it."""
    match = BALANCE_RULE.search(body)
    return match.group(1) if match else None


def find_reference(body: str) -> Optional[str]:
    """Return the reference, UTR or transaction ID."""
    for match in REFERENCE_RULE.finditer(body):
        value = match.group(1)
        if len(value) >= 3:
            return value
    return None


def find_direction(body: str) -> Direction:
    """Direction of the first transaction verb in the body."""
    match = DIRECTION_VERB.search(body)
    if match is None:
        return Direction.UNKNOWN
    return Direction.DEBIT if match.group("debit") else Direction.CREDIT


def find_account(body: str) -> Optional[str]:
    """Masked account or card reference, e.g. ``XX1234``."""
    match = ACCOUNT_RULE.search(body)
    return match.group(1).upper() if match else None


def find_vpa(body: str) -> Optional[str]:
    """UPI virtual payment address such as ``swiggy@axisbank``."""
    match = VPA_RULE.search(body)
    return match.group(1).lower() if match else None


def find_location(body: str) -> Optional[str]:
    """ATM or branch location for cash withdrawals."""
    if not CASH_WORDS.search(body):
        return None
    match = LOCATION_RULE.search(body)
    return clean_merchant(match.group(1)) if match else None


def find_payment_method(body: str, upi_id: Optional[str] = None) -> Optional[str]:
    """Payment rail named in the message: UPI, ATM, CARD or NETBANKING."""
    if upi_id is not None:
        return "UPI"
    for method, pattern in PAYMENT_METHODS:
        if pattern.search(body):
            return method
    return None


def find_merchant(body: str) -> Optional[str]:
    """Merchant after "at", "to", "for" and similar lead words.

    The merchant is the run of capitalized tokens after the lead word, cut at
    the next keyword or sentence end. Leads followed by an account reference
    ("to A/c XX1234") are skipped.
    """
    for lead in MERCHANT_LEAD.finditer(body):
        tokens = body[lead.end():].split()
        name = _capitalized_run(tokens)
        if name:
            merchant = clean_merchant(name)
            if merchant:
                return merchant
    return None


def _capitalized_run(tokens: list[str]) -> Optional[str]:
    taken: list[str] = []
    for token in tokens[:MAX_MERCHANT_TOKENS]:
        if "@" in token:
            break
        bare = token.rstrip(".,;:!)")
        if not bare:
            break
        if bare.lower() in MERCHANT_STOP_WORDS:
            break
        if not taken:
            if bare.lower() in ACCOUNT_WORDS or MASKED_ACCOUNT.match(bare) or not bare[0].isupper():
                return None
        elif not (bare[0].isupper() or bare[0].isdigit() or bare in ("&", "-")):
            break
        taken.append(bare)
        # Sentence boundary
        if bare != token and token[len(bare)] in ".;!":
            break
    return " ".join(taken) if taken else None


def merchant_from_vpa(vpa: str) -> Optional[str]:
    """Readable name from the user part of a VPA: ``amazon.pay@icici`` -> ``Amazon Pay``."""
    username = vpa.split("@", 1)[0].strip()
    if len(username) < 3:
        return None
    name = re.sub(r"[._-]+", " ", username)
    without_numbers = re.sub(r"\d+", "", name).strip()
    if len(without_numbers) >= 3:
        name = without_numbers
    return clean_merchant(name)


def clean_merchant(raw: Optional[str]) -> Optional[str]:
    """Tidy a merchant name for display.

    Collapses whitespace, drops company suffixes and edge punctuation,
    title-cases names written entirely in one case, and caps the length.
    """
    if raw is None:
        return None
    name = re.sub(r"\s+", " ", raw).strip()
    name = MERCHANT_SUFFIX.sub("", name)
    name = re.sub(r"\.{2,}", ".", name)
    name = re.sub(r"-{2,}", "-", name)
    name = name.strip(" .,-_:;")
    if not name or name.isdigit():
        return None
    if name.isupper() or name.islower():
        name = " ".join(word[:1].upper() + word[1:].lower() for word in name.split(" "))
    return name[:MAX_MERCHANT_LENGTH]

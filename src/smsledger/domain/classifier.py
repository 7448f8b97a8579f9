"""Message classifier.

Decides whether a message body is a transaction notification. The rules are
deterministic: a currency amount and a transaction verb close to each other,
and none of the wording used by one-time codes, promotions or reminders. A
negative match always wins over a positive one.
"""

import re

# Rs.500, Rs 500, INR 1,234.50, ₹500
AMOUNT_TOKEN = re.compile(r"(?:\bRs\.?|\bINR|₹)\s*-?\s*\d[\d,]*(?:\.\d{1,2})?", re.IGNORECASE)

TRANSACTION_VERB = re.compile(
    r"\b(?:debited|credited|spent|withdrawn|paid|received|sent|transferred|deposited|purchase|refunded)\b",
    re.IGNORECASE,
)

NEGATIVE_PATTERNS = (
    # One-time codes
    re.compile(r"\bOTP\b|one[\s-]*time[\s-]*password|verification\s+code|\bCVV\b|do\s+not\s+share", re.IGNORECASE),
    # Promotions
    re.compile(
        r"pre-?approved|apply\s+now|\boffer\b|click\s+here|\bT\s*&\s*C\b|\bwin\b|\bvoucher\b|\bcoupon\b",
        re.IGNORECASE,
    ),
    # Reminders and requests describe money that has not moved yet
    re.compile(
        r"will\s+be\s+(?:debited|credited|deducted)|\bis\s+due\b|\bdue\s+(?:on|by)\b|requested\s+(?:money|payment)|collect\s+request",
        re.IGNORECASE,
    ),
)

VERB_DISTANCE = 120


def is_transaction_message(body: str) -> bool:
    """Return True when ``body`` reads like a completed transaction alert."""
    if not body:
        return False

    if any(pattern.search(body) for pattern in NEGATIVE_PATTERNS):
        return False

    amounts = [m.span() for m in AMOUNT_TOKEN.finditer(body)]
    if not amounts:
        return False

    verbs = [m.span() for m in TRANSACTION_VERB.finditer(body)]
    return any(_near(amount, verb) for amount in amounts for verb in verbs)


def _near(a: tuple[int, int], b: tuple[int, int]) -> bool:
    gap = max(a[0], b[0]) - min(a[1], b[1])
    return gap <= VERB_DISTANCE


class MessageClassifier:
    """Object wrapper so the sync coordinator can take a classifier instance."""

    def is_transaction_message(self, body: str) -> bool:
        """Return True when ``body`` reads like a completed transaction alert."""
        return is_transaction_message(body)

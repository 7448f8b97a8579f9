"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

AMOUNT_FORMAT = re.compile(r"^-?\d+(?:\.\d{1,2})?$")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "500"
    - "500.5"
    - "1,234.50"
    - "5,00,000.00" (Indian digit grouping)
    - "Rs. 500", "INR 500", "₹500"
    - "-50"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Remove currency markers
    amount_str = re.sub(r"^(?:Rs\.?|INR|₹)", "", amount_str, flags=re.IGNORECASE)

    # Remove grouping separators and inner whitespace
    amount_str = amount_str.replace(",", "").replace(" ", "")

    if not AMOUNT_FORMAT.match(amount_str):
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        return Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")


def parse_positive_amount(amount_str: str) -> Decimal:
    """Parse an amount that must be strictly greater than zero.

    Raises:
        ValueError: If the amount cannot be parsed or is zero or negative
    """
    amount = parse_amount(amount_str)
    if amount <= 0:
        raise ValueError(f"Amount must be positive, got {amount}")
    return amount

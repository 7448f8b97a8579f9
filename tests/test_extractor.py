"""Tests for field extraction."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from smsledger.domain.banks import BankRegistry
from smsledger.domain.entities import Direction
from smsledger.domain.extractor import (
    FieldExtractor,
    clean_merchant,
    find_amount,
    find_direction,
    find_merchant,
    find_reference,
    merchant_from_vpa,
)
from smsledger.utils.date_parser import from_millis, to_millis

ARRIVAL = to_millis(datetime(2026, 1, 3, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def extract(make_message):
    """Extract a transaction from a body, resolving the sender like the sync does."""
    extractor = FieldExtractor()
    registry = BankRegistry()

    def _extract(body, sender="VM-HDFCBK", timestamp=ARRIVAL):
        message = make_message(1, body, sender=sender, timestamp=timestamp)
        return extractor.extract(message, registry.resolve(sender))

    return _extract


def test_debit_alert_with_balance(extract):
    """Test a standard debit alert with reference and balance."""
    txn = extract("Rs.500.00 debited from A/c XX1234 on 03-01-26 at Amazon. Ref 123456789. Avl Bal Rs.5000.00")

    assert txn is not None
    assert txn.amount == Decimal("500.00")
    assert txn.direction == Direction.DEBIT
    assert txn.merchant == "Amazon"
    assert txn.reference == "123456789"
    assert txn.balance == Decimal("5000.00")
    assert txn.account == "XX1234"
    assert txn.bank_name == "HDFC Bank"
    assert txn.source_id == 1
    assert txn.received_at == ARRIVAL


def test_explicit_date_replaces_arrival_date(extract):
    """Test that a date in the body wins over the arrival date, keeping the time."""
    txn = extract("Rs.500.00 debited from A/c XX1234 on 02-01-26 at Amazon.")
    assert from_millis(txn.date).date() == date(2026, 1, 2)
    assert from_millis(txn.date).hour == 10
    assert txn.received_at == ARRIVAL


def test_arrival_time_used_without_date(extract):
    """Test that the arrival time is the date when the body names none."""
    txn = extract("Rs.500.00 debited from A/c XX1234 at Amazon.")
    assert txn.date == ARRIVAL


@pytest.mark.parametrize("amount", ["0", "-50", "0.00"])
def test_zero_or_negative_amount_fails(extract, amount):
    """Test that non-positive amounts drop the message."""
    assert extract(f"Rs.{amount} debited from A/c XX1234 at Amazon.") is None


def test_grouped_amount(extract):
    """Test thousands separators."""
    txn = extract("Rs.1,234.50 debited from A/c XX1234 at Amazon.")
    assert txn.amount == Decimal("1234.50")


def test_no_amount_fails(extract):
    """Test that a body without a currency amount yields nothing."""
    assert extract("Your A/c XX1234 has been debited at Amazon.") is None


def test_balance_amount_not_taken_as_transaction_amount():
    """Test that an amount introduced by a balance phrase is skipped."""
    assert find_amount("Avl Bal: Rs.9,000.00. Rs.250 debited from A/c XX1234") == "250"


def test_credit_alert(extract):
    """Test a NEFT credit with a company payer and Indian digit grouping."""
    txn = extract(
        "INR 25,000.00 credited to your A/c XX5678 on 03-01-26 by NEFT from ACME CORP PVT LTD. "
        "Avl Bal INR 1,25,000.00"
    )
    assert txn.amount == Decimal("25000.00")
    assert txn.direction == Direction.CREDIT
    assert txn.merchant == "Acme Corp"
    assert txn.account == "XX5678"
    assert txn.balance == Decimal("125000.00")
    assert txn.payment_method == "NETBANKING"


def test_upi_vpa_fallback(extract):
    """Test that a VPA provides the merchant when no name follows 'to'."""
    txn = extract(
        "Rs.250 debited from A/c XX9876 to VPA swiggy.food@axisbank on 03-01-26. UPI Ref 401234567890",
        sender="VM-SBIINB",
    )
    assert txn.merchant == "Swiggy Food"
    assert txn.upi_id == "swiggy.food@axisbank"
    assert txn.reference == "401234567890"
    assert txn.payment_method == "UPI"
    assert txn.bank_name == "State Bank of India"


def test_atm_withdrawal_location(extract):
    """Test location extraction for cash withdrawals."""
    txn = extract("Rs.2,000 withdrawn at SBI ATM MG ROAD on 03-01-26 from A/c XX1111. Avl Bal Rs.8,000")
    assert txn.amount == Decimal("2000")
    assert txn.direction == Direction.DEBIT
    assert txn.location == "Sbi Atm Mg Road"
    assert txn.payment_method == "ATM"
    assert txn.balance == Decimal("8000")


def test_icici_card_override_rules(extract):
    """Test the ICICI card format, where the merchant needs an override rule."""
    body = "INR 1,500.00 spent using ICICI Bank Card XX1234 on 03-Jan-26 on AMAZON. Avl Limit: INR 50,000.00"

    txn = extract(body, sender="VM-ICICIB")
    assert txn.amount == Decimal("1500.00")
    assert txn.merchant == "Amazon"
    # The credit limit is not the account balance
    assert txn.balance is None
    assert txn.payment_method == "CARD"
    assert txn.bank_name == "ICICI Bank"

    generic = extract(body, sender="AX-UNKNOWN")
    assert generic.merchant is None
    assert generic.balance is None
    assert generic.bank_name is None


def test_axis_upi_override_rules(extract):
    """Test the Axis UPI/P2M/<ref>/<merchant> format."""
    body = "INR 500.00 debited A/c no. XX1234 03-01-26 12:00:00 UPI/P2M/123456789012/SWIGGY Not you? Call 18001035577"

    txn = extract(body, sender="AD-AXISBK")
    assert txn.reference == "123456789012"
    assert txn.merchant == "Swiggy"
    assert txn.account == "XX1234"
    assert txn.payment_method == "UPI"

    generic = extract(body, sender="AX-UNKNOWN")
    assert generic.reference is None


@pytest.mark.parametrize(
    "body, expected",
    [
        ("Rs.100 debited. Ref 111", "111"),
        ("Rs.100 debited. Ref No. 987654", "987654"),
        ("Rs.100 debited. UTR: SBIN12345678", "SBIN12345678"),
        ("Rs.100 debited. RRN 600112233", "600112233"),
        ("Rs.100 credited. Txn ID TXN98765", "TXN98765"),
        ("Rs.100 paid. UPI:512345678901", "512345678901"),
    ],
)
def test_reference_formats(body, expected):
    """Test the reference labels banks use."""
    assert find_reference(body) == expected


def test_refund_is_not_a_reference():
    """Test that the word 'Refund' is not read as a reference label."""
    assert find_reference("Refund of Rs.349 credited to A/c XX1234") is None


@pytest.mark.parametrize(
    "body, expected",
    [
        ("Rs.100 paid to Zomato on 03-01-26", "Zomato"),
        ("Rs.100 debited via UPI to Big Bazaar Ref 12345", "Big Bazaar"),
        ("Rs.100 spent at Pizza Hut. Avl Bal Rs.50", "Pizza Hut"),
        ("Rs.100 debited from A/c XX1234 to A/c XX9999", None),
        ("Rs.100 sent to your friend", None),
    ],
)
def test_generic_merchant(body, expected):
    """Test merchant capture and the account-like captures it skips."""
    assert find_merchant(body) == expected


def test_direction_from_first_verb():
    """Test that the first transaction verb decides the direction."""
    assert find_direction("Rs.100 debited from A/c XX1 and credited to A/c XX2") == Direction.DEBIT
    assert find_direction("Rs.100 received from Ravi") == Direction.CREDIT
    assert find_direction("Rs.100 for your card") == Direction.UNKNOWN


def test_clean_merchant():
    """Test merchant display clean-up."""
    assert clean_merchant("  AMAZON   RETAIL  INDIA PVT LTD ") == "Amazon Retail India"
    assert clean_merchant("McDonald's.") == "McDonald's"
    assert clean_merchant("1234") is None
    assert clean_merchant(" .. ") is None
    assert len(clean_merchant("A" * 80)) == 50


def test_merchant_from_vpa():
    """Test readable names from VPA user parts."""
    assert merchant_from_vpa("amazon.pay@icici") == "Amazon Pay"
    assert merchant_from_vpa("ravi.kumar123@okhdfcbank") == "Ravi Kumar"
    assert merchant_from_vpa("ab@upi") is None


def test_date_near_local_midnight_keeps_arrival(extract):
    """Test that the date in the body matches the local arrival day, not the UTC one."""
    # 2026-01-04 00:30 IST
    arrival = to_millis(datetime(2026, 1, 3, 19, 0, tzinfo=timezone.utc))

    txn = extract("Rs.500.00 debited from A/c XX1234 on 04-01-26 at Amazon.", timestamp=arrival)

    assert txn.date == arrival

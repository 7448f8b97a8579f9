"""Utility functions for smsledger."""

from smsledger.utils.date_parser import parse_date, now_millis
from smsledger.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount", "now_millis"]

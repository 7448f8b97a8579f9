"""Message sources feeding the sync pipeline."""

from smsledger.sources.base import MessageSource
from smsledger.sources.csv_source import CsvMessageSource

__all__ = ["MessageSource", "CsvMessageSource"]

"""
Sample storage for the memmark package.

- RowSink: interface every sink implements
- CsvSink: CSV file or stdout output with a single header line
"""

from .base import RowSink
from .csv_sink import STDOUT_PATH, CsvSink, needs_header

__all__ = [
    "RowSink",
    "CsvSink",
    "STDOUT_PATH",
    "needs_header",
]

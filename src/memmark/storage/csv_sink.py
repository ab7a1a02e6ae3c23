"""
CSV sink for samples.

Writes one header line followed by one row per sample. A file destination is
opened in append mode; the header is written only when the file is new or
empty, so repeated runs against the same file extend one table. Writing to
stdout (path ``-``) always starts with the header.
"""

import csv
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from ..models.runtime import CSV_COLUMNS, MetricSample
from .base import RowSink

logger = logging.getLogger(__name__)

STDOUT_PATH = "-"


def needs_header(path: Path) -> bool:
    """A destination needs a header when it does not exist or is empty."""
    return not path.exists() or path.stat().st_size == 0


class CsvSink(RowSink):
    """
    Streams samples as comma-separated rows, flushing after every row.

    Attributes:
        path: Destination path as given, or ``-`` for stdout.
        rows_written: Number of data rows written so far.
    """

    def __init__(self, path: str, stream: Optional[TextIO] = None):
        """
        Open the destination and write the header if needed.

        Args:
            path: CSV file path, or ``-`` to write to ``stream``.
            stream: Text stream used for ``-``; defaults to ``sys.stdout``.

        Raises:
            OSError: If the destination file cannot be opened for appending.
        """
        self.path = path
        self.rows_written = 0

        if path == STDOUT_PATH:
            self._handle: TextIO = stream or sys.stdout
            self._owns_handle = False
            write_header = True
        else:
            file_path = Path(path)
            write_header = needs_header(file_path)
            self._handle = open(file_path, "a", newline="", encoding="utf-8")
            self._owns_handle = True

        self._writer = csv.writer(self._handle, lineterminator="\n")
        if write_header:
            self._writer.writerow(CSV_COLUMNS)
            self._handle.flush()
            logger.debug(f"Wrote CSV header to {path}")

    @property
    def is_file(self) -> bool:
        return self.path != STDOUT_PATH

    def write(self, sample: MetricSample) -> None:
        self._writer.writerow(sample.to_row())
        self._handle.flush()
        self.rows_written += 1

    def close(self) -> None:
        if self._owns_handle and not self._handle.closed:
            self._handle.close()
        elif not self._owns_handle:
            self._handle.flush()

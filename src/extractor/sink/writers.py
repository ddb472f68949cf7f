import csv
import os
from typing import Iterable, Sequence

from loguru import logger

from src.extractor.errors import SinkError


def ensure_parent_dir(path: str):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


class DelimitedFileWriter:
    """Writes rows of string fields to a delimited text file without quoting.

    A field that contains the separator or a line break cannot be written
    unquoted and raises SinkError.
    """

    def __init__(self, path: str, separator: str = ";"):
        self.path = path
        self.separator = separator
        self.rows_written = 0
        self._file = None
        self._writer = None

    def open(self):
        try:
            ensure_parent_dir(self.path)
            self._file = open(self.path, "w", newline="", encoding="utf-8")
        except OSError as e:
            raise SinkError(f"Cannot open {self.path} for writing: {e}") from e
        self._writer = csv.writer(
            self._file,
            delimiter=self.separator,
            quoting=csv.QUOTE_NONE,
            quotechar=None,
            escapechar=None,
            lineterminator="\n",
        )
        return self

    def write_row(self, row: Sequence[str]):
        if self._writer is None:
            raise SinkError(f"{self.path} is not open")
        try:
            self._writer.writerow(row)
        except csv.Error as e:
            raise SinkError(f"Cannot write row to {self.path}: {e}") from e
        except OSError as e:
            raise SinkError(f"Write to {self.path} failed: {e}") from e
        self.rows_written += 1

    def write_rows(self, rows: Iterable[Sequence[str]]):
        for row in rows:
            self.write_row(row)

    def close(self, failed: bool = False):
        if self._file is None:
            return
        try:
            self._file.close()
        except OSError as e:
            raise SinkError(f"Cannot close {self.path}: {e}") from e
        finally:
            self._file = None
            self._writer = None
        if failed:
            logger.warning("Output incomplete", path=self.path, rows=self.rows_written)
        else:
            logger.info("Output written", path=self.path, rows=self.rows_written)

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close(failed=exc_type is not None)


class LineFileWriter(DelimitedFileWriter):
    """One value per line, e.g. a pool name per block."""

    def write_line(self, value: str):
        if self._file is None:
            raise SinkError(f"{self.path} is not open")
        if "\n" in value or "\r" in value:
            raise SinkError(f"Cannot write a value containing a line break to {self.path}")
        try:
            self._file.write(value + "\n")
        except OSError as e:
            raise SinkError(f"Write to {self.path} failed: {e}") from e
        self.rows_written += 1

    def write_lines(self, values: Iterable[str]):
        for value in values:
            self.write_line(value)

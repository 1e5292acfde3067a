#!/usr/bin/env python3

"""
Output sinks for validated and rejected alignments.
"""

import logging
import threading
from typing import Optional, TextIO

from .data_structures import AlignmentRecord
from .exceptions import OutputError


class LockedSink:
    """A text file whose writes are serialized by its own lock."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._handle: Optional[TextIO] = None
        self.records_written = 0

    def open(self) -> None:
        try:
            self._handle = open(self.path, 'w')
        except OSError as e:
            raise OutputError(f"Cannot open output file {self.path}: {e}")

    def write(self, text: str) -> None:
        with self._lock:
            if self._handle is None:
                raise OutputError(f"Output file {self.path} is not open")
            try:
                self._handle.write(text)
                self._handle.flush()
            except OSError as e:
                raise OutputError(f"Failed writing {self.path}: {e}")
            self.records_written += 1

    def close(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.close()
                self._handle = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None


class OutputRouter:
    """Route each alignment to the valid or invalid sink.

    The two sinks are locked independently, so a valid write never waits on
    an invalid one.
    """

    def __init__(self, out_prefix: str):
        self.valid_path = f"{out_prefix}.valid_alignments.gtf"
        self.invalid_path = f"{out_prefix}.invalid_alignments.gtf"
        self.valid = LockedSink(self.valid_path)
        self.invalid = LockedSink(self.invalid_path)

    def open(self) -> None:
        self.invalid.open()
        try:
            self.valid.open()
        except OutputError:
            self.invalid.close()
            raise
        logging.info(f"Writing {self.valid_path} and {self.invalid_path}")

    def close(self) -> None:
        self.valid.close()
        self.invalid.close()

    def write_valid(self, record: AlignmentRecord) -> None:
        header = f"# {record.accession} {record.compact_token()}\n"
        self.valid.write(header + record.to_gtf() + "\n")

    def write_invalid(self, record: AlignmentRecord) -> None:
        header = f"# {record.accession} {record.compact_token()} ERROR: {record.error_flag}\n"
        self.invalid.write(header + record.to_gtf() + "\n")

    def route(self, record: AlignmentRecord) -> bool:
        """Write the record to the sink matching its verdict; return validity."""
        if record.is_valid:
            self.write_valid(record)
            return True
        self.write_invalid(record)
        return False

    def __enter__(self) -> 'OutputRouter':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

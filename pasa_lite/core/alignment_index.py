#!/usr/bin/env python3

"""
Durable keyed store of alignment records.

The index is written once by a single thread and then read through
independent handles, one per worker task, so no cursor is ever shared
across threads. Storage lives in a temporary directory that is removed
when the index is closed.
"""

import json
import logging
import os
import shutil
import sqlite3
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .data_structures import AlignmentRecord
from .exceptions import IndexStoreError
from .parsers import parse_alignment_files
from .partitioner import ScaffoldPartitioner

_SCHEMA = """
CREATE TABLE IF NOT EXISTS alignments (
    accession TEXT PRIMARY KEY,
    scaffold TEXT NOT NULL,
    payload TEXT NOT NULL
)
"""


class IndexHandle:
    """Read-only connection into a built AlignmentIndex."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        try:
            uri = f"{Path(db_path).resolve().as_uri()}?mode=ro"
            self._conn = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as e:
            raise IndexStoreError(f"Cannot open alignment index {db_path}: {e}")

    def get(self, accession: str) -> AlignmentRecord:
        try:
            row = self._conn.execute(
                "SELECT payload FROM alignments WHERE accession = ?", (accession,)
            ).fetchone()
        except sqlite3.Error as e:
            raise IndexStoreError(f"Lookup failed: {e}", accession)
        if row is None:
            raise IndexStoreError("Accession not present in index", accession)
        return AlignmentRecord.from_dict(json.loads(row[0]))

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> 'IndexHandle':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class AlignmentIndex:
    """Alignment records keyed by accession, plus the scaffold grouping."""

    def __init__(self, index_dir: Optional[str] = None):
        try:
            self.workdir = tempfile.mkdtemp(prefix="pasa_lite_index_", dir=index_dir)
        except OSError as e:
            raise IndexStoreError(f"Cannot create index directory: {e}")
        self.db_path = os.path.join(self.workdir, "alignments.sqlite")
        self.partitioner = ScaffoldPartitioner()
        self.overwritten: List[str] = []

        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(_SCHEMA)
            conn.close()
        except sqlite3.Error as e:
            self.close()
            raise IndexStoreError(f"Cannot initialize alignment index: {e}")

    def build(self, file_paths: Iterable[str]) -> Dict[str, Tuple[str, ...]]:
        """Index every alignment of every file, sequentially, and return the grouping."""
        file_paths = list(file_paths)
        logging.info(f"Building alignment index from {len(file_paths)} file(s)")
        count = self.add_records(parse_alignment_files(file_paths))
        logging.info(f"Indexed {count} alignments on {len(self.scaffold_groups())} scaffolds")
        return self.scaffold_groups()

    def add_records(self, records: Iterable[AlignmentRecord]) -> int:
        """Insert records; a repeated accession replaces the earlier record."""
        count = 0
        conn = sqlite3.connect(self.db_path)
        try:
            for record in records:
                exists = conn.execute(
                    "SELECT 1 FROM alignments WHERE accession = ?", (record.accession,)
                ).fetchone()
                if exists:
                    logging.debug(f"Accession {record.accession} re-indexed, replacing earlier record")
                    self.overwritten.append(record.accession)
                conn.execute(
                    "INSERT OR REPLACE INTO alignments (accession, scaffold, payload) VALUES (?, ?, ?)",
                    (record.accession, record.scaffold, json.dumps(record.to_dict())),
                )
                self.partitioner.add(record.accession, record.scaffold)
                count += 1
            conn.commit()
        except sqlite3.Error as e:
            raise IndexStoreError(f"Failed to write alignment index: {e}")
        finally:
            conn.close()
        return count

    def scaffold_groups(self) -> Dict[str, Tuple[str, ...]]:
        return self.partitioner.groups()

    def open(self) -> IndexHandle:
        """Independent read handle; call from the thread that will use it."""
        return IndexHandle(self.db_path)

    def get(self, accession: str) -> AlignmentRecord:
        with self.open() as handle:
            return handle.get(accession)

    def __len__(self) -> int:
        return len(self.partitioner)

    def close(self) -> None:
        """Remove on-disk storage."""
        if self.workdir and os.path.isdir(self.workdir):
            shutil.rmtree(self.workdir)
            logging.debug(f"Removed alignment index {self.workdir}")
        self.workdir = None

    def __enter__(self) -> 'AlignmentIndex':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

#!/usr/bin/env python3

"""
File parsers for transcript alignments and genome sequences.

Handles GFF3/GTF alignment parsing and FASTA sequence retrieval.
"""

import logging
import os
from typing import Dict, Iterator, List, Optional, Tuple

import pyfaidx

from .data_structures import AlignmentRecord, Segment, VALID_ORIENTATIONS
from .exceptions import GenomeError, ParseError

GFF3_EXTENSIONS = ('.gff3', '.gff')
GTF_EXTENSIONS = ('.gtf',)


def detect_format(file_path: str) -> str:
    """Return 'GFF3' or 'GTF' based on the file extension."""
    lowered = file_path.lower()
    if lowered.endswith(GTF_EXTENSIONS):
        return "GTF"
    if lowered.endswith(GFF3_EXTENSIONS):
        return "GFF3"
    raise ParseError("Unrecognized alignment file extension (expected .gtf or .gff3)", file_path)


class AlignmentParser:
    """Parse spliced alignments from GFF3 or GTF into AlignmentRecord objects."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self.file_type = detect_format(file_path)

    def parse(self) -> Iterator[AlignmentRecord]:
        """Yield one record per alignment, in order of first appearance."""
        logging.info(f"Parsing {self.file_type} alignment file: {self.file_path}")

        # accession -> (scaffold, strand, source, target, first line, segments)
        pending: Dict[str, dict] = {}

        try:
            with open(self.file_path, 'r') as f:
                for line_num, line in enumerate(f, 1):
                    line = line.rstrip('\n').rstrip('\r')
                    if not line.strip() or line.startswith('#'):
                        continue
                    self._parse_line(line, line_num, pending)
        except FileNotFoundError:
            raise ParseError(f"Alignment file not found: {self.file_path}")
        except OSError as e:
            raise ParseError(f"Failed to read {self.file_type} file: {e}", self.file_path)

        for accession, entry in pending.items():
            yield self._build_record(accession, entry)

        logging.info(f"Parsed {len(pending)} alignments from {self.file_path}")

    def _parse_line(self, line: str, line_num: int, pending: Dict[str, dict]) -> None:
        parts = line.split('\t')
        if len(parts) != 9:
            raise ParseError(f"Expected 9 tab-separated columns, found {len(parts)}",
                             self.file_path, line_num)

        scaffold, source, feature, start, end, score, strand, _phase, attributes = parts

        if self.file_type == "GTF" and feature != 'exon':
            return

        try:
            lend, rend = int(start), int(end)
        except ValueError:
            raise ParseError(f"Non-integer coordinates: {start}, {end}", self.file_path, line_num)
        if lend > rend:
            lend, rend = rend, lend

        if strand not in VALID_ORIENTATIONS:
            raise ParseError(f"Alignment strand must be '+' or '-', found '{strand}'",
                             self.file_path, line_num)

        if self.file_type == "GTF":
            attr_dict = self._parse_gtf_attributes(attributes)
            accession = attr_dict.get('transcript_id', '')
        else:
            attr_dict = self._parse_gff3_attributes(attributes)
            accession = attr_dict.get('ID', '') or attr_dict.get('Parent', '')

        if not accession:
            raise ParseError("Alignment line carries no identifier", self.file_path, line_num)

        target, target_lend, target_rend = self._parse_target(attr_dict.get('Target', ''))
        per_id = self._parse_per_id(score, attr_dict, line_num)

        entry = pending.get(accession)
        if entry is None:
            entry = pending[accession] = {
                'scaffold': scaffold,
                'strand': strand,
                'source': source,
                'target': target,
                'line': line_num,
                'segments': [],
            }
        elif entry['scaffold'] != scaffold or entry['strand'] != strand:
            raise ParseError(
                f"Alignment {accession} switches scaffold or strand "
                f"(first seen at line {entry['line']})", self.file_path, line_num)

        entry['segments'].append(Segment(
            lend=lend,
            rend=rend,
            per_id=per_id,
            target_lend=target_lend,
            target_rend=target_rend,
            orientation=strand,
        ))

    def _build_record(self, accession: str, entry: dict) -> AlignmentRecord:
        segments = sorted(entry['segments'], key=lambda x: x.lend)
        for left, right in zip(segments, segments[1:]):
            if left.overlaps_with(right):
                raise ParseError(
                    f"Alignment {accession} has overlapping segments "
                    f"{left.lend}-{left.rend} and {right.lend}-{right.rend}",
                    self.file_path, entry['line'])

        return AlignmentRecord(
            accession=accession,
            scaffold=entry['scaffold'],
            aligned_orientation=entry['strand'],
            segments=segments,
            source=entry['source'],
            target=entry['target'],
        )

    def _parse_per_id(self, score: str, attr_dict: Dict[str, str], line_num: int) -> Optional[float]:
        raw = attr_dict.get('per_id', score)
        if raw in ('', '.'):
            return None
        try:
            per_id = float(raw)
        except ValueError:
            raise ParseError(f"Invalid percent identity: {raw}", self.file_path, line_num)
        if not 0 <= per_id <= 100:
            raise ParseError(f"Percent identity out of range: {raw}", self.file_path, line_num)
        return per_id

    def _parse_target(self, target: str) -> Tuple[str, Optional[int], Optional[int]]:
        """Split 'acc start end [strand]' into its parts."""
        fields = target.split()
        if len(fields) < 3:
            return (fields[0] if fields else ""), None, None
        try:
            t_start, t_end = int(fields[1]), int(fields[2])
        except ValueError:
            return fields[0], None, None
        return fields[0], min(t_start, t_end), max(t_start, t_end)

    def _parse_gff3_attributes(self, attr_string: str) -> Dict[str, str]:
        """Parse GFF3 attributes string."""
        attributes = {}
        for attr in attr_string.split(';'):
            if '=' in attr:
                key, value = attr.split('=', 1)
                attributes[key.strip()] = value.strip()
        return attributes

    def _parse_gtf_attributes(self, attr_string: str) -> Dict[str, str]:
        """Parse GTF attributes string."""
        attributes = {}
        for attr in attr_string.split(';'):
            attr = attr.strip()
            if not attr:
                continue
            if ' "' in attr:
                key, value = attr.split(' "', 1)
                attributes[key.strip()] = value.rstrip('"')
            elif ' ' in attr:
                key, value = attr.split(' ', 1)
                attributes[key.strip()] = value.strip()
        return attributes


def parse_alignment_files(file_paths: List[str]) -> Iterator[AlignmentRecord]:
    """Stream records from each file in turn."""
    for file_path in file_paths:
        yield from AlignmentParser(file_path).parse()


class GenomeSequenceStore:
    """Random access to scaffold sequences of a FASTA genome."""

    def __init__(self, genome_file: str):
        self.genome_file = genome_file
        if not os.path.exists(genome_file):
            raise GenomeError(f"Genome file not found: {genome_file}")

        try:
            # one handle for the whole run; pyfaidx serializes reads internally
            self.fasta = pyfaidx.Fasta(genome_file)
        except (pyfaidx.FastaIndexingError, OSError, ValueError) as e:
            raise GenomeError(f"Failed to index genome {genome_file}: {e}")
        self.scaffolds = set(self.fasta.keys())

        logging.info(f"Indexed genome {genome_file} ({len(self.scaffolds)} scaffolds)")

    @property
    def is_open(self) -> bool:
        return self.fasta is not None

    def get_sequence(self, scaffold: str) -> str:
        """Return the full sequence of one scaffold."""
        if not self.is_open:
            raise GenomeError("Genome store is closed", scaffold)
        if scaffold not in self.scaffolds:
            raise GenomeError("Scaffold not present in genome", scaffold)

        try:
            return str(self.fasta[scaffold])
        except (KeyError, OSError, ValueError) as e:
            raise GenomeError(f"Failed to read sequence: {e}", scaffold)

    def close(self) -> None:
        if self.fasta is not None:
            self.fasta.close()
            self.fasta = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

#!/usr/bin/env python3

"""
Shared fixtures for the test suite.
"""

from typing import Dict, List, Optional, Tuple

from pasa_lite.core.data_structures import AlignmentRecord, Segment
from pasa_lite.core.exceptions import GenomeError


def make_sequence(length: int, junctions: List[Tuple[int, int, str, str]] = ()) -> str:
    """
    Build a 'C'-filled sequence with dinucleotides placed at intron ends.

    Each junction is (intron_lend, intron_rend, donor, acceptor) with donor
    and acceptor written on the plus strand.
    """
    bases = ['C'] * length
    for intron_lend, intron_rend, donor, acceptor in junctions:
        bases[intron_lend - 1:intron_lend + 1] = donor
        bases[intron_rend - 2:intron_rend] = acceptor
    return ''.join(bases)


def make_record(accession: str, spans: List[Tuple[int, int]], orientation: str = '+',
                scaffold: str = 'chr1', per_id: Optional[float] = 99.0,
                with_target: bool = False) -> AlignmentRecord:
    segments = []
    offset = 0
    for lend, rend in spans:
        target_lend = target_rend = None
        if with_target:
            target_lend, target_rend = offset + 1, offset + (rend - lend + 1)
            offset = target_rend
        segments.append(Segment(lend=lend, rend=rend, per_id=per_id,
                                target_lend=target_lend, target_rend=target_rend,
                                orientation=orientation))
    return AlignmentRecord(accession=accession, scaffold=scaffold,
                           aligned_orientation=orientation, segments=segments,
                           source='TEST')


class DictSequenceStore:
    """In-memory stand-in for GenomeSequenceStore."""

    def __init__(self, sequences: Dict[str, str]):
        self.sequences = sequences
        self.calls: List[str] = []

    def get_sequence(self, scaffold: str) -> str:
        self.calls.append(scaffold)
        if scaffold not in self.sequences:
            raise GenomeError("Scaffold not present in genome", scaffold)
        return self.sequences[scaffold]


def write_fasta(path: str, sequences: Dict[str, str], width: int = 60) -> None:
    with open(path, 'w') as f:
        for name, sequence in sequences.items():
            f.write(f">{name}\n")
            for i in range(0, len(sequence), width):
                f.write(sequence[i:i + width] + "\n")

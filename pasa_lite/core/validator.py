#!/usr/bin/env python3

"""
Transcript validation rule chain.

Each rule inspects one alignment and may return a rejection message. Rules
run in a fixed order and a later message replaces an earlier one, so a
record carries only the last reason it failed on.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .data_structures import AlignmentRecord, ValidationResult, UNKNOWN_ORIENTATION

CANONICAL_SPLICE_PAIRS = frozenset({"GT-AG", "GC-AG", "AT-AC"})
# donor and acceptor dinucleotides must not overlap
MIN_INTRON_LENGTH = 4

NONCONSENSUS_SPLICE_MSG = "non-consensus splice sites"
UNSPLICED_MSG = "unspliced alignment discarded"
LOW_PER_ID_MSG = "average percent identity {per_id:.2f} below minimum {min_per_id:g}"

_COMPLEMENT = str.maketrans("ACGTNacgtn", "TGCANtgcan")


def reverse_complement(sequence: str) -> str:
    """Get reverse complement of DNA sequence."""
    return sequence.translate(_COMPLEMENT)[::-1]


@dataclass
class JunctionCall:
    """Dinucleotides flanking one intron, read on the plus strand."""
    lend: int
    rend: int
    donor: str
    acceptor: str

    @property
    def plus_pair(self) -> str:
        return f"{self.donor}-{self.acceptor}"

    @property
    def minus_pair(self) -> str:
        return f"{reverse_complement(self.acceptor)}-{reverse_complement(self.donor)}"

    @property
    def length(self) -> int:
        return self.rend - self.lend + 1

    @property
    def is_splice_gap(self) -> bool:
        """Whether the gap is long enough to hold separate donor and acceptor sites."""
        return self.length >= MIN_INTRON_LENGTH

    @property
    def plus_canonical(self) -> bool:
        return self.is_splice_gap and self.plus_pair in CANONICAL_SPLICE_PAIRS

    @property
    def minus_canonical(self) -> bool:
        return self.is_splice_gap and self.minus_pair in CANONICAL_SPLICE_PAIRS


def read_junctions(record: AlignmentRecord, sequence: str) -> List[JunctionCall]:
    """Read the flanking dinucleotides of every intron of an alignment."""
    calls = []
    for intron_lend, intron_rend in record.introns():
        # 1-based inclusive -> python slices
        donor = sequence[intron_lend - 1:intron_lend + 1].upper()
        acceptor = sequence[max(intron_rend - 2, 0):intron_rend].upper()
        calls.append(JunctionCall(intron_lend, intron_rend, donor, acceptor))
    return calls


def infer_spliced_orientation(junctions: List[JunctionCall]) -> Tuple[str, bool]:
    """
    Pick the strand whose reading gives canonical pairs at most junctions.

    Returns the orientation ('+', '-' or '?') and whether every junction is
    canonical on that strand.
    """
    plus_hits = sum(1 for j in junctions if j.plus_canonical)
    minus_hits = sum(1 for j in junctions if j.minus_canonical)

    if plus_hits == minus_hits:
        return UNKNOWN_ORIENTATION, False
    if plus_hits > minus_hits:
        return '+', plus_hits == len(junctions)
    return '-', minus_hits == len(junctions)


Rule = Callable[[AlignmentRecord, str], Optional[str]]


class TranscriptValidator:
    """Apply the validation rules to alignments of one scaffold sequence."""

    def __init__(self, min_per_id: float = 95.0,
                 transcribed_is_aligned_orient: bool = False,
                 discard_unspliced: bool = False,
                 require_consensus_splicesites: bool = False):
        self.min_per_id = min_per_id
        self.transcribed_is_aligned_orient = transcribed_is_aligned_orient
        self.discard_unspliced = discard_unspliced
        self.require_consensus_splicesites = require_consensus_splicesites

        # order matters: the last rule to reject a record names the reason
        self.rules: List[Rule] = [
            self._check_splice_orientation,
            self._check_unspliced,
            self._check_percent_identity,
        ]

    @classmethod
    def from_config(cls, config) -> 'TranscriptValidator':
        return cls(
            min_per_id=config.min_per_id,
            transcribed_is_aligned_orient=config.transcribed_is_aligned_orient,
            discard_unspliced=config.discard_unspliced_transcripts,
            require_consensus_splicesites=config.require_consensus_splicesites,
        )

    def validate(self, record: AlignmentRecord, sequence: str) -> ValidationResult:
        """Run every rule on the record, mutating it, and return the verdict."""
        for rule in self.rules:
            message = rule(record, sequence)
            if message is not None:
                record.error_flag = message

        if record.error_flag:
            logging.debug(f"{record.accession} invalid: {record.error_flag}")
        return ValidationResult(record.accession, record.is_valid, record.error_flag)

    def _check_splice_orientation(self, record: AlignmentRecord, sequence: str) -> Optional[str]:
        if self.transcribed_is_aligned_orient:
            record.spliced_orientation = record.aligned_orientation
            return None

        if not record.is_multi_exon:
            return None

        orientation, all_canonical = infer_spliced_orientation(read_junctions(record, sequence))
        record.spliced_orientation = orientation

        # records confirmed on their aligned strand keep their stored segment order
        if orientation != UNKNOWN_ORIENTATION and orientation != record.aligned_orientation:
            record.remap_to_orientation(orientation)

        if self.require_consensus_splicesites and not all_canonical:
            return NONCONSENSUS_SPLICE_MSG
        return None

    def _check_unspliced(self, record: AlignmentRecord, sequence: str) -> Optional[str]:
        if self.discard_unspliced and record.segment_count == 1:
            return UNSPLICED_MSG
        return None

    def _check_percent_identity(self, record: AlignmentRecord, sequence: str) -> Optional[str]:
        per_id = record.avg_per_id
        if per_id is not None and per_id < self.min_per_id:
            return LOW_PER_ID_MSG.format(per_id=per_id, min_per_id=self.min_per_id)
        return None

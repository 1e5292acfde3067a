#!/usr/bin/env python3

"""
Core data structures for the alignment validation pipeline.

Defines alignment segments, alignment records and the small result
containers passed between the validator, the worker pool and the pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

VALID_ORIENTATIONS = ('+', '-')
UNKNOWN_ORIENTATION = '?'


@dataclass
class Segment:
    """One aligned exon in genome coordinates (1-based, inclusive)."""
    lend: int
    rend: int
    per_id: Optional[float] = None
    target_lend: Optional[int] = None
    target_rend: Optional[int] = None
    orientation: str = '+'

    def __post_init__(self):
        """Validate segment data after initialization."""
        if self.lend > self.rend:
            raise ValueError(f"Invalid segment coordinates: {self.lend}-{self.rend}")
        if self.orientation not in VALID_ORIENTATIONS:
            raise ValueError(f"Invalid orientation: {self.orientation}")

    @property
    def length(self) -> int:
        """Get segment length."""
        return self.rend - self.lend + 1

    @property
    def end5(self) -> int:
        """Genome coordinate of the transcribed 5' end."""
        return self.lend if self.orientation == '+' else self.rend

    @property
    def end3(self) -> int:
        """Genome coordinate of the transcribed 3' end."""
        return self.rend if self.orientation == '+' else self.lend

    def overlaps_with(self, other: 'Segment') -> bool:
        """Check if this segment overlaps with another."""
        return not (self.rend < other.lend or self.lend > other.rend)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lend': self.lend,
            'rend': self.rend,
            'per_id': self.per_id,
            'target_lend': self.target_lend,
            'target_rend': self.target_rend,
            'orientation': self.orientation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Segment':
        return cls(**data)


@dataclass
class AlignmentRecord:
    """One transcript-to-genome alignment."""
    accession: str
    scaffold: str
    aligned_orientation: str
    segments: List[Segment] = field(default_factory=list)
    spliced_orientation: str = ""
    error_flag: Optional[str] = None
    source: str = ""
    target: str = ""

    def __post_init__(self):
        """Validate alignment data after initialization."""
        if not self.accession:
            raise ValueError("Alignment accession cannot be empty")
        if not self.scaffold:
            raise ValueError(f"Scaffold cannot be empty for {self.accession}")
        if self.aligned_orientation not in VALID_ORIENTATIONS:
            raise ValueError(f"Invalid aligned orientation: {self.aligned_orientation}")
        if not self.target:
            self.target = self.accession

    @property
    def segment_count(self) -> int:
        """Get number of segments."""
        return len(self.segments)

    @property
    def is_multi_exon(self) -> bool:
        return len(self.segments) > 1

    @property
    def lend(self) -> int:
        return min(segment.lend for segment in self.segments)

    @property
    def rend(self) -> int:
        return max(segment.rend for segment in self.segments)

    @property
    def avg_per_id(self) -> Optional[float]:
        """Average percent identity over segments that report one."""
        known = [segment.per_id for segment in self.segments if segment.per_id is not None]
        if not known:
            return None
        return sum(known) / len(known)

    @property
    def is_valid(self) -> bool:
        return self.error_flag is None

    @property
    def output_orientation(self) -> str:
        """Spliced orientation when inferred, aligned orientation otherwise."""
        if self.spliced_orientation in VALID_ORIENTATIONS:
            return self.spliced_orientation
        return self.aligned_orientation

    def genomic_segments(self) -> List[Segment]:
        """Segments in ascending genome order regardless of stored order."""
        return sorted(self.segments, key=lambda x: x.lend)

    def introns(self) -> List[tuple]:
        """Intron spans (lend, rend) between consecutive genomic segments."""
        ordered = self.genomic_segments()
        return [(left.rend + 1, right.lend - 1) for left, right in zip(ordered, ordered[1:])]

    def remap_to_orientation(self, orientation: str) -> None:
        """
        Rewrite segments so they read in the given transcription direction.

        Genome lend/rend stay ordered; segment order follows transcription
        and transcript coordinates are reflected across the transcript length.

        The validator only calls this when the spliced orientation differs
        from the aligned one. A record confirmed on its aligned strand keeps
        the ascending order the parser stores, so a '-' alignment confirmed
        as '-' is written in ascending genome order while a '+' alignment
        flipped to '-' is written 5' to 3' (descending).
        """
        if orientation not in VALID_ORIENTATIONS:
            raise ValueError(f"Invalid orientation: {orientation}")

        ordered = self.genomic_segments()
        if orientation == '-':
            ordered.reverse()

        target_ends = [s.target_rend for s in ordered if s.target_rend is not None]
        target_length = max(target_ends) if target_ends else None

        remapped = []
        for segment in ordered:
            target_lend, target_rend = segment.target_lend, segment.target_rend
            if (orientation != segment.orientation and target_length is not None
                    and target_lend is not None and target_rend is not None):
                target_lend, target_rend = (target_length - target_rend + 1,
                                            target_length - target_lend + 1)
            remapped.append(Segment(
                lend=segment.lend,
                rend=segment.rend,
                per_id=segment.per_id,
                target_lend=target_lend,
                target_rend=target_rend,
                orientation=orientation,
            ))
        self.segments = remapped

    def compact_token(self) -> str:
        """Render a one-line summary of orientation and segment spans."""
        spans = ",".join(f"{s.lend}-{s.rend}" for s in self.segments)
        spliced = self.spliced_orientation or '?'
        return f"{self.aligned_orientation}/{spliced}:{spans}"

    def to_gtf(self) -> str:
        """Render the alignment as GTF exon lines in stored segment order."""
        strand = self.output_orientation
        source = self.source or "pasa_lite"
        lines = []
        for segment in self.segments:
            score = f"{segment.per_id:g}" if segment.per_id is not None else "."
            attributes = f'gene_id "{self.accession}"; transcript_id "{self.accession}";'
            if segment.target_lend is not None and segment.target_rend is not None:
                attributes += f' Target "{self.target} {segment.target_lend} {segment.target_rend}";'
            lines.append("\t".join([
                self.scaffold, source, "exon", str(segment.lend), str(segment.rend),
                score, strand, ".", attributes
            ]))
        return "\n".join(lines) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'accession': self.accession,
            'scaffold': self.scaffold,
            'aligned_orientation': self.aligned_orientation,
            'segments': [segment.to_dict() for segment in self.segments],
            'spliced_orientation': self.spliced_orientation,
            'error_flag': self.error_flag,
            'source': self.source,
            'target': self.target,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AlignmentRecord':
        values = dict(data)
        values['segments'] = [Segment.from_dict(s) for s in values.get('segments', [])]
        return cls(**values)


@dataclass
class ValidationResult:
    """Verdict for one alignment."""
    accession: str
    valid: bool
    reason: Optional[str] = None


@dataclass
class TaskSummary:
    """Counts produced by one scaffold task."""
    scaffold: str
    valid_count: int = 0
    invalid_count: int = 0

    @property
    def total(self) -> int:
        return self.valid_count + self.invalid_count


@dataclass
class TaskFault:
    """A scaffold task that raised instead of completing."""
    scaffold: str
    error: BaseException

#!/usr/bin/env python3

"""
Unit tests for the transcript validation rule chain.

Covers splice-site orientation inference, orientation re-mapping, the
unspliced policy, the percent identity threshold and the order in which
rejection reasons replace each other.
"""

import unittest
import sys
import os

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from pasa_lite.core.config import ValidatorConfig
from pasa_lite.core.validator import (
    TranscriptValidator, JunctionCall, infer_spliced_orientation, read_junctions,
    reverse_complement, NONCONSENSUS_SPLICE_MSG, UNSPLICED_MSG
)
from pasa_lite.tests.helpers import make_record, make_sequence

# exons 1-100, 201-300, 401-500; introns 101-200 and 301-400
SPANS = [(1, 100), (201, 300), (401, 500)]
PLUS_GENOME = make_sequence(600, [(101, 200, "GT", "AG"), (301, 400, "GC", "AG")])
MINUS_GENOME = make_sequence(600, [(101, 200, "CT", "AC"), (301, 400, "GT", "AT")])
NONCANONICAL_GENOME = make_sequence(600)
MIXED_GENOME = make_sequence(600, [(101, 200, "GT", "AG"), (301, 400, "CC", "CC")])


class TestSpliceHelpers(unittest.TestCase):
    """Test dinucleotide reading and orientation inference."""

    def test_reverse_complement(self):
        self.assertEqual(reverse_complement("ACGTN"), "NACGT")
        self.assertEqual(reverse_complement("ct"), "ag")

    def test_read_junctions(self):
        record = make_record("a", SPANS)
        calls = read_junctions(record, PLUS_GENOME.lower())

        self.assertEqual([(c.lend, c.rend) for c in calls], [(101, 200), (301, 400)])
        self.assertEqual([c.plus_pair for c in calls], ["GT-AG", "GC-AG"])
        self.assertTrue(all(c.plus_canonical for c in calls))

    def test_minus_reading(self):
        call = JunctionCall(101, 200, "CT", "AC")
        self.assertEqual(call.minus_pair, "GT-AG")
        self.assertTrue(call.minus_canonical)
        self.assertFalse(call.plus_canonical)

        at_ac = JunctionCall(101, 200, "GT", "AT")
        self.assertEqual(at_ac.minus_pair, "AT-AC")

    def test_infer_orientation(self):
        plus = JunctionCall(1, 10, "GT", "AG")
        minus = JunctionCall(1, 10, "CT", "AC")
        other = JunctionCall(1, 10, "CC", "CC")

        self.assertEqual(infer_spliced_orientation([plus, plus]), ('+', True))
        self.assertEqual(infer_spliced_orientation([minus, minus]), ('-', True))
        self.assertEqual(infer_spliced_orientation([plus, other]), ('+', False))
        self.assertEqual(infer_spliced_orientation([plus, minus]), ('?', False))
        self.assertEqual(infer_spliced_orientation([other]), ('?', False))

    def test_touching_segments_have_no_splice_sites(self):
        # AG ends the first segment and GT starts the second, with no gap between
        sequence = make_sequence(200, [(99, 100, "AG", "AG"), (101, 102, "GT", "GT")])
        record = make_record("a", [(1, 100), (101, 200)])
        calls = read_junctions(record, sequence)

        self.assertEqual(calls[0].length, 0)
        self.assertFalse(calls[0].is_splice_gap)
        self.assertFalse(calls[0].plus_canonical or calls[0].minus_canonical)
        self.assertEqual(infer_spliced_orientation(calls), ('?', False))

    def test_short_gap_is_not_canonical(self):
        self.assertFalse(JunctionCall(101, 103, "GT", "AG").plus_canonical)
        self.assertFalse(JunctionCall(101, 103, "CT", "AC").minus_canonical)
        self.assertTrue(JunctionCall(101, 104, "GT", "AG").plus_canonical)

    def test_junction_past_sequence_end(self):
        record = make_record("a", [(1, 10), (50, 60)])
        calls = read_junctions(record, "C" * 20)
        self.assertFalse(calls[0].plus_canonical or calls[0].minus_canonical)


class TestTranscriptValidator(unittest.TestCase):
    """Test the rule chain on single records."""

    def test_canonical_plus_alignment_is_valid(self):
        record = make_record("a", SPANS)
        result = TranscriptValidator(require_consensus_splicesites=True).validate(record, PLUS_GENOME)

        self.assertTrue(result.valid)
        self.assertIsNone(result.reason)
        self.assertEqual(record.spliced_orientation, '+')
        self.assertEqual([(s.lend, s.rend) for s in record.segments], SPANS)

    def test_minus_junctions_remap_plus_alignment(self):
        record = make_record("a", SPANS, orientation='+', with_target=True)
        result = TranscriptValidator().validate(record, MINUS_GENOME)

        self.assertTrue(result.valid)
        self.assertEqual(record.aligned_orientation, '+')
        self.assertEqual(record.spliced_orientation, '-')
        self.assertEqual([(s.lend, s.rend) for s in record.segments],
                         [(401, 500), (201, 300), (1, 100)])
        self.assertEqual(record.segments[0].target_lend, 1)
        self.assertEqual(record.segments[0].end5, 500)
        self.assertEqual(record.to_gtf().split("\t")[6], '-')

    def test_plus_junctions_remap_minus_alignment(self):
        record = make_record("a", SPANS, orientation='-')
        TranscriptValidator().validate(record, PLUS_GENOME)

        self.assertEqual(record.spliced_orientation, '+')
        self.assertEqual([(s.lend, s.rend) for s in record.segments], SPANS)
        self.assertTrue(all(s.orientation == '+' for s in record.segments))

    def test_noncanonical_rejected_when_consensus_required(self):
        record = make_record("a", SPANS, per_id=100.0)
        result = TranscriptValidator(require_consensus_splicesites=True).validate(
            record, NONCANONICAL_GENOME)

        self.assertFalse(result.valid)
        self.assertEqual(result.reason, NONCONSENSUS_SPLICE_MSG)
        self.assertEqual(record.spliced_orientation, '?')

    def test_partially_canonical_rejected_when_consensus_required(self):
        record = make_record("a", SPANS)
        result = TranscriptValidator(require_consensus_splicesites=True).validate(record, MIXED_GENOME)

        self.assertFalse(result.valid)
        self.assertEqual(record.spliced_orientation, '+')

    def test_gapless_split_rejected_when_consensus_required(self):
        sequence = make_sequence(200, [(99, 100, "AG", "AG"), (101, 102, "GT", "GT")])
        record = make_record("a", [(1, 100), (101, 200)])
        result = TranscriptValidator(require_consensus_splicesites=True).validate(record, sequence)

        self.assertFalse(result.valid)
        self.assertEqual(result.reason, NONCONSENSUS_SPLICE_MSG)
        self.assertEqual(record.spliced_orientation, '?')

    def test_confirmed_minus_alignment_keeps_stored_order(self):
        record = make_record("a", SPANS, orientation='-')
        TranscriptValidator().validate(record, MINUS_GENOME)

        self.assertEqual(record.spliced_orientation, '-')
        self.assertEqual([(s.lend, s.rend) for s in record.segments], SPANS)

    def test_noncanonical_accepted_without_consensus_requirement(self):
        record = make_record("a", SPANS)
        result = TranscriptValidator().validate(record, NONCANONICAL_GENOME)

        self.assertTrue(result.valid)
        self.assertEqual(record.spliced_orientation, '?')
        self.assertEqual(record.to_gtf().split("\t")[6], '+')

    def test_transcribed_is_aligned_orient_skips_junctions(self):
        record = make_record("a", SPANS, orientation='-')
        validator = TranscriptValidator(transcribed_is_aligned_orient=True,
                                        require_consensus_splicesites=True)
        result = validator.validate(record, NONCANONICAL_GENOME)

        self.assertTrue(result.valid)
        self.assertEqual(record.spliced_orientation, '-')
        self.assertEqual([(s.lend, s.rend) for s in record.segments], SPANS)

    def test_single_exon_untouched_by_splice_rule(self):
        record = make_record("a", [(1, 100)])
        result = TranscriptValidator(require_consensus_splicesites=True).validate(
            record, NONCANONICAL_GENOME)

        self.assertTrue(result.valid)
        self.assertEqual(record.spliced_orientation, "")

    def test_unspliced_discarded_regardless_of_identity(self):
        record = make_record("a", [(1, 100)], per_id=100.0)
        result = TranscriptValidator(discard_unspliced=True).validate(record, PLUS_GENOME)

        self.assertFalse(result.valid)
        self.assertEqual(result.reason, UNSPLICED_MSG)

    def test_low_identity_rejected(self):
        record = make_record("a", SPANS, per_id=90.0)
        result = TranscriptValidator(min_per_id=95).validate(record, PLUS_GENOME)

        self.assertFalse(result.valid)
        self.assertIn("below minimum", result.reason)

    def test_identity_at_threshold_passes(self):
        record = make_record("a", SPANS, per_id=95.0)
        self.assertTrue(TranscriptValidator(min_per_id=95).validate(record, PLUS_GENOME).valid)

    def test_unknown_identity_passes(self):
        record = make_record("a", SPANS, per_id=None)
        self.assertTrue(TranscriptValidator(min_per_id=99).validate(record, PLUS_GENOME).valid)

    def test_identity_reason_replaces_earlier_reasons(self):
        spliced = make_record("a", SPANS, per_id=50.0)
        TranscriptValidator(require_consensus_splicesites=True).validate(spliced, NONCANONICAL_GENOME)
        self.assertIn("below minimum", spliced.error_flag)

        unspliced = make_record("b", [(1, 100)], per_id=50.0)
        TranscriptValidator(discard_unspliced=True).validate(unspliced, PLUS_GENOME)
        self.assertIn("below minimum", unspliced.error_flag)

    def test_from_config(self):
        config = ValidatorConfig(min_per_id=80, discard_unspliced_transcripts=True,
                                 require_consensus_splicesites=True,
                                 transcribed_is_aligned_orient=True)
        validator = TranscriptValidator.from_config(config)

        self.assertEqual(validator.min_per_id, 80)
        self.assertTrue(validator.discard_unspliced)
        self.assertTrue(validator.require_consensus_splicesites)
        self.assertTrue(validator.transcribed_is_aligned_orient)


if __name__ == '__main__':
    unittest.main()

#!/usr/bin/env python3

"""
Unit tests for overlap piling and single-linkage clustering.
"""

import unittest
import os
import sys

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from pasa_lite.core.clustering import OverlapClusterer
from pasa_lite.tests.helpers import make_record


class TestPiling(unittest.TestCase):
    """Test grouping intervals by direct overlap."""

    def setUp(self):
        self.clusterer = OverlapClusterer()

    def test_overlapping_intervals_share_pile(self):
        piles = self.clusterer.pile([("A", 1, 10), ("B", 5, 15)])
        self.assertEqual(piles, [["A", "B"]])

    def test_disjoint_intervals_stay_apart(self):
        piles = self.clusterer.pile([("A", 1, 10), ("B", 20, 30)])
        self.assertEqual(piles, [["A"], ["B"]])

    def test_shared_endpoint_overlaps(self):
        self.assertEqual(self.clusterer.pile([("A", 1, 10), ("B", 10, 20)]), [["A", "B"]])

    def test_adjacent_intervals_do_not_overlap(self):
        self.assertEqual(self.clusterer.pile([("A", 1, 10), ("B", 11, 20)]), [["A"], ["B"]])

    def test_chained_overlap_extends_pile(self):
        piles = self.clusterer.pile([("C", 18, 30), ("A", 1, 10), ("B", 8, 20)])
        self.assertEqual(piles, [["A", "B", "C"]])

    def test_contained_interval(self):
        piles = self.clusterer.pile([("A", 1, 100), ("B", 20, 30), ("C", 90, 120)])
        self.assertEqual(piles, [["A", "B", "C"]])

    def test_accession_listed_once_per_pile(self):
        piles = self.clusterer.pile([("A", 1, 10), ("A", 5, 8), ("B", 9, 12)])
        self.assertEqual(piles, [["A", "B"]])

    def test_empty(self):
        self.assertEqual(self.clusterer.pile([]), [])


class TestSingleLinkage(unittest.TestCase):
    """Test pair extraction and component merging."""

    def test_adjacency_pairs(self):
        pairs = OverlapClusterer.adjacency_pairs([["A", "B", "C"], ["D"], ["E", "F"]])
        self.assertEqual(pairs, [("A", "B"), ("B", "C"), ("E", "F")])

    def test_transitive_merge(self):
        clusters = OverlapClusterer.single_linkage([("A", "B"), ("B", "C")])
        self.assertEqual(clusters, [frozenset({"A", "B", "C"})])

    def test_members_without_pairs_are_singletons(self):
        clusters = OverlapClusterer.single_linkage([("A", "B")], members=["A", "B", "C"])
        self.assertEqual(sorted(clusters, key=len), [frozenset({"C"}), frozenset({"A", "B"})])


class TestClusterRecords(unittest.TestCase):
    """Test clustering whole alignments."""

    def setUp(self):
        self.clusterer = OverlapClusterer()

    def test_spliced_alignment_bridges_piles(self):
        records = [
            make_record("left", [(1, 50)]),
            make_record("right", [(300, 400)]),
            make_record("bridge", [(40, 60), (350, 360)]),
            make_record("alone", [(1000, 1100)]),
        ]
        clusters = self.clusterer.cluster(records)

        self.assertEqual(clusters, [frozenset({"left", "bridge", "right"}), frozenset({"alone"})])

    def test_intron_does_not_link(self):
        records = [
            make_record("spliced", [(1, 50), (300, 400)]),
            make_record("in_intron", [(100, 200)]),
        ]
        clusters = self.clusterer.cluster(records)
        self.assertEqual(clusters, [frozenset({"spliced"}), frozenset({"in_intron"})])

    def test_mixed_scaffolds_rejected(self):
        with self.assertRaises(ValueError):
            self.clusterer.cluster([make_record("a", [(1, 10)], scaffold="chr1"),
                                    make_record("b", [(1, 10)], scaffold="chr2")])

    def test_cluster_by_scaffold(self):
        records = [
            make_record("a", [(1, 10)], scaffold="chr1"),
            make_record("b", [(5, 15)], scaffold="chr1"),
            make_record("c", [(5, 15)], scaffold="chr2"),
        ]
        clusters = self.clusterer.cluster_by_scaffold(records)

        self.assertEqual(clusters, {
            "chr1": [frozenset({"a", "b"})],
            "chr2": [frozenset({"c"})],
        })


if __name__ == '__main__':
    unittest.main()

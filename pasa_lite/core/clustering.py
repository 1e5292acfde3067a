#!/usr/bin/env python3

"""
Overlap clustering of alignments into candidate loci.

Segments are first piled by direct coordinate overlap, each pile is turned
into a chain of adjacent accession pairs, and the pairs from all piles are
merged by single linkage so that an alignment spanning two piles joins them.
"""

from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

import networkx as nx
from intervaltree import IntervalTree

from .data_structures import AlignmentRecord


def _collect_accessions(accessions: List[str], accession: str) -> List[str]:
    if accession not in accessions:
        accessions.append(accession)
    return accessions


class OverlapClusterer:
    """Group alignments of one scaffold whose exons are overlap-connected."""

    def pile(self, intervals: Iterable[Tuple[str, int, int]]) -> List[List[str]]:
        """
        Pile (accession, lend, rend) intervals by overlap.

        Coordinates are 1-based inclusive. Returns the accessions of each
        pile in discovery order, piles ordered left to right.
        """
        tree = IntervalTree()
        for accession, lend, rend in intervals:
            if lend > rend:
                lend, rend = rend, lend
            tree.addi(lend, rend + 1, accession)

        if not tree:
            return []

        # touching half-open intervals share no base and stay apart
        tree.merge_overlaps(data_reducer=_collect_accessions, data_initializer=[], strict=True)
        return [interval.data for interval in sorted(tree)]

    @staticmethod
    def adjacency_pairs(piles: Iterable[Sequence[str]]) -> List[Tuple[str, str]]:
        """Link consecutive accessions of each pile instead of every pair."""
        pairs = []
        for pile in piles:
            pairs.extend(zip(pile, pile[1:]))
        return pairs

    @staticmethod
    def single_linkage(pairs: Iterable[Tuple[str, str]],
                       members: Iterable[str] = ()) -> List[FrozenSet[str]]:
        """Connected components over the pairs; lone members become singletons."""
        graph = nx.Graph()
        graph.add_nodes_from(members)
        graph.add_edges_from(pairs)
        return [frozenset(component) for component in nx.connected_components(graph)]

    def cluster(self, records: Iterable[AlignmentRecord]) -> List[FrozenSet[str]]:
        """Cluster alignments that all sit on the same scaffold."""
        records = list(records)
        scaffolds = {record.scaffold for record in records}
        if len(scaffolds) > 1:
            raise ValueError(f"Cannot cluster across scaffolds: {sorted(scaffolds)}")

        intervals = [
            (record.accession, segment.lend, segment.rend)
            for record in records
            for segment in record.segments
        ]
        piles = self.pile(intervals)
        clusters = self.single_linkage(self.adjacency_pairs(piles),
                                       members=[record.accession for record in records])

        leftmost = defaultdict(lambda: float('inf'))
        for accession, lend, _ in intervals:
            leftmost[accession] = min(leftmost[accession], lend)
        return sorted(clusters, key=lambda c: (min(leftmost[a] for a in c), sorted(c)))

    def cluster_by_scaffold(self, records: Iterable[AlignmentRecord]) -> Dict[str, List[FrozenSet[str]]]:
        by_scaffold: Dict[str, List[AlignmentRecord]] = defaultdict(list)
        for record in records:
            by_scaffold[record.scaffold].append(record)
        return {scaffold: self.cluster(group) for scaffold, group in by_scaffold.items()}

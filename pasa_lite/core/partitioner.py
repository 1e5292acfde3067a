#!/usr/bin/env python3

"""
Grouping of alignment accessions by genome scaffold.
"""

from collections import OrderedDict
from typing import Dict, Tuple


class ScaffoldPartitioner:
    """Accumulate scaffold -> accessions in file-scan order.

    An accession re-indexed under a different scaffold moves to the new
    scaffold so that every accession belongs to exactly one group.
    """

    def __init__(self):
        self._groups: Dict[str, "OrderedDict[str, None]"] = {}
        self._owner: Dict[str, str] = {}

    def add(self, accession: str, scaffold: str) -> None:
        previous = self._owner.get(accession)
        if previous == scaffold:
            return
        if previous is not None:
            del self._groups[previous][accession]
            if not self._groups[previous]:
                del self._groups[previous]
        self._groups.setdefault(scaffold, OrderedDict())[accession] = None
        self._owner[accession] = scaffold

    def scaffold_of(self, accession: str) -> str:
        return self._owner[accession]

    def groups(self) -> Dict[str, Tuple[str, ...]]:
        """Snapshot of the grouping; tuples keep it read-only."""
        return {scaffold: tuple(accessions) for scaffold, accessions in self._groups.items()}

    def __len__(self) -> int:
        return len(self._owner)

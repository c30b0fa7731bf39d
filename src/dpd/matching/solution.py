"""
Solutions of a matching run.

A Solution records one occurrence of a pattern in the system. Two solutions
are duplicates when they bind the same system nodes to the same pattern
nodes, whatever order the search found them in.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

from dpd.core.models import Node, Relation
from dpd.rules.comparators import Feedback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Solution:
    """
    One detected pattern occurrence.

    Attributes:
        pattern_name: Name of the detected pattern
        mapping: Bound (system node, pattern node) pairs
        matched_relations: (pattern relation, system relation) pairs used by the match
        superfluous_relations: System relations between bound nodes not used by the match
        missing_relations: Pattern relations tolerated as absent
    """
    pattern_name: str
    mapping: Tuple[Tuple[Node, Node], ...] = ()
    matched_relations: Tuple[Tuple[Relation, Relation], ...] = ()
    superfluous_relations: Tuple[Relation, ...] = ()
    missing_relations: Tuple[Relation, ...] = ()

    @property
    def bounded_mapping(self) -> FrozenSet[Tuple[str, str]]:
        return frozenset((system.id, pattern.id) for system, pattern in self.mapping)

    def is_empty(self) -> bool:
        return not self.mapping

    def is_duplicate_of(self, other: "Solution") -> bool:
        return self.bounded_mapping == other.bounded_mapping

    def __str__(self) -> str:
        pairs = ", ".join(f"{s} -> {p}" for s, p in self.mapping)
        return f"{self.pattern_name}: {pairs}"


class Solutions:
    """
    Insertion-ordered solutions without duplicates.

    Attributes:
        feedback: Rule feedback of the run that produced these solutions
    """

    def __init__(self, feedback: Optional[Feedback] = None):
        self._solutions: List[Solution] = []
        self.feedback = feedback if feedback is not None else Feedback()

    def is_unique(self, solution: Solution) -> bool:
        return not any(existing.is_duplicate_of(solution) for existing in self._solutions)

    def add(self, solution: Solution) -> bool:
        """Add a solution unless it is empty or a duplicate. Returns whether it was added."""
        if solution.is_empty():
            return False
        if not self.is_unique(solution):
            logger.debug(f"Skipping duplicate solution {solution}")
            return False
        self._solutions.append(solution)
        return True

    def as_map(self) -> Dict[str, List[Solution]]:
        """Solutions grouped by pattern name, keeping insertion order."""
        grouped: Dict[str, List[Solution]] = {}
        for solution in self._solutions:
            grouped.setdefault(solution.pattern_name, []).append(solution)
        return grouped

    def __iter__(self) -> Iterator[Solution]:
        return iter(self._solutions)

    def __len__(self) -> int:
        return len(self._solutions)

    def __getitem__(self, index: int) -> Solution:
        return self._solutions[index]

    def __bool__(self) -> bool:
        return bool(self._solutions)

"""
Tolerant backtracking matcher.

Pattern relations are visited in the pattern's deterministic order. For each
one, every unlocked system relation accepted by the comparators and
compatible with the correspondence built so far opens a branch; when no
candidate leads to a solution the pattern relation may be skipped, at the
cost of one unit of tolerance. All accepted branches become solutions.

State is per branch: the correspondence is copied before binding, locked
system relations are a frozenset of ids and matched/missing relations are
tuples, so nothing is undone on backtrack and concurrent runs share nothing.
"""

import logging
from typing import FrozenSet, List, Optional, Tuple

from dpd.core.graph import PatternGraph, SystemGraph
from dpd.core.models import Relation
from dpd.matching.correspondence import Correspondence
from dpd.matching.solution import Solution, Solutions
from dpd.rules.comparators import Feedback, NodeComparator, RelationComparator

logger = logging.getLogger(__name__)

RelationPairs = Tuple[Tuple[Relation, Relation], ...]


class Matcher:
    """
    Detects occurrences of one pattern in one system.

    A Matcher instance runs one match at a time; use one instance per thread.
    The feedback of the last run is kept in ``feedback`` and handed to its Solutions.
    """

    def __init__(self):
        self.feedback: Feedback = Feedback()
        self._pattern: Optional[PatternGraph] = None
        self._system: Optional[SystemGraph] = None
        self._pattern_relations: List[Relation] = []
        self._system_relations: List[Relation] = []
        self._node_comparator: Optional[NodeComparator] = None
        self._relation_comparator: Optional[RelationComparator] = None
        self._solutions = Solutions(self.feedback)

    def match(self, pattern: PatternGraph, system: SystemGraph, tolerance: int = 0) -> Solutions:
        """
        Find all occurrences of pattern in system.

        Args:
            pattern: The design pattern to look for
            system: The system under consideration
            tolerance: Maximum number of pattern relations allowed to have no counterpart

        Returns:
            The distinct solutions, in discovery order

        Raises:
            ValueError: if tolerance is negative
            RuleError: if a rule of the pattern cannot be evaluated
        """
        if tolerance < 0:
            raise ValueError(f"Tolerance must be a non-negative integer, got {tolerance}")

        self.feedback = Feedback()
        self._pattern = pattern
        self._system = system
        self._pattern_relations = pattern.ordered_relations()
        self._system_relations = system.relations
        self._node_comparator = NodeComparator(pattern, self.feedback)
        self._relation_comparator = RelationComparator(pattern, self.feedback)
        self._solutions = Solutions(self.feedback)

        logger.info(
            f"Matching pattern '{pattern.name}' ({len(self._pattern_relations)} relations) against "
            f"system '{system.name}' ({len(self._system_relations)} relations), tolerance {tolerance}"
        )
        self._search(0, Correspondence.prepare(system), tolerance, frozenset(), (), ())
        logger.info(f"Pattern '{pattern.name}': {len(self._solutions)} solution(s) found")
        return self._solutions

    # ----- search -----

    def _accepts(self, pattern_relation: Relation, system_relation: Relation,
                 correspondence: Correspondence) -> bool:
        return (
            self._relation_comparator.compare(pattern_relation, system_relation)
            and self._node_comparator.compare(pattern_relation.source, system_relation.source)
            and self._node_comparator.compare(pattern_relation.target, system_relation.target)
            and correspondence.can_match(system_relation, pattern_relation)
        )

    def _search(self, index: int, correspondence: Correspondence, tolerance: int,
                locked: FrozenSet[str], matched: RelationPairs,
                missing: Tuple[Relation, ...]) -> bool:
        if index >= len(self._pattern_relations):
            self._accept(correspondence, locked, matched, missing)
            return True

        pattern_relation = self._pattern_relations[index]
        found = False

        for j, system_relation in enumerate(self._system_relations):
            if system_relation.id in locked:
                continue
            if not self._accepts(pattern_relation, system_relation, correspondence):
                continue

            branch = correspondence.copy()
            branch.make_match(system_relation, pattern_relation)
            branch_locked = {system_relation.id}
            branch_matched = [(pattern_relation, system_relation)]

            if pattern_relation.is_multi_inheritance:
                # Other children of the same parent join this branch. They are
                # checked against the correspondence from before this binding.
                for extra in self._system_relations[j + 1:]:
                    if (extra.id not in locked
                            and extra.target == system_relation.target
                            and self._accepts(pattern_relation, extra, correspondence)):
                        branch.make_match(extra, pattern_relation)
                        branch_locked.add(extra.id)
                        branch_matched.append((pattern_relation, extra))

            logger.debug(
                f"[{index}] {pattern_relation.id} -> "
                f"{', '.join(s.id for _, s in branch_matched)}"
            )
            succeeded = self._search(
                index + 1, branch, tolerance,
                locked | branch_locked, matched + tuple(branch_matched), missing,
            )
            found = found or succeeded

            if succeeded and len(branch_matched) > 1:
                # The whole multi-inheritance group is resolved
                break

        if found:
            return True

        if tolerance - 1 >= 0:
            logger.debug(f"[{index}] {pattern_relation.id} tolerated as missing")
            return self._search(index + 1, correspondence, tolerance - 1,
                                locked, matched, missing + (pattern_relation,))
        return False

    def _accept(self, correspondence: Correspondence, locked: FrozenSet[str],
                matched: RelationPairs, missing: Tuple[Relation, ...]) -> None:
        solution = self._create_solution(correspondence, locked, matched, missing)
        if self._solutions.add(solution):
            logger.debug(f"Solution found: {solution}")

    def _create_solution(self, correspondence: Correspondence, locked: FrozenSet[str],
                         matched: RelationPairs, missing: Tuple[Relation, ...]) -> Solution:
        superfluous = tuple(
            r for r in self._system_relations
            if correspondence.is_bound(r.source)
            and correspondence.is_bound(r.target)
            and r.id not in locked
        )
        return Solution(
            pattern_name=self._pattern.name,
            mapping=tuple(correspondence.bounded_items()),
            matched_relations=matched,
            superfluous_relations=superfluous,
            missing_relations=missing,
        )


def match(pattern: PatternGraph, system: SystemGraph, tolerance: int = 0) -> Solutions:
    """Find all occurrences of pattern in system, allowing up to tolerance missing pattern relations."""
    return Matcher().match(pattern, system, tolerance)

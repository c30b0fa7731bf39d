"""
Vertex correspondence of one matching run.

Maps every system node that takes part in a system relation either to the
pattern node it is bound to, or to nothing (unbound). Several system nodes
may be bound to the same pattern node (the children of a multi-inheritance
group), but a pattern node that is already bound can only be reached again
through a system node bound to it.
"""

from typing import Dict, List, Optional, Set, Tuple

from dpd.core.graph import SystemGraph
from dpd.core.models import Node, Relation


class Correspondence:
    """Copy-on-branch map from system nodes to pattern nodes."""

    def __init__(self):
        self._mapping: Dict[Node, Optional[Node]] = {}
        self._bound_pattern_ids: Set[str] = set()

    @classmethod
    def prepare(cls, system: SystemGraph) -> "Correspondence":
        """Every system node occurring in some relation, all unbound."""
        correspondence = cls()
        for relation in system.relations:
            correspondence.add(relation.source)
            correspondence.add(relation.target)
        return correspondence

    def copy(self) -> "Correspondence":
        clone = Correspondence()
        clone._mapping = dict(self._mapping)
        clone._bound_pattern_ids = set(self._bound_pattern_ids)
        return clone

    def add(self, system_node: Node) -> None:
        self._mapping.setdefault(system_node, None)

    def get(self, system_node: Node) -> Optional[Node]:
        return self._mapping.get(system_node)

    def is_bound(self, system_node: Node) -> bool:
        return self._mapping.get(system_node) is not None

    def is_pattern_node_bound(self, pattern_node: Node) -> bool:
        return pattern_node.id in self._bound_pattern_ids

    def can_bind(self, system_node: Node, pattern_node: Node) -> bool:
        """A bound system node only accepts its own pattern node; an unbound one only a free pattern node."""
        current = self._mapping.get(system_node)
        if current is not None:
            return current == pattern_node
        return not self.is_pattern_node_bound(pattern_node)

    def can_match(self, system_relation: Relation, pattern_relation: Relation) -> bool:
        """Whether both endpoints of system_relation can be bound to those of pattern_relation."""
        if not self.can_bind(system_relation.source, pattern_relation.source):
            return False
        trial = self.copy()
        trial.bind(system_relation.source, pattern_relation.source)
        return trial.can_bind(system_relation.target, pattern_relation.target)

    def bind(self, system_node: Node, pattern_node: Node) -> None:
        self._mapping[system_node] = pattern_node
        self._bound_pattern_ids.add(pattern_node.id)

    def make_match(self, system_relation: Relation, pattern_relation: Relation) -> None:
        self.bind(system_relation.source, pattern_relation.source)
        self.bind(system_relation.target, pattern_relation.target)

    def bounded_items(self) -> List[Tuple[Node, Node]]:
        """Bound (system node, pattern node) pairs, ordered by system node name then id."""
        pairs = [(s, p) for s, p in self._mapping.items() if p is not None]
        return sorted(pairs, key=lambda pair: (pair[0].name or "", pair[0].id))

    @property
    def system_nodes(self) -> List[Node]:
        return list(self._mapping)

    def __contains__(self, system_node: Node) -> bool:
        return system_node in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

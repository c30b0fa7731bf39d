"""
Directed graph ADTs for pattern graphs and system graphs.

A ClassGraph keeps nodes by id and at most one Relation per ordered
(source, target) pair; adding a second relation between the same pair merges
its properties into the existing one. Both node and relation iteration follow
insertion order so that searches over the graph are reproducible.
"""

import logging
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from dpd.core.errors import GraphError
from dpd.core.models import Node, Relation

if TYPE_CHECKING:
    from dpd.rules.rule import EdgeRule, NodeRule

logger = logging.getLogger(__name__)


class ClassGraph:
    """Directed graph of class-like nodes connected by multi-property relations."""

    def __init__(self):
        self._nodes: Dict[str, Node] = {}
        self._relations_by_pair: Dict[Tuple[str, str], Relation] = {}
        self._relations_by_id: Dict[str, Relation] = {}
        self._outgoing: Dict[str, List[Relation]] = {}
        self._incoming: Dict[str, List[Relation]] = {}

    # ----- construction -----

    def add_node(self, node: Node) -> Node:
        """Register a node. Adding a node whose id is already known returns the registered one."""
        existing = self._nodes.get(node.id)
        if existing is not None:
            return existing
        self._nodes[node.id] = node
        self._outgoing[node.id] = []
        self._incoming[node.id] = []
        return node

    def add_relation(self, relation: Relation) -> Relation:
        """
        Register a relation and return the relation held by the graph.

        Raises:
            GraphError: when an endpoint is not registered, the relation has no
                properties, or its id is already used between other nodes.
        """
        for endpoint in (relation.source, relation.target):
            if endpoint.id not in self._nodes:
                msg = f"Relation '{relation.id}' references unregistered node '{endpoint.id}'."
                logger.error(msg)
                raise GraphError(msg)
        if not relation.properties:
            msg = f"Relation '{relation.id}' has no relation properties."
            logger.error(msg)
            raise GraphError(msg)

        pair = (relation.source.id, relation.target.id)
        same_id = self._relations_by_id.get(relation.id)
        if same_id is not None and (same_id.source.id, same_id.target.id) != pair:
            msg = (f"Relation id '{relation.id}' is already used for "
                   f"{same_id.source.id} -> {same_id.target.id}, cannot reuse it for {pair[0]} -> {pair[1]}.")
            logger.error(msg)
            raise GraphError(msg)

        existing = self._relations_by_pair.get(pair)
        if existing is not None:
            existing.add_properties(relation.properties)
            logger.debug(f"Merged relation '{relation.id}' into '{existing.id}' ({pair[0]} -> {pair[1]})")
            return existing

        self._relations_by_pair[pair] = relation
        self._relations_by_id[relation.id] = relation
        self._outgoing[pair[0]].append(relation)
        self._incoming[pair[1]].append(relation)
        return relation

    # ----- queries -----

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def relations(self) -> List[Relation]:
        return list(self._relations_by_pair.values())

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_relation(self, source: Node, target: Node) -> Optional[Relation]:
        return self._relations_by_pair.get((source.id, target.id))

    def get_relation_by_id(self, relation_id: str) -> Optional[Relation]:
        return self._relations_by_id.get(relation_id)

    def contains_node(self, node: Node) -> bool:
        return node.id in self._nodes

    def contains_relation(self, source: Node, target: Node) -> bool:
        return (source.id, target.id) in self._relations_by_pair

    def outgoing(self, node: Node) -> List[Relation]:
        return list(self._outgoing.get(node.id, []))

    def incoming(self, node: Node) -> List[Relation]:
        return list(self._incoming.get(node.id, []))

    def incident(self, node: Node) -> List[Relation]:
        """Outgoing then incoming relations; a self-loop is listed once."""
        result = self.outgoing(node)
        result.extend(r for r in self.incoming(node) if r.source.id != r.target.id)
        return result

    def connected_nodes(self) -> List[Node]:
        """Nodes taking part in at least one relation, in node insertion order."""
        return [n for n in self._nodes.values() if self._outgoing[n.id] or self._incoming[n.id]]

    def __len__(self) -> int:
        return len(self._nodes)


class SystemGraph(ClassGraph):
    """The system under consideration, usually read from an XMI model."""

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None):
        super().__init__()
        self.id = id
        self.name = name

    def __repr__(self) -> str:
        return f"SystemGraph(name={self.name!r}, nodes={len(self.nodes)}, relations={len(self.relations)})"


class PatternGraph(ClassGraph):
    """
    A design pattern: a small class graph plus the rules its nodes and
    relations impose on the system elements they are matched with.
    """

    def __init__(self, name: str, family: Optional[str] = None):
        super().__init__()
        self.name = name
        self.family = family
        self._node_rules: Dict[str, List["NodeRule"]] = {}
        self._relation_rules: Dict[str, List["EdgeRule"]] = {}

    def add_node(self, node: Node, rules: Optional[List["NodeRule"]] = None) -> Node:
        registered = super().add_node(node)
        self._node_rules.setdefault(registered.id, [])
        for rule in rules or []:
            self.add_node_rule(registered, rule)
        return registered

    def add_relation(self, relation: Relation, rules: Optional[List["EdgeRule"]] = None) -> Relation:
        registered = super().add_relation(relation)
        self._relation_rules.setdefault(registered.id, [])
        for rule in rules or []:
            self.add_relation_rule(registered, rule)
        return registered

    def add_node_rule(self, node: Node, rule: "NodeRule") -> None:
        if node.id not in self._node_rules:
            raise GraphError(f"Cannot attach a rule to unregistered node '{node.id}'.")
        self._node_rules[node.id].append(rule)

    def add_relation_rule(self, relation: Relation, rule: "EdgeRule") -> None:
        if relation.id not in self._relation_rules:
            raise GraphError(f"Cannot attach a rule to unregistered relation '{relation.id}'.")
        self._relation_rules[relation.id].append(rule)

    def node_rules(self, node: Node) -> List["NodeRule"]:
        """Rules for a pattern node. A node without rules accepts any candidate."""
        return list(self._node_rules.get(node.id, []))

    def relation_rules(self, relation: Relation) -> List["EdgeRule"]:
        """
        Rules for a pattern relation. A relation without explicit rules is
        compared on its relation types only.
        """
        rules = self._relation_rules.get(relation.id)
        if rules:
            return list(rules)
        from dpd.rules.rule import EdgeRule, Operator, Scope, Topic
        return [EdgeRule(relation, Scope.RELATION, Topic.TYPE, Operator.EQUALS)]

    def ordered_relations(self) -> List[Relation]:
        """
        Deterministic search order: creation order, except that a relation
        touching an already visited node is always taken before one that
        does not.
        """
        remaining = self.relations
        visited = set()
        ordered = []
        while remaining:
            chosen = next(
                (r for r in remaining if r.source.id in visited or r.target.id in visited),
                remaining[0],
            )
            remaining.remove(chosen)
            ordered.append(chosen)
            visited.update((chosen.source.id, chosen.target.id))
        logger.debug(f"Pattern '{self.name}' relation order: {[r.id for r in ordered]}")
        return ordered

    def __repr__(self) -> str:
        return f"PatternGraph(name={self.name!r}, nodes={len(self.nodes)}, relations={len(self.relations)})"

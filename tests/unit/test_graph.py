"""
Unit tests for ClassGraph, SystemGraph and PatternGraph.
"""

import pytest

from builders import node, observer_pattern, relate
from dpd.core.errors import GraphError
from dpd.core.graph import PatternGraph, SystemGraph
from dpd.core.models import Cardinality, Node, NodeType, Relation, RelationProperty, RelationType
from dpd.rules.rule import EdgeRule, NodeRule, Operator, Scope, Topic


@pytest.fixture
def graph():
    system = SystemGraph(id="s", name="Sample")
    for node_id in ("A", "B", "C"):
        system.add_node(node(node_id, NodeType.CONCRETE_CLASS))
    return system


def test_add_node_is_idempotent(graph):
    again = graph.add_node(Node("A", name="Other"))
    assert again is graph.get_node("A")
    assert again.name == "A"
    assert len(graph) == 3


def test_relation_to_unregistered_node(graph):
    relation = Relation("r", graph.get_node("A"), Node("Z"))
    relation.add_property(RelationProperty(RelationType.DEPENDS_ON))
    with pytest.raises(GraphError, match="unregistered node 'Z'"):
        graph.add_relation(relation)


def test_relation_without_properties(graph):
    with pytest.raises(GraphError, match="no relation properties"):
        graph.add_relation(Relation("r", graph.get_node("A"), graph.get_node("B")))


def test_relation_id_reused_for_other_pair(graph):
    relate(graph, "r", "A", "B", RelationType.DEPENDS_ON)
    with pytest.raises(GraphError, match="already used"):
        relate(graph, "r", "B", "C", RelationType.DEPENDS_ON)


def test_relations_between_same_pair_merge(graph):
    first = relate(graph, "r1", "A", "B", RelationType.DEPENDS_ON)
    second = relate(graph, "r2", "A", "B", RelationType.ASSOCIATES_WITH, left="1", right="0..*")

    assert second is first
    assert len(graph.relations) == 1
    assert first.relation_types == {RelationType.DEPENDS_ON, RelationType.ASSOCIATES_WITH}
    assert first.properties_of_type(RelationType.ASSOCIATES_WITH)[0].cardinality_right == Cardinality(0, None)


def test_opposite_directions_are_distinct(graph):
    relate(graph, "r1", "A", "B", RelationType.ASSOCIATES_WITH)
    relate(graph, "r2", "B", "A", RelationType.ASSOCIATES_WITH)
    assert len(graph.relations) == 2
    assert graph.contains_relation(graph.get_node("B"), graph.get_node("A"))
    assert graph.get_relation_by_id("r2").source.id == "B"


def test_adjacency_queries(graph):
    relate(graph, "ab", "A", "B", RelationType.INHERITS_FROM)
    relate(graph, "cb", "C", "B", RelationType.INHERITS_FROM)
    relate(graph, "bb", "B", "B", RelationType.ASSOCIATES_WITH)
    b = graph.get_node("B")

    assert [r.id for r in graph.outgoing(b)] == ["bb"]
    assert [r.id for r in graph.incoming(b)] == ["ab", "cb", "bb"]
    assert [r.id for r in graph.incident(b)] == ["bb", "ab", "cb"]


def test_connected_nodes(graph):
    graph.add_node(node("Lonely"))
    relate(graph, "ab", "A", "B", RelationType.DEPENDS_ON)
    assert [n.id for n in graph.connected_nodes()] == ["A", "B"]


def test_insertion_order(graph):
    relate(graph, "bc", "B", "C", RelationType.DEPENDS_ON)
    relate(graph, "ab", "A", "B", RelationType.DEPENDS_ON)
    assert [n.id for n in graph.nodes] == ["A", "B", "C"]
    assert [r.id for r in graph.relations] == ["bc", "ab"]


class TestPatternGraph:

    def test_default_edge_rule(self):
        pattern = PatternGraph("P")
        pattern.add_node(node("A"))
        pattern.add_node(node("B"))
        relation = relate(pattern, "r", "A", "B", RelationType.INHERITS_FROM)

        rules = pattern.relation_rules(relation)
        assert len(rules) == 1
        assert rules[0] == EdgeRule(relation, Scope.RELATION, Topic.TYPE, Operator.EQUALS)

    def test_explicit_rules_replace_default(self, observer):
        observers = observer.get_relation_by_id("obs-2")
        topics = [rule.topic for rule in observer.relation_rules(observers)]
        assert topics == [Topic.TYPE, Topic.CARDINALITY_RIGHT]

    def test_node_without_rules_accepts_anything(self):
        pattern = PatternGraph("P")
        a = pattern.add_node(node("A"))
        assert pattern.node_rules(a) == []

    def test_rules_on_unregistered_elements(self):
        pattern = PatternGraph("P")
        stray = node("X")
        with pytest.raises(GraphError):
            pattern.add_node_rule(stray, NodeRule(stray, Scope.OBJECT, Topic.TYPE, Operator.EXISTS))

    def test_rules_given_on_add(self):
        pattern = PatternGraph("P")
        a = node("A", NodeType.INTERFACE)
        pattern.add_node(a, rules=[NodeRule(a, Scope.OBJECT, Topic.TYPE, Operator.EQUALS)])
        assert len(pattern.node_rules(a)) == 1

    def test_ordered_relations_follow_visited_nodes(self):
        pattern = PatternGraph("P")
        for node_id in ("A", "B", "C", "D"):
            pattern.add_node(node(node_id))
        relate(pattern, "ab", "A", "B", RelationType.DEPENDS_ON)
        relate(pattern, "cd", "C", "D", RelationType.DEPENDS_ON)
        relate(pattern, "bc", "B", "C", RelationType.DEPENDS_ON)

        assert [r.id for r in pattern.ordered_relations()] == ["ab", "bc", "cd"]

    def test_ordered_relations_observer(self):
        ordered = observer_pattern().ordered_relations()
        assert [r.id for r in ordered] == ["obs-1", "obs-2", "obs-3", "obs-4"]

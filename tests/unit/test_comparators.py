"""
Tests for NodeComparator, RelationComparator and the feedback they record.
"""

import pytest

from builders import node
from dpd.core.errors import RuleError
from dpd.core.graph import PatternGraph
from dpd.core.models import Node, NodeType, Visibility
from dpd.rules.comparators import Feedback, FeedbackEntry, NodeComparator, RelationComparator
from dpd.rules.rule import NodeRule, Operator, Scope, Topic


def test_node_without_rules_accepts_anything(observer):
    comparator = NodeComparator(observer)
    observer.add_node(node("Free"))
    assert comparator.compare(observer.get_node("Free"), node("x", NodeType.DATATYPE))
    assert len(comparator.feedback) == 0


def test_node_type_rule(observer, observer_sut):
    comparator = NodeComparator(observer)
    subject = observer.get_node("Subject")

    assert comparator.compare(subject, observer_sut.get_node("MySubject"))
    assert not comparator.compare(subject, observer_sut.get_node("MyConcreteSubject"))

    summary = comparator.feedback.summary()
    assert summary == {"evaluated": 2, "passed": 1, "failed": 1}
    assert comparator.feedback.failures[0].system_element.id == "MyConcreteSubject"


def test_relation_rules(observer, observer_sut):
    comparator = RelationComparator(observer)
    observers = observer.get_relation_by_id("obs-2")

    assert comparator.compare(observers, observer_sut.get_relation_by_id("a1"))
    # a2 is an association too, but its target end is 1..1
    assert not comparator.compare(observers, observer_sut.get_relation_by_id("a2"))
    assert not comparator.compare(observers, observer_sut.get_relation_by_id("g1"))


def test_all_rules_evaluated_after_failure(observer):
    """A broken rule raises even when an earlier rule already failed"""
    mould = observer.get_node("Observer")
    observer.add_node_rule(mould, NodeRule(mould, Scope.OBJECT, Topic.VISIBILITY, Operator.EQUALS))
    comparator = NodeComparator(observer)

    with pytest.raises(RuleError):
        comparator.compare(mould, node("c", NodeType.CONCRETE_CLASS))


def test_shared_feedback():
    pattern = PatternGraph("Visible")
    mould = pattern.add_node(Node("m", visibility=Visibility.PUBLIC))
    pattern.add_node_rule(mould, NodeRule(mould, Scope.OBJECT, Topic.VISIBILITY, Operator.EQUALS))
    feedback = Feedback()
    comparator = NodeComparator(pattern, feedback)

    candidate = Node("c", visibility=Visibility.PRIVATE)
    comparator.compare(mould, candidate)

    assert len(feedback) == 1
    assert feedback.failures[0].system_element is candidate
    assert "VISIBILITY EQUALS failed" in str(feedback.entries[0])


def test_feedback_one_entry_per_check():
    pattern_node = node("p")
    rule = NodeRule(pattern_node, Scope.OBJECT, Topic.TYPE, Operator.EXISTS)
    feedback = Feedback()
    feedback.add(FeedbackEntry(rule, pattern_node, node("a"), True))
    feedback.add(FeedbackEntry(rule, pattern_node, node("a"), True))
    feedback.add(FeedbackEntry(rule, pattern_node, node("b"), False))

    assert len(feedback) == 2
    assert [e.system_element.id for e in feedback.failures] == ["b"]


def test_verdict_reused_for_same_pair(observer, observer_sut):
    comparator = RelationComparator(observer)
    observers = observer.get_relation_by_id("obs-2")
    candidate = observer_sut.get_relation_by_id("a1")

    assert comparator.compare(observers, candidate)
    evaluated = len(comparator.feedback)
    for _ in range(5):
        assert comparator.compare(observers, candidate)
    assert len(comparator.feedback) == evaluated == 2

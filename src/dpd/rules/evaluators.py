"""
Rule evaluation.

Each supported (Scope, Topic) pair maps to an evaluator that reads the topic's
value from a mould and from a candidate, then applies the rule's operator:

- EXISTS / NOT_EXISTS look at the candidate only: does it have a determinate
  value for the topic?
- EQUALS / NOT_EQUALS compare the candidate with the mould. A mould without a
  determinate value is a configuration error and raises RuleError.

Anything outside the table raises RuleError naming the offending combination.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

from dpd.core.errors import RuleError
from dpd.core.models import Node, Relation, RelationProperty, RelationType, implied_types
from dpd.rules.rule import EdgeRule, NodeRule, Operator, Rule, Scope, Topic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopicEvaluator:
    """
    How to evaluate one topic.

    Attributes:
        value_of: Reads the topic's value from an element
        is_determinate: Whether a value read by value_of is usable
        equals: Compares a (determinate) mould value with a candidate value
    """
    value_of: Callable[[Any], Any]
    is_determinate: Callable[[Any], bool]
    equals: Callable[[Any, Any], bool]

    def evaluate(self, rule: Rule, candidate: Any) -> bool:
        candidate_value = self.value_of(candidate)
        if rule.operator is Operator.EXISTS:
            return self.is_determinate(candidate_value)
        if rule.operator is Operator.NOT_EXISTS:
            return not self.is_determinate(candidate_value)

        mould_value = self.value_of(rule.mould)
        if not self.is_determinate(mould_value):
            msg = f"Cannot perform rule on topic '{rule.topic.name}'. Unable to detect what to check for in {rule}."
            logger.error(msg)
            raise RuleError(msg)
        if not self.is_determinate(candidate_value):
            equal = False
        else:
            equal = self.equals(mould_value, candidate_value)
        return equal if rule.operator is Operator.EQUALS else not equal


def _not_none(value) -> bool:
    return value is not None


def _not_empty(value) -> bool:
    return bool(value)


def _same(mould_value, candidate_value) -> bool:
    return mould_value == candidate_value


# ----- node topics -----

def _node_types_match(mould_types, candidate_types) -> bool:
    return set(mould_types) <= implied_types(candidate_types)


def _modifier(attribute: str) -> TopicEvaluator:
    return TopicEvaluator(
        value_of=lambda node: getattr(node, attribute),
        is_determinate=lambda state: state.is_set,
        equals=_same,
    )


# ----- relation topics -----

def _relation_types_match(mould_types, candidate_types) -> bool:
    candidate_bases = {t.base for t in candidate_types}
    return all(t.base in candidate_bases for t in mould_types)


def _both_ends(prop: RelationProperty) -> Tuple:
    return prop.cardinality_left, prop.cardinality_right


def _left_end(prop: RelationProperty) -> Tuple:
    return (prop.cardinality_left,)


def _right_end(prop: RelationProperty) -> Tuple:
    return (prop.cardinality_right,)


def _cardinality_topic(key: Callable[[RelationProperty], Tuple]) -> TopicEvaluator:
    """
    Cardinalities of the association properties of a relation, reduced to
    the end(s) selected by key. A property lacking one of those ends does not
    count as a value.
    """
    def value_of(relation: Relation):
        return [
            key(p) for p in relation.properties_of_type(RelationType.ASSOCIATES_WITH)
            if None not in key(p)
        ]

    def equals(mould_keys, candidate_keys) -> bool:
        return all(k in candidate_keys for k in mould_keys)

    return TopicEvaluator(value_of=value_of, is_determinate=_not_empty, equals=equals)


EVALUATORS: Dict[Tuple[Scope, Topic], TopicEvaluator] = {
    (Scope.OBJECT, Topic.TYPE): TopicEvaluator(
        value_of=lambda node: node.types,
        is_determinate=_not_empty,
        equals=_node_types_match,
    ),
    (Scope.OBJECT, Topic.VISIBILITY): TopicEvaluator(
        value_of=lambda node: node.visibility,
        is_determinate=_not_none,
        equals=_same,
    ),
    (Scope.OBJECT, Topic.MODIFIER_ROOT): _modifier("root"),
    (Scope.OBJECT, Topic.MODIFIER_LEAF): _modifier("leaf"),
    (Scope.OBJECT, Topic.MODIFIER_ABSTRACT): _modifier("abstract"),
    (Scope.OBJECT, Topic.MODIFIER_ACTIVE): _modifier("active"),
    (Scope.RELATION, Topic.TYPE): TopicEvaluator(
        value_of=lambda relation: relation.relation_types,
        is_determinate=_not_empty,
        equals=_relation_types_match,
    ),
    (Scope.RELATION, Topic.CARDINALITY): _cardinality_topic(_both_ends),
    (Scope.RELATION, Topic.CARDINALITY_LEFT): _cardinality_topic(_left_end),
    (Scope.RELATION, Topic.CARDINALITY_RIGHT): _cardinality_topic(_right_end),
}

# Scope each rule family may use
_RULE_SCOPES = {
    NodeRule: Scope.OBJECT,
    EdgeRule: Scope.RELATION,
}


def lookup(rule: Rule) -> TopicEvaluator:
    """
    Find the evaluator for a rule.

    Raises:
        RuleError: when the rule's scope or topic is not supported
    """
    allowed_scope = _RULE_SCOPES.get(type(rule))
    if allowed_scope is None or rule.scope is not allowed_scope:
        msg = f"Unexpected scope: '{rule.scope.name}' in {rule}."
        logger.error(msg)
        raise RuleError(msg)
    evaluator = EVALUATORS.get((rule.scope, rule.topic))
    if evaluator is None:
        msg = f"Unexpected topic '{rule.topic.name}' while processing scope '{rule.scope.name}' in {rule}."
        logger.error(msg)
        raise RuleError(msg)
    return evaluator


def evaluate(rule: Rule, candidate: Any) -> bool:
    """Process a rule against a candidate node (NodeRule) or relation (EdgeRule)."""
    if isinstance(rule, NodeRule) and not isinstance(candidate, Node):
        raise RuleError(f"{rule} cannot be processed against {type(candidate).__name__}.")
    if isinstance(rule, EdgeRule) and not isinstance(candidate, Relation):
        raise RuleError(f"{rule} cannot be processed against {type(candidate).__name__}.")
    return lookup(rule).evaluate(rule, candidate)

"""
Pattern Template Parser

Reads design pattern templates into PatternGraphs:

    <patterns>
      <pattern name="Observer" family="Behavioral">
        <node id="Subject" name="Subject">
          <rule scope="OBJECT" topic="TYPE" operator="EQUALS" value="ABSTRACT_CLASS_OR_INTERFACE"/>
        </node>
        <relation id="r1" source="ConcreteSubject" target="Subject" type="INHERITS_FROM">
          <rule scope="RELATION" topic="TYPE" operator="EQUALS"/>
        </relation>
      </pattern>
    </patterns>

A rule's value is applied onto its mould before the rule is created, so the
rule has something to compare against. Values are only accepted on EQUALS
rules.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Dict, List, Optional, Type, TypeVar, Union

from dpd.core.errors import GraphError, ParseError, RuleError
from dpd.core.graph import PatternGraph
from dpd.core.models import (
    Cardinality,
    Node,
    NodeType,
    Relation,
    RelationProperty,
    RelationType,
    TriState,
    Visibility,
)
from dpd.rules.rule import EdgeRule, NodeRule, Operator, Scope, Topic

logger = logging.getLogger(__name__)

E = TypeVar("E")


def _enum(enum_type: Type[E], value: Optional[str], what: str) -> E:
    if value is None:
        raise ParseError(f"Missing {what}.")
    try:
        return enum_type[value.strip().upper()]
    except KeyError:
        raise ParseError(f"Unknown {what}: '{value}'.")


# ===== Mould application =====

_MODIFIERS = {
    Topic.MODIFIER_ROOT: "root",
    Topic.MODIFIER_LEAF: "leaf",
    Topic.MODIFIER_ABSTRACT: "abstract",
    Topic.MODIFIER_ACTIVE: "active",
}


def _check_applicable(scope: Scope, topic: Topic, operator: Operator, allowed_scope: Scope):
    if scope is not allowed_scope:
        raise RuleError(f"Unexpected scope: '{scope.name}'.")
    if operator is not Operator.EQUALS:
        raise RuleError(f"Unexpected operation while applying {topic.name}: '{operator.name}'.")


def apply_node_value(node: Node, scope: Scope, topic: Topic, operator: Operator, value: str) -> None:
    """Set the value of a node rule onto its mould."""
    _check_applicable(scope, topic, operator, Scope.OBJECT)
    try:
        if topic is Topic.TYPE:
            for name in value.split():
                node.add_type(NodeType[name.upper()])
        elif topic is Topic.VISIBILITY:
            node.visibility = Visibility.parse(value)
        elif topic in _MODIFIERS:
            setattr(node, _MODIFIERS[topic], TriState.parse(value))
        else:
            raise RuleError(f"Unexpected topic while applying OBJECT: '{topic.name}'.")
    except (KeyError, ValueError) as e:
        raise RuleError(f"Cannot apply value '{value}' to topic '{topic.name}' of node '{node.id}'.") from e


def _replace_association(relation: Relation, update: Callable[[RelationProperty], RelationProperty]) -> None:
    """Replace the first association property of a relation by an updated copy."""
    current = next(iter(sorted(relation.properties_of_type(RelationType.ASSOCIATES_WITH), key=str)),
                   RelationProperty(RelationType.ASSOCIATES_WITH))
    relation.properties.discard(current)
    relation.add_property(update(current))


def apply_relation_value(relation: Relation, scope: Scope, topic: Topic, operator: Operator, value: str) -> None:
    """Set the value of an edge rule onto its mould."""
    _check_applicable(scope, topic, operator, Scope.RELATION)
    try:
        if topic is Topic.TYPE:
            for name in value.split():
                relation.add_property(RelationProperty(RelationType[name.upper()]))
        elif topic is Topic.CARDINALITY:
            left, right = (Cardinality.parse(part) for part in value.split(","))
            _replace_association(relation, lambda p: RelationProperty(p.relation_type, left, right))
        elif topic is Topic.CARDINALITY_LEFT:
            left = Cardinality.parse(value)
            _replace_association(relation, lambda p: RelationProperty(p.relation_type, left, p.cardinality_right))
        elif topic is Topic.CARDINALITY_RIGHT:
            right = Cardinality.parse(value)
            _replace_association(relation, lambda p: RelationProperty(p.relation_type, p.cardinality_left, right))
        else:
            raise RuleError(f"Unexpected topic while applying RELATION: '{topic.name}'.")
    except (KeyError, ValueError) as e:
        raise RuleError(f"Cannot apply value '{value}' to topic '{topic.name}' of relation '{relation.id}'.") from e


# ===== Parser =====

class TemplateParser:
    """Parses pattern template files into PatternGraphs."""

    def parse(self, template_file: Union[str, Path]) -> List[PatternGraph]:
        """
        Parse all patterns of a template file.

        Raises:
            ParseError: malformed XML, unknown names or references, repeated pattern names
            RuleError: a rule value that cannot be applied to its mould
        """
        try:
            root = ET.parse(str(template_file)).getroot()
        except (OSError, ET.ParseError) as e:
            msg = f"The template file {template_file} could not be parsed."
            logger.error(f"{msg} ({e})")
            raise ParseError(msg) from e

        try:
            patterns = [self._parse_pattern(element) for element in root.iter("pattern")]
        except GraphError as e:
            msg = f"Invalid template file {template_file}: {e}"
            logger.error(msg)
            raise ParseError(msg) from e

        seen = set()
        for pattern in patterns:
            if pattern.name in seen:
                msg = f"Invalid template file {template_file}: pattern '{pattern.name}' is declared twice."
                logger.error(msg)
                raise ParseError(msg)
            seen.add(pattern.name)

        logger.info(f"Parsed {len(patterns)} pattern(s) from {template_file}")
        return patterns

    def _parse_pattern(self, element: ET.Element) -> PatternGraph:
        name = element.get("name")
        if not name:
            raise ParseError("A pattern needs a name.")
        pattern = PatternGraph(name=name, family=element.get("family"))

        nodes: Dict[str, Node] = {}
        for node_element in element.findall("node"):
            node = self._parse_node(node_element)
            if node.id in nodes:
                raise ParseError(f"Pattern '{name}' declares node '{node.id}' twice.")
            nodes[node.id] = pattern.add_node(node)
            for rule_element in node_element.findall("rule"):
                pattern.add_node_rule(node, self._parse_node_rule(node, rule_element))

        for relation_element in element.findall("relation"):
            relation = self._parse_relation(relation_element, nodes, name)
            registered = pattern.add_relation(relation)
            for rule_element in relation_element.findall("rule"):
                pattern.add_relation_rule(registered, self._parse_edge_rule(registered, rule_element))

        logger.debug(f"Pattern '{name}': {len(pattern.nodes)} nodes, {len(pattern.relations)} relations")
        return pattern

    def _parse_node(self, element: ET.Element) -> Node:
        node_id = element.get("id")
        if not node_id:
            raise ParseError("A pattern node needs an id.")
        return Node(id=node_id, name=element.get("name", node_id))

    def _parse_relation(self, element: ET.Element, nodes: Dict[str, Node], pattern_name: str) -> Relation:
        relation_id = element.get("id")
        if not relation_id:
            raise ParseError(f"A relation of pattern '{pattern_name}' needs an id.")
        endpoints = []
        for attribute in ("source", "target"):
            node = nodes.get(element.get(attribute, ""))
            if node is None:
                raise ParseError(
                    f"Relation '{relation_id}' of pattern '{pattern_name}' references "
                    f"unknown {attribute} node '{element.get(attribute)}'."
                )
            endpoints.append(node)

        type_names = element.get("type", "").split()
        if not type_names:
            raise ParseError(f"Relation '{relation_id}' of pattern '{pattern_name}' needs a type.")
        left = self._cardinality(element.get("cardinality-left"), relation_id)
        right = self._cardinality(element.get("cardinality-right"), relation_id)

        relation = Relation(id=relation_id, source=endpoints[0], target=endpoints[1], name=element.get("name"))
        for type_name in type_names:
            relation_type = _enum(RelationType, type_name, f"relation type of '{relation_id}'")
            if relation_type is RelationType.ASSOCIATES_WITH:
                relation.add_property(RelationProperty(relation_type, left, right))
            else:
                relation.add_property(RelationProperty(relation_type))
        if (left or right) and not relation.has_type(RelationType.ASSOCIATES_WITH):
            raise ParseError(f"Relation '{relation_id}' has cardinalities but is no association.")
        return relation

    @staticmethod
    def _cardinality(text: Optional[str], relation_id: str) -> Optional[Cardinality]:
        if text is None:
            return None
        try:
            return Cardinality.parse(text)
        except ValueError as e:
            raise ParseError(f"Relation '{relation_id}': {e}") from e

    @staticmethod
    def _rule_parts(element: ET.Element):
        return (
            _enum(Scope, element.get("scope"), "rule scope"),
            _enum(Topic, element.get("topic"), "rule topic"),
            _enum(Operator, element.get("operator"), "rule operator"),
            element.get("value"),
        )

    def _parse_node_rule(self, node: Node, element: ET.Element) -> NodeRule:
        scope, topic, operator, value = self._rule_parts(element)
        if value is not None:
            apply_node_value(node, scope, topic, operator, value)
        return NodeRule(node, scope, topic, operator)

    def _parse_edge_rule(self, relation: Relation, element: ET.Element) -> EdgeRule:
        scope, topic, operator, value = self._rule_parts(element)
        if value is not None:
            apply_relation_value(relation, scope, topic, operator, value)
        return EdgeRule(relation, scope, topic, operator)


def parse_templates(template_file: Union[str, Path]) -> List[PatternGraph]:
    """Parse all design patterns of a template file."""
    return TemplateParser().parse(template_file)

"""
ArgoUML XMI Parser

Reads an ArgoUML XMI 1.2 (UML 1.4) model into a SystemGraph.

Parsing happens in two passes over the element tree. The first pass creates
a node for every class, interface and datatype and attaches attributes,
operations and parameters. The second pass turns generalizations,
abstractions, dependencies and associations into relations.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Union

from dpd.core.errors import ParseError
from dpd.core.graph import SystemGraph
from dpd.core.models import (
    Attribute,
    Cardinality,
    Node,
    NodeType,
    Operation,
    Parameter,
    Relation,
    RelationProperty,
    RelationType,
    TriState,
    Visibility,
)

logger = logging.getLogger(__name__)

UML_NS = "org.omg.xmi.namespace.UML"

ID = "xmi.id"
IDREF = "xmi.idref"
HREF = "href"

# Suffixes of the ArgoUML profile datatype hrefs
DATATYPE_NAMES = {
    "87E": "String",
    "87C": "Integer",
    "87D": "UnlimitedInteger",
    "880": "Boolean",
}

CLASSIFIER_TAGS = ("Class", "Interface", "DataType")


def _tag(local_name: str) -> str:
    return f"{{{UML_NS}}}{local_name}"


def _local_name(element: ET.Element) -> str:
    return element.tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    return next((c for c in element if c.tag == _tag(name)), None)


def _grandchildren(element: ET.Element, holder: str, name: Optional[str] = None) -> List[ET.Element]:
    """Children of the element's <UML:holder> children, optionally only those named name."""
    return [
        grandchild
        for child in element if child.tag == _tag(holder)
        for grandchild in child
        if name is None or grandchild.tag == _tag(name)
    ]


class XMIParser:
    """
    Parses ArgoUML XMI files.

    One parser instance can parse several files, one at a time.
    """

    def __init__(self):
        self.nodes: Dict[str, Node] = {}
        self.system: Optional[SystemGraph] = None

    def parse(self, xmi_file: Union[str, Path]) -> SystemGraph:
        """
        Parse an XMI file into a SystemGraph.

        Raises:
            ParseError: if the file cannot be read or is not a usable XMI model
        """
        try:
            root = ET.parse(str(xmi_file)).getroot()
        except (OSError, ET.ParseError) as e:
            msg = f"The XMI file {xmi_file} could not be parsed."
            logger.error(f"{msg} ({e})")
            raise ParseError(msg) from e

        model = next(root.iter(_tag("Model")), None)
        if model is None:
            msg = f"The XMI file {xmi_file} contains no UML model."
            logger.error(msg)
            raise ParseError(msg)

        self.nodes = {}
        self.system = SystemGraph(id=model.get(ID), name=model.get("name"))

        self._parse_nodes(model)
        for node in self.nodes.values():
            self.system.add_node(node)
        self._parse_relations(model)

        logger.info(
            f"Parsed XMI model '{self.system.name}': {len(self.system.nodes)} nodes, "
            f"{len(self.system.relations)} relations"
        )
        return self.system

    # ===== Pass 1: nodes =====

    def _parse_nodes(self, model: ET.Element):
        definitions = [
            element for element in model.iter()
            if _local_name(element) in CLASSIFIER_TAGS and element.get(ID) is not None
        ]
        for element in definitions:
            self._create_node(element)
        for element in definitions:
            node = self.nodes[element.get(ID)]
            for feature in _grandchildren(element, "Classifier.feature"):
                if _local_name(feature) == "Attribute":
                    node.add_attribute(self._create_attribute(feature))
                elif _local_name(feature) == "Operation":
                    node.add_operation(self._create_operation(feature))

    def _create_node(self, element: ET.Element) -> Node:
        kind = _local_name(element)
        node = self._find_or_create(element.get(ID))
        node.name = element.get("name")
        node.visibility = self._visibility(element)
        node.root = TriState.parse(element.get("isRoot"))
        node.leaf = TriState.parse(element.get("isLeaf"))
        node.abstract = TriState.parse(element.get("isAbstract"))
        node.active = TriState.parse(element.get("isActive"))

        if kind == "Class":
            if node.abstract is TriState.TRUE:
                node.add_type(NodeType.ABSTRACT_CLASS)
                node.add_type(NodeType.ABSTRACT_CLASS_OR_INTERFACE)
            else:
                node.add_type(NodeType.CONCRETE_CLASS)
        elif kind == "Interface":
            node.add_type(NodeType.INTERFACE)
            node.add_type(NodeType.ABSTRACT_CLASS_OR_INTERFACE)
        else:
            node.add_type(NodeType.DATATYPE)
        return node

    def _create_attribute(self, element: ET.Element) -> Attribute:
        return Attribute(
            id=element.get(ID),
            name=element.get("name"),
            visibility=self._visibility(element),
            type=self._resolve_type(_child(element, "StructuralFeature.type")),
        )

    def _create_operation(self, element: ET.Element) -> Operation:
        operation = Operation(
            id=element.get(ID),
            name=element.get("name"),
            visibility=self._visibility(element),
        )
        for param in _grandchildren(element, "BehavioralFeature.parameter", "Parameter"):
            param_type = self._resolve_type(_child(param, "Parameter.type"))
            kind = param.get("kind", "in")
            if kind == "return":
                operation.return_type = param_type
            elif kind == "in":
                operation.add_parameter(Parameter(id=param.get(ID), name=param.get("name"), type=param_type))
        return operation

    def _resolve_type(self, type_holder: Optional[ET.Element]) -> Optional[Node]:
        """Node referenced by the single child of a *.type element."""
        if type_holder is None or len(type_holder) == 0:
            return None
        reference = type_holder[0]
        if reference.get(HREF) is not None:
            return self._datatype(reference.get(HREF))
        if reference.get(IDREF) is not None:
            return self._find_or_create(reference.get(IDREF))
        return None

    def _datatype(self, href: str) -> Node:
        node = self.nodes.get(href)
        if node is None:
            name = DATATYPE_NAMES.get(href[-3:], href.rsplit("#", 1)[-1])
            node = Node(id=href, name=name, visibility=Visibility.PUBLIC, types={NodeType.DATATYPE})
            self.nodes[href] = node
        return node

    def _find_or_create(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            node = Node(id=node_id)
            self.nodes[node_id] = node
        return node

    @staticmethod
    def _visibility(element: ET.Element) -> Optional[Visibility]:
        try:
            return Visibility.parse(element.get("visibility"))
        except ValueError as e:
            raise ParseError(f"Element '{element.get(ID)}': {e}") from e

    # ===== Pass 2: relations =====

    def _parse_relations(self, model: ET.Element):
        handlers = {
            "Generalization": self._handle_generalization,
            "Abstraction": self._handle_dependency,
            "Dependency": self._handle_dependency,
            "Association": self._handle_association,
        }
        for element in model.iter():
            handler = handlers.get(_local_name(element))
            if handler is not None and element.get(ID) is not None:
                handler(element)
        self._add_attribute_relations()

    def _referenced_nodes(self, element: ET.Element, holder: str) -> List[Node]:
        nodes = []
        for reference in _grandchildren(element, holder):
            node = self.nodes.get(reference.get(IDREF, ""))
            if node is None:
                logger.warning(f"Skipping unknown reference '{reference.get(IDREF)}' in '{element.get(ID)}'")
                continue
            nodes.append(node)
        return nodes

    def _handle_generalization(self, element: ET.Element):
        children = self._referenced_nodes(element, "Generalization.child")
        parents = self._referenced_nodes(element, "Generalization.parent")
        if children and parents:
            self._add(element.get(ID), element.get("name"), children[0], parents[0],
                      RelationProperty(RelationType.INHERITS_FROM))

    def _handle_dependency(self, element: ET.Element):
        relation_type = RelationType.IMPLEMENTS if _local_name(element) == "Abstraction" else RelationType.DEPENDS_ON
        clients = self._referenced_nodes(element, "Dependency.client")
        suppliers = self._referenced_nodes(element, "Dependency.supplier")
        if clients and suppliers:
            self._add(element.get(ID), element.get("name"), clients[0], suppliers[0],
                      RelationProperty(relation_type))

    def _handle_association(self, element: ET.Element):
        ends = _grandchildren(element, "Association.connection", "AssociationEnd")
        if len(ends) != 2:
            logger.warning(f"Skipping association '{element.get(ID)}' with {len(ends)} ends")
            return
        participants = []
        for end in ends:
            nodes = self._referenced_nodes(end, "AssociationEnd.participant")
            if not nodes:
                return
            participants.append(nodes[0])
        source, target = participants
        left, right = (self._multiplicity(end) for end in ends)
        prop = RelationProperty(RelationType.ASSOCIATES_WITH, left, right)
        self._add(element.get(ID), element.get("name"), source, target, prop)

        reverse = self.system.get_relation(target, source)
        if reverse is not None:
            reverse.add_property(prop.reversed())
        elif all(end.get("isNavigable") == "true" for end in ends):
            self._add(f"{element.get(ID)}-reversed", None, target, source, prop.reversed())

    def _multiplicity(self, end: ET.Element) -> Optional[Cardinality]:
        ranges = list(end.iter(_tag("MultiplicityRange")))
        if not ranges:
            return None
        try:
            return Cardinality.of(int(ranges[0].get("lower")), int(ranges[0].get("upper")))
        except (TypeError, ValueError) as e:
            raise ParseError(f"Association end '{end.get(ID)}' has a malformed multiplicity.") from e

    def _add_attribute_relations(self):
        """Attributes typed by a class or interface relate their owner to that type."""
        for owner in list(self.nodes.values()):
            for attribute in owner.attributes:
                if attribute.type is None or attribute.type.is_datatype or not attribute.type.types:
                    continue
                self._add(f"{owner.id}-has-{attribute.id or attribute.name}", attribute.name,
                          owner, attribute.type, RelationProperty(RelationType.HAS_ATTRIBUTE_OF))

    def _add(self, relation_id: str, name: Optional[str], source: Node, target: Node,
             prop: RelationProperty) -> Relation:
        relation = Relation(id=relation_id, source=source, target=target, name=name or None)
        relation.add_property(prop)
        return self.system.add_relation(relation)


def parse_xmi(xmi_file: Union[str, Path]) -> SystemGraph:
    """Parse an ArgoUML XMI file into a SystemGraph."""
    return XMIParser().parse(xmi_file)

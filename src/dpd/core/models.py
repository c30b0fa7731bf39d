"""
Core Data Models for the Design Pattern Detector

This module defines the vertices (Node) and edges (Relation) shared by pattern
graphs and system graphs, together with the value types they carry.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple


# ===== Enumerations =====

class Visibility(Enum):
    """UML visibility of a classifier or feature."""
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    PACKAGE = "package"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Visibility"]:
        """Case-insensitive lookup. An empty value yields None (indeterminate)."""
        if value is None or not value.strip():
            return None
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown visibility: '{value}'")


class NodeType(Enum):
    """Kinds of classifiers a node can represent."""
    CONCRETE_CLASS = "concrete_class"
    ABSTRACT_CLASS = "abstract_class"
    INTERFACE = "interface"
    ABSTRACT_CLASS_OR_INTERFACE = "abstract_class_or_interface"
    DATATYPE = "datatype"


def implied_types(types: Iterable[NodeType]) -> FrozenSet[NodeType]:
    """Types plus the ones they imply (abstract classes and interfaces are both ABSTRACT_CLASS_OR_INTERFACE)."""
    result = set(types)
    if NodeType.ABSTRACT_CLASS in result or NodeType.INTERFACE in result:
        result.add(NodeType.ABSTRACT_CLASS_OR_INTERFACE)
    return frozenset(result)


class TriState(Enum):
    """
    Three-valued modifier flag.

    UNSET is not the same as FALSE: a rule asking whether the modifier EXISTS
    fails on UNSET, and a rule comparing against an UNSET mould is an error.
    """
    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def of(cls, value: Optional[bool]) -> "TriState":
        if value is None:
            return cls.UNSET
        return cls.TRUE if value else cls.FALSE

    @classmethod
    def parse(cls, value: Optional[str]) -> "TriState":
        """Parse 'true'/'false' (any case); None or empty yields UNSET."""
        if value is None or not value.strip():
            return cls.UNSET
        lowered = value.strip().lower()
        if lowered == "true":
            return cls.TRUE
        if lowered == "false":
            return cls.FALSE
        raise ValueError(f"Not a boolean value: '{value}'")

    @property
    def is_set(self) -> bool:
        return self is not TriState.UNSET


class RelationType(Enum):
    """Structural relation kinds. INHERITS_FROM_MULTI only occurs in pattern graphs."""
    ASSOCIATES_WITH = "associates_with"
    IMPLEMENTS = "implements"
    INHERITS_FROM = "inherits_from"
    INHERITS_FROM_MULTI = "inherits_from_multi"
    HAS_ATTRIBUTE_OF = "has_attribute_of"
    DEPENDS_ON = "depends_on"

    @property
    def base(self) -> "RelationType":
        """The type this one is compared as (one parent, many children is still inheritance)."""
        if self is RelationType.INHERITS_FROM_MULTI:
            return RelationType.INHERITS_FROM
        return self


# ===== Value Types =====

@dataclass(frozen=True)
class Cardinality:
    """
    Multiplicity of one association end.

    Attributes:
        lower: Lower bound (>= 0)
        upper: Upper bound, or None when unbounded (*)
    """
    lower: int
    upper: Optional[int] = None

    def __post_init__(self):
        if self.lower < 0:
            raise ValueError(f"Cardinality lower bound must be >= 0, got {self.lower}")
        if self.upper is not None and self.upper < self.lower:
            raise ValueError(f"Cardinality upper bound {self.upper} is below lower bound {self.lower}")

    @classmethod
    def of(cls, lower: int, upper: int) -> "Cardinality":
        """Build from XMI style bounds where an upper bound of -1 means unbounded."""
        return cls(lower, None if upper == -1 else upper)

    @classmethod
    def parse(cls, text: str) -> "Cardinality":
        """Parse '0..1', '1..*', '*' or a single number."""
        text = text.strip()
        if not text:
            raise ValueError("Empty cardinality")
        if ".." in text:
            lower_str, upper_str = text.split("..", 1)
        elif text == "*":
            lower_str, upper_str = "0", "*"
        else:
            lower_str, upper_str = text, text
        try:
            lower = int(lower_str)
            upper = None if upper_str.strip() in ("*", "-1") else int(upper_str)
        except ValueError:
            raise ValueError(f"Malformed cardinality: '{text}'")
        return cls(lower, upper)

    @property
    def is_unbounded(self) -> bool:
        return self.upper is None

    def __str__(self) -> str:
        upper_str = "*" if self.upper is None else str(self.upper)
        return f"{self.lower}..{upper_str}"


@dataclass(frozen=True)
class RelationProperty:
    """
    One facet of a relation. Only ASSOCIATES_WITH carries cardinalities, one
    for each end (left = source end, right = target end).
    """
    relation_type: RelationType
    cardinality_left: Optional[Cardinality] = None
    cardinality_right: Optional[Cardinality] = None

    def __post_init__(self):
        has_cardinality = self.cardinality_left is not None or self.cardinality_right is not None
        if has_cardinality and self.relation_type is not RelationType.ASSOCIATES_WITH:
            raise ValueError(f"Only associations carry cardinalities, not {self.relation_type.name}")

    @property
    def has_cardinalities(self) -> bool:
        return self.cardinality_left is not None and self.cardinality_right is not None

    def reversed(self) -> "RelationProperty":
        """The same property seen from the other end."""
        return RelationProperty(self.relation_type, self.cardinality_right, self.cardinality_left)

    def __str__(self) -> str:
        if self.has_cardinalities:
            return f"{self.relation_type.name} [{self.cardinality_left}, {self.cardinality_right}]"
        return self.relation_type.name


# ===== Nodes =====

def _type_signature(node: Optional["Node"]) -> Optional[Tuple]:
    """Shallow signature of a type reference (avoids recursing through cyclic types)."""
    if node is None:
        return None
    return node.name, frozenset(node.types)


@dataclass
class Attribute:
    """
    An attribute owned by a node.

    Attributes:
        name: Attribute name
        visibility: Visibility, None when unknown
        type: The node typing this attribute (a class or a datatype)
        id: External identifier, when read from a model file
    """
    name: Optional[str] = None
    visibility: Optional[Visibility] = None
    type: Optional["Node"] = None
    id: Optional[str] = None

    def signature(self) -> Tuple:
        return self.name, self.visibility, _type_signature(self.type)

    def equals_signature(self, other: Optional["Attribute"]) -> bool:
        return other is not None and self.signature() == other.signature()

    def __str__(self) -> str:
        type_name = self.type.name if self.type is not None else "?"
        return f"{self.name}: {type_name}"


@dataclass
class Parameter:
    """An input parameter of an operation."""
    name: Optional[str] = None
    type: Optional["Node"] = None
    id: Optional[str] = None

    def signature(self) -> Tuple:
        return self.name, _type_signature(self.type)


@dataclass
class Operation:
    """
    An operation owned by a node.

    Attributes:
        name: Operation name
        visibility: Visibility, None when unknown
        return_type: Node returned, None for no return value
        parameters: Ordered input parameters
        id: External identifier, when read from a model file
    """
    name: Optional[str] = None
    visibility: Optional[Visibility] = None
    return_type: Optional["Node"] = None
    parameters: List[Parameter] = field(default_factory=list)
    id: Optional[str] = None

    def add_parameter(self, parameter: Parameter) -> Parameter:
        self.parameters.append(parameter)
        return parameter

    def signature(self) -> Tuple:
        return (
            self.name,
            self.visibility,
            _type_signature(self.return_type),
            tuple(p.signature() for p in self.parameters),
        )

    def equals_signature(self, other: Optional["Operation"]) -> bool:
        return other is not None and self.signature() == other.signature()

    def __str__(self) -> str:
        params = ", ".join(p.name or "?" for p in self.parameters)
        return f"{self.name}({params})"


@dataclass(eq=False)
class Node:
    """
    A class, interface or datatype in a pattern or system graph.

    Identity (equality and hashing) is the id only. Use equals_signature() to
    compare the content of two nodes regardless of their ids.

    Attributes:
        id: Stable external identifier, unique within a graph
        name: Display name, not unique
        visibility: Visibility, None when indeterminate
        types: Classifier kinds of this node
        root, leaf, abstract, active: Three-valued modifiers
        attributes: Owned attributes, in declaration order
        operations: Owned operations, in declaration order
    """
    id: str
    name: Optional[str] = None
    visibility: Optional[Visibility] = None
    types: Set[NodeType] = field(default_factory=set)
    root: TriState = TriState.UNSET
    leaf: TriState = TriState.UNSET
    abstract: TriState = TriState.UNSET
    active: TriState = TriState.UNSET
    attributes: List[Attribute] = field(default_factory=list)
    operations: List[Operation] = field(default_factory=list)

    def add_type(self, node_type: NodeType) -> "Node":
        self.types.add(node_type)
        return self

    def add_attribute(self, attribute: Attribute) -> Attribute:
        self.attributes.append(attribute)
        return attribute

    def add_operation(self, operation: Operation) -> Operation:
        self.operations.append(operation)
        return operation

    @property
    def is_datatype(self) -> bool:
        return NodeType.DATATYPE in self.types

    def equals_signature(self, other: Optional["Node"]) -> bool:
        """
        Compare name, visibility, types and the multisets of attribute and
        operation signatures. Ids are ignored.
        """
        if other is None:
            return False
        if self is other:
            return True
        return (
            self.name == other.name
            and self.visibility == other.visibility
            and self.types == other.types
            and Counter(a.signature() for a in self.attributes) == Counter(a.signature() for a in other.attributes)
            and Counter(o.signature() for o in self.operations) == Counter(o.signature() for o in other.operations)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.name if self.name is not None else self.id

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, name={self.name!r})"


# ===== Relations =====

@dataclass(eq=False)
class Relation:
    """
    A directed edge between two nodes.

    A relation is a multi-relation: it can be an association and a dependency
    at the same time, one RelationProperty per facet. Identity is the id.

    Attributes:
        id: Identifier, unique within a graph
        source: Node the relation starts from (the child of an inheritance)
        target: Node the relation points to (the parent of an inheritance)
        name: Optional display name
        properties: Facets of this relation
    """
    id: str
    source: Node
    target: Node
    name: Optional[str] = None
    properties: Set[RelationProperty] = field(default_factory=set)

    def add_property(self, prop: RelationProperty) -> "Relation":
        self.properties.add(prop)
        return self

    def add_properties(self, props: Iterable[RelationProperty]) -> "Relation":
        self.properties.update(props)
        return self

    @property
    def relation_types(self) -> FrozenSet[RelationType]:
        return frozenset(p.relation_type for p in self.properties)

    def has_type(self, relation_type: RelationType) -> bool:
        return relation_type in self.relation_types

    def properties_of_type(self, relation_type: RelationType) -> List[RelationProperty]:
        return [p for p in self.properties if p.relation_type is relation_type]

    @property
    def is_multi_inheritance(self) -> bool:
        return self.has_type(RelationType.INHERITS_FROM_MULTI)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Relation):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        props = ", ".join(sorted(str(p) for p in self.properties))
        return f"{self.source} --[{props}]--> {self.target}"

    def __repr__(self) -> str:
        return f"Relation(id={self.id!r}, source={self.source.id!r}, target={self.target.id!r})"

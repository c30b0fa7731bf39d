"""Graph model of the design pattern detector."""

from .errors import DetectorError, GraphError, ParseError, RuleError
from .models import (
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
from .graph import ClassGraph, PatternGraph, SystemGraph

__all__ = [
    'DetectorError',
    'GraphError',
    'ParseError',
    'RuleError',
    'Attribute',
    'Cardinality',
    'Node',
    'NodeType',
    'Operation',
    'Parameter',
    'Relation',
    'RelationProperty',
    'RelationType',
    'TriState',
    'Visibility',
    'ClassGraph',
    'PatternGraph',
    'SystemGraph',
]

"""
Rule Model

A rule compares one property (the topic) of a candidate system element with
the same property of a mould, the pattern node or relation carrying the
expected value.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from dpd.core.models import Node, Relation


class Scope(Enum):
    """Which part of an element a rule inspects."""
    OBJECT = "object"
    ATTRIBUTE = "attribute"
    OPERATION = "operation"
    RELATION = "relation"
    CARDINALITY = "cardinality"


class Topic(Enum):
    """Which property a rule inspects."""
    TYPE = "type"
    VISIBILITY = "visibility"
    MODIFIER_ROOT = "modifier_root"
    MODIFIER_LEAF = "modifier_leaf"
    MODIFIER_ABSTRACT = "modifier_abstract"
    MODIFIER_ACTIVE = "modifier_active"
    CARDINALITY = "cardinality"
    CARDINALITY_LEFT = "cardinality_left"
    CARDINALITY_RIGHT = "cardinality_right"


class Operator(Enum):
    """How the candidate value is compared with the mould value."""
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"

    @property
    def compares_mould(self) -> bool:
        return self in (Operator.EQUALS, Operator.NOT_EQUALS)


@dataclass(frozen=True)
class Rule:
    """
    Immutable predicate over one property of a candidate element.

    Attributes:
        mould: Pattern element holding the expected value
        scope: Part of the element inspected
        topic: Property inspected
        operator: Comparison applied
    """
    mould: Any
    scope: Scope
    topic: Topic
    operator: Operator

    def __post_init__(self):
        if self.mould is None or self.scope is None or self.topic is None or self.operator is None:
            raise ValueError("All arguments are mandatory.")

    def __str__(self) -> str:
        mould_id = getattr(self.mould, "id", self.mould)
        return f"{type(self).__name__}({self.scope.name}, {self.topic.name}, {self.operator.name}) on '{mould_id}'"


@dataclass(frozen=True)
class NodeRule(Rule):
    """A rule whose mould is a pattern Node."""
    mould: Node

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.mould, Node):
            raise TypeError(f"A NodeRule needs a Node as mould, got {type(self.mould).__name__}")


@dataclass(frozen=True)
class EdgeRule(Rule):
    """A rule whose mould is a pattern Relation."""
    mould: Relation

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.mould, Relation):
            raise TypeError(f"An EdgeRule needs a Relation as mould, got {type(self.mould).__name__}")

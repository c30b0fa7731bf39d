"""Rule model and comparators."""

from .rule import EdgeRule, NodeRule, Operator, Rule, Scope, Topic
from .evaluators import evaluate
from .comparators import Feedback, FeedbackEntry, NodeComparator, RelationComparator

__all__ = [
    'EdgeRule',
    'NodeRule',
    'Operator',
    'Rule',
    'Scope',
    'Topic',
    'evaluate',
    'Feedback',
    'FeedbackEntry',
    'NodeComparator',
    'RelationComparator',
]

"""
Comparators

A comparator decides whether a system element satisfies every rule attached
to a pattern element, and records one feedback entry per rule and compared
pair. The feedback is for reporting only; the decision does not depend on it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from dpd.core.graph import PatternGraph
from dpd.core.models import Node, Relation
from dpd.rules.evaluators import evaluate
from dpd.rules.rule import EdgeRule, NodeRule, Rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackEntry:
    """Outcome of one rule evaluated against one system element."""
    rule: Rule
    pattern_element: Any
    system_element: Any
    passed: bool

    def __str__(self) -> str:
        outcome = "passed" if self.passed else "failed"
        return f"{self.system_element} vs {self.pattern_element}: {self.rule.topic.name} {self.rule.operator.name} {outcome}"


@dataclass
class Feedback:
    """
    Feedback entries in evaluation order, one per (rule, pattern element,
    system element). Re-recording the same check replaces the entry.
    """
    _entries: Dict[Tuple[Rule, str, str], FeedbackEntry] = field(default_factory=dict)

    def add(self, entry: FeedbackEntry) -> None:
        self._entries[(entry.rule, entry.pattern_element.id, entry.system_element.id)] = entry

    @property
    def entries(self) -> List[FeedbackEntry]:
        return list(self._entries.values())

    @property
    def failures(self) -> List[FeedbackEntry]:
        return [e for e in self._entries.values() if not e.passed]

    def summary(self) -> Dict[str, int]:
        passed = sum(1 for e in self._entries.values() if e.passed)
        return {"evaluated": len(self._entries), "passed": passed, "failed": len(self._entries) - passed}

    def __len__(self) -> int:
        return len(self._entries)


class _Comparator:
    """
    Shared rule loop of the node and relation comparators.

    Rule outcomes depend only on the compared pair, so each (pattern element,
    system element) pair is evaluated once and its verdict reused.
    """

    def __init__(self, pattern: PatternGraph, feedback: Optional[Feedback] = None):
        self.pattern = pattern
        self.feedback = feedback if feedback is not None else Feedback()
        self._rules: Dict[str, List[Rule]] = {}
        self._verdicts: Dict[Tuple[str, str], bool] = {}

    def _rules_for(self, pattern_element) -> List[Rule]:
        raise NotImplementedError

    def compare(self, pattern_element, system_element) -> bool:
        """
        Evaluate every rule of pattern_element against system_element.

        All rules are evaluated even after one fails, so a misconfigured rule
        raises RuleError regardless of rule order.
        """
        key = (pattern_element.id, system_element.id)
        verdict = self._verdicts.get(key)
        if verdict is not None:
            return verdict

        rules = self._rules.get(pattern_element.id)
        if rules is None:
            rules = self._rules[pattern_element.id] = self._rules_for(pattern_element)
        accepted = True
        for rule in rules:
            passed = evaluate(rule, system_element)
            self.feedback.add(FeedbackEntry(rule, pattern_element, system_element, passed))
            accepted = accepted and passed
        self._verdicts[key] = accepted
        return accepted


class NodeComparator(_Comparator):
    """Compares pattern nodes with system nodes using the pattern's NodeRules."""

    def _rules_for(self, pattern_element: Node) -> List[NodeRule]:
        return self.pattern.node_rules(pattern_element)


class RelationComparator(_Comparator):
    """Compares pattern relations with system relations using the pattern's EdgeRules."""

    def _rules_for(self, pattern_element: Relation) -> List[EdgeRule]:
        return self.pattern.relation_rules(pattern_element)

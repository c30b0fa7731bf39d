"""
Design Pattern Detector

Finds occurrences of design patterns in UML class models by tolerant,
rule-driven subgraph matching.
"""

from dpd.core.errors import DetectorError, GraphError, ParseError, RuleError
from dpd.core.graph import PatternGraph, SystemGraph
from dpd.matching.matcher import Matcher, match
from dpd.matching.solution import Solution, Solutions

__version__ = "1.0.0"

__all__ = [
    'DetectorError',
    'GraphError',
    'ParseError',
    'RuleError',
    'PatternGraph',
    'SystemGraph',
    'Matcher',
    'match',
    'Solution',
    'Solutions',
]

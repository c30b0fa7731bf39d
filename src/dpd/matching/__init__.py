"""Matching engine: tolerant pattern search and its solutions."""

from .correspondence import Correspondence
from .solution import Solution, Solutions
from .matcher import Matcher, match

__all__ = ['Correspondence', 'Solution', 'Solutions', 'Matcher', 'match']

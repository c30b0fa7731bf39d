from pydantic import BaseModel
from typing import Optional, List

from dpd.core.models import Node, Relation
from dpd.matching.solution import Solution, Solutions


class NodeMatch(BaseModel):
    system_id: str
    system_name: Optional[str] = None
    pattern_id: str
    pattern_name: Optional[str] = None

    @classmethod
    def from_pair(cls, system: Node, pattern: Node) -> "NodeMatch":
        return cls(system_id=system.id, system_name=system.name,
                   pattern_id=pattern.id, pattern_name=pattern.name)


class RelationMatch(BaseModel):
    id: str
    source: Optional[str] = None
    target: Optional[str] = None
    types: List[str] = []

    @classmethod
    def from_relation(cls, relation: Relation) -> "RelationMatch":
        return cls(id=relation.id, source=relation.source.name or relation.source.id,
                   target=relation.target.name or relation.target.id,
                   types=sorted(str(p) for p in relation.properties))


class SolutionReport(BaseModel):
    pattern: str
    nodes: List[NodeMatch] = []
    superfluous: List[RelationMatch] = []
    missing: List[RelationMatch] = []

    @classmethod
    def from_solution(cls, solution: Solution) -> "SolutionReport":
        return cls(
            pattern=solution.pattern_name,
            nodes=[NodeMatch.from_pair(s, p) for s, p in solution.mapping],
            superfluous=[RelationMatch.from_relation(r) for r in solution.superfluous_relations],
            missing=[RelationMatch.from_relation(r) for r in solution.missing_relations],
        )


class RuleSummary(BaseModel):
    pattern: str
    evaluated: int = 0
    passed: int = 0
    failed: int = 0

    @classmethod
    def from_solutions(cls, pattern: str, solutions: Solutions) -> "RuleSummary":
        return cls(pattern=pattern, **solutions.feedback.summary())


class DetectionReport(BaseModel):
    system: Optional[str] = None
    tolerance: int = 0
    patterns: List[str] = []
    solutions: List[SolutionReport] = []
    rules: List[RuleSummary] = []
    timeMs: float = 0.0

    def solutions_for(self, pattern: str) -> List[SolutionReport]:
        return [s for s in self.solutions if s.pattern == pattern]

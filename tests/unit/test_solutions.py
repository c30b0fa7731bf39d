"""
Tests for Solution and the Solutions collection.
"""

from builders import node
from dpd.matching.solution import Solution, Solutions


def solution(pattern_name, *pairs):
    return Solution(pattern_name=pattern_name,
                    mapping=tuple((node(s), node(p)) for s, p in pairs))


def test_empty_solution_is_not_added():
    solutions = Solutions()
    assert not solutions.add(Solution(pattern_name="Observer"))
    assert len(solutions) == 0
    assert not solutions


def test_duplicates_ignore_order():
    solutions = Solutions()
    assert solutions.add(solution("Observer", ("A", "Subject"), ("B", "Observer")))
    assert not solutions.add(solution("Observer", ("B", "Observer"), ("A", "Subject")))
    assert len(solutions) == 1


def test_same_nodes_different_roles_are_distinct():
    solutions = Solutions()
    solutions.add(solution("Observer", ("A", "Subject"), ("B", "Observer")))
    assert solutions.is_unique(solution("Observer", ("A", "Observer"), ("B", "Subject")))


def test_as_map_groups_by_pattern():
    solutions = Solutions()
    solutions.add(solution("Observer", ("A", "Subject")))
    solutions.add(solution("Adapter", ("B", "Target")))
    solutions.add(solution("Observer", ("C", "Subject")))

    grouped = solutions.as_map()
    assert list(grouped) == ["Observer", "Adapter"]
    assert [s.mapping[0][0].id for s in grouped["Observer"]] == ["A", "C"]
    assert solutions[1].pattern_name == "Adapter"


def test_str_lists_bindings():
    found = solution("Composite", ("Leaf1", "Leaf"), ("Leaf2", "Leaf"), ("Box", "Component"))
    assert str(found).startswith("Composite: Leaf1 -> Leaf")

"""Unit tests for the part 1 / part 2 aggregator."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from page_order.domain.models import Constraint, PuzzleInput
from page_order.ordering.resolver import OrderingInvariantError
from page_order.solver import (
    PuzzleSolution,
    correct_update_indices,
    solve,
    solve_part1,
    solve_part2,
)


@pytest.mark.unit
def test_example_part_sums(example_puzzle: PuzzleInput) -> None:
    assert correct_update_indices(example_puzzle) == (0, 1, 2)
    assert solve_part1(example_puzzle) == 143
    assert solve_part2(example_puzzle) == 123


@pytest.mark.unit
def test_solve_classifies_each_update_once(example_puzzle: PuzzleInput) -> None:
    solution = solve(example_puzzle)

    assert solution == PuzzleSolution(
        part1=143,
        part2=123,
        correct_indices=(0, 1, 2),
        incorrect_indices=(3, 4, 5),
    )
    assert solution.to_dict() == {
        "part1": 143,
        "part2": 123,
        "correct_indices": [0, 1, 2],
        "incorrect_indices": [3, 4, 5],
    }


@pytest.mark.unit
def test_single_page_update_counts_toward_part1() -> None:
    puzzle = PuzzleInput(constraints=(Constraint(1, 2),), updates=((7,), (2, 1)))

    solution = solve(puzzle)
    assert solution.part1 == 7
    assert solution.part2 == 2
    assert solution.correct_indices == (0,)


@pytest.mark.unit
def test_cyclic_constraints_abort_part2() -> None:
    puzzle = PuzzleInput(
        constraints=(Constraint(1, 2), Constraint(2, 3), Constraint(3, 1)),
        updates=((1, 2, 3),),
    )

    assert solve_part1(puzzle) == 0
    with pytest.raises(OrderingInvariantError):
        solve_part2(puzzle)


@st.composite
def _totally_ordered_puzzles(draw: st.DrawFn) -> PuzzleInput:
    ranking = draw(
        st.lists(st.integers(min_value=10, max_value=99), min_size=2, max_size=15, unique=True)
    )
    constraints = tuple(
        Constraint(ranking[i], ranking[j])
        for i in range(len(ranking))
        for j in range(i + 1, len(ranking))
    )
    updates = draw(
        st.lists(
            st.lists(st.sampled_from(ranking), min_size=1, max_size=len(ranking), unique=True),
            min_size=1,
            max_size=8,
        )
    )
    return PuzzleInput(constraints=constraints, updates=tuple(tuple(u) for u in updates))


@pytest.mark.unit
@settings(max_examples=100, deadline=None)
@given(puzzle=_totally_ordered_puzzles())
def test_every_update_lands_in_exactly_one_part(puzzle: PuzzleInput) -> None:
    solution = solve(puzzle)

    correct = set(solution.correct_indices)
    incorrect = set(solution.incorrect_indices)
    assert not correct & incorrect
    assert correct | incorrect == set(range(len(puzzle.updates)))
    assert solution.part1 == solve_part1(puzzle)
    assert solution.part2 == solve_part2(puzzle)

    rank = {page: index for index, page in enumerate(_ranking(puzzle))}
    expected_part2 = 0
    for index in solution.incorrect_indices:
        reordered = sorted(puzzle.updates[index], key=rank.__getitem__)
        expected_part2 += reordered[len(reordered) // 2]
    assert solution.part2 == expected_part2


def _ranking(puzzle: PuzzleInput) -> list[int]:
    pages = {page for constraint in puzzle.constraints for page in constraint}
    predecessors = {page: 0 for page in pages}
    for constraint in puzzle.constraints:
        predecessors[constraint.after] += 1
    return sorted(pages, key=predecessors.__getitem__)

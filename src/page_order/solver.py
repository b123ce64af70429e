"""Aggregate checker and resolver results into the two puzzle answers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from page_order.domain.models import middle_of
from page_order.observability.logging import correlation_scope
from page_order.ordering.checker import is_correct, restrict_constraints
from page_order.ordering.resolver import find_middle_page

if TYPE_CHECKING:
    from page_order.domain.models import JSONValue, PageNumber, PuzzleInput, Update

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PuzzleSolution:
    """Both part sums plus the classification that produced them."""

    part1: int
    part2: int
    correct_indices: tuple[int, ...]
    incorrect_indices: tuple[int, ...]

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "part1": self.part1,
            "part2": self.part2,
            "correct_indices": list(self.correct_indices),
            "incorrect_indices": list(self.incorrect_indices),
        }


def solve_part1(puzzle: PuzzleInput) -> int:
    """Sum the existing middle page of every already-correct update."""
    return sum(
        middle_of(update)
        for update in puzzle.updates
        if is_correct(update, puzzle.constraints)
    )


def solve_part2(puzzle: PuzzleInput) -> int:
    """Sum the reordered middle page of every incorrect update."""
    total = 0
    for index, update in enumerate(puzzle.updates):
        if is_correct(update, puzzle.constraints):
            continue
        total += _resolve_middle(puzzle, index, update)
    return total


def correct_update_indices(puzzle: PuzzleInput) -> tuple[int, ...]:
    """Return 0-based indices of updates that already satisfy every constraint."""
    return tuple(
        index
        for index, update in enumerate(puzzle.updates)
        if is_correct(update, puzzle.constraints)
    )


def solve(puzzle: PuzzleInput) -> PuzzleSolution:
    """
    Classify every update once and compute both sums.

    Each update lands in exactly one of the two parts.
    """
    part1 = 0
    part2 = 0
    correct: list[int] = []
    incorrect: list[int] = []

    for index, update in enumerate(puzzle.updates):
        if is_correct(update, puzzle.constraints):
            correct.append(index)
            part1 += middle_of(update)
        else:
            incorrect.append(index)
            part2 += _resolve_middle(puzzle, index, update)

    solution = PuzzleSolution(
        part1=part1,
        part2=part2,
        correct_indices=tuple(correct),
        incorrect_indices=tuple(incorrect),
    )
    logger.info(
        "solved puzzle",
        extra={
            "part1": part1,
            "part2": part2,
            "correct_count": len(correct),
            "incorrect_count": len(incorrect),
        },
    )
    return solution


def _resolve_middle(puzzle: PuzzleInput, index: int, update: Update) -> PageNumber:
    pages = frozenset(update)
    with correlation_scope(part=2, update_index=index):
        middle = find_middle_page(pages, restrict_constraints(pages, puzzle.constraints))
        logger.debug("reordered update", extra={"middle_page": middle})
    return middle


__all__ = [
    "PuzzleSolution",
    "correct_update_indices",
    "solve",
    "solve_part1",
    "solve_part2",
]

"""
page-order — check and repair page orderings against pairwise rules.

Given ``L|R`` ordering rules and comma-separated page updates, sums the middle
page of already-correct updates (part 1) and of reordered incorrect updates
(part 2). Importing the package has no side effects: no config loading and
no logging setup.
"""

from page_order.domain.models import Constraint, PuzzleInput
from page_order.ordering import OrderingInvariantError, find_middle_page, is_correct
from page_order.parsing import PuzzleParseError, load_input, parse_input
from page_order.solver import PuzzleSolution, solve, solve_part1, solve_part2

__version__ = "0.1.0"

__all__ = [
    "Constraint",
    "OrderingInvariantError",
    "PuzzleInput",
    "PuzzleParseError",
    "PuzzleSolution",
    "__version__",
    "find_middle_page",
    "is_correct",
    "load_input",
    "parse_input",
    "solve",
    "solve_part1",
    "solve_part2",
]

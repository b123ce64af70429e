"""Ordering layer: constraint checks and partial topological resolution."""

from page_order.ordering.checker import is_correct, restrict_constraints, violated_constraints
from page_order.ordering.resolver import ConstraintGraph, OrderingInvariantError, find_middle_page

__all__ = [
    "ConstraintGraph",
    "OrderingInvariantError",
    "find_middle_page",
    "is_correct",
    "restrict_constraints",
    "violated_constraints",
]

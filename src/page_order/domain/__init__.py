"""Domain types shared across page-order modules."""

from page_order.domain.models import (
    Constraint,
    PageNumber,
    PuzzleInput,
    Update,
    middle_of,
)

__all__ = [
    "Constraint",
    "PageNumber",
    "PuzzleInput",
    "Update",
    "middle_of",
]

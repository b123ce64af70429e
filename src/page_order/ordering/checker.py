"""Check candidate updates against ordering constraints."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from page_order.domain.models import Constraint, PageNumber


def is_correct(update: Sequence[PageNumber], constraints: Iterable[Constraint]) -> bool:
    """
    Return whether ``update`` already satisfies every applicable constraint.

    A constraint applies only when both of its pages appear in the update;
    otherwise it is vacuously satisfied.
    """
    positions = _positions(update)
    return all(_satisfied(constraint, positions) for constraint in constraints)


def violated_constraints(
    update: Sequence[PageNumber], constraints: Iterable[Constraint]
) -> tuple[Constraint, ...]:
    """Return the applicable constraints that ``update`` breaks, in input order."""
    positions = _positions(update)
    return tuple(
        constraint for constraint in constraints if not _satisfied(constraint, positions)
    )


def restrict_constraints(
    pages: Iterable[PageNumber], constraints: Iterable[Constraint]
) -> tuple[Constraint, ...]:
    """Keep only constraints whose both endpoints lie in ``pages``."""
    page_set = frozenset(pages)
    return tuple(constraint for constraint in constraints if constraint.applies_to(page_set))


def _positions(update: Sequence[PageNumber]) -> dict[PageNumber, int]:
    return {page: index for index, page in enumerate(update)}


def _satisfied(constraint: Constraint, positions: dict[PageNumber, int]) -> bool:
    left = positions.get(constraint.before)
    right = positions.get(constraint.after)
    if left is None or right is None:
        return True
    return left <= right


__all__ = ["is_correct", "restrict_constraints", "violated_constraints"]

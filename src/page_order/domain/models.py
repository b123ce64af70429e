"""Dataclass domain models for page-ordering puzzles."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import NoReturn

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

PageNumber = int
Update = tuple[PageNumber, ...]


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _as_page(value: object, path: str) -> PageNumber:
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(path, f"expected integer, got {type(value).__name__}")
    if value < 0:
        _fail(path, "must be >= 0")
    return value


@dataclass(frozen=True, slots=True)
class Constraint:
    """Ordering rule: ``before`` may not appear after ``after`` in an update."""

    before: PageNumber
    after: PageNumber

    def __post_init__(self) -> None:
        _as_page(self.before, "Constraint.before")
        _as_page(self.after, "Constraint.after")

    def __iter__(self) -> Iterator[PageNumber]:
        yield self.before
        yield self.after

    def __str__(self) -> str:
        return f"{self.before}|{self.after}"

    def applies_to(self, pages: frozenset[PageNumber] | set[PageNumber]) -> bool:
        """Return whether both endpoints are present in ``pages``."""
        return self.before in pages and self.after in pages


def middle_of(update: Sequence[PageNumber]) -> PageNumber:
    """Return the element at index ``len(update) // 2``."""

    if not update:
        raise ValueError("an empty update has no middle page")
    return update[len(update) // 2]


@dataclass(frozen=True, slots=True)
class PuzzleInput:
    """Parsed puzzle: constraint rules plus candidate updates."""

    constraints: tuple[Constraint, ...]
    updates: tuple[Update, ...]

    def __post_init__(self) -> None:
        if not self.constraints:
            _fail("PuzzleInput.constraints", "must contain at least one constraint")
        if not self.updates:
            _fail("PuzzleInput.updates", "must contain at least one update")
        for index, update in enumerate(self.updates):
            if not update:
                _fail(f"PuzzleInput.updates[{index}]", "must not be empty")


__all__ = [
    "Constraint",
    "JSONScalar",
    "JSONValue",
    "PageNumber",
    "PuzzleInput",
    "Update",
    "middle_of",
]

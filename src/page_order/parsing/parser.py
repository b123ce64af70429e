"""Parse puzzle text into constraint rules and candidate updates.

The input carries two blocks separated by the first blank line:

- one ``L|R`` constraint per line;
- one comma-separated update per line.

Both blocks must be non-empty. Any malformed line aborts parsing with a
``PuzzleParseError`` that names the offending line.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Final

from page_order.constants import BLOCK_SEPARATOR, CONSTRAINT_SEPARATOR, UPDATE_SEPARATOR
from page_order.domain.models import Constraint, PuzzleInput

if TYPE_CHECKING:
    from page_order.domain.models import PageNumber, Update

logger = logging.getLogger(__name__)

_SECTION_LAYOUT: Final[str] = "layout"
_SECTION_CONSTRAINTS: Final[str] = "constraints"
_SECTION_UPDATES: Final[str] = "updates"
_SECTION_IO: Final[str] = "I/O"


class PuzzleParseError(ValueError):
    """Structured parse failure for puzzle input."""

    line: int
    section: str
    message: str
    hint: str
    path: Path | None

    def __init__(
        self,
        *,
        line: int,
        section: str,
        message: str,
        hint: str,
        path: Path | None = None,
    ) -> None:
        self.line = line
        self.section = section
        self.message = message
        self.hint = hint
        self.path = path
        location = f"line {line}" if path is None else f"{path}:{line}"
        super().__init__(f"{location} [{section}] {message} (hint: {hint})")

    def with_path(self, path: Path) -> PuzzleParseError:
        return PuzzleParseError(
            line=self.line,
            section=self.section,
            message=self.message,
            hint=self.hint,
            path=path,
        )


def parse_input(text: str) -> PuzzleInput:
    """Parse raw puzzle text into a ``PuzzleInput``."""

    normalized = text.replace("\r\n", "\n")
    constraints_block, separator, updates_block = normalized.partition(BLOCK_SEPARATOR)
    if not separator:
        raise PuzzleParseError(
            line=1,
            section=_SECTION_LAYOUT,
            message="no empty line found",
            hint="separate the constraint block from the update block with a blank line",
        )

    constraint_lines = constraints_block.split("\n") if constraints_block else []
    constraints = tuple(
        _parse_constraint(raw, line_number)
        for line_number, raw in enumerate(constraint_lines, start=1)
    )
    if not constraints:
        raise PuzzleParseError(
            line=1,
            section=_SECTION_CONSTRAINTS,
            message="no constraints found",
            hint="list at least one 'L|R' rule before the blank line",
        )

    first_update_line = len(constraint_lines) + 2
    update_text = updates_block.rstrip("\n")
    update_lines = update_text.split("\n") if update_text else []
    updates = tuple(
        _parse_update(raw, line_number)
        for line_number, raw in enumerate(update_lines, start=first_update_line)
    )
    if not updates:
        raise PuzzleParseError(
            line=first_update_line,
            section=_SECTION_UPDATES,
            message="no updates found",
            hint="list at least one comma-separated update after the blank line",
        )

    logger.debug(
        "parsed puzzle input",
        extra={"constraint_count": len(constraints), "update_count": len(updates)},
    )
    return PuzzleInput(constraints=constraints, updates=updates)


def read_input_text(path: str | Path) -> str:
    """Return the UTF-8 text of a puzzle file, as a ``PuzzleParseError`` on failure."""

    resolved = Path(path).expanduser()
    try:
        return resolved.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PuzzleParseError(
            line=1,
            section=_SECTION_IO,
            message=f"unable to read puzzle input: {exc}",
            hint="pass a readable UTF-8 text file",
            path=resolved,
        ) from exc


def load_input(path: str | Path) -> PuzzleInput:
    """Read a UTF-8 puzzle file and parse it."""

    resolved = Path(path).expanduser()
    text = read_input_text(resolved)
    try:
        return parse_input(text)
    except PuzzleParseError as exc:
        raise exc.with_path(resolved) from exc


def _parse_constraint(raw: str, line_number: int) -> Constraint:
    left, separator, right = raw.partition(CONSTRAINT_SEPARATOR)
    if not separator:
        raise PuzzleParseError(
            line=line_number,
            section=_SECTION_CONSTRAINTS,
            message=f"no {CONSTRAINT_SEPARATOR!r} found on a constraint line: {raw!r}",
            hint="write constraints as 'L|R'",
        )
    return Constraint(
        before=_parse_page(left, line_number, _SECTION_CONSTRAINTS),
        after=_parse_page(right, line_number, _SECTION_CONSTRAINTS),
    )


def _parse_update(raw: str, line_number: int) -> Update:
    return tuple(
        _parse_page(token, line_number, _SECTION_UPDATES)
        for token in raw.split(UPDATE_SEPARATOR)
    )


def _parse_page(token: str, line_number: int, section: str) -> PageNumber:
    stripped = token.strip()
    if not stripped.isdigit() or not stripped.isascii():
        raise PuzzleParseError(
            line=line_number,
            section=section,
            message=f"invalid page number {token!r}",
            hint="page numbers are unsigned base-10 integers",
        )
    return int(stripped)


__all__ = ["PuzzleParseError", "load_input", "parse_input", "read_input_text"]

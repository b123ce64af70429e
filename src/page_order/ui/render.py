"""Plain-text output rendering for the page-order CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class CLIRenderer:
    """Writes key/value lines, section headings and column-aligned tables to stdout."""

    def kv(self, key: str, value: object) -> None:
        print(f"{key}: {value}")

    def section(self, title: str) -> None:
        print()
        print(title)

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        """Print ``rows`` under ``headers`` with a dashed rule; trailing blanks are trimmed."""

        grid = [list(headers), *(list(row) for row in rows)]
        widths = [max(len(line[column]) for line in grid) for column in range(len(headers))]
        rule = ["-" * width for width in widths]
        for line in (grid[0], rule, *grid[1:]):
            print("  ".join(cell.ljust(width) for cell, width in zip(line, widths)).rstrip())


__all__ = ["CLIRenderer"]

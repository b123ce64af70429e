"""Partial topological ordering over the pages of a single update."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from itertools import islice

from page_order.domain.models import Constraint, PageNumber

logger = logging.getLogger(__name__)


class OrderingInvariantError(RuntimeError):
    """Raised when the ready set runs dry before the requested position.

    This means the constraints contain a cycle or do not order enough pages.
    Puzzle input is trusted, so callers treat this as fatal.
    """

    cycles: tuple[tuple[PageNumber, ...], ...]
    emitted: tuple[PageNumber, ...]
    target: int

    def __init__(
        self,
        *,
        emitted: Sequence[PageNumber],
        target: int,
        cycles: Iterable[Sequence[PageNumber]] = (),
    ) -> None:
        self.emitted = tuple(emitted)
        self.target = target
        self.cycles = tuple(tuple(path) for path in cycles)

        message = (
            f"ready set exhausted after {len(self.emitted)} page(s); "
            f"needed {target + 1} to reach position {target}"
        )
        if self.cycles:
            preview = ", ".join(
                " -> ".join(str(page) for page in path) for path in self.cycles[:3]
            )
            suffix = "..." if len(self.cycles) > 3 else ""
            message = f"{message}; cycle(s): {preview}{suffix}"
        super().__init__(message)


class ConstraintGraph:
    """Directed ``before -> after`` graph restricted to one page set.

    Built fresh for each resolution and discarded afterwards.
    """

    __slots__ = ("_pages", "_successors", "_indegree")

    def __init__(
        self,
        pages: Iterable[PageNumber],
        constraints: Iterable[Constraint | tuple[PageNumber, PageNumber]],
    ) -> None:
        self._pages: frozenset[PageNumber] = frozenset(pages)
        self._successors: dict[PageNumber, list[PageNumber]] = {}
        self._indegree: dict[PageNumber, int] = {}

        for before, after in constraints:
            self._assert_page_exists(before)
            self._assert_page_exists(after)
            self._successors.setdefault(before, []).append(after)
            self._indegree[after] = self._indegree.get(after, 0) + 1

    def __len__(self) -> int:
        return len(self._pages)

    @property
    def middle_index(self) -> int:
        return len(self._pages) // 2

    def iter_order(self) -> Iterator[PageNumber]:
        """
        Lazily yield pages in a topological order.

        Ready pages are kept on a stack, so the most recently released page is
        emitted next. Raises ``OrderingInvariantError`` if the stack empties
        before every page has been emitted.
        """
        indegree = dict(self._indegree)
        ready: list[PageNumber] = [page for page in sorted(self._pages) if page not in indegree]
        emitted: list[PageNumber] = []

        while len(emitted) < len(self._pages):
            if not ready:
                raise OrderingInvariantError(
                    emitted=emitted,
                    target=len(self._pages) - 1,
                    cycles=self.detect_cycles(),
                )
            page = ready.pop()
            emitted.append(page)
            yield page

            for successor in self._successors.get(page, ()):
                indegree[successor] -= 1
                if indegree[successor] == 0:
                    ready.append(successor)

    def middle_page(self) -> PageNumber:
        """Return the page at ``middle_index`` without ordering the rest."""
        if not self._pages:
            raise ValueError("an empty page set has no middle page")

        target = self.middle_index
        iterator = self.iter_order()
        try:
            return next(islice(iterator, target, None))
        except OrderingInvariantError as exc:
            raise OrderingInvariantError(
                emitted=exc.emitted, target=target, cycles=exc.cycles
            ) from None
        finally:
            iterator.close()

    def detect_cycles(self) -> tuple[tuple[PageNumber, ...], ...]:
        """
        Detect directed cycles.

        Returns closed paths, e.g. ``(13, 29, 53, 13)``.
        """
        state: dict[PageNumber, int] = {}
        stack: list[PageNumber] = []
        stack_index: dict[PageNumber, int] = {}
        cycles: dict[tuple[PageNumber, ...], None] = {}

        for start in sorted(self._pages):
            if state.get(start, 0) != 0:
                continue

            state[start] = 1
            stack.append(start)
            stack_index[start] = len(stack) - 1
            frames: list[tuple[PageNumber, Iterator[PageNumber]]] = [
                (start, iter(sorted(set(self._successors.get(start, ())))))
            ]

            while frames:
                page, child_iter = frames[-1]

                try:
                    child = next(child_iter)
                except StopIteration:
                    frames.pop()
                    state[page] = 2
                    stack.pop()
                    del stack_index[page]
                    continue

                child_state = state.get(child, 0)
                if child_state == 0:
                    state[child] = 1
                    stack_index[child] = len(stack)
                    stack.append(child)
                    frames.append((child, iter(sorted(set(self._successors.get(child, ()))))))
                    continue

                if child_state == 1:
                    cycle = tuple(stack[stack_index[child] :] + [child])
                    cycles[_canonicalize_cycle(cycle)] = None

        return tuple(sorted(cycles))

    def _assert_page_exists(self, page: PageNumber) -> None:
        if page not in self._pages:
            raise ValueError(f"constraint references page {page} outside the page set")


def find_middle_page(
    page_set: Iterable[PageNumber],
    constraints: Iterable[Constraint | tuple[PageNumber, PageNumber]],
) -> PageNumber:
    """
    Return the page at position ``len(page_set) // 2`` of a constraint-respecting order.

    ``constraints`` must already be restricted to pairs inside ``page_set``.
    """
    graph = ConstraintGraph(page_set, constraints)
    middle = graph.middle_page()
    logger.debug(
        "resolved middle page",
        extra={"page_count": len(graph), "middle_page": middle},
    )
    return middle


def _canonicalize_cycle(cycle: Sequence[PageNumber]) -> tuple[PageNumber, ...]:
    core = tuple(cycle[:-1])
    if len(core) == 1:
        return (core[0], core[0])

    best = core
    for offset in range(1, len(core)):
        rotated = core[offset:] + core[:offset]
        if rotated < best:
            best = rotated

    return best + (best[0],)


__all__ = ["ConstraintGraph", "OrderingInvariantError", "find_middle_page"]

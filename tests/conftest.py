"""Shared fixtures for page-order tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from page_order.parsing import parse_input

if TYPE_CHECKING:
    from page_order.domain.models import PuzzleInput

EXAMPLE_INPUT = """47|53
97|13
97|61
97|47
75|29
61|13
75|53
29|13
97|29
53|29
61|53
97|53
61|29
47|13
75|47
97|75
47|61
75|61
47|29
75|13
53|13

75,47,61,53,29
97,61,53,29,13
75,29,13
75,97,47,61,53
61,13,29
97,13,75,29,47
"""


@pytest.fixture
def example_text() -> str:
    return EXAMPLE_INPUT


@pytest.fixture
def example_puzzle() -> PuzzleInput:
    return parse_input(EXAMPLE_INPUT)

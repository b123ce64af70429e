"""Puzzle text parsing."""

from page_order.parsing.parser import PuzzleParseError, load_input, parse_input, read_input_text

__all__ = ["PuzzleParseError", "load_input", "parse_input", "read_input_text"]

"""Stable constants shared across page-order modules."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Input wire format.
BLOCK_SEPARATOR: Final[str] = "\n\n"
CONSTRAINT_SEPARATOR: Final[str] = "|"
UPDATE_SEPARATOR: Final[str] = ","

# Default runtime paths (relative to the config file unless overridden).
DEFAULT_INPUT_PATH: Final[PurePosixPath] = PurePosixPath("input/2024/day5.txt")
LOG_DIR: Final[PurePosixPath] = PurePosixPath("logs")

__all__ = [
    "BLOCK_SEPARATOR",
    "CONFIG_SCHEMA_VERSION",
    "CONSTRAINT_SEPARATOR",
    "DEFAULT_INPUT_PATH",
    "LOG_DIR",
    "UPDATE_SEPARATOR",
]

"""Process entrypoint for ``page_order``: maps outcomes onto exit codes."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

from page_order.config import ConfigLoadError, ConfigValidationError
from page_order.ordering.resolver import OrderingInvariantError
from page_order.parsing import PuzzleParseError
from page_order.ui.cli import run_cli

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    SUCCESS = 0
    INPUT_ERROR = 2
    INTERNAL_ERROR = 4


# Raised for bad puzzle files or config; reported as one line on stderr.
_INPUT_ERRORS = (
    PuzzleParseError,
    ConfigLoadError,
    ConfigValidationError,
    FileNotFoundError,
    IsADirectoryError,
    PermissionError,
)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit code; never raises except on interrupt."""

    try:
        return _exit_code_for(run_cli(argv))
    except SystemExit as exc:
        return _exit_code_for(exc.code)
    except OrderingInvariantError:
        traceback.print_exc()
        return ExitCode.INTERNAL_ERROR
    except _INPUT_ERRORS as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ExitCode.INPUT_ERROR
    except Exception:
        traceback.print_exc()
        return ExitCode.INTERNAL_ERROR


def console_main() -> None:
    raise SystemExit(cli_entrypoint())


def _exit_code_for(raw: object) -> int:
    if raw is None:
        return ExitCode.SUCCESS
    try:
        return ExitCode(raw)
    except ValueError:
        if isinstance(raw, str) and raw.strip():
            print(raw.strip(), file=sys.stderr)
        return ExitCode.INTERNAL_ERROR


__all__ = ["ExitCode", "cli_entrypoint", "console_main"]

"""Command-line interface router for page-order."""

from __future__ import annotations

import argparse
import json
import logging
import statistics
import sys
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final
from uuid import uuid4

import yaml

from page_order.config import (
    LOG_LEVELS,
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from page_order.observability import correlation_scope, setup_logging, shutdown_logging
from page_order.ordering import is_correct, violated_constraints
from page_order.parsing import PuzzleParseError, load_input, parse_input, read_input_text
from page_order.solver import solve, solve_part1, solve_part2
from page_order.ui.render import CLIRenderer

if TYPE_CHECKING:
    from page_order.domain.models import PuzzleInput

logger = logging.getLogger(__name__)

OUTPUT_FORMATS: Final[tuple[str, ...]] = ("text", "json", "yaml")

Handler = Callable[[argparse.Namespace, Mapping[str, Any]], int]


@dataclass(eq=False, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 2

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="page-order",
        description=(
            "page-order — validate and repair page orderings against '|' rules.\n\n"
            "Common workflows:\n"
            "  page-order solve input.txt        Print both part sums\n"
            "  page-order check input.txt        Show which updates break which rules\n"
            "  page-order bench input.txt        Time parse + both parts\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to page_order TOML config (default: ./page_order.toml if present).",
    )
    common.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Override observability.log_level.",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # solve ---------------------------------------------------------------
    solve_parser = subparsers.add_parser(
        "solve",
        parents=[common],
        help="Print the part 1 and part 2 sums",
        description=(
            "Sum the middle pages of correct updates (part 1) and of reordered\n"
            "incorrect updates (part 2).\n\n"
            "Examples:\n"
            "  page-order solve input.txt\n"
            "  page-order solve input.txt --part 2\n"
            "  page-order solve input.txt --format yaml\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    solve_parser.add_argument("input_path", nargs="?", default=None, help="Puzzle input file")
    solve_parser.add_argument("--part", type=int, choices=(1, 2), default=None)
    solve_parser.add_argument("--format", choices=OUTPUT_FORMATS, default="text")
    solve_parser.set_defaults(handler=_cmd_solve)

    # check ---------------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Report each update as correct or incorrect",
    )
    check_parser.add_argument("input_path", nargs="?", default=None, help="Puzzle input file")
    check_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    check_parser.set_defaults(handler=_cmd_check)

    # bench ---------------------------------------------------------------
    bench_parser = subparsers.add_parser(
        "bench",
        parents=[common],
        help="Time parse + part 1 + part 2 over repeated runs",
    )
    bench_parser.add_argument("input_path", nargs="?", default=None, help="Puzzle input file")
    bench_parser.add_argument("--iterations", type=int, default=None)
    bench_parser.add_argument("--warmup", type=int, default=None)
    bench_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    bench_parser.set_defaults(handler=_cmd_bench)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration",
    )
    config_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler: Handler | None = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        config = _load_effective_config(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    handle = setup_logging(config["observability"], run_id=_new_run_id())
    try:
        with correlation_scope(command=namespace.command):
            result = handler(namespace, config)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging(handle)
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_solve(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    puzzle = _load_puzzle(config)
    part = getattr(args, "part", None)
    output_format = getattr(args, "format", "text")

    payload: dict[str, object]
    if part == 1:
        payload = {"part1": solve_part1(puzzle)}
    elif part == 2:
        payload = {"part2": solve_part2(puzzle)}
    else:
        payload = dict(solve(puzzle).to_dict())
        if not _flag(args, "verbose"):
            payload = {"part1": payload["part1"], "part2": payload["part2"]}

    if output_format == "json":
        _emit_json(payload)
    elif output_format == "yaml":
        _emit_yaml(payload)
    elif part is not None:
        print(payload[f"part{part}"])
    else:
        renderer = CLIRenderer()
        for key, value in payload.items():
            renderer.kv(key, value)
    return 0


def _cmd_check(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    puzzle = _load_puzzle(config)

    entries: list[dict[str, object]] = []
    for index, update in enumerate(puzzle.updates):
        correct = is_correct(update, puzzle.constraints)
        broken = () if correct else violated_constraints(update, puzzle.constraints)
        entries.append(
            {
                "index": index,
                "update": list(update),
                "correct": correct,
                "violations": [str(item) for item in broken],
            }
        )

    if _flag(args, "json"):
        _emit_json({"command": "check", "updates": entries})
        return 0

    renderer = CLIRenderer()
    rows = [
        [
            str(entry["index"]),
            "correct" if entry["correct"] else "incorrect",
            ",".join(str(page) for page in _as_list(entry["update"])),
            " ".join(str(item) for item in _as_list(entry["violations"])),
        ]
        for entry in entries
    ]
    renderer.table(("index", "status", "update", "violations"), rows)
    correct_count = sum(1 for entry in entries if entry["correct"])
    renderer.section(f"{correct_count} of {len(entries)} update(s) already correct")
    return 0


def _cmd_bench(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    input_path = Path(config["input"]["path"])
    try:
        text = read_input_text(input_path)
    except PuzzleParseError as exc:
        raise CLIError(str(exc)) from exc

    bench = config["bench"]
    iterations = _override_int(getattr(args, "iterations", None), bench["iterations"], 1)
    warmup = _override_int(getattr(args, "warmup", None), bench["warmup"], 0)

    def run_once() -> tuple[int, int]:
        puzzle = parse_input(text)
        return solve_part1(puzzle), solve_part2(puzzle)

    try:
        for _ in range(warmup):
            run_once()
        samples_ms: list[float] = []
        answers = (0, 0)
        for _ in range(iterations):
            started = time.perf_counter()
            answers = run_once()
            samples_ms.append((time.perf_counter() - started) * 1000.0)
    except PuzzleParseError as exc:
        raise CLIError(str(exc.with_path(input_path))) from exc

    payload: dict[str, object] = {
        "command": "bench",
        "iterations": iterations,
        "warmup": warmup,
        "part1": answers[0],
        "part2": answers[1],
        "min_ms": round(min(samples_ms), 6),
        "mean_ms": round(statistics.fmean(samples_ms), 6),
        "median_ms": round(statistics.median(samples_ms), 6),
        "max_ms": round(max(samples_ms), 6),
    }
    logger.info("benchmark finished", extra={"iterations": iterations})

    if _flag(args, "json"):
        _emit_json(payload)
        return 0

    renderer = CLIRenderer()
    renderer.kv("iterations", iterations)
    renderer.kv("answers", f"{answers[0]} / {answers[1]}")
    renderer.kv(
        "time (ms)",
        f"min {payload['min_ms']:.3f}  mean {payload['mean_ms']:.3f}  "
        f"median {payload['median_ms']:.3f}  max {payload['max_ms']:.3f}",
    )
    return 0


def _cmd_config(args: argparse.Namespace, config: Mapping[str, Any]) -> int:
    if _flag(args, "json"):
        print(dump_effective_config(config))
    else:
        _emit_yaml(config)
    return 0


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _emit_yaml(payload: Mapping[str, object]) -> None:
    """Emit a YAML document to stdout with deterministic key order."""

    sys.stdout.write(yaml.safe_dump(dict(payload), sort_keys=True, default_flow_style=False))


# ---------------------------------------------------------------------------
# Helpers: config, input
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {}
    input_path = getattr(args, "input_path", None)
    if isinstance(input_path, str) and input_path.strip():
        overrides["input.path"] = str(Path(input_path).expanduser().resolve())
    log_level = getattr(args, "log_level", None)
    if isinstance(log_level, str):
        overrides["observability.log_level"] = log_level

    try:
        return load_config(getattr(args, "config_path", None), cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc)) from exc


def _load_puzzle(config: Mapping[str, Any]) -> PuzzleInput:
    try:
        return load_input(config["input"]["path"])
    except PuzzleParseError as exc:
        raise CLIError(str(exc)) from exc


def _new_run_id() -> str:
    stamp = time.strftime("%Y%m%dT%H%M%SZ", time.gmtime())
    return f"run-{stamp}-{uuid4().hex[:8]}"


def _override_int(raw: object, default: int, minimum: int) -> int:
    if raw is None:
        return default
    if not isinstance(raw, int) or raw < minimum:
        raise CLIError(f"value must be an integer >= {minimum}, got {raw!r}")
    return raw


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


def _as_list(value: object) -> list[object]:
    return list(value) if isinstance(value, list) else []


__all__ = ["CLIError", "build_parser", "run_cli"]

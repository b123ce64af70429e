"""
page-order — CLI smoke contracts

Purpose
- Exercise `python -m page_order` end to end: exit codes, stdout payloads, and per-run logs.
- Cover in-process routing through `cli_entrypoint` for error classification.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
import yaml

from page_order.main import ExitCode, cli_entrypoint
from page_order.ui.cli import build_parser, run_cli

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"

CYCLIC_INPUT = "1|2\n2|3\n3|1\n\n3,2,1\n"


def _run_cli(workdir: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("PAGE_ORDER_")}
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}:{existing_pythonpath}"
    )
    return subprocess.run(
        [sys.executable, "-m", "page_order", *args],
        cwd=workdir,
        text=True,
        capture_output=True,
        check=False,
        env=env,
    )


def _write(path: Path, contents: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")


@pytest.fixture
def workdir(tmp_path: Path, example_text: str, monkeypatch: pytest.MonkeyPatch) -> Path:
    _write(tmp_path / "day5.txt", example_text)
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("PAGE_ORDER_"):
            monkeypatch.delenv(key)
    return tmp_path


@pytest.mark.integration
def test_module_solve_prints_both_parts(workdir: Path) -> None:
    completed = _run_cli(workdir, "solve", "day5.txt")

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout.splitlines() == ["part1: 143", "part2: 123"]

    log_files = list((workdir / "logs").glob("*/page_order.jsonl"))
    assert len(log_files) == 1


@pytest.mark.integration
def test_module_solve_reads_input_path_from_config(workdir: Path) -> None:
    _write(workdir / "conf" / "page_order.toml", '[input]\npath = "../day5.txt"\n')

    completed = _run_cli(workdir, "solve", "--config", "conf/page_order.toml", "--part", "2")

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout.strip() == "123"


@pytest.mark.integration
def test_module_bad_input_exits_with_input_error(workdir: Path) -> None:
    _write(workdir / "bad.txt", "47|53\n97-13\n\n75,47\n")

    completed = _run_cli(workdir, "solve", "bad.txt")

    assert completed.returncode == int(ExitCode.INPUT_ERROR)
    assert completed.stdout == ""
    assert completed.stderr.startswith("error: ")
    assert "bad.txt:2 [constraints]" in completed.stderr


@pytest.mark.integration
def test_module_cyclic_constraints_exit_with_internal_error(workdir: Path) -> None:
    _write(workdir / "cycle.txt", CYCLIC_INPUT)

    completed = _run_cli(workdir, "solve", "cycle.txt")

    assert completed.returncode == int(ExitCode.INTERNAL_ERROR)
    assert "OrderingInvariantError" in completed.stderr
    assert "1 -> 2 -> 3 -> 1" in completed.stderr


@pytest.mark.integration
@pytest.mark.parametrize(
    ("args", "expected"),
    [
        (("--part", "1"), "143"),
        (("--part", "2"), "123"),
    ],
)
def test_solve_single_part_prints_bare_integer(
    workdir: Path, capsys: pytest.CaptureFixture[str], args: tuple[str, ...], expected: str
) -> None:
    assert run_cli(["solve", "day5.txt", *args]) == 0
    assert capsys.readouterr().out.strip() == expected


@pytest.mark.integration
def test_solve_json_and_yaml_formats(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["solve", "day5.txt", "--format", "json"]) == 0
    assert capsys.readouterr().out.strip() == '{"part1":143,"part2":123}'

    assert run_cli(["solve", "day5.txt", "--format", "yaml", "--verbose"]) == 0
    document = yaml.safe_load(capsys.readouterr().out)
    assert document == {
        "part1": 143,
        "part2": 123,
        "correct_indices": [0, 1, 2],
        "incorrect_indices": [3, 4, 5],
    }


@pytest.mark.integration
def test_check_json_lists_violations(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["check", "day5.txt", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["command"] == "check"
    assert [entry["correct"] for entry in payload["updates"]] == [
        True,
        True,
        True,
        False,
        False,
        False,
    ]
    assert payload["updates"][3]["violations"] == ["97|75"]
    assert payload["updates"][4]["violations"] == ["29|13"]
    assert payload["updates"][0]["violations"] == []


@pytest.mark.integration
def test_check_text_renders_table_and_summary(
    workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert run_cli(["check", "day5.txt"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["index", "status", "update", "violations"]
    assert lines[2].split() == ["0", "correct", "75,47,61,53,29"]
    assert lines[6].split() == ["4", "incorrect", "61,13,29", "29|13"]
    assert lines[-1] == "3 of 6 update(s) already correct"


@pytest.mark.integration
def test_bench_json_reports_answers_and_timings(
    workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = run_cli(["bench", "day5.txt", "--iterations", "3", "--warmup", "0", "--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["command"] == "bench"
    assert (payload["iterations"], payload["warmup"]) == (3, 0)
    assert (payload["part1"], payload["part2"]) == (143, 123)
    assert 0 <= payload["min_ms"] <= payload["median_ms"] <= payload["max_ms"]
    assert payload["min_ms"] <= payload["mean_ms"] <= payload["max_ms"]


@pytest.mark.integration
def test_bench_rejects_non_positive_iterations(
    workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert run_cli(["bench", "day5.txt", "--iterations", "0"]) == 2
    assert "must be an integer >= 1" in capsys.readouterr().err


@pytest.mark.integration
def test_config_json_reflects_overrides(
    workdir: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("PAGE_ORDER_BENCH_WARMUP", "2")

    assert run_cli(["config", "--json", "--log-level", "DEBUG"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["bench"]["warmup"] == 2
    assert payload["observability"]["log_level"] == "DEBUG"


@pytest.mark.integration
def test_config_text_is_yaml(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["config"]) == 0

    document = yaml.safe_load(capsys.readouterr().out)
    assert document["bench"] == {"iterations": 100, "warmup": 5}
    assert document["meta"]["schema_version"] == 1


@pytest.mark.integration
def test_invalid_config_file_is_an_input_error(
    workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(workdir / "page_order.toml", "[bench]\niterations = 0\n")

    assert cli_entrypoint(["solve", "day5.txt"]) == int(ExitCode.INPUT_ERROR)
    assert "bench.iterations: must be >= 1" in capsys.readouterr().err


@pytest.mark.integration
def test_entrypoint_routes_missing_input_and_cycles(
    workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli_entrypoint(["solve", "missing.txt"]) == int(ExitCode.INPUT_ERROR)
    assert "unable to read puzzle input" in capsys.readouterr().err

    _write(workdir / "cycle.txt", CYCLIC_INPUT)
    assert cli_entrypoint(["solve", "cycle.txt", "--part", "2"]) == int(ExitCode.INTERNAL_ERROR)
    assert "ready set exhausted" in capsys.readouterr().err


@pytest.mark.integration
@pytest.mark.parametrize(
    "args",
    [
        ("solve", "undecodable.txt"),
        ("bench", "undecodable.txt", "--iterations", "1", "--warmup", "0"),
    ],
)
def test_undecodable_input_is_an_input_error(
    workdir: Path, capsys: pytest.CaptureFixture[str], args: tuple[str, ...]
) -> None:
    (workdir / "undecodable.txt").write_bytes(b"1|2\n\n\xff\xfe,1\n")

    assert cli_entrypoint(list(args)) == int(ExitCode.INPUT_ERROR)
    assert "unable to read puzzle input" in capsys.readouterr().err


@pytest.mark.integration
def test_entrypoint_normalizes_argparse_exit(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint(["solve", "--format", "xml"]) == 2
    assert "invalid choice" in capsys.readouterr().err


@pytest.mark.integration
def test_parser_exposes_all_subcommands() -> None:
    parser = build_parser()
    for command in ("solve", "check", "bench", "config"):
        namespace = parser.parse_args([command])
        assert namespace.command == command
        assert callable(namespace.handler)

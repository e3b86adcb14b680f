# tests/test_cli.py
"""
Tests for the translines command-line interface (CLI).

Scope
-----
1.  **Command Registration**: `translate`, `replay` and `--help` work.
2.  **Startup Errors**: a missing credential exits 1 before reading input.
3.  **Pipeline Integration**: a stub translator replaces the remote client,
    so the real pipeline runs end to end without network access.
4.  **Reports & Replay**: `--report` writes JSON that `replay` re-emits.

We use `typer.testing.CliRunner` to invoke the app in-process.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from translines.cli import app
from translines.core.result import Result, err, ok


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    """Create a fresh CliRunner for each test."""
    return CliRunner()


def _stub_translator(text: str) -> Result[str, str]:
    if text == "坏":
        return err("HTTP 500: Internal Server Error")
    return ok(f"{text}_T")


def _positions(output: str, needles: list[str]) -> list[int]:
    return [output.index(n) for n in needles]


def test_cli_help_shows_usage(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, f"Help failed: {result.output}"
    assert "translate" in result.output
    assert "replay" in result.output


def test_missing_credential_is_fatal(runner: CliRunner, monkeypatch: Any) -> None:
    """No GOOGLE_API_KEY: exit 1 with a descriptive message."""
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

    with patch("translines.cli.run_pipeline") as mock_run:
        result = runner.invoke(app, ["translate"], input="你好\n")

    assert result.exit_code == 1, f"Expected fatal exit. Output:\n{result.output}"
    assert "GOOGLE_API_KEY" in result.output
    mock_run.assert_not_called()


def test_translate_stdin_in_order(runner: CliRunner) -> None:
    with patch("translines.cli.build_translator", return_value=_stub_translator):
        result = runner.invoke(
            app,
            ["translate", "--workers", "3", "--rate", "1000"],
            input="你好\n再見\n謝謝\n",
        )

    assert result.exit_code == 0, f"CLI Failed with Output:\n{result.output}"
    positions = _positions(result.output, ["你好_T", "再見_T", "謝謝_T"])
    assert positions == sorted(positions)


def test_translate_file_with_failure_and_report(runner: CliRunner, tmp_path: Path) -> None:
    src = tmp_path / "lines.txt"
    src.write_text("一\n坏\n三\n", encoding="utf-8")
    report = tmp_path / "out" / "run.json"

    with patch("translines.cli.build_translator", return_value=_stub_translator):
        result = runner.invoke(
            app,
            [
                "translate",
                "--input",
                str(src),
                "--rate",
                "1000",
                "--error-marker",
                "[失敗]",
                "--report",
                str(report),
            ],
        )

    # Per-line failures never change the exit code.
    assert result.exit_code == 0, f"CLI Failed with Output:\n{result.output}"
    positions = _positions(result.output, ["一_T", "[失敗]", "三_T"])
    assert positions == sorted(positions)
    assert "1 of 3 lines failed" in result.output

    payload = json.loads(report.read_text(encoding="utf-8"))
    assert payload["meta"]["total"] == 3
    assert payload["meta"]["failed"] == 1
    assert [o["position"] for o in payload["outcomes"]] == [0, 1, 2]
    assert payload["outcomes"][1]["error"].startswith("HTTP 500")
    assert payload["outcomes"][1]["text"] == ""


def test_options_are_passed_to_pipeline_config(runner: CliRunner) -> None:
    fake_result = {
        "outcomes": [],
        "texts": [],
        "failures": [],
        "total": 0,
        "truncated": False,
        "elapsed_seconds": 0.0,
        "max_concurrent": 0,
    }
    with (
        patch("translines.cli.build_translator", return_value=_stub_translator),
        patch("translines.cli.run_pipeline", return_value=fake_result) as mock_run,
    ):
        result = runner.invoke(
            app,
            ["translate", "-w", "7", "-r", "12.5", "--burst", "2", "--max-items", "4"],
            input="",
        )

    assert result.exit_code == 0, result.output
    config = mock_run.call_args.kwargs["config"]
    assert (config.workers, config.rate_limit, config.burst, config.max_items) == (7, 12.5, 2, 4)


def test_pipeline_crash_exits_one(runner: CliRunner) -> None:
    with (
        patch("translines.cli.build_translator", return_value=_stub_translator),
        patch("translines.cli.run_pipeline", side_effect=RuntimeError("worker exploded")),
    ):
        result = runner.invoke(app, ["translate"], input="你好\n")

    assert result.exit_code == 1
    assert "Pipeline Error" in result.output
    assert "worker exploded" in result.output


def test_replay_reemits_report(runner: CliRunner, tmp_path: Path) -> None:
    report = tmp_path / "run.json"
    report.write_text(
        json.dumps(
            {
                "meta": {},
                "outcomes": [
                    {"position": 1, "text": "", "error": "timeout"},
                    {"position": 0, "text": "你好_T", "error": None},
                    {"position": 2, "text": "謝謝_T", "error": None},
                ],
            }
        ),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["replay", str(report), "--error-marker", "<ERR>"])

    assert result.exit_code == 0, result.output
    positions = _positions(result.output, ["你好_T", "<ERR>", "謝謝_T"])
    assert positions == sorted(positions)


def test_replay_rejects_bad_json(runner: CliRunner, tmp_path: Path) -> None:
    report = tmp_path / "broken.json"
    report.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["replay", str(report)])

    assert result.exit_code == 1
    assert "Replay Error" in result.output


def test_ctrl_c_exits_130(runner: CliRunner) -> None:
    with (
        patch("translines.cli.build_translator", return_value=_stub_translator),
        patch("translines.cli.run_pipeline", side_effect=KeyboardInterrupt),
    ):
        result = runner.invoke(app, ["translate"], input="你好\n")

    assert result.exit_code == 130, result.output
    assert "Interrupted" in result.output


@pytest.mark.parametrize(
    "positions",
    [
        [0, 0, 1],  # duplicate
        [0, 2],  # gap
        [1, 2],  # missing first line
    ],
)
def test_replay_rejects_incomplete_position_sets(
    runner: CliRunner, tmp_path: Path, positions: list[int]
) -> None:
    report = tmp_path / "run.json"
    report.write_text(
        json.dumps(
            {
                "meta": {},
                "outcomes": [{"position": p, "text": f"t{p}", "error": None} for p in positions],
            }
        ),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["replay", str(report)])

    assert result.exit_code == 1
    assert "Replay Error" in result.output

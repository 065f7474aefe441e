"""
Command-line entry points.
"""

import json

import pytest

from trainplan import cli

TARGET_ARGS = ["--mileage", "25", "--long-run", "6", "--weeks", "19", "--race", "Marathon", "--experience", "beginner"]


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda stream=None: None)


def test_targets_json(capsys):
    assert cli.main(["targets", *TARGET_ARGS, "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["targets"]["long_run_max"] == 20
    assert len(data["weeks"]) == 19


def test_targets_table(capsys):
    assert cli.main(["targets", *TARGET_ARGS]) == 0
    out = capsys.readouterr().out
    assert "long run max: 20" in out
    assert out.count("\n") > 19


def test_invalid_inputs_exit_code(capsys):
    args = ["targets", "--mileage", "25", "--long-run", "6", "--weeks", "40",
            "--race", "Marathon", "--experience", "beginner"]
    assert cli.main(args) == 2
    assert "error:" in capsys.readouterr().err


def test_repair(tmp_path, capsys):
    lines = []
    for week in range(1, 11):
        lines += [
            f"## Week {week}",
            "- Mon: Rest",
            "- Tue: Easy 4 miles",
            "- Thu: Tempo 5 miles",
            "- Sat: Long Run 7 miles",
            "- Sun: Easy 4 miles",
        ]
    plan = tmp_path / "plan.md"
    plan.write_text("\n".join(lines), encoding="utf-8")

    args = ["repair", str(plan), "--mileage", "20", "--long-run", "5", "--weeks", "10",
            "--race", "5K", "--experience", "intermediate", "--hard-days", "Tue", "Thu",
            "--recent-time", "25:00"]
    assert cli.main(args) == 0
    out = capsys.readouterr().out
    assert out.startswith("Repaired plan: 10 weeks")
    assert "repairs applied" in out


def test_repair_empty_plan(tmp_path, capsys):
    plan = tmp_path / "empty.md"
    plan.write_text("", encoding="utf-8")
    args = ["repair", str(plan), "--mileage", "20", "--long-run", "5", "--weeks", "10",
            "--race", "5K", "--experience", "intermediate"]
    assert cli.main(args) == 2
    assert "error:" in capsys.readouterr().err


def test_repair_missing_file(tmp_path):
    args = ["repair", str(tmp_path / "nope.md"), "--mileage", "20", "--long-run", "5", "--weeks", "10",
            "--race", "5K", "--experience", "intermediate"]
    assert cli.main(args) == 1

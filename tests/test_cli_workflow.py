"""Tests for the workflow CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from taskrep import __version__
from taskrep.cli import workflow as workflow_cli
from taskrep.cli.common import format_status
from taskrep.cli.main import app
from tests.harness import CHAIN, transition_records, write_workflow_file

runner = CliRunner()


@pytest.fixture
def chain_file(tmp_path: Path) -> Path:
    return write_workflow_file(tmp_path / "workflow.json", transition_records(*CHAIN))


@pytest.fixture
def cycle_file(tmp_path: Path) -> Path:
    pairs = [*CHAIN, ("Review", "In Progress")]
    return write_workflow_file(tmp_path / "cycle.json", transition_records(*pairs))


@pytest.fixture
def branch_file(tmp_path: Path) -> Path:
    data = {
        "transitions": [
            {"from_status": "New", "to_status": "A"},
            {"from_status": "New", "to_status": "B"},
            {"from_status": "A", "to_status": "Done"},
            {"from_status": "B", "to_status": "Done"},
        ]
    }
    return write_workflow_file(tmp_path / "branch.json", data)


def _invoke(*args: str | Path):
    return runner.invoke(app, ["workflow", *[str(a) for a in args]])


class TestSequenceCommand:
    """Tests for `taskrep workflow sequence`."""

    def test_json_output(self, chain_file: Path) -> None:
        result = _invoke("sequence", "--file", chain_file)

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "sequence": ["New", "In Progress", "Review", "Completed"]
        }

    def test_table_output(self, chain_file: Path) -> None:
        result = _invoke("sequence", "-f", chain_file, "--table")

        assert result.exit_code == 0
        assert "Status Sequence" in result.stdout

    def test_ignore_case(self, tmp_path: Path) -> None:
        path = write_workflow_file(
            tmp_path / "mixed.json",
            [
                {"from_status": "New", "to_status": "Doing"},
                {"from_status": "doing", "to_status": "Done"},
            ],
        )

        strict = json.loads(_invoke("sequence", "-f", path).stdout)
        folded = json.loads(_invoke("sequence", "-f", path, "--ignore-case").stdout)

        assert strict["sequence"] == ["New", "Doing"]
        assert folded["sequence"] == ["New", "Doing", "Done"]

    def test_uses_configured_file(
        self, chain_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(workflow_cli.settings, "transitions_file", chain_file)

        result = _invoke("sequence")

        assert result.exit_code == 0
        assert json.loads(result.stdout)["sequence"][0] == "New"


class TestNextAndCheckCommands:
    """Tests for `next` and `check`."""

    def test_next(self, chain_file: Path) -> None:
        result = _invoke("next", "In Progress", "-f", chain_file)

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "status": "In Progress",
            "allowed": ["Review"],
            "terminal": False,
        }

    def test_next_terminal(self, chain_file: Path) -> None:
        result = _invoke("next", "Completed", "-f", chain_file)
        assert json.loads(result.stdout)["terminal"] is True

    def test_check_allowed(self, chain_file: Path) -> None:
        result = _invoke("check", "Review", "Completed", "-f", chain_file)

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "from_status": "Review",
            "to_status": "Completed",
            "allowed": True,
            "moving_backwards": False,
        }

    def test_check_backwards(self, cycle_file: Path) -> None:
        result = _invoke("check", "Review", "In Progress", "-f", cycle_file)

        body = json.loads(result.stdout)
        assert body["allowed"] is True
        assert body["moving_backwards"] is True


class TestOrderCommand:
    """Tests for `taskrep workflow order`."""

    def test_order(self, branch_file: Path) -> None:
        result = _invoke("order", "-f", branch_file)

        assert result.exit_code == 0
        assert json.loads(result.stdout)["ordered_statuses"] == ["New", "A", "B", "Done"]

    def test_order_reports_cycle_members(self, cycle_file: Path) -> None:
        body = json.loads(_invoke("order", "-f", cycle_file).stdout)

        assert body["ordered_statuses"] == ["New"]
        assert body["unordered_statuses"] == ["In Progress", "Review", "Completed"]
        assert body["warnings"]

    def test_strict_fails_on_cycle(self, cycle_file: Path) -> None:
        result = _invoke("order", "-f", cycle_file, "--strict")

        assert result.exit_code == 1
        body = json.loads(result.stdout)
        assert "cycle" in body["error"]
        assert body["cycles"] == [["In Progress", "Review", "In Progress"]]

    def test_strict_fails_on_branch(self, branch_file: Path) -> None:
        result = _invoke("order", "-f", branch_file, "--strict")

        assert result.exit_code == 1
        assert json.loads(result.stdout)["branch_points"] == {"New": ["A", "B"]}

    def test_strict_allow_branches(self, branch_file: Path) -> None:
        result = _invoke("order", "-f", branch_file, "--strict", "--allow-branches")

        assert result.exit_code == 0
        assert json.loads(result.stdout)["ordered_statuses"] == ["New", "A", "B", "Done"]


class TestLintCommand:
    """Tests for `taskrep workflow lint`."""

    def test_linear_chain_passes(self, chain_file: Path) -> None:
        result = _invoke("lint", "-f", chain_file)

        assert result.exit_code == 0
        body = json.loads(result.stdout)
        assert body["is_linear"] is True
        assert body["terminal_statuses"] == ["Completed"]

    def test_branching_workflow_fails(self, branch_file: Path) -> None:
        result = _invoke("lint", "-f", branch_file)

        assert result.exit_code == 1
        body = json.loads(result.stdout)
        assert body["is_linear"] is False
        assert body["unreachable_statuses"] == ["B"]

    def test_table_output(self, cycle_file: Path) -> None:
        result = _invoke("lint", "-f", cycle_file, "-t")

        assert result.exit_code == 1
        assert "Workflow Lint" in result.stdout


class TestFileErrors:
    """Tests for unreadable or missing workflow files."""

    def test_no_file_configured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(workflow_cli.settings, "transitions_file", None)

        result = _invoke("sequence")

        assert result.exit_code == 1
        assert "No workflow file" in result.stdout

    def test_missing_file(self, tmp_path: Path) -> None:
        result = _invoke("sequence", "-f", tmp_path / "missing.json")

        assert result.exit_code == 1
        assert "Cannot read" in result.stdout

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")

        result = _invoke("sequence", "-f", path)

        assert result.exit_code == 1
        assert "Invalid JSON" in result.stdout


class TestMainApp:
    """Tests for the top-level app."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_help_lists_workflow(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "workflow" in result.stdout


class TestFormatStatus:
    """Tests for format_status helper."""

    def test_named_status(self) -> None:
        result = format_status("In Progress")
        assert "In Progress" in result
        assert "#80ffea" in result  # NEON_CYAN

    def test_blank_status(self) -> None:
        assert "(blank)" in format_status("")

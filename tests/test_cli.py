"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from todotxt.cli import main

DOCUMENT = """\
x 2024-03-01 2024-02-20 Completed task +Home due:2024-03-01
(A) 2024-03-01 Call Mom +Family @phone due:2024-03-10
(B) Write docs +Work @computer due:2024-03-15 rec:1w
2024-03-02 Pay taxes +Money @phone due:2024-03-05
"""


@pytest.fixture
def todo_file(tmp_path):
    path = tmp_path / "todo.txt"
    path.write_text(DOCUMENT, encoding="utf-8")
    return str(path)


@pytest.fixture
def runner():
    return CliRunner()


class TestListCommand:
    """Test the list command."""

    def test_list_table(self, runner, todo_file, monkeypatch):
        """Test the default listing renders a table."""
        monkeypatch.setenv("COLUMNS", "200")
        result = runner.invoke(main, ["--today", "2024-03-10", "list", todo_file])
        assert result.exit_code == 0
        assert "Call Mom" in result.output
        assert "4 of 4 tasks" in result.output

    def test_list_json_with_filters(self, runner, todo_file):
        """Test project filters combine with any-of matching in JSON output."""
        result = runner.invoke(main, ["list", todo_file, "--json", "-p", "+Family", "-p", "+Money"])
        assert result.exit_code == 0

        data = json.loads(result.output)
        assert [task["priority"] for task in data] == ["(A)", None]

    def test_list_status_and_sort(self, runner, todo_file):
        """Test listing pending tasks sorted by due date."""
        result = runner.invoke(main, ["list", todo_file, "--json", "--status", "pending", "--sort", "due"])
        data = json.loads(result.output)
        assert [task["metadata"]["due"] for task in data] == [
            "2024-03-05", "2024-03-10", "2024-03-15"
        ]

    def test_list_done(self, runner, todo_file):
        """Test listing only completed tasks."""
        result = runner.invoke(main, ["list", todo_file, "--json", "--status", "done"])
        data = json.loads(result.output)
        assert len(data) == 1
        assert data[0]["completed"] is True

    def test_list_no_match(self, runner, todo_file):
        """Test a filter matching nothing prints a notice."""
        result = runner.invoke(main, ["list", todo_file, "-c", "@nowhere"])
        assert result.exit_code == 0
        assert "No tasks found." in result.output

    def test_list_priority_without_letter(self, runner, todo_file):
        """Test a letterless --priority lists no tasks."""
        result = runner.invoke(main, ["list", todo_file, "--priority", "1", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output) == []

    def test_list_from_stdin(self, runner):
        """Test reading the document from standard input."""
        result = runner.invoke(main, ["list", "-", "--json"], input="(A) From stdin\n")
        assert json.loads(result.output)[0]["description"] == "From stdin"

    def test_config_hides_completed(self, runner, todo_file, tmp_path):
        """Test show_completed in the config hides done tasks."""
        config = tmp_path / "config.yaml"
        config.write_text("show_completed: false\n")
        result = runner.invoke(main, ["--config", str(config), "list", todo_file, "--json"])
        assert all(not task["completed"] for task in json.loads(result.output))


class TestQueryCommands:
    """Test tag, key and due listings."""

    def test_projects(self, runner, todo_file):
        """Test listing project tags."""
        result = runner.invoke(main, ["projects", todo_file])
        assert result.output.split() == ["+Family", "+Home", "+Money", "+Work"]

    def test_contexts(self, runner, todo_file):
        """Test listing context tags."""
        result = runner.invoke(main, ["contexts", todo_file])
        assert result.output.split() == ["@computer", "@phone"]

    def test_keys(self, runner, todo_file):
        """Test listing metadata key names."""
        result = runner.invoke(main, ["keys", todo_file])
        assert result.output.split() == ["due", "rec"]

    def test_due_overdue(self, runner, todo_file):
        """Test listing overdue tasks."""
        result = runner.invoke(main, ["--today", "2024-03-10", "due", todo_file, "--mode", "overdue"])
        assert result.output.strip() == "2024-03-02 Pay taxes +Money @phone due:2024-03-05"

    def test_due_today(self, runner, todo_file):
        """Test listing tasks due today."""
        result = runner.invoke(main, ["--today", "2024-03-10", "due", todo_file, "--mode", "today"])
        assert result.output.strip().startswith("2024-03-01 (A) Call Mom")

    def test_due_within(self, runner, todo_file):
        """Test listing tasks due within a number of days."""
        result = runner.invoke(main, ["--today", "2024-03-01", "due", todo_file, "--within", "3"])
        assert result.output.strip() == ""

        result = runner.invoke(main, ["--today", "2024-03-01", "due", todo_file])
        assert result.output.strip() == "2024-03-02 Pay taxes +Money @phone due:2024-03-05"


class TestOutputCommands:
    """Test format and next."""

    def test_format(self, runner, todo_file):
        """Test printing the normalized document."""
        result = runner.invoke(main, ["format", todo_file])
        assert result.exit_code == 0
        assert result.output == DOCUMENT.replace("(A) 2024-03-01", "2024-03-01 (A)")

    def test_format_sorted(self, runner, todo_file):
        """Test printing the document sorted by priority."""
        result = runner.invoke(main, ["format", todo_file, "--sort", "priority"])
        assert result.output.splitlines()[-1].startswith("(B)")

    def test_next(self, runner, todo_file):
        """Test printing the next occurrence of recurring tasks."""
        result = runner.invoke(main, ["next", todo_file])
        assert result.output.strip() == "(B) Write docs +Work @computer due:2024-03-22 rec:1w"


class TestErrors:
    """Test error reporting."""

    def test_parse_error_exits_with_status_1(self, runner, tmp_path):
        """Test a parse error is reported with exit status 1."""
        config = tmp_path / "config.yaml"
        config.write_text("duplicate_key_behavior: error\n")
        todo = tmp_path / "todo.txt"
        todo.write_text("ok\nbad due:1 due:2\n")

        result = runner.invoke(main, ["--config", str(config), "format", str(todo)])

        assert result.exit_code == 1
        assert "line 2" in result.output
        assert "Duplicate key 'due'" in result.output

    def test_invalid_config(self, runner, todo_file, tmp_path):
        """Test an invalid config value is reported."""
        config = tmp_path / "config.yaml"
        config.write_text("duplicate_key_behavior: sometimes\n")
        result = runner.invoke(main, ["--config", str(config), "format", todo_file])
        assert result.exit_code == 1
        assert "duplicate_key_behavior" in result.output

    def test_mistyped_config_value(self, runner, todo_file, tmp_path):
        """Test a config value of the wrong type is reported, not raised."""
        config = tmp_path / "config.yaml"
        config.write_text("due_soon_days: soon\n")
        result = runner.invoke(main, ["--config", str(config), "due", todo_file])
        assert result.exit_code == 1
        assert "due_soon_days must be an integer" in result.output

    def test_invalid_today(self, runner, todo_file):
        """Test a malformed --today date is a usage error."""
        result = runner.invoke(main, ["--today", "tomorrow", "format", todo_file])
        assert result.exit_code == 2

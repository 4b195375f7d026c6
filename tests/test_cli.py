"""
Unit tests for the command line interface.
"""

import importlib
import json
from unittest.mock import ANY, MagicMock, patch

import pytest

from jira_sync.cli import (
    compute_changes,
    extract_page_id,
    labels_equal,
    main,
    sanitize_filename,
    transition_issue,
)
from jira_sync.documents import Ticket, marshal_confluence_page, marshal_issue
from jira_sync.exceptions import APIError, JiraSyncError

SYNCED = "2024-01-16T08:00:00Z"


@pytest.fixture
def jira(config):
    """Patched config loading and client; yields the mock client."""
    client = MagicMock()
    with patch("jira_sync.cli.load_config", return_value=config), \
            patch("jira_sync.cli.JiraClient", return_value=client):
        yield client


@pytest.fixture
def issue_file(tmp_path, sample_issue):
    path = tmp_path / "PROJ-123.md"
    path.write_text(marshal_issue(sample_issue, "https://org.atlassian.net", synced=SYNCED), encoding="utf-8")
    return path


@pytest.fixture
def page_file(tmp_path, sample_page, sample_space):
    path = tmp_path / "Design Notes.md"
    path.write_text(marshal_confluence_page(sample_page, sample_space, synced=SYNCED), encoding="utf-8")
    return path


class TestHelpers:
    """Tests for CLI helper functions."""

    @pytest.mark.parametrize("value, expected", [
        ("85962893", "85962893"),
        ("  123 ", "123"),
        ("https://org.atlassian.net/wiki/spaces/ENG/pages/85962893/Page+Title", "85962893"),
        ("https://org.atlassian.net/wiki/spaces/ENG/overview", ""),
        ("abc", ""),
    ])
    def test_extract_page_id(self, value, expected):
        assert extract_page_id(value) == expected

    def test_sanitize_filename(self):
        assert sanitize_filename("Design Notes v2.1") == "Design Notes v2.1"
        assert sanitize_filename("Q3: Plan/Review") == "Q3- Plan-Review"
        assert sanitize_filename("") == "confluence-page"

    def test_labels_equal(self):
        assert labels_equal(["a", "b"], ["b", "a"])
        assert labels_equal([], None)
        assert not labels_equal(["a"], ["a", "b"])
        assert not labels_equal(["a", "a"], ["a", "b"])

    def test_compute_changes(self, sample_issue):
        ticket = Ticket("PROJ-123", title="New title", status="in progress", labels=["backend", "urgent"])
        payload = {"fields": {"summary": "New title", "labels": ["urgent", "backend"], "description": {}}}
        changes = compute_changes(sample_issue, ticket, payload)
        assert changes == {
            "title": "'Fix: login' -> 'New title'",
            "description": "(updated)",
            "status": "'To Do' -> 'in progress'",
        }

    def test_transition_by_target_status(self):
        client = MagicMock()
        client.get_transitions.return_value = [
            {"id": "11", "name": "Stop", "to": {"name": "To Do"}},
            {"id": "31", "name": "Start", "to": {"name": "In Progress"}},
        ]
        transition_issue(client, "PROJ-1", "in progress")
        client.do_transition.assert_called_once_with("PROJ-1", "31")

    def test_transition_not_found(self):
        client = MagicMock()
        client.get_transitions.return_value = [{"id": "11", "name": "Stop", "to": {"name": "To Do"}}]
        with pytest.raises(JiraSyncError, match="'Stop' \\(-> To Do\\)"):
            transition_issue(client, "PROJ-1", "Done")


class TestGetCommand:
    """Tests for `jira-sync get`."""

    def test_stdout(self, jira, sample_issue, capsys):
        jira.get_issue.return_value = sample_issue
        assert main(["get", "proj-123"]) == 0
        jira.get_issue.assert_called_once_with("PROJ-123")
        assert "# PROJ-123: Fix: login" in capsys.readouterr().out

    def test_output_dir(self, jira, sample_issue, tmp_path, capsys):
        jira.get_issue.return_value = sample_issue
        out_dir = tmp_path / "tickets"
        assert main(["get", "PROJ-123", "--output-dir", str(out_dir)]) == 0
        assert (out_dir / "PROJ-123.md").read_text(encoding="utf-8").startswith("---\n")
        assert capsys.readouterr().out == ""

    def test_api_error_exits_1(self, jira):
        jira.get_issue.side_effect = APIError("JIRA", 404, "not found")
        assert main(["get", "PROJ-9"]) == 1

    def test_missing_config_exits_1(self):
        from jira_sync.config import Config
        with patch("jira_sync.cli.load_config", return_value=Config()):
            assert main(["get", "PROJ-9"]) == 1


class TestPushCommand:
    """Tests for `jira-sync push`."""

    def test_push_description_only(self, jira, sample_issue, issue_file):
        jira.get_issue.return_value = sample_issue
        assert main(["push", "-f", str(issue_file)]) == 0
        key, payload = jira.update_issue.call_args[0]
        assert key == "PROJ-123"
        assert list(payload["fields"]) == ["description"]
        assert payload["fields"]["description"]["type"] == "doc"

    def test_dry_run_prints_adf(self, jira, sample_issue, issue_file, capsys):
        jira.get_issue.return_value = sample_issue
        assert main(["push", "-f", str(issue_file), "--dry-run"]) == 0
        jira.update_issue.assert_not_called()
        printed = json.loads(capsys.readouterr().out)
        assert printed["content"][0]["content"][1]["text"] == "world"

    def test_conflict(self, jira, sample_issue, issue_file):
        sample_issue["fields"]["updated"] = "2024-02-01T00:00:00.000+0000"
        jira.get_issue.return_value = sample_issue
        assert main(["push", "-f", str(issue_file)]) == 1
        jira.update_issue.assert_not_called()

    def test_missing_file(self, jira, tmp_path):
        assert main(["push", "-f", str(tmp_path / "nope.md")]) == 1


class TestApplyCommand:
    """Tests for `jira-sync apply`."""

    def test_applies_fields_and_status(self, jira, sample_issue, issue_file):
        content = issue_file.read_text(encoding="utf-8").replace("status: To Do", "status: In Progress")
        issue_file.write_text(content, encoding="utf-8")
        jira.get_issue.return_value = sample_issue
        jira.get_transitions.return_value = [{"id": "31", "name": "Start", "to": {"name": "In Progress"}}]

        assert main(["apply", "-f", str(issue_file)]) == 0
        key, payload = jira.update_issue.call_args[0]
        assert key == "PROJ-123"
        assert payload["fields"]["summary"] == "Fix: login"
        assert payload["fields"]["labels"] == ["backend", "urgent"]
        jira.do_transition.assert_called_once_with("PROJ-123", "31")

    def test_dry_run(self, jira, sample_issue, issue_file):
        jira.get_issue.return_value = sample_issue
        assert main(["apply", "-f", str(issue_file), "--dry-run"]) == 0
        jira.update_issue.assert_not_called()
        jira.do_transition.assert_not_called()

    def test_unknown_status(self, jira, sample_issue, issue_file):
        content = issue_file.read_text(encoding="utf-8").replace("status: To Do", "status: Shipped")
        issue_file.write_text(content, encoding="utf-8")
        jira.get_issue.return_value = sample_issue
        jira.get_transitions.return_value = []
        assert main(["apply", "-f", str(issue_file)]) == 1


class TestConfigCommand:
    """Tests for `jira-sync config`."""

    def test_interactive_setup(self, tmp_path):
        from jira_sync.config import Config
        path = str(tmp_path / "cfg.yaml")
        with patch("jira_sync.cli.load_config", return_value=Config(email="old@a.net")), \
                patch("builtins.input", side_effect=["https://a.net", ""]), \
                patch("jira_sync.cli.getpass.getpass", return_value="tok"), \
                patch("jira_sync.cli.save_config", return_value=path) as save:
            assert main(["--config", path, "config"]) == 0
        cfg, saved_path = save.call_args[0]
        assert (cfg.url, cfg.email, cfg.token) == ("https://a.net", "old@a.net", "tok")
        assert saved_path == path

    def test_incomplete_input(self):
        from jira_sync.config import Config
        with patch("jira_sync.cli.load_config", return_value=Config()), \
                patch("builtins.input", side_effect=["", ""]), \
                patch("jira_sync.cli.getpass.getpass", return_value=""), \
                patch("jira_sync.cli.save_config") as save:
            assert main(["config"]) == 1
        save.assert_not_called()


class TestConfluenceCommands:
    """Tests for `jira-sync confluence ...`."""

    def test_get_by_url(self, jira, sample_page, sample_space, capsys):
        jira.get_confluence_page.return_value = sample_page
        jira.get_confluence_space.return_value = sample_space
        url = "https://org.atlassian.net/wiki/spaces/ENG/pages/85962893/Design+Notes"
        assert main(["confluence", "get", url]) == 0
        jira.get_confluence_page.assert_called_once_with("85962893")
        out = capsys.readouterr().out
        assert "source: confluence" in out
        assert "spaceKey: ENG" in out

    def test_get_space_failure_is_not_fatal(self, jira, sample_page, capsys):
        jira.get_confluence_page.return_value = sample_page
        jira.get_confluence_space.side_effect = APIError("Confluence", 403, "forbidden")
        assert main(["confluence", "get", "85962893"]) == 0
        assert "spaceKey" not in capsys.readouterr().out

    def test_get_writes_sanitized_filename(self, jira, sample_page, tmp_path):
        sample_page["title"] = "Q3: Plan"
        jira.get_confluence_page.return_value = sample_page
        jira.get_confluence_space.return_value = None
        assert main(["confluence", "get", "85962893", "--output-dir", str(tmp_path)]) == 0
        assert (tmp_path / "Q3- Plan.md").exists()

    def test_get_bad_page_argument(self, jira):
        assert main(["confluence", "get", "not-a-page"]) == 1
        jira.get_confluence_page.assert_not_called()

    def test_push_bumps_version(self, jira, sample_page, page_file):
        jira.get_confluence_page.return_value = sample_page
        assert main(["confluence", "push", "-f", str(page_file)]) == 0
        jira.update_confluence_page.assert_called_once_with(
            "85962893", "Design Notes", ANY, 5, "Updated via jira-sync push",
        )
        adf = json.loads(jira.update_confluence_page.call_args[0][2])
        assert adf["type"] == "doc"

    def test_push_dry_run(self, jira, page_file, capsys):
        assert main(["confluence", "push", "-f", str(page_file), "--dry-run"]) == 0
        jira.update_confluence_page.assert_not_called()
        assert json.loads(capsys.readouterr().out)["type"] == "doc"

    def test_push_rejects_issue_file(self, jira, issue_file):
        assert main(["confluence", "push", "-f", str(issue_file)]) == 1

    def test_create_empty_page(self, jira, sample_space):
        jira.get_confluence_space_by_key.return_value = sample_space
        jira.create_confluence_page.return_value = {"id": "77", "title": "New"}
        assert main(["confluence", "create", "--space", "ENG", "--title", "New"]) == 0
        space_id, title, adf_json, parent = jira.create_confluence_page.call_args[0]
        assert (space_id, title, parent) == ("9", "New", None)
        assert json.loads(adf_json) == {"type": "doc", "content": [{"type": "paragraph"}], "attrs": {"version": 1}}

    def test_create_from_file_with_parent(self, jira, sample_space, page_file, tmp_path):
        jira.get_confluence_space_by_key.return_value = sample_space
        jira.create_confluence_page.return_value = {"id": "78", "title": "Child"}
        parent = "https://org.atlassian.net/wiki/spaces/ENG/pages/5/Parent"
        out_dir = tmp_path / "pages"
        assert main([
            "confluence", "create", "--space", "ENG", "--title", "Child",
            "--parent", parent, "-f", str(page_file), "--output-dir", str(out_dir),
        ]) == 0
        _, _, adf_json, parent_id = jira.create_confluence_page.call_args[0]
        assert parent_id == "5"
        assert json.loads(adf_json)["content"][0]["type"] == "paragraph"
        assert (out_dir / "Child.md").exists()

    def test_create_bad_parent(self, jira, sample_space):
        jira.get_confluence_space_by_key.return_value = sample_space
        assert main(["confluence", "create", "--space", "ENG", "--title", "T", "--parent", "nope"]) == 1
        jira.create_confluence_page.assert_not_called()


class TestEntryPoint:
    """Tests for argument handling."""

    def test_no_command(self):
        assert main([]) == 1

    def test_confluence_without_subcommand(self):
        assert main(["confluence"]) == 1

    def test_file_is_required(self):
        with pytest.raises(SystemExit):
            main(["push"])


@pytest.mark.parametrize("module, title", [
    ("jira_sync.cli", "Command Line Interface"),
    ("jira_sync.config", "Configuration"),
    ("jira_sync.logger", "Logger"),
])
def test_module_docstring_title(module, title):
    """Entry-point modules carry a titled docstring like the rest of the package."""
    doc = importlib.import_module(module).__doc__
    assert doc.strip().splitlines()[0] == title

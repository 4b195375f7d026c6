"""
Pytest configuration and shared fixtures.
"""

import json
import os
import sys
from typing import Any, Dict

import pytest

# Add src/ to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from jira_sync.adf.nodes import Mark, Node  # noqa: E402
from jira_sync.config import Config  # noqa: E402


def text(value: str, *marks: str) -> Node:
    return Node.text_node(value, [Mark(m) for m in marks])


def paragraph(*children: Node) -> Node:
    return Node("paragraph", content=list(children))


def doc(*children: Node) -> Node:
    return Node("doc", content=list(children), attrs={"version": 1})


def list_item(label: str, *sub_lists: Node) -> Node:
    return Node("listItem", content=[paragraph(text(label))] + list(sub_lists))


@pytest.fixture
def media_node() -> Node:
    """An image node, which markdown cannot express."""
    return Node(
        "mediaSingle",
        content=[Node("media", attrs={"id": "abc-123", "type": "file", "collection": "jira-1"})],
        attrs={"layout": "center"},
    )


@pytest.fixture
def canonical_markdown() -> str:
    """Markdown in exactly the form the renderer writes it."""
    return (
        "# Title\n\n"
        "Intro with **bold**, *em*, `code`, ~~gone~~ and [a link](https://example.com).\n\n"
        "- one\n"
        "- two\n"
        "  1. first\n"
        "  2. second\n"
        "\n"
        "| Name | Value |\n"
        "| --- | --- |\n"
        "| a | 1 |\n"
        "\n"
        "> quoted\n"
        "\n"
        "```python\n"
        "print(\"hi\")\n"
        "```\n"
        "\n"
        "---\n"
        "\n"
    )


@pytest.fixture
def description_doc() -> Dict[str, Any]:
    return doc(paragraph(text("Hello "), text("world", "strong"))).to_dict()


@pytest.fixture
def sample_issue(description_doc) -> Dict[str, Any]:
    """Issue JSON as returned by GET /rest/api/3/issue/{key}."""
    return {
        "key": "PROJ-123",
        "fields": {
            "summary": "Fix: login",
            "status": {"name": "To Do", "statusCategory": {"key": "new", "name": "To Do"}},
            "issuetype": {"name": "Bug"},
            "priority": {"name": "High"},
            "labels": ["backend", "urgent"],
            "assignee": {"emailAddress": "alice@example.com", "displayName": "Alice"},
            "reporter": {"emailAddress": "", "displayName": "Bob Smith"},
            "description": description_doc,
            "updated": "2024-01-15T10:30:00.000+0000",
            "comment": {
                "comments": [
                    {
                        "author": {"emailAddress": "alice@example.com", "displayName": "Alice"},
                        "created": "2024-01-15T09:00:00.000+0000",
                        "body": doc(paragraph(text("Looks good"))).to_dict(),
                    },
                ],
            },
        },
    }


@pytest.fixture
def sample_page(description_doc) -> Dict[str, Any]:
    """Page JSON as returned by GET /wiki/api/v2/pages/{id}?body-format=atlas_doc_format."""
    return {
        "id": "85962893",
        "title": "Design Notes",
        "status": "current",
        "spaceId": "9",
        "version": {"number": 4},
        "body": {
            "atlas_doc_format": {
                "value": json.dumps(description_doc),
                "representation": "atlas_doc_format",
            },
        },
        "_links": {"base": "https://org.atlassian.net/wiki", "webui": "/spaces/ENG/pages/85962893"},
    }


@pytest.fixture
def sample_space() -> Dict[str, Any]:
    return {"id": "9", "key": "ENG", "name": "Engineering"}


@pytest.fixture
def config() -> Config:
    return Config(url="https://org.atlassian.net/", email="me@example.com", token="secret")


@pytest.fixture
def config_path(tmp_path) -> str:
    """Path of a not-yet-existing config file."""
    return str(tmp_path / ".jira-cli.yaml")


@pytest.fixture
def clean_env(monkeypatch):
    """No JIRA_* variables and no .env loading."""
    for name in ("JIRA_URL", "JIRA_EMAIL", "JIRA_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("jira_sync.config.load_dotenv", lambda *a, **kw: False)

"""
Markdown Documents

Turns JIRA issues and Confluence pages into markdown files with YAML
frontmatter, and reads those files back. Layout of an issue file:

    ---
    # READ-ONLY metadata pulled from JIRA. ...
    key: PROJ-1
    title: Fix login
    ...
    ---

    # PROJ-1: Fix login

    ## Description

    ...

    ## Comments

    ### alice@example.com - 2024-01-15

    ...

Only the body is ever pushed; the frontmatter is context for the reader.
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import yaml

from jira_sync.adf.nodes import Node
from jira_sync.constants import (
    COMMENTS_HEADING,
    CONFLUENCE_READONLY_NOTICE,
    CONFLUENCE_SOURCE,
    CONFLUENCE_REPRESENTATION,
    DESCRIPTION_HEADING,
    FRONTMATTER_DELIMITER,
    JIRA_READONLY_NOTICE,
    NO_CONTENT,
    NO_DESCRIPTION,
)
from jira_sync.converter import parse, render, split_frontmatter
from jira_sync.exceptions import ConversionError, StructuralParseError

COMMENTS_SECTION = re.compile(r'(?m)^## Comments\s*$')
COMMENT_HEADING = re.compile(r'(?m)^### (.+) - (\S+)\s*$')

DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
)


class TicketComment:
    """A comment section of an issue file."""

    def __init__(self, author: str, date: str, body: str):
        self.author = author
        self.date = date
        self.body = body

    def __repr__(self):
        return f"TicketComment({self.author!r}, {self.date!r})"


class Ticket:
    """An issue as read back from a markdown file."""

    def __init__(
        self,
        key: str,
        title: str = "",
        status: str = "",
        type: str = "",
        priority: str = "",
        labels: Optional[List[str]] = None,
        assignee: str = "",
        reporter: str = "",
        url: str = "",
        synced: str = "",
        updated: str = "",
        body: str = "",
        comments: Optional[List[TicketComment]] = None,
    ):
        self.key = key
        self.title = title
        self.status = status
        self.type = type
        self.priority = priority
        self.labels = labels if labels is not None else []
        self.assignee = assignee
        self.reporter = reporter
        self.url = url
        self.synced = synced
        self.updated = updated
        self.body = body
        self.comments = comments if comments is not None else []

    def __repr__(self):
        return f"Ticket({self.key!r}, title={self.title!r})"


class ConfluenceDoc:
    """A Confluence page as read back from a markdown file."""

    def __init__(
        self,
        page_id: str,
        title: str = "",
        status: str = "",
        space_key: str = "",
        space_name: str = "",
        version: int = 0,
        url: str = "",
        synced: str = "",
        body: str = "",
    ):
        self.page_id = page_id
        self.title = title
        self.status = status
        self.space_key = space_key
        self.space_name = space_name
        self.version = version
        self.url = url
        self.synced = synced
        self.body = body

    def __repr__(self):
        return f"ConfluenceDoc({self.page_id!r}, title={self.title!r}, version={self.version})"


# ============================================================
# Helpers
# ============================================================
def format_date(iso: str) -> str:
    """``2024-01-15T10:30:00.000+0000`` -> ``2024-01-15``; unparseable input is returned as is."""
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(iso, fmt).strftime("%Y-%m-%d")
        except (TypeError, ValueError):
            continue
    return iso


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _name(field: Any) -> str:
    if isinstance(field, dict):
        return _str(field.get("name"))
    return ""


def _user(field: Any) -> str:
    if not isinstance(field, dict):
        return ""
    return _str(field.get("emailAddress") or field.get("displayName"))


def _frontmatter(notice: str, meta: Dict[str, Any]) -> str:
    dumped = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True, default_flow_style=None)
    return f"{FRONTMATTER_DELIMITER}\n{notice}{dumped}{FRONTMATTER_DELIMITER}\n\n"


def _load_meta(content: str) -> Tuple[Dict[str, Any], str]:
    raw, body = split_frontmatter(content)
    try:
        meta = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise StructuralParseError(f"parsing frontmatter: {e}") from e
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise StructuralParseError("parsing frontmatter: expected a mapping")
    return meta, body


def _strip_title_heading(body: str) -> str:
    body = body.lstrip("\r\n")
    first, _, rest = body.partition("\n")
    if first.strip().startswith("# "):
        return rest.lstrip("\r\n")
    return body


def _render_adf(value: Any) -> str:
    text = render(Node.from_dict(value))
    return text if text.endswith("\n") else text + "\n"


# ============================================================
# JIRA issues
# ============================================================
def marshal_issue(issue: Dict[str, Any], base_url: str, synced: Optional[str] = None) -> str:
    """Render an issue (REST API v3 JSON) as a markdown document.

    Args:
        issue: issue JSON with ``key`` and ``fields``
        base_url: site URL, used for the browse link
        synced: timestamp to record, defaults to now (UTC)
    """
    key = _str(issue.get("key"))
    fields = issue.get("fields") or {}
    summary = _str(fields.get("summary"))
    status = fields.get("status") or {}

    meta: Dict[str, Any] = {"key": key, "title": summary, "status": _name(status)}
    category = status.get("statusCategory") if isinstance(status, dict) else None
    if category:
        meta["statusCategory"] = _name(category)
    meta["type"] = _name(fields.get("issuetype"))
    if _name(fields.get("priority")):
        meta["priority"] = _name(fields.get("priority"))
    meta["labels"] = [_str(label) for label in fields.get("labels") or []]
    if fields.get("assignee"):
        meta["assignee"] = _user(fields["assignee"])
    if fields.get("reporter"):
        meta["reporter"] = _user(fields["reporter"])
    meta["url"] = f"{base_url.rstrip('/')}/browse/{key}"
    if fields.get("updated"):
        meta["updated"] = _str(fields["updated"])
    meta["synced"] = synced or _now()

    parts = [
        _frontmatter(JIRA_READONLY_NOTICE, meta),
        f"# {key}: {summary}\n\n",
        f"{DESCRIPTION_HEADING}\n\n",
    ]
    description = fields.get("description")
    parts.append(_render_adf(description) if description else f"{NO_DESCRIPTION}\n")
    parts.append("\n")

    comments = (fields.get("comment") or {}).get("comments") or []
    if comments:
        parts.append(f"{COMMENTS_HEADING}\n\n")
        for comment in comments:
            author = _user(comment.get("author"))
            parts.append(f"### {author} - {format_date(_str(comment.get('created')))}\n\n")
            if comment.get("body"):
                parts.append(_render_adf(comment["body"]))
            parts.append("\n")

    return "".join(parts)


def _split_comments(body: str) -> Tuple[str, List[TicketComment]]:
    stripped = body.strip()
    if stripped.startswith(DESCRIPTION_HEADING):
        body = stripped[len(DESCRIPTION_HEADING):].lstrip("\r\n")

    section = COMMENTS_SECTION.search(body)
    if section is None:
        return body, []

    rest = body[section.end():]
    headings = list(COMMENT_HEADING.finditer(rest))
    comments = []
    for idx, match in enumerate(headings):
        end = headings[idx + 1].start() if idx + 1 < len(headings) else len(rest)
        comments.append(TicketComment(
            author=match.group(1),
            date=match.group(2),
            body=rest[match.end():end].strip(),
        ))
    return body[:section.start()], comments


def unmarshal_ticket(content: str) -> Ticket:
    """Parse an issue markdown file.

    Raises:
        StructuralParseError: bad frontmatter or no ``key`` field
    """
    meta, body = _load_meta(content)
    key = _str(meta.get("key"))
    if not key:
        raise StructuralParseError("frontmatter missing required 'key' field")

    description, comments = _split_comments(_strip_title_heading(body))
    labels = meta.get("labels") or []
    if not isinstance(labels, list):
        labels = [labels]

    return Ticket(
        key=key,
        title=_str(meta.get("title")),
        status=_str(meta.get("status")),
        type=_str(meta.get("type")),
        priority=_str(meta.get("priority")),
        labels=[_str(label) for label in labels],
        assignee=_str(meta.get("assignee")),
        reporter=_str(meta.get("reporter")),
        url=_str(meta.get("url")),
        synced=_str(meta.get("synced")),
        updated=_str(meta.get("updated")),
        body=description.strip(),
        comments=comments,
    )


def to_update_payload(ticket: Ticket) -> Dict[str, Any]:
    """Issue update payload: summary, labels and the parsed description."""
    fields: Dict[str, Any] = {}
    if ticket.title:
        fields["summary"] = ticket.title
    if ticket.labels:
        fields["labels"] = list(ticket.labels)
    fields["description"] = parse(ticket.body).to_dict()
    return {"fields": fields}


# ============================================================
# Confluence pages
# ============================================================
def page_url(page: Dict[str, Any]) -> str:
    links = page.get("_links") or {}
    if links.get("base") and links.get("webui"):
        return f"{links['base']}{links['webui']}"
    return ""


def page_version(page: Dict[str, Any]) -> int:
    version = page.get("version") or {}
    return int(version.get("number") or 0)


def _page_adf(page: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    body = (page.get("body") or {}).get(CONFLUENCE_REPRESENTATION) or {}
    value = body.get("value")
    if not value:
        return None
    try:
        doc = json.loads(value)
    except ValueError as e:
        raise ConversionError(f"parsing ADF body: {e}") from e
    if not isinstance(doc, dict):
        raise ConversionError("parsing ADF body: expected a JSON object")
    return doc


def marshal_confluence_page(
    page: Dict[str, Any],
    space: Optional[Dict[str, Any]] = None,
    synced: Optional[str] = None,
) -> str:
    """Render a Confluence page (REST API v2 JSON) as a markdown document.

    Raises:
        ConversionError: the page body is not valid ADF JSON
    """
    title = _str(page.get("title"))
    meta: Dict[str, Any] = {
        "source": CONFLUENCE_SOURCE,
        "pageId": _str(page.get("id")),
        "title": title,
        "status": _str(page.get("status")),
    }
    if space:
        meta["spaceKey"] = _str(space.get("key"))
        meta["spaceName"] = _str(space.get("name"))
    meta["version"] = page_version(page)
    if page_url(page):
        meta["url"] = page_url(page)
    meta["synced"] = synced or _now()

    doc = _page_adf(page)
    return "".join([
        _frontmatter(CONFLUENCE_READONLY_NOTICE, meta),
        f"# {title}\n\n",
        _render_adf(doc) if doc is not None else f"{NO_CONTENT}\n",
    ])


def unmarshal_confluence_page(content: str) -> ConfluenceDoc:
    """Parse a Confluence markdown file.

    Raises:
        StructuralParseError: bad frontmatter, no ``pageId``, or the file
            was not pulled from Confluence
    """
    meta, body = _load_meta(content)
    page_id = _str(meta.get("pageId"))
    if not page_id:
        raise StructuralParseError("frontmatter missing required 'pageId' field")
    source = _str(meta.get("source"))
    if source != CONFLUENCE_SOURCE:
        raise StructuralParseError(
            f"not a Confluence document (source: {source!r}, expected {CONFLUENCE_SOURCE!r})"
        )

    try:
        version = int(meta.get("version") or 0)
    except (TypeError, ValueError) as e:
        raise StructuralParseError(f"invalid 'version' field: {meta.get('version')!r}") from e

    return ConfluenceDoc(
        page_id=page_id,
        title=_str(meta.get("title")),
        status=_str(meta.get("status")),
        space_key=_str(meta.get("spaceKey")),
        space_name=_str(meta.get("spaceName")),
        version=version,
        url=_str(meta.get("url")),
        synced=_str(meta.get("synced")),
        body=_strip_title_heading(body).strip(),
    )

"""
Command Line Interface

The jira-sync command: pull issues and Confluence pages to markdown, push
edited bodies back, apply field and status changes, and set up credentials.
"""

import argparse
import getpass
import os
import re
import sys
from typing import Any, Dict, List, Optional, Tuple

import requests

from jira_sync.adf.nodes import Node
from jira_sync.config import Config, default_config_path, load_config, save_config
from jira_sync.constants import CONFLUENCE_PUSH_MESSAGE, DOC_VERSION, NodeType
from jira_sync.converter import parse, strip_frontmatter
from jira_sync.documents import (
    Ticket,
    marshal_confluence_page,
    marshal_issue,
    page_url,
    page_version,
    to_update_payload,
    unmarshal_confluence_page,
    unmarshal_ticket,
)
from jira_sync.exceptions import APIError, ConfigError, ConflictError, JiraSyncError
from jira_sync.jira import JiraClient
from jira_sync.logger import LogLevel, logger

PAGE_ID = re.compile(r'^\d+$')
PAGE_URL_ID = re.compile(r'/pages/(\d+)')
UNSAFE_FILENAME_CHARS = re.compile(r'[^a-zA-Z0-9\-_. ]+')


# ============================================================
# Helpers
# ============================================================
def extract_page_id(value: str) -> str:
    """Page ID from a numeric ID or a Confluence URL; "" when there is none."""
    value = value.strip()
    if PAGE_ID.match(value):
        return value
    match = PAGE_URL_ID.search(value)
    return match.group(1) if match else ""


def sanitize_filename(title: str) -> str:
    safe = UNSAFE_FILENAME_CHARS.sub("-", title).strip()
    return safe or "confluence-page"


def labels_equal(a: List[str], b: List[str]) -> bool:
    """Order-insensitive label comparison."""
    a = a or []
    b = b or []
    return len(a) == len(b) and set(a) == set(b)


def _make_client(args) -> Tuple[JiraClient, Config]:
    cfg = load_config(args.config)
    cfg.validate()
    return JiraClient(cfg), cfg


def _read_file(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise JiraSyncError(f"reading file {path}: {e}") from e


def _write_output(content: str, output_dir: Optional[str], filename: str):
    """Write to ``output_dir/filename``, or to stdout when no directory is given."""
    if not output_dir:
        sys.stdout.write(content)
        return
    try:
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, filename)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise JiraSyncError(f"writing file: {e}") from e
    logger.success(f"Written to {path}")


def check_conflict(ticket: Ticket, current: Dict[str, Any]):
    """Refuse to push over changes made in JIRA after the last pull.

    Raises:
        ConflictError: both sides carry an ``updated`` stamp and they differ
    """
    remote = (current.get("fields") or {}).get("updated") or ""
    if ticket.updated and remote and ticket.updated != remote:
        raise ConflictError(
            f"conflict: {ticket.key} was modified in JIRA since your last pull "
            f"(local: {ticket.updated}, JIRA: {remote}). Re-pull the ticket before pushing."
        )


def _status_name(issue: Dict[str, Any]) -> str:
    return ((issue.get("fields") or {}).get("status") or {}).get("name") or ""


def compute_changes(current: Dict[str, Any], ticket: Ticket, payload: Dict[str, Any]) -> Dict[str, str]:
    """Field -> human-readable change, for every field apply would touch."""
    fields = current.get("fields") or {}
    new = payload["fields"]
    changes: Dict[str, str] = {}

    if new.get("summary", "") != (fields.get("summary") or ""):
        changes["title"] = f"{fields.get('summary') or ''!r} -> {new.get('summary', '')!r}"
    if not labels_equal(new.get("labels"), fields.get("labels")):
        changes["labels"] = f"{fields.get('labels') or []} -> {new.get('labels') or []}"
    if new.get("description") is not None:
        changes["description"] = "(updated)"
    status = _status_name(current)
    if ticket.status and ticket.status.lower() != status.lower():
        changes["status"] = f"{status!r} -> {ticket.status!r}"
    return changes


def transition_issue(client: JiraClient, key: str, target_status: str):
    """Move an issue to ``target_status`` through a matching workflow transition.

    A transition matches on its own name or on its destination status name,
    case-insensitively.
    """
    transitions = client.get_transitions(key)
    wanted = target_status.lower()
    for transition in transitions:
        to_name = (transition.get("to") or {}).get("name") or ""
        if to_name.lower() == wanted or (transition.get("name") or "").lower() == wanted:
            client.do_transition(key, transition["id"])
            return

    available = ", ".join(
        f"'{t.get('name')}' (-> {(t.get('to') or {}).get('name')})" for t in transitions
    )
    raise JiraSyncError(
        f"no transition found to status {target_status!r}; available transitions: {available}"
    )


def _empty_doc() -> Node:
    return Node(NodeType.DOC, content=[Node(NodeType.PARAGRAPH)], attrs={"version": DOC_VERSION})


# ============================================================
# JIRA commands
# ============================================================
def cmd_get(args):
    client, cfg = _make_client(args)
    key = args.key.upper()
    logger.debug(f"Fetching issue {key}")
    issue = client.get_issue(key)
    _write_output(marshal_issue(issue, cfg.url), args.output_dir, f"{key}.md")


def cmd_push(args):
    """Push only the body of an issue file to the description field."""
    client, _ = _make_client(args)
    ticket = unmarshal_ticket(_read_file(args.file))
    doc = parse(ticket.body)

    if ticket.updated:
        check_conflict(ticket, client.get_issue(ticket.key))

    if args.dry_run:
        logger.info(f"Dry run: would push body to {ticket.key}")
        sys.stdout.write(doc.to_json(indent=2) + "\n")
        return

    client.update_issue(ticket.key, {"fields": {"description": doc.to_dict()}})
    logger.success(f"Pushed body to {ticket.key}")


def cmd_apply(args):
    """Apply title, labels, description and status from an issue file."""
    client, _ = _make_client(args)
    ticket = unmarshal_ticket(_read_file(args.file))

    current = client.get_issue(ticket.key)
    check_conflict(ticket, current)

    payload = to_update_payload(ticket)
    changes = compute_changes(current, ticket, payload)
    if not changes:
        logger.info("No changes detected.")
        return

    logger.summary_table(f"Changes to {ticket.key}", changes)
    if args.dry_run:
        logger.info("(dry run - no changes applied)")
        return

    if any(field in changes for field in ("title", "labels", "description")):
        client.update_issue(ticket.key, payload)
        logger.success(f"Updated fields for {ticket.key}")

    if "status" in changes:
        transition_issue(client, ticket.key, ticket.status)
        logger.success(f"Transitioned {ticket.key} to '{ticket.status}'")

    logger.success("Done.")


def cmd_config(args):
    """Interactive setup of the connection settings."""
    try:
        existing = load_config(args.config)
    except ConfigError as e:
        logger.warning(f"Ignoring unreadable config: {e}")
        existing = Config()

    prompt = f"JIRA URL [{existing.url}]: " if existing.url else "JIRA URL (e.g., https://your-org.atlassian.net): "
    url = input(prompt).strip() or existing.url
    prompt = f"Email [{existing.email}]: " if existing.email else "Email: "
    email = input(prompt).strip() or existing.email
    token = getpass.getpass("API Token (input hidden): ").strip() or existing.token

    cfg = Config(url=url, email=email, token=token)
    cfg.validate()
    path = save_config(cfg, args.config or default_config_path())
    logger.success(f"Configuration saved to {path}")


# ============================================================
# Confluence commands
# ============================================================
def _require_page_id(value: str, what: str = "page") -> str:
    page_id = extract_page_id(value)
    if not page_id:
        raise JiraSyncError(
            f"could not extract {what} ID from {value!r}; expected a numeric ID or Confluence URL"
        )
    return page_id


def cmd_confluence_get(args):
    client, _ = _make_client(args)
    page_id = _require_page_id(args.page)
    page = client.get_confluence_page(page_id)

    space = None
    if page.get("spaceId"):
        try:
            space = client.get_confluence_space(page["spaceId"])
        except (APIError, requests.exceptions.RequestException) as e:
            logger.warning(f"Could not fetch space {page['spaceId']}: {e}")

    md = marshal_confluence_page(page, space)
    _write_output(md, args.output_dir, sanitize_filename(page.get("title") or "") + ".md")


def cmd_confluence_push(args):
    """Push only the body of a page file; the page version is bumped by one."""
    client, _ = _make_client(args)
    doc = unmarshal_confluence_page(_read_file(args.file))
    adf = parse(doc.body)

    if args.dry_run:
        logger.info(
            f"Dry run: would push body to Confluence page {doc.page_id} "
            f"(version {doc.version} -> {doc.version + 1})"
        )
        sys.stdout.write(adf.to_json(indent=2) + "\n")
        return

    current = client.get_confluence_page(doc.page_id)
    old_version = page_version(current)
    client.update_confluence_page(
        doc.page_id,
        current.get("title") or doc.title,
        adf.to_json(),
        old_version + 1,
        CONFLUENCE_PUSH_MESSAGE,
    )
    logger.success(f"Pushed body to Confluence page {doc.page_id} (version {old_version} -> {old_version + 1})")


def cmd_confluence_create(args):
    client, _ = _make_client(args)
    space = client.get_confluence_space_by_key(args.space)

    adf = parse(strip_frontmatter(_read_file(args.file))) if args.file else _empty_doc()
    parent_id = _require_page_id(args.parent, "parent page") if args.parent else None

    page = client.create_confluence_page(space["id"], args.title, adf.to_json(), parent_id)
    logger.success(f"Created Confluence page {page.get('id')}: {args.title}")
    if page_url(page):
        logger.info(f"URL: {page_url(page)}")

    if args.output_dir:
        md = marshal_confluence_page(page, space)
        _write_output(md, args.output_dir, sanitize_filename(page.get("title") or args.title) + ".md")


# ============================================================
# Entry point
# ============================================================
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jira-sync",
        description="Sync JIRA issues and Confluence pages with local markdown files",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  1. Pull an issue:
     jira-sync get PROJ-123 --output-dir ./tickets

  2. Push an edited description back:
     jira-sync push -f tickets/PROJ-123.md

  3. Preview title/labels/status changes:
     jira-sync apply -f tickets/PROJ-123.md --dry-run

  4. Pull a Confluence page by URL:
     jira-sync confluence get https://org.atlassian.net/wiki/spaces/ENG/pages/85962893/Title
"""
    )
    parser.add_argument("--config", help=f"config file (default: {default_config_path()})")
    parser.add_argument("--debug", action="store_true", help="verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="command")

    get_parser = subparsers.add_parser("get", help="fetch a JIRA issue as markdown")
    get_parser.add_argument("key", help="issue key, e.g. PROJ-123")
    get_parser.add_argument("--output-dir", help="write to <dir>/<KEY>.md instead of stdout")
    get_parser.set_defaults(func=cmd_get)

    push_parser = subparsers.add_parser("push", help="push only the body to the issue description")
    push_parser.add_argument("-f", "--file", required=True, help="markdown file to push")
    push_parser.add_argument("--dry-run", action="store_true", help="print the ADF instead of pushing")
    push_parser.set_defaults(func=cmd_push)

    apply_parser = subparsers.add_parser("apply", help="apply title, labels, description and status")
    apply_parser.add_argument("-f", "--file", required=True, help="markdown file to apply")
    apply_parser.add_argument("--dry-run", action="store_true", help="preview changes without applying")
    apply_parser.set_defaults(func=cmd_apply)

    config_parser = subparsers.add_parser("config", help="configure the JIRA connection")
    config_parser.set_defaults(func=cmd_config)

    confluence_parser = subparsers.add_parser("confluence", help="Confluence page operations")
    confluence_sub = confluence_parser.add_subparsers(dest="confluence_command")

    cget = confluence_sub.add_parser("get", help="fetch a page as markdown")
    cget.add_argument("page", help="page ID or URL")
    cget.add_argument("--output-dir", help="write to <dir>/<Title>.md instead of stdout")
    cget.set_defaults(func=cmd_confluence_get)

    cpush = confluence_sub.add_parser("push", help="push only the body to a page")
    cpush.add_argument("-f", "--file", required=True, help="markdown file to push")
    cpush.add_argument("--dry-run", action="store_true", help="print the ADF instead of pushing")
    cpush.set_defaults(func=cmd_confluence_push)

    ccreate = confluence_sub.add_parser("create", help="create a new page")
    ccreate.add_argument("--space", required=True, help="space key")
    ccreate.add_argument("--title", required=True, help="page title")
    ccreate.add_argument("--parent", help="parent page ID or URL")
    ccreate.add_argument("-f", "--file", help="markdown file for the initial body")
    ccreate.add_argument("--output-dir", help="write the created page to <dir>/<Title>.md")
    ccreate.set_defaults(func=cmd_confluence_create)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logger.set_level(LogLevel.DEBUG)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        args.func(args)
    except (JiraSyncError, requests.exceptions.RequestException) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

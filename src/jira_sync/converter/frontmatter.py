"""
Frontmatter Splitting

Separates the leading ``---`` delimited metadata block from the markdown
body. The block is returned as raw text; interpreting it is up to the caller.
"""

from typing import Tuple

from jira_sync.constants import FRONTMATTER_DELIMITER
from jira_sync.exceptions import StructuralParseError


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r\n") == FRONTMATTER_DELIMITER


def split_frontmatter(content: str) -> Tuple[str, str]:
    """Split content into (metadata block, body).

    Raises:
        StructuralParseError: the content does not open with ``---`` or the
            block is never closed
    """
    lines = content.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        raise StructuralParseError("no frontmatter found (must start with ---)")

    for idx in range(1, len(lines)):
        if _is_delimiter(lines[idx]):
            return "".join(lines[1:idx]), "".join(lines[idx + 1:])

    raise StructuralParseError("no closing --- for frontmatter")


def strip_frontmatter(content: str) -> str:
    """Body text without any frontmatter block or leading ``# `` title line."""
    try:
        _, body = split_frontmatter(content)
    except StructuralParseError:
        body = content

    body = body.lstrip("\n")
    if body.startswith("# "):
        body = body.split("\n", 1)[1] if "\n" in body else ""
    return body.lstrip("\n")

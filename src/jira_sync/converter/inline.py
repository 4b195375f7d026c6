"""
Inline Marks

Conversion between inline markdown (``**bold**``, ``*italic*``, `` `code` ``,
``~~strike~~``, ``[text](url)``) and runs of ADF text nodes. Inline nodes
markdown cannot express ride along as one-line preservation markers.
"""

import re
from typing import Callable, List, Sequence

from jira_sync.adf.nodes import Mark, Node
from jira_sync.constants import MarkType
from jira_sync.converter.preserve import INLINE_MARKER, decode_payload
from jira_sync.exceptions import MarkerDecodeError
from jira_sync.logger import logger


def _link(match) -> Node:
    return Node.text_node(match.group(1), [Mark(MarkType.LINK, {"href": match.group(2)})])


def _marked(mark_type: str) -> Callable:
    def build(match) -> Node:
        return Node.text_node(match.group(1), [Mark(mark_type)])
    return build


# Order matters: when two patterns match at the same offset the earlier wins.
INLINE_PATTERNS = (
    (re.compile(r'\[([^\]]+)\]\(([^)]+)\)'), _link),
    (re.compile(r'\*\*([^*]+)\*\*'), _marked(MarkType.STRONG)),
    (re.compile(r'~~([^~]+)~~'), _marked(MarkType.STRIKE)),
    (re.compile(r'`([^`]+)`'), _marked(MarkType.CODE)),
    (re.compile(r'\*([^*]+)\*'), _marked(MarkType.EM)),
)


def parse_inline(text: str) -> List[Node]:
    """Split inline markdown into nodes.

    One-line preservation markers are restored to their nodes first; the text
    between them goes through the mark patterns.
    """
    if not text:
        return [Node.text_node("")]

    nodes: List[Node] = []
    pos = 0
    for match in INLINE_MARKER.finditer(text):
        try:
            node = decode_payload(match.group(1))
        except MarkerDecodeError as e:
            logger.debug(f"Inline marker kept as text: {e}")
            continue
        if match.start() > pos:
            nodes.extend(parse_marks(text[pos:match.start()]))
        nodes.append(node)
        pos = match.end()

    if pos < len(text):
        nodes.extend(parse_marks(text[pos:]))
    return nodes


def parse_marks(text: str) -> List[Node]:
    """Split marked-up text into text nodes.

    Repeatedly takes the leftmost match of any pattern; text before it becomes
    a plain node, the match becomes a node with one mark.
    """
    nodes: List[Node] = []
    remaining = text
    while remaining:
        best = None
        best_builder = None
        for pattern, builder in INLINE_PATTERNS:
            match = pattern.search(remaining)
            if match and (best is None or match.start() < best.start()):
                best = match
                best_builder = builder

        if best is None:
            nodes.append(Node.text_node(remaining))
            break

        if best.start() > 0:
            nodes.append(Node.text_node(remaining[:best.start()]))
        nodes.append(best_builder(best))
        remaining = remaining[best.end():]

    return nodes


def apply_marks(text: str, marks: Sequence[Mark]) -> str:
    """Wrap text in markdown for each mark, in list order (later marks outermost)."""
    for mark in marks:
        if mark.type == MarkType.STRONG:
            text = f"**{text}**"
        elif mark.type == MarkType.EM:
            text = f"*{text}*"
        elif mark.type == MarkType.CODE:
            text = f"`{text}`"
        elif mark.type == MarkType.STRIKE:
            text = f"~~{text}~~"
        elif mark.type == MarkType.LINK:
            href = mark.attrs.get("href")
            text = f"[{text}]({href if isinstance(href, str) else ''})"
        elif mark.type == MarkType.UNDERLINE:
            # no native underline in markdown
            text = f"_{text}_"
        elif mark.type != MarkType.SUBSUP:
            logger.debug(f"Mark {mark.type!r} has no markdown form, text kept plain")
    return text

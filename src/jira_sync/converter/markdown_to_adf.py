"""
Markdown to ADF Converter

Line-oriented parser producing an Atlassian Document Format tree. Each block
is recognised on its first line, checked in this order (first match wins):

    preservation marker, rule, heading, fenced code, blockquote,
    bullet list, ordered list, pipe table, paragraph

A marker that fails to decode, or a lone pipe line, falls through to the
next candidates and ends up as ordinary text; nothing here raises on bad
input.
"""

import re
from typing import List, Sequence, Tuple

from jira_sync.adf.nodes import Node
from jira_sync.constants import DOC_VERSION, NodeType
from jira_sync.converter.inline import parse_inline
from jira_sync.converter.lists import BULLET_ITEM, ORDERED_ITEM, parse_list
from jira_sync.converter.preserve import decode_marker, is_marker_start
from jira_sync.converter.tables import parse_table

HEADING = re.compile(r'^(#{1,6})(?:\s+(.*))?$')
RULES = ("---", "***", "___")
FENCE = "```"


def is_rule(line: str) -> bool:
    return line.strip() in RULES


def is_quote(line: str) -> bool:
    return line.startswith("> ") or line.rstrip() == ">"


def starts_block(line: str) -> bool:
    """True when ``line`` opens any construct other than a paragraph."""
    stripped = line.strip()
    return (
        is_marker_start(line)
        or stripped in RULES
        or HEADING.match(line) is not None
        or stripped.startswith(FENCE)
        or is_quote(line)
        or BULLET_ITEM.match(line) is not None
        or ORDERED_ITEM.match(line) is not None
        or stripped.startswith("|")
    )


class MarkdownToADF:
    """Parse Markdown text into an ADF ``doc`` node."""

    def parse(self, text: str) -> Node:
        """Parse markdown into a document tree.

        Args:
            text: markdown body (no frontmatter)

        Returns:
            ``doc`` node
        """
        lines = text.replace("\r\n", "\n").split("\n")
        return Node(NodeType.DOC, content=self._parse_blocks(lines), attrs={"version": DOC_VERSION})

    def _parse_blocks(self, lines: Sequence[str]) -> List[Node]:
        blocks: List[Node] = []
        i = 0

        while i < len(lines):
            line = lines[i]
            stripped = line.strip()

            if not stripped:
                i += 1
                continue

            if is_marker_start(line):
                node, next_i = decode_marker(lines, i)
                if node is not None:
                    blocks.append(node)
                    i = next_i
                    continue

            if stripped in RULES:
                blocks.append(Node(NodeType.RULE))
                i += 1
                continue

            heading = HEADING.match(line)
            if heading:
                blocks.append(Node(
                    NodeType.HEADING,
                    content=parse_inline((heading.group(2) or "").strip()),
                    attrs={"level": len(heading.group(1))},
                ))
                i += 1
                continue

            if stripped.startswith(FENCE):
                node, i = self._parse_code_block(lines, i)
                blocks.append(node)
                continue

            if is_quote(line):
                node, i = self._parse_blockquote(lines, i)
                blocks.append(node)
                continue

            if BULLET_ITEM.match(line):
                items, i = parse_list(lines, i, ordered=False)
                blocks.append(Node(NodeType.BULLET_LIST, content=items))
                continue

            if ORDERED_ITEM.match(line):
                items, i = parse_list(lines, i, ordered=True)
                blocks.append(Node(NodeType.ORDERED_LIST, content=items))
                continue

            if stripped.startswith("|"):
                table, next_i = parse_table(lines, i)
                if table is not None:
                    blocks.append(table)
                    i = next_i
                    continue

            node, i = self._parse_paragraph(lines, i)
            blocks.append(node)

        return blocks

    def _parse_code_block(self, lines: Sequence[str], i: int) -> Tuple[Node, int]:
        lang = lines[i].strip()[len(FENCE):].strip()
        code_lines = []
        i += 1
        while i < len(lines):
            if lines[i].strip() == FENCE:
                i += 1
                break
            code_lines.append(lines[i])
            i += 1

        node = Node(NodeType.CODE_BLOCK, content=[Node.text_node("\n".join(code_lines))])
        if lang:
            node.attrs["language"] = lang
        return node, i

    def _parse_blockquote(self, lines: Sequence[str], i: int) -> Tuple[Node, int]:
        quote_lines = []
        while i < len(lines) and is_quote(lines[i]):
            line = lines[i]
            quote_lines.append(line[2:] if line.startswith("> ") else "")
            i += 1
        return Node(NodeType.BLOCKQUOTE, content=self._parse_blocks(quote_lines)), i

    def _parse_paragraph(self, lines: Sequence[str], i: int) -> Tuple[Node, int]:
        # The first line is always taken, whatever it looks like.
        para_lines = [lines[i].strip()]
        i += 1
        while i < len(lines) and lines[i].strip() and not starts_block(lines[i]):
            para_lines.append(lines[i].strip())
            i += 1
        return Node(NodeType.PARAGRAPH, content=parse_inline(" ".join(para_lines))), i


def parse(markdown: str) -> Node:
    """Parse a Markdown body into a document tree."""
    return MarkdownToADF().parse(markdown)

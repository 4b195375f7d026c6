"""
ADF to Markdown Converter

Converts an Atlassian Document Format tree to Markdown with handling of:
- Headings, paragraphs, rules and blockquotes
- Nested bullet/ordered lists (renumbered on every render)
- Tables (first row always written as the header)
- Rich text marks (bold, italic, code, strike, links)
- Everything else (media, panels, macros, ...) as preservation markers
"""

from typing import Callable, Dict, List

from jira_sync.adf.nodes import Node
from jira_sync.constants import DEFAULT_HEADING_LEVEL, NodeType
from jira_sync.converter.inline import apply_marks
from jira_sync.converter.lists import render_item, render_list
from jira_sync.converter.preserve import encode_inline_marker, encode_marker
from jira_sync.converter.tables import render_table


def heading_level(attrs: Dict) -> int:
    level = attrs.get("level")
    if isinstance(level, bool) or not isinstance(level, (int, float)):
        return DEFAULT_HEADING_LEVEL
    return int(level)


def _string_attr(node: Node, key: str) -> str:
    value = node.attrs.get(key)
    return value if isinstance(value, str) else ""


def _at_line_start(out: List[str]) -> bool:
    for piece in reversed(out):
        if piece:
            return piece.endswith("\n")
    return True


class ADFToMarkdown:
    """Convert an ADF document tree to Markdown text.

    Node types without a handler are never approximated: they are written
    as preservation markers and restored verbatim by MarkdownToADF.
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[[Node, List[str]], None]] = {
            NodeType.DOC: self._render_children,
            NodeType.PARAGRAPH: self._render_paragraph,
            NodeType.HEADING: self._render_heading,
            NodeType.BULLET_LIST: self._render_list,
            NodeType.ORDERED_LIST: self._render_list,
            NodeType.LIST_ITEM: self._render_list_item,
            NodeType.CODE_BLOCK: self._render_code_block,
            NodeType.BLOCKQUOTE: self._render_blockquote,
            NodeType.RULE: self._render_rule,
            NodeType.TABLE: self._render_table,
            NodeType.TEXT: self._render_text,
            NodeType.HARD_BREAK: self._render_hard_break,
            NodeType.MENTION: self._render_mention,
            NodeType.INLINE_CARD: self._render_inline_card,
            NodeType.EMOJI: self._render_emoji,
        }

    def supports(self, node_type: str) -> bool:
        return node_type in self._handlers

    def convert(self, root: Node) -> str:
        """Convert a document tree to Markdown.

        Args:
            root: ``doc`` node (any node is accepted)

        Returns:
            Markdown string
        """
        out: List[str] = []
        self._render(root, out)
        return "".join(out)

    def _render(self, node: Node, out: List[str]):
        handler = self._handlers.get(node.type)
        if handler is None:
            self._render_preserved(node, out)
        else:
            handler(node, out)

    def _render_children(self, node: Node, out: List[str]):
        for child in node.content:
            self._render(child, out)

    def _children_text(self, node: Node) -> str:
        out: List[str] = []
        self._render_children(node, out)
        return "".join(out)

    def _block_text(self, node: Node) -> str:
        out: List[str] = []
        self._render(node, out)
        return "".join(out)

    def _render_inline_children(self, node: Node, out: List[str]):
        for child in node.content:
            if self.supports(child.type):
                self._render(child, out)
            else:
                out.append(encode_inline_marker(child))

    def _inline_text(self, node: Node) -> str:
        out: List[str] = []
        self._render_inline_children(node, out)
        return "".join(out)

    def _cell_text(self, node: Node) -> str:
        """Text of one table cell child; it must fit on the row's line."""
        if node.type == NodeType.PARAGRAPH:
            return self._inline_text(node)
        if not self.supports(node.type):
            return encode_inline_marker(node)
        return self._block_text(node)

    # ------------------------------------------------------------------
    # Block nodes
    # ------------------------------------------------------------------

    def _render_paragraph(self, node: Node, out: List[str]):
        self._render_inline_children(node, out)
        out.append("\n\n")

    def _render_heading(self, node: Node, out: List[str]):
        out.append("#" * heading_level(node.attrs) + " ")
        self._render_inline_children(node, out)
        out.append("\n\n")

    def _render_list(self, node: Node, out: List[str]):
        out.append(render_list(node, "", self._inline_text, self._block_text))
        # keep adjacent lists apart on re-parse
        out.append("\n")

    def _render_list_item(self, node: Node, out: List[str]):
        out.append(render_item(node, "", self._inline_text, self._block_text))

    def _render_code_block(self, node: Node, out: List[str]):
        lang = _string_attr(node, "language")
        code = "".join(child.text for child in node.content)
        out.append(f"```{lang}\n{code}\n```\n\n")

    def _render_blockquote(self, node: Node, out: List[str]):
        inner = self._children_text(node).rstrip("\n")
        for line in inner.split("\n"):
            out.append(f"> {line}\n")
        out.append("\n")

    def _render_rule(self, node: Node, out: List[str]):
        out.append("---\n\n")

    def _render_table(self, node: Node, out: List[str]):
        out.append(render_table(node, self._cell_text))

    def _render_preserved(self, node: Node, out: List[str]):
        if not _at_line_start(out):
            out.append("\n")
        out.append("\n".join(encode_marker(node)) + "\n\n")

    # ------------------------------------------------------------------
    # Inline nodes
    # ------------------------------------------------------------------

    def _render_text(self, node: Node, out: List[str]):
        out.append(apply_marks(node.text, node.marks))

    def _render_hard_break(self, node: Node, out: List[str]):
        out.append("\n")

    def _render_mention(self, node: Node, out: List[str]):
        name = _string_attr(node, "text")
        if name.startswith("@"):
            name = name[1:]
        out.append(f"@{name}")

    def _render_inline_card(self, node: Node, out: List[str]):
        out.append(f"[link]({_string_attr(node, 'url')})")

    def _render_emoji(self, node: Node, out: List[str]):
        out.append(_string_attr(node, "text") or _string_attr(node, "shortName"))


def render(root: Node) -> str:
    """Render a document tree to Markdown."""
    return ADFToMarkdown().convert(root)

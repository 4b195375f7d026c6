"""
List Conversion

Bullet and ordered lists in both directions. A nested list is indented by
the width of its parent's full prefix (``"- "`` → 2 spaces, ``"  1. "`` → 5),
and any line indented by 2+ spaces or a tab that starts an item is read back
as a sub-list of the item above it.
"""

import re
from typing import Callable, List, Sequence, Tuple

from jira_sync.adf.nodes import Node
from jira_sync.constants import LIST_TYPES, NodeType
from jira_sync.converter.inline import parse_inline

BULLET_ITEM = re.compile(r'^[-*]\s')
ORDERED_ITEM = re.compile(r'^\d+\.\s')
NESTED_ITEM = re.compile(r'^(\s{2,}|\t)([-*]|\d+\.)\s')

RenderFn = Callable[[Node], str]


def item_prefix(list_type: str, position: int) -> str:
    if list_type == NodeType.ORDERED_LIST:
        return f"{position}. "
    return "- "


def render_list(node: Node, indent: str, inline_text: RenderFn, block_text: RenderFn) -> str:
    """Render a bullet/ordered list; items are numbered by render position."""
    parts = []
    for position, item in enumerate(node.content, start=1):
        prefix = indent + item_prefix(node.type, position)
        parts.append(render_item(item, prefix, inline_text, block_text))
    return "".join(parts)


def render_item(item: Node, prefix: str, inline_text: RenderFn, block_text: RenderFn) -> str:
    if item.type != NodeType.LIST_ITEM:
        return block_text(item)

    parts = []
    for idx, child in enumerate(item.content):
        if idx == 0 and child.type == NodeType.PARAGRAPH:
            parts.append(f"{prefix}{inline_text(child)}\n")
        elif child.type in LIST_TYPES:
            parts.append(render_list(child, " " * len(prefix), inline_text, block_text))
        else:
            parts.append(block_text(child))
    return "".join(parts)


def parse_list(lines: Sequence[str], i: int, ordered: bool) -> Tuple[List[Node], int]:
    """Parse list items of one kind starting at ``lines[i]``.

    Returns:
        (listItem nodes, index of the first line after the list)
    """
    item_re = ORDERED_ITEM if ordered else BULLET_ITEM
    items: List[Node] = []

    while i < len(lines):
        match = item_re.match(lines[i])
        if not match:
            break

        paragraph = Node(NodeType.PARAGRAPH, content=parse_inline(lines[i][match.end():]))
        item = Node(NodeType.LIST_ITEM, content=[paragraph])
        i += 1

        while i < len(lines) and NESTED_ITEM.match(lines[i]):
            sub_list, i = _parse_sub_list(lines, i)
            item.content.append(sub_list)

        items.append(item)

    return items, i


def _parse_sub_list(lines: Sequence[str], i: int) -> Tuple[Node, int]:
    """Collect the indented run at ``lines[i]`` and parse it one level down."""
    first = lines[i]
    indent = first[:len(first) - len(first.lstrip())]
    ordered = ORDERED_ITEM.match(first[len(indent):]) is not None
    item_re = ORDERED_ITEM if ordered else BULLET_ITEM

    sub_lines = []
    while i < len(lines) and lines[i].startswith(indent):
        rest = lines[i][len(indent):]
        if not (item_re.match(rest) or NESTED_ITEM.match(rest)):
            break
        sub_lines.append(rest)
        i += 1

    items, _ = parse_list(sub_lines, 0, ordered)
    list_type = NodeType.ORDERED_LIST if ordered else NodeType.BULLET_LIST
    return Node(list_type, content=items), i

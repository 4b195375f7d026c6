"""
Table Conversion

Pipe tables in both directions. The renderer always writes the first row as
a header with a ``| --- |`` separator under it; the parser only treats the
first row as a header when the second row is such a separator.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from jira_sync.adf.nodes import Node
from jira_sync.constants import INLINE_TYPES, NodeType, TABLE_DEFAULT_ATTRS
from jira_sync.converter.inline import parse_inline


def split_row(line: str) -> List[str]:
    """Split a ``| a | b |`` row into stripped cell texts."""
    line = line.strip()
    if line.startswith("|"):
        line = line[1:]
    if line.endswith("|"):
        line = line[:-1]
    return [cell.strip() for cell in line.split("|")]


def is_separator(cells: Sequence[str]) -> bool:
    return all(not cell.strip().strip(":-") for cell in cells)


def build_cell(cell_type: str, text: str) -> Node:
    """Build one cell; preserved block nodes sit beside the paragraphs."""
    content: List[Node] = []
    run: List[Node] = []

    def flush():
        if any(n.type != NodeType.TEXT or n.text.strip() for n in run):
            content.append(Node(NodeType.PARAGRAPH, content=list(run)))
        run.clear()

    for node in parse_inline(text):
        if node.type in INLINE_TYPES:
            run.append(node)
        else:
            flush()
            content.append(node)
    flush()

    if not content:
        content.append(Node(NodeType.PARAGRAPH, content=parse_inline("")))
    return Node(cell_type, content=content)


def build_row(cells: Sequence[str], header: bool) -> Node:
    cell_type = NodeType.TABLE_HEADER if header else NodeType.TABLE_CELL
    return Node(NodeType.TABLE_ROW, content=[build_cell(cell_type, text) for text in cells])


def parse_table(lines: Sequence[str], i: int) -> Tuple[Optional[Node], int]:
    """Parse the run of pipe rows starting at ``lines[i]``.

    Ragged rows are kept as they are. Fewer than two rows is not a table.

    Returns:
        (table node, index after the table) or (None, i)
    """
    start = i
    table_lines = []
    while i < len(lines) and lines[i].strip().startswith("|"):
        table_lines.append(lines[i].strip())
        i += 1

    if len(table_lines) < 2:
        return None, start

    rows = []
    if is_separator(split_row(table_lines[1])):
        rows.append(build_row(split_row(table_lines[0]), header=True))
        body = table_lines[2:]
    else:
        body = table_lines
    rows.extend(build_row(split_row(line), header=False) for line in body)

    return Node(NodeType.TABLE, content=rows, attrs=dict(TABLE_DEFAULT_ATTRS)), i


def strip_header_bold(text: str) -> str:
    """Drop one ``**...**`` pair from header text (header cells are bold already)."""
    if text.startswith("**") and text.endswith("**") and len(text) > 4:
        return text[2:-2]
    return text


def render_table(node: Node, cell_text: Callable[[Node], str]) -> str:
    """Render a table; ``cell_text`` renders one child of a cell."""
    rows: List[List[str]] = []
    for row in node.content:
        if row.type != NodeType.TABLE_ROW:
            continue
        cells = []
        for cell in row.content:
            text = "".join(cell_text(child) for child in cell.content)
            text = " ".join(text.split("\n")).strip()
            if cell.type == NodeType.TABLE_HEADER:
                text = strip_header_bold(text)
            cells.append(text)
        rows.append(cells)

    if not rows:
        return ""

    width = max(len(row) for row in rows)

    def format_row(cells: List[str]) -> str:
        padded = cells + [""] * (width - len(cells))
        return "| " + " | ".join(padded) + " |"

    lines = [format_row(rows[0]), format_row(["---"] * width)]
    lines.extend(format_row(row) for row in rows[1:])
    return "\n".join(lines) + "\n\n"

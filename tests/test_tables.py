"""
Unit tests for table conversion.
"""

from conftest import doc, paragraph, text

from jira_sync.adf.nodes import Node
from jira_sync.converter import parse, render
from jira_sync.converter.tables import build_row, is_separator, parse_table, split_row, strip_header_bold


def cell(kind: str, *children: Node) -> Node:
    return Node(kind, content=[paragraph(*children)])


def table(*rows) -> Node:
    return Node("table", content=[Node("tableRow", content=list(r)) for r in rows])


class TestRenderTable:
    """Tests for rendering tables."""

    def test_header_bold_is_stripped(self):
        tree = doc(table(
            [cell("tableHeader", text("Name", "strong")), cell("tableHeader", text("Value", "strong"))],
            [cell("tableCell", text("a")), cell("tableCell", text("1"))],
        ))
        assert render(tree) == "| Name | Value |\n| --- | --- |\n| a | 1 |\n\n"

    def test_first_row_is_always_the_header(self):
        tree = doc(table(
            [cell("tableCell", text("a")), cell("tableCell", text("b"))],
            [cell("tableCell", text("c")), cell("tableCell", text("d"))],
        ))
        assert render(tree) == "| a | b |\n| --- | --- |\n| c | d |\n\n"

    def test_ragged_rows_are_padded(self):
        tree = doc(table(
            [cell("tableHeader", text("A")), cell("tableHeader", text("B"))],
            [cell("tableCell", text("1"))],
        ))
        assert render(tree) == "| A | B |\n| --- | --- |\n| 1 |  |\n\n"

    def test_line_breaks_in_cells_are_flattened(self):
        tree = doc(table(
            [cell("tableHeader", text("H"))],
            [cell("tableCell", text("a"), Node("hardBreak"), text("b"))],
        ))
        assert render(tree) == "| H |\n| --- |\n| a b |\n\n"

    def test_empty_table(self):
        assert render(doc(Node("table"))) == ""

    def test_strip_header_bold_once(self):
        assert strip_header_bold("**x**") == "x"
        assert strip_header_bold("****") == "****"
        assert strip_header_bold("plain") == "plain"


class TestParseTable:
    """Tests for parsing pipe tables."""

    def test_header_and_data_rows(self):
        node, end = parse_table(["| A | B |", "| --- | --- |", "| 1 | 2 |"], 0)
        assert end == 3
        assert [c.type for c in node.content[0].content] == ["tableHeader", "tableHeader"]
        assert [c.type for c in node.content[1].content] == ["tableCell", "tableCell"]
        assert node.attrs == {"isNumberColumnEnabled": False, "layout": "default"}

    def test_alignment_separator(self):
        assert is_separator(split_row("| :--- | ---: | :-: |"))
        assert not is_separator(split_row("| a | --- |"))

    def test_no_separator_means_no_header(self):
        node, _ = parse_table(["| a | b |", "| c | d |"], 0)
        assert len(node.content) == 2
        assert all(c.type == "tableCell" for row in node.content for c in row.content)

    def test_single_row_is_not_a_table(self):
        assert parse_table(["| lone |", "text"], 0) == (None, 0)

    def test_split_row(self):
        assert split_row("|  a | b  |") == ["a", "b"]
        assert split_row("| a | b") == ["a", "b"]

    def test_inline_marks_in_cells(self):
        tree = parse("| **k** | `v` |\n| --- | --- |\n| x | y |")
        header_cell = tree.content[0].content[0].content[0]
        assert header_cell.content[0].content[0].marks[0].type == "strong"


class TestPreservedCells:
    """Nodes without a markdown form keep their place inside cells."""

    def round_trip_cell(self, data_cell: Node) -> Node:
        tree = doc(table([cell("tableHeader", text("H"))], [data_cell]))
        restored = parse(render(tree))
        return restored.content[0].content[1].content[0]

    def test_panel_in_cell(self):
        panel = Node("panel", content=[paragraph(text("careful"))], attrs={"panelType": "warning"})
        restored = self.round_trip_cell(Node("tableCell", content=[panel]))
        assert restored == Node("tableCell", content=[panel])

    def test_image_in_cell(self, media_node):
        restored = self.round_trip_cell(Node("tableCell", content=[media_node]))
        assert media_node in restored.content
        assert restored.content == [media_node]

    def test_text_beside_image(self, media_node):
        data_cell = Node("tableCell", content=[paragraph(text("logo")), media_node])
        assert self.round_trip_cell(data_cell) == data_cell

    def test_inline_node_in_cell(self):
        status = Node("status", attrs={"text": "DONE", "color": "green"})
        data_cell = cell("tableCell", text("state "), status)
        assert self.round_trip_cell(data_cell) == data_cell

    def test_row_stays_one_line(self, media_node):
        tree = doc(table([cell("tableHeader", text("H"))], [Node("tableCell", content=[media_node])]))
        assert len(render(tree).rstrip("\n").split("\n")) == 3

    def test_empty_cell_keeps_empty_paragraph(self):
        row = build_row(["", "x"], header=False)
        assert row.content[0] == cell("tableCell", text(""))

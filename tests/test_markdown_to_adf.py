"""
Unit tests for the Markdown to ADF parser.
"""

from jira_sync.converter import parse


def types(tree):
    return [n.type for n in tree.content]


class TestBlocks:
    """Tests for block recognition."""

    def test_doc_has_version(self):
        tree = parse("")
        assert tree.type == "doc"
        assert tree.attrs == {"version": 1}
        assert tree.content == []

    def test_headings(self):
        tree = parse("# One\n### Three\n###### Six")
        assert [n.attrs["level"] for n in tree.content] == [1, 3, 6]
        assert tree.content[1].plain_text() == "Three"

    def test_hash_without_space_is_text(self):
        tree = parse("#hashtag")
        assert types(tree) == ["paragraph"]
        assert tree.plain_text() == "#hashtag"

    def test_rules(self):
        assert types(parse("---\n***\n___")) == ["rule", "rule", "rule"]

    def test_code_block(self):
        tree = parse("```go\nfmt.Println(1)\n\n# not a heading\n```")
        node = tree.content[0]
        assert node.type == "codeBlock"
        assert node.attrs == {"language": "go"}
        assert node.content[0].text == "fmt.Println(1)\n\n# not a heading"

    def test_unclosed_code_block_runs_to_end(self):
        tree = parse("```\na\nb")
        assert types(tree) == ["codeBlock"]
        assert tree.content[0].content[0].text == "a\nb"

    def test_blockquote_contents_are_parsed(self):
        tree = parse("> # Title\n> - item\n>\n> text")
        quote = tree.content[0]
        assert quote.type == "blockquote"
        assert types(quote) == ["heading", "bulletList", "paragraph"]

    def test_paragraph_lines_are_joined(self):
        tree = parse("first line\n  second line\n\nnext")
        assert types(tree) == ["paragraph", "paragraph"]
        assert tree.content[0].plain_text() == "first line second line"

    def test_paragraph_stops_at_block_start(self):
        assert types(parse("text\n- item")) == ["paragraph", "bulletList"]
        assert types(parse("text\n## H")) == ["paragraph", "heading"]

    def test_windows_line_endings(self):
        tree = parse("# T\r\n\r\nbody\r\n")
        assert types(tree) == ["heading", "paragraph"]
        assert tree.content[1].plain_text() == "body"


class TestNeverStalls:
    """Inputs that look like a block but are not one still make progress."""

    def test_lone_pipe_line(self):
        tree = parse("| lone\nnext line")
        assert types(tree) == ["paragraph"]
        assert tree.plain_text() == "| lone next line"

    def test_lone_pipe_line_before_block(self):
        assert types(parse("| lone\n# H")) == ["paragraph", "heading"]

    def test_malformed_marker_is_text(self):
        """A marker whose middle line lacks the data prefix is ordinary text."""
        md = (
            "<!-- PRESERVED: Inline image — Do not edit this block; it is restored on push. -->\n"
            "not data\n"
            "<!-- /PRESERVED -->\n"
        )
        tree = parse(md)
        assert types(tree) == ["paragraph"]
        assert "not data" in tree.plain_text()

    def test_marker_start_at_end_of_input(self):
        tree = parse("<!-- PRESERVED: Date — x -->")
        assert types(tree) == ["paragraph"]

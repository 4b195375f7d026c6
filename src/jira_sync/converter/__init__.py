"""
Converter Package

Bidirectional conversion between Markdown and ADF document trees, with
preservation markers for node types markdown cannot express.

Usage:
    from jira_sync.converter import ADFToMarkdown, MarkdownToADF

    # ADF → Markdown
    markdown = ADFToMarkdown().convert(doc)

    # Markdown → ADF
    doc = MarkdownToADF().parse(markdown)

    # Separate frontmatter from the body
    metadata, body = split_frontmatter(content)
"""

from jira_sync.converter.adf_to_markdown import ADFToMarkdown, render
from jira_sync.converter.markdown_to_adf import MarkdownToADF, parse
from jira_sync.converter.frontmatter import split_frontmatter, strip_frontmatter
from jira_sync.converter.preserve import decode_marker, encode_marker

__all__ = [
    'ADFToMarkdown', 'MarkdownToADF', 'render', 'parse',
    'split_frontmatter', 'strip_frontmatter',
    'encode_marker', 'decode_marker',
]

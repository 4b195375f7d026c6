"""
Constants Module

Defines constants used across the jira-sync project.
"""

from types import MappingProxyType


# =============================================================================
# ADF Node Types
# =============================================================================

class NodeType:
    """Atlassian Document Format node types handled by the converter."""
    DOC = "doc"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    CODE_BLOCK = "codeBlock"
    BLOCKQUOTE = "blockquote"
    RULE = "rule"
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_HEADER = "tableHeader"
    TABLE_CELL = "tableCell"
    TEXT = "text"
    HARD_BREAK = "hardBreak"
    MENTION = "mention"
    INLINE_CARD = "inlineCard"
    EMOJI = "emoji"


class MarkType:
    """ADF inline mark types."""
    STRONG = "strong"
    EM = "em"
    CODE = "code"
    STRIKE = "strike"
    LINK = "link"
    UNDERLINE = "underline"
    SUBSUP = "subsup"


LIST_TYPES = frozenset({NodeType.BULLET_LIST, NodeType.ORDERED_LIST})

# Node types that live inside a paragraph rather than beside it
INLINE_TYPES = frozenset({
    NodeType.TEXT,
    NodeType.HARD_BREAK,
    NodeType.MENTION,
    NodeType.INLINE_CARD,
    NodeType.EMOJI,
    "status",
    "date",
    "placeholder",
    "inlineExtension",
    "mediaInline",
})

DEFAULT_HEADING_LEVEL = 2

DOC_VERSION = 1

# Attributes given to tables built from markdown
TABLE_DEFAULT_ATTRS = MappingProxyType({
    "isNumberColumnEnabled": False,
    "layout": "default",
})


# =============================================================================
# Preservation Markers
# =============================================================================

PRESERVE_START = "<!-- PRESERVED:"
PRESERVE_DATA = "<!-- data:"
PRESERVE_END = "<!-- /PRESERVED -->"
COMMENT_CLOSE = " -->"

PRESERVE_NOTICE = "Do not edit this block; it is restored on push."
PRESERVE_FAILED_NOTICE = "Could not serialize for round-trip"

# Human-readable descriptions for preserved node types
PRESERVED_DESCRIPTIONS = MappingProxyType({
    "mediaSingle": "Inline image",
    "mediaGroup": "Image group",
    "media": "Attachment",
    "panel": "Info/warning panel",
    "expand": "Expand/collapse section",
    "nestedExpand": "Nested expand section",
    "extension": "JIRA extension",
    "bodiedExtension": "JIRA macro",
    "inlineExtension": "Inline JIRA macro",
    "multiBodiedExtension": "Multi-body JIRA macro",
    "layoutSection": "Layout columns",
    "layoutColumn": "Layout column",
    "decisionList": "Decision list",
    "decisionItem": "Decision item",
    "taskList": "Task checklist",
    "taskItem": "Task checkbox",
    "status": "Status lozenge",
    "date": "Date",
    "placeholder": "Placeholder",
})


# =============================================================================
# Document Layout
# =============================================================================

FRONTMATTER_DELIMITER = "---"

JIRA_READONLY_NOTICE = (
    "# READ-ONLY metadata pulled from JIRA. Changes here are NOT pushed back.\n"
    "# Only the document body (below the frontmatter) is synced on push.\n"
)

CONFLUENCE_READONLY_NOTICE = (
    "# READ-ONLY metadata pulled from Confluence. Changes here are NOT pushed back.\n"
    "# Only the document body (below the frontmatter) is synced on push.\n"
)

DESCRIPTION_HEADING = "## Description"
COMMENTS_HEADING = "## Comments"
NO_DESCRIPTION = "(No description)"
NO_CONTENT = "(No content)"

CONFLUENCE_SOURCE = "confluence"
CONFLUENCE_REPRESENTATION = "atlas_doc_format"
CONFLUENCE_PUSH_MESSAGE = "Updated via jira-sync push"


# =============================================================================
# API Constants
# =============================================================================

ISSUE_FIELDS = "summary,status,issuetype,priority,labels,assignee,reporter,description,comment,updated"

DEFAULT_TIMEOUT = 30

# Retry settings
API_MAX_RETRIES = 3
API_RETRY_BASE_DELAY = 1.0
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


# =============================================================================
# Configuration
# =============================================================================

CONFIG_FILENAME = ".jira-cli.yaml"
KEYRING_SERVICE = "jira-sync"
KEYRING_TOKEN_KEY = "api_token"

ENV_URL = "JIRA_URL"
ENV_EMAIL = "JIRA_EMAIL"
ENV_TOKEN = "JIRA_TOKEN"
ENV_LOG_LEVEL = "JIRASYNC_LOG_LEVEL"

"""
JIRA / Confluence Client

Combines the base client with issue and Confluence operation mixins.
"""

from jira_sync.jira.base import JiraClientBase
from jira_sync.jira.confluence import ConfluenceOperationsMixin
from jira_sync.jira.issues import IssueOperationsMixin


class JiraClient(JiraClientBase, IssueOperationsMixin, ConfluenceOperationsMixin):
    """REST client for JIRA Cloud (API v3) and Confluence (API v2)."""

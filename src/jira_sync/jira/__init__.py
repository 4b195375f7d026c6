"""
JIRA / Confluence API Client Package

Package Structure:
    - base.py: Core client (session, authentication, error mapping)
    - issues.py: Issue operations (get/update/transitions)
    - confluence.py: Confluence page and space operations
    - retry.py: Exponential backoff for HTTP requests

Usage:
    from jira_sync.jira import JiraClient
"""

from jira_sync.jira.base import JiraClientBase
from jira_sync.jira.client import JiraClient
from jira_sync.jira.confluence import ConfluenceOperationsMixin
from jira_sync.jira.issues import IssueOperationsMixin

__all__ = [
    'JiraClient',
    'JiraClientBase',
    'IssueOperationsMixin',
    'ConfluenceOperationsMixin',
]

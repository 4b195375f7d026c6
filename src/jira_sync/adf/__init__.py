"""
ADF Package

Tree model for Atlassian Document Format content.

Usage:
    from jira_sync.adf import Node, Mark

    doc = Node.from_dict(issue["fields"]["description"])
"""

from jira_sync.adf.nodes import Node, Mark

__all__ = ['Node', 'Mark']

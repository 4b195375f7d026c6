"""
jira-sync

Pull JIRA issues and Confluence pages to Markdown and push edited Markdown
back, keeping rich content the Markdown side cannot express intact.
"""

__version__ = "0.1.0"

"""
Issue Operations Module

JIRA REST API v3 issue endpoints: fetch, update and status transitions.
"""

from typing import Any, Dict, List

from jira_sync.constants import ISSUE_FIELDS
from jira_sync.jira.base import JIRA


class IssueOperationsMixin:
    """Mixin for JIRA issue operations."""

    def get_issue(self, key: str) -> Dict[str, Any]:
        """Fetch a single issue with the fields used by the markdown layer.

        Args:
            key: issue key, e.g. ``PROJ-123``

        Returns:
            issue JSON (``key`` and ``fields``)
        """
        return self._get_json(JIRA, f"/rest/api/3/issue/{key}", params={"fields": ISSUE_FIELDS})

    def update_issue(self, key: str, payload: Dict[str, Any]) -> None:
        """PUT an update payload (``{"fields": {...}}``) to an issue."""
        self._request(JIRA, "PUT", f"/rest/api/3/issue/{key}", ok_statuses=(200, 204), json=payload)

    def get_transitions(self, key: str) -> List[Dict[str, Any]]:
        """Available workflow transitions for an issue."""
        data = self._get_json(JIRA, f"/rest/api/3/issue/{key}/transitions")
        return data.get("transitions") or []

    def do_transition(self, key: str, transition_id: str) -> None:
        self._request(
            JIRA,
            "POST",
            f"/rest/api/3/issue/{key}/transitions",
            ok_statuses=(200, 204),
            json={"transition": {"id": transition_id}},
        )

"""
Confluence Operations Module

Confluence REST API v2 page and space endpoints. Page bodies travel as
ADF documents encoded into a JSON string (``atlas_doc_format``).
"""

from typing import Any, Dict, Optional

from jira_sync.constants import CONFLUENCE_REPRESENTATION
from jira_sync.exceptions import APIError
from jira_sync.jira.base import CONFLUENCE


def page_body(adf_json: str) -> Dict[str, str]:
    return {"representation": CONFLUENCE_REPRESENTATION, "value": adf_json}


class ConfluenceOperationsMixin:
    """Mixin for Confluence page operations."""

    def get_confluence_page(self, page_id: str) -> Dict[str, Any]:
        """Fetch a page with its body in ADF format."""
        return self._get_json(
            CONFLUENCE,
            f"/wiki/api/v2/pages/{page_id}",
            params={"body-format": CONFLUENCE_REPRESENTATION},
        )

    def get_confluence_space(self, space_id: str) -> Dict[str, Any]:
        return self._get_json(CONFLUENCE, f"/wiki/api/v2/spaces/{space_id}")

    def get_confluence_space_by_key(self, space_key: str) -> Dict[str, Any]:
        """Look up a space by its key.

        Raises:
            APIError: 404 when no space carries that key
        """
        data = self._get_json(CONFLUENCE, "/wiki/api/v2/spaces", params={"keys": space_key})
        results = data.get("results") or []
        if not results:
            raise APIError(CONFLUENCE, 404, f"space {space_key!r} not found")
        return results[0]

    def create_confluence_page(
        self,
        space_id: str,
        title: str,
        adf_json: str,
        parent_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a page and return the created page JSON."""
        payload = {
            "spaceId": space_id,
            "status": "current",
            "title": title,
            "body": page_body(adf_json),
        }
        if parent_id:
            payload["parentId"] = parent_id
        response = self._request(CONFLUENCE, "POST", "/wiki/api/v2/pages", ok_statuses=(200, 201), json=payload)
        return response.json()

    def update_confluence_page(
        self,
        page_id: str,
        title: str,
        adf_json: str,
        version: int,
        message: str = "",
    ) -> None:
        """Replace a page body; ``version`` must be the current version + 1."""
        payload = {
            "id": page_id,
            "status": "current",
            "title": title,
            "body": page_body(adf_json),
            "version": {"number": version},
        }
        if message:
            payload["version"]["message"] = message
        self._request(CONFLUENCE, "PUT", f"/wiki/api/v2/pages/{page_id}", json=payload)

"""
Base JIRA Client Module

Contains core client functionality:
- Basic authentication (email + API token)
- JSON request/response handling
- Error mapping to APIError
"""

from typing import Any, Dict, Optional

import requests

from jira_sync.config import Config
from jira_sync.exceptions import APIError
from jira_sync.jira.retry import api_request_with_retry
from jira_sync.logger import logger

JIRA = "JIRA"
CONFLUENCE = "Confluence"


class JiraClientBase:
    """Base class for the Atlassian REST client: session, auth and error mapping."""

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            config: connection settings (url, email, token)
            session: optional pre-built session, mainly for tests
        """
        self.base_url = config.url.rstrip("/")
        self.session = session or requests.Session()
        self.session.auth = (config.email, config.token)
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        service: str,
        method: str,
        path: str,
        ok_statuses=(200,),
        **kwargs
    ) -> requests.Response:
        """Send a request and raise APIError on an unexpected status."""
        url = self._url(path)
        logger.debug(f"{method} {url}")
        response = api_request_with_retry(self.session, method, url, **kwargs)
        if response.status_code not in ok_statuses:
            raise APIError(service, response.status_code, response.text)
        return response

    def _get_json(self, service: str, path: str, **kwargs) -> Dict[str, Any]:
        response = self._request(service, "GET", path, **kwargs)
        return response.json()

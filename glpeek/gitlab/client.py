"""Minimal GitLab v4 REST API client scoped to a single host."""

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from glpeek.config import Credentials
from glpeek.gitlab._retry import DEFAULT_TIMEOUT, fetch_url

__all__ = ["GitLabClient"]

logger = logging.getLogger(__name__)


class GitLabClient:
    """Issues project-scoped GET requests against ``https://<host>/api/v4``.

    Parameters
    ----------
    credentials
        Host and bearer token. An empty token sends no ``Authorization`` header.
    port
        Non-standard HTTPS port of the GitLab instance.
    timeout
        Per-request timeout in seconds.
    """

    def __init__(self, credentials: Credentials, port: Optional[int] = None, timeout: float = DEFAULT_TIMEOUT):
        self.credentials = credentials
        self.port = port
        self.timeout = timeout

    @property
    def api_url(self) -> str:
        netloc = f"{self.credentials.host}:{self.port}" if self.port else self.credentials.host
        return f"https://{netloc}/api/v4"

    @property
    def headers(self) -> dict[str, str]:
        if not self.credentials.token:
            return {}
        return {"Authorization": f"Bearer {self.credentials.token}"}

    def project_url(self, organization: str, repository: str, endpoint: str = "") -> str:
        """URL of a project API endpoint; the project path is encoded as a single segment."""
        project_id = quote(f"{organization}/{repository}", safe="")
        url = f"{self.api_url}/projects/{project_id}"
        return f"{url}/{endpoint}" if endpoint else url

    def get(
        self,
        organization: str,
        repository: str,
        endpoint: str = "",
        *,
        params: Optional[dict] = None,
        stream: bool = False,
    ) -> requests.Response:
        """GET a project endpoint.

        Raises
        ------
        requests.exceptions.RequestException
            On network failure or non-2xx response.
        """
        url = self.project_url(organization, repository, endpoint)
        logger.debug(f"GET {url} params={params}")
        response = fetch_url(url, headers=self.headers, params=params, stream=stream, timeout=self.timeout)
        response.raise_for_status()
        return response

    def get_json(
        self,
        organization: str,
        repository: str,
        endpoint: str = "",
        *,
        params: Optional[dict] = None,
    ) -> Any:
        """GET a project endpoint and decode its JSON body.

        Raises
        ------
        requests.exceptions.RequestException
            On network failure or non-2xx response.
        ValueError
            If the body is not valid JSON.
        """
        return self.get(organization, repository, endpoint, params=params).json()

    def stream_archive(self, organization: str, repository: str, sha: str) -> requests.Response:
        """Start streaming the ``tar.gz`` archive of the repository at ``sha``."""
        return self.get(organization, repository, "repository/archive.tar.gz", params={"sha": sha}, stream=True)

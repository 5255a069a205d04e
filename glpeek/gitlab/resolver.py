"""Resolve a repository reference to the commit that should be peeked."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests
from typing_extensions import assert_never

from glpeek.config import token_variable
from glpeek.exceptions import ResolutionError
from glpeek.gitlab.client import GitLabClient
from glpeek.url import Category, RepoRef

__all__ = [
    "ResolvedTarget",
    "fetch_default_branch",
    "fetch_last_commit",
    "fetch_merge_request_branch",
    "resolve_target",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTarget:
    """Commit to download.

    Attributes
    ----------
    ref_label
        Branch name or commit SHA; only used to name the destination folder.
    commit_sha
        Commit the archive is fetched at.
    """

    ref_label: str
    commit_sha: str


def _request(
    client: GitLabClient,
    stage: str,
    organization: str,
    repository: str,
    ref: Optional[str],
    endpoint: str = "",
    params: Optional[dict] = None,
) -> Any:
    try:
        return client.get_json(organization, repository, endpoint, params=params)
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        reason = str(e)
        if status in (401, 403, 404) and not client.credentials.token:
            reason += f" (no {token_variable(client.credentials.host)} configured for this host)"
        raise ResolutionError(stage, organization, repository, ref, reason) from e
    except (requests.exceptions.RequestException, ValueError) as e:
        raise ResolutionError(stage, organization, repository, ref, str(e)) from e


def _require(payload: Any, key: str, stage: str, organization: str, repository: str, ref: Optional[str]) -> str:
    value = payload.get(key) if isinstance(payload, dict) else None
    if not value or not isinstance(value, str):
        raise ResolutionError(stage, organization, repository, ref, f'response has no "{key}"')
    return value


def fetch_default_branch(client: GitLabClient, organization: str, repository: str) -> str:
    stage = "fetch default branch"
    project = _request(client, stage, organization, repository, None)
    return _require(project, "default_branch", stage, organization, repository, None)


def fetch_last_commit(client: GitLabClient, organization: str, repository: str, branch: str) -> str:
    """SHA of the most recent commit on ``branch``."""
    stage = "fetch last commit"
    commits = _request(
        client,
        stage,
        organization,
        repository,
        branch,
        "repository/commits",
        params={"ref_name": branch, "per_page": 1, "page": 1},
    )
    if not isinstance(commits, list) or not commits:
        raise ResolutionError(stage, organization, repository, branch, "no commits found")
    return _require(commits[0], "id", stage, organization, repository, branch)


def fetch_merge_request_branch(client: GitLabClient, organization: str, repository: str, merge_request_id: str) -> str:
    """Source branch of merge request ``!merge_request_id``."""
    stage = "fetch merge request"
    ref = f"!{merge_request_id}"
    merge_request = _request(client, stage, organization, repository, ref, f"merge_requests/{merge_request_id}")
    return _require(merge_request, "source_branch", stage, organization, repository, ref)


def resolve_target(client: GitLabClient, ref: RepoRef) -> ResolvedTarget:
    """Determine the commit (and its label) that ``ref`` points at.

    API calls are sequential; each depends on the previous result.

    * Repository root: default branch, then its last commit.
    * Tree: last commit of the branch.
    * Commit: the commit itself, no API call.
    * Merge request: source branch, then its last commit.

    Parameters
    ----------
    client
        Client for the host ``ref`` lives on.
    ref
        Parsed repository reference.

    Returns
    -------
    ResolvedTarget

    Raises
    ------
    ResolutionError
        If any API call fails or returns an unexpected payload.
    """
    organization, repository = ref.organization, ref.repository
    category = ref.category

    if category is None:
        branch = fetch_default_branch(client, organization, repository)
    elif category is Category.TREE:
        branch = ref.identifier
    elif category is Category.COMMIT:
        return ResolvedTarget(ref_label=ref.identifier, commit_sha=ref.identifier)
    elif category is Category.MERGE_REQUEST:
        branch = fetch_merge_request_branch(client, organization, repository, ref.identifier)
    else:
        assert_never(category)

    commit_sha = fetch_last_commit(client, organization, repository, branch)
    logger.debug(f"Resolved {ref.project_path}@{branch} to {commit_sha}")
    return ResolvedTarget(ref_label=branch, commit_sha=commit_sha)

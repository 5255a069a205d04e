from .client import GitLabClient
from .resolver import (
    ResolvedTarget,
    fetch_default_branch,
    fetch_last_commit,
    fetch_merge_request_branch,
    resolve_target,
)

__all__ = [
    "GitLabClient",
    "ResolvedTarget",
    "fetch_default_branch",
    "fetch_last_commit",
    "fetch_merge_request_branch",
    "resolve_target",
]

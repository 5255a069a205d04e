import os
from pathlib import Path
from typing import Optional

from glpeek.archive import TOKEN_ENV_VAR, extract_archive
from glpeek.cli.common import VerboseFlag, configure_logging, remove_stacktrace
from glpeek.config import Credentials, resolve_credentials
from glpeek.gitlab import GitLabClient


def archive(
    destination: Path,
    *,
    host: str,
    organization: str,
    repository: str,
    sha: str,
    port: Optional[int] = None,
    verbose: VerboseFlag = False,
):
    """Download and extract a repository archive into a folder.

    Used by ``gl-peek <URL>`` to fetch in the background.

    Parameters
    ----------
    destination: Path
        Folder to extract into.
    host: str
        GitLab host, like gitlab.com.
    organization: str
        Repository namespace.
    repository: str
        Repository name.
    sha: str
        Commit to download.
    port: Optional[int]
        Non-standard HTTPS port of the GitLab instance.
    """
    configure_logging(verbose)
    token = os.environ.get(TOKEN_ENV_VAR)
    credentials = Credentials(host=host, token=token) if token is not None else resolve_credentials(host)
    client = GitLabClient(credentials, port=port)

    with remove_stacktrace():
        extract_archive(client, organization, repository, sha, destination)

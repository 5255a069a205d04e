"""Download and extract repository archives."""

import logging
import os
import posixpath
import subprocess  # nosec
import sys
import tarfile
import tempfile
from pathlib import Path, PurePosixPath
from typing import Optional

import requests

from glpeek.config import Credentials
from glpeek.exceptions import ArchiveError
from glpeek.gitlab import GitLabClient
from glpeek.typing import PathType

__all__ = [
    "TOKEN_ENV_VAR",
    "destination_folder",
    "destination_name",
    "extract_archive",
    "slugify",
    "spawn_archive_fetch",
]

logger = logging.getLogger(__name__)

# Passes the token to the background worker without exposing it in the process list.
TOKEN_ENV_VAR = "GL_PEEK_TOKEN"

# Python 3.12+ (and security backports) sanitize members on extraction.
_EXTRACT_KWARGS = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}
_FILTER_ERRORS = (tarfile.FilterError,) if hasattr(tarfile, "FilterError") else ()


def slugify(ref_label: str) -> str:
    return ref_label.replace("/", "-")


def destination_name(repository: str, ref_label: str, sha: str) -> str:
    """Folder name for a peeked repository.

    Examples
    --------
    >>> destination_name("widgets", "feature/foo", "deadbeef")
    'widgets-feature-foo-deadbeef'
    """
    return f"{repository}-{slugify(ref_label)}-{sha}"


def destination_folder(repository: str, ref_label: str, sha: str, root: Optional[PathType] = None) -> Path:
    """Absolute destination folder, under the system temporary directory by default."""
    if root is None:
        root = tempfile.gettempdir()
    return Path(root).absolute() / destination_name(repository, ref_label, sha)


def _strip_root(name: str) -> str:
    """Remove the ``<repo>-<ref>-<sha>/`` folder GitLab wraps archive contents in."""
    parts = name.split("/", 1)
    return parts[1] if len(parts) > 1 else ""


def _is_safe(name: str) -> bool:
    path = PurePosixPath(name)
    return bool(name) and not path.is_absolute() and ".." not in path.parts


def _link_target(name: str, member: tarfile.TarInfo) -> Optional[str]:
    """Archive-relative path a link member points at; ``None`` for other members."""
    if member.issym():
        return posixpath.normpath(posixpath.join(posixpath.dirname(name), member.linkname))
    if member.islnk():
        return member.linkname
    return None


def extract_archive(client: GitLabClient, organization: str, repository: str, sha: str, dst: PathType) -> Path:
    """Stream the archive of ``organization/repository`` at ``sha`` into ``dst``.

    The archive is never written to disk; it is decompressed and extracted
    while downloading. Archive contents are placed directly in ``dst``.

    Parameters
    ----------
    client
        Client for the repository's host.
    organization
        Repository namespace.
    repository
        Repository name.
    sha
        Commit to fetch.
    dst
        Destination folder. Created if missing.

    Returns
    -------
    Path
        Destination folder.

    Raises
    ------
    ArchiveError
        If the download or extraction fails.
    """
    dst = Path(dst)
    dst.mkdir(parents=True, exist_ok=True)
    description = f"{organization}/{repository}@{sha}"

    try:
        response = client.stream_archive(organization, repository, sha)
    except requests.exceptions.RequestException as e:
        raise ArchiveError(f"Failed to download archive of {description}: {e}") from e

    root = Path(os.path.realpath(dst))
    n_files = 0
    with response:
        response.raw.decode_content = True
        try:
            with tarfile.open(fileobj=response.raw, mode="r|gz") as tar:
                for member in tar:
                    name = _strip_root(member.name)
                    if not name:
                        continue
                    if member.islnk():
                        member.linkname = _strip_root(member.linkname)
                    target = _link_target(name, member)
                    if (
                        not _is_safe(name)
                        or (target is not None and not _is_safe(target))
                        # A previously extracted link may redirect this member.
                        or not Path(os.path.realpath(root / name)).is_relative_to(root)
                    ):
                        logger.warning(f"Skipping unsafe archive member: {member.name}")
                        continue
                    member.name = name
                    try:
                        tar.extract(member, dst, **_EXTRACT_KWARGS)
                    except _FILTER_ERRORS as e:
                        logger.warning(f"Skipping archive member {member.name}: {e}")
                        continue
                    n_files += member.isfile()
        except (tarfile.TarError, OSError, requests.exceptions.RequestException) as e:
            raise ArchiveError(f"Failed to extract archive of {description}: {e}") from e

    logger.info(f"Extracted {n_files} files from {description} to {dst}")
    return dst


def spawn_archive_fetch(
    credentials: Credentials,
    organization: str,
    repository: str,
    sha: str,
    dst: PathType,
    port: Optional[int] = None,
) -> subprocess.Popen:
    """Download and extract an archive in a detached background process.

    Creates ``dst`` and returns immediately. The process is never waited on
    and outlives this one; download failures are not reported back.
    The returned handle may be polled to observe completion.

    Returns
    -------
    subprocess.Popen
        Handle of the background ``gl-peek archive`` process.
    """
    dst = Path(dst)
    dst.mkdir(parents=True, exist_ok=True)

    command = [
        sys.executable,
        "-m",
        "glpeek",
        "archive",
        str(dst),
        "--host",
        credentials.host,
        "--organization",
        organization,
        "--repository",
        repository,
        "--sha",
        sha,
    ]
    if port:
        command.extend(["--port", str(port)])

    env = os.environ.copy()
    env[TOKEN_ENV_VAR] = credentials.token

    logger.debug(f"Spawning background archive fetch: {command}")
    return subprocess.Popen(  # nosec
        command,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )

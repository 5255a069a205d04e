"""GitLab web URL parsing."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import unquote

from glpeek.exceptions import ParseError, UnsupportedCategoryError

__all__ = [
    "Category",
    "ParsedUrl",
    "RepoRef",
    "parse",
    "parse_repo_ref",
    "parse_url",
]

# RFC 3986 Appendix B, with the authority further split into userinfo, host and port.
#
#   ^(([^:/?#]+):)?(//((([^:/?#]+)@)?([^:/?#]+)(:([0-9]+))?))?(/([^?#]*))(\?([^#]*))?(#(.*))?
#    ||            | |||            |         | |            | |        |  |        | |
#    |2 scheme     | ||6 userinfo   7 host    | 9 port       | 11 rpath |  13 query | 15 fragment
#    1 scheme:     | |5 userinfo@             8 :port        10 path    12 ?query   14 #fragment
#                  | 4 authority
#                  3 //authority
URI_REGEX = re.compile(r"^(([^:/?#]+):)?(//((([^:/?#]+)@)?([^:/?#]+)(:([0-9]+))?))?(/([^?#]*))(\?([^#]*))?(#(.*))?")

# Branch names may contain "/", so a tree reference is everything after the marker.
_TREE_PATTERN = re.compile(r"/-/tree/+([^/].*?)/*$")


class Category(Enum):
    """GitLab page types that can be peeked."""

    TREE = "tree"
    COMMIT = "commit"
    MERGE_REQUEST = "merge_requests"


@dataclass(frozen=True)
class ParsedUrl:
    scheme: Optional[str]
    userinfo: Optional[str]
    host: str
    port: Optional[int]
    path: str
    query: Optional[str]
    fragment: Optional[str]


@dataclass(frozen=True)
class RepoRef:
    """Repository and, optionally, the page within it that a URL points at.

    Attributes
    ----------
    organization
        Namespace owning the repository.
    repository
        Repository name.
    category
        Page type; ``None`` for the repository root.
    identifier
        Branch name for ``TREE``, commit SHA for ``COMMIT``,
        merge request IID for ``MERGE_REQUEST``.
    """

    organization: str
    repository: str
    category: Optional[Category] = None
    identifier: Optional[str] = None

    @property
    def project_path(self) -> str:
        return f"{self.organization}/{self.repository}"


def parse_url(url: str) -> ParsedUrl:
    """Decompose ``url`` into its RFC 3986 components.

    Parameters
    ----------
    url
        Any URL string.

    Returns
    -------
    ParsedUrl

    Raises
    ------
    ParseError
        If ``url`` has no host or no path.

    Examples
    --------
    >>> parsed = parse_url("https://user@gitlab.example.com:8443/acme/widgets?x=1#top")
    >>> parsed.host, parsed.port, parsed.path
    ('gitlab.example.com', 8443, '/acme/widgets')
    """
    match = URI_REGEX.match(url.strip())
    if match is None or not match.group(7):
        raise ParseError(f"Could not parse {url}, is it a valid URL?")

    port = match.group(9)
    return ParsedUrl(
        scheme=match.group(2),
        userinfo=match.group(6),
        host=match.group(7).lower(),
        port=int(port) if port else None,
        path=match.group(10),
        query=match.group(13),
        fragment=match.group(15),
    )


def parse_repo_ref(path: str) -> RepoRef:
    """Extract organization, repository and target page from a GitLab URL path.

    Segments are positional: ``/<organization>/<repository>/-/<category>/<identifier>``.
    Nested group namespaces (``/group/subgroup/repository``) are not supported
    and are rejected instead of being mis-extracted.

    Parameters
    ----------
    path
        Path component of a GitLab web URL.

    Returns
    -------
    RepoRef

    Raises
    ------
    ParseError
        If the path does not follow the expected layout.
    UnsupportedCategoryError
        If the path points to a GitLab page other than a tree, commit or merge request.

    Examples
    --------
    >>> parse_repo_ref("/acme/widgets/-/tree/feature/foo-bar")
    RepoRef(organization='acme', repository='widgets', category=<Category.TREE: 'tree'>, identifier='feature/foo-bar')
    """
    segments = [x for x in path.split("/") if x]

    if len(segments) < 2:
        raise ParseError(f'Cannot find an organization and repository in "{path}".')

    organization, repository = segments[0], segments[1]
    if repository.endswith(".git"):
        repository = repository[: -len(".git")]

    if len(segments) == 2 or segments[2:] == ["-"]:
        return RepoRef(organization, repository)

    if segments[2] != "-":
        raise ParseError(f'Unsupported repository path "{path}"; nested namespaces are not supported.')

    try:
        category = Category(segments[3])
    except ValueError:
        raise UnsupportedCategoryError(segments[3]) from None

    if category is Category.TREE:
        match = _TREE_PATTERN.search(path)
        identifier = unquote(match.group(1)) if match else ""
    else:
        identifier = segments[4] if len(segments) > 4 else ""

    if not identifier:
        raise ParseError(f'Missing {category.value} identifier in "{path}".')

    if category is Category.MERGE_REQUEST and not identifier.isdigit():
        raise ParseError(f'Invalid merge request id "{identifier}".')

    return RepoRef(organization, repository, category, identifier)


def parse(url: str) -> tuple[ParsedUrl, RepoRef]:
    """Parse a GitLab web URL into its components and the repository reference it points at."""
    parsed = parse_url(url)
    return parsed, parse_repo_ref(parsed.path)

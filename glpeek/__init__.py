# Don't manually change, let poetry-dynamic-versioning-plugin handle it.
__version__ = "0.0.0"

__all__ = [
    "ArchiveError",
    "Category",
    "Credentials",
    "GitLabClient",
    "GlPeekException",
    "MissingDependencyError",
    "ParseError",
    "RepoRef",
    "ResolutionError",
    "ResolvedTarget",
    "UnsupportedCategoryError",
    "parse",
    "resolve_credentials",
    "resolve_target",
]
from .config import Credentials, resolve_credentials
from .exceptions import (
    ArchiveError,
    GlPeekException,
    MissingDependencyError,
    ParseError,
    ResolutionError,
    UnsupportedCategoryError,
)
from .gitlab import GitLabClient, ResolvedTarget, resolve_target
from .url import Category, RepoRef, parse

from typing import Optional


class GlPeekException(Exception):  # noqa: N818
    """Root gl-peek exception class."""


class ParseError(GlPeekException):
    """Input could not be interpreted as a GitLab repository URL."""


class UnsupportedCategoryError(GlPeekException):
    """URL points to a recognized GitLab page that cannot be peeked (issues, pipelines, ...)."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Category '{category}' not supported.")


class ResolutionError(GlPeekException):
    """A GitLab API call needed to resolve the target commit failed."""

    def __init__(
        self,
        stage: str,
        organization: str,
        repository: str,
        ref: Optional[str] = None,
        reason: str = "",
    ):
        self.stage = stage
        self.organization = organization
        self.repository = repository
        self.ref = ref
        self.reason = reason

        message = f"Failed to {stage} for {organization}/{repository}"
        if ref:
            message += f" ({ref})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MissingDependencyError(GlPeekException):
    """A required external program (like the editor) is unavailable."""


class ArchiveError(GlPeekException):
    """Downloading or extracting a repository archive failed."""

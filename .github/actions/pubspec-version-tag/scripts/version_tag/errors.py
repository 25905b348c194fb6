"""Error types shared across the version tagging package."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003

__all__ = [
    "ConfigurationError",
    "GithubApiError",
    "ManifestError",
    "ReferenceCreationError",
    "TagCreationError",
    "VersionTagError",
]


class VersionTagError(RuntimeError):
    """Raised when the tagging run cannot continue."""

    title = "Version Tag Failure"


class ConfigurationError(VersionTagError):
    """Raised when required runtime configuration is missing or invalid."""

    title = "Configuration Error"


class ManifestError(ConfigurationError):
    """Raised when ``pubspec.yaml`` cannot provide a version.

    Parameters
    ----------
    path : Path
        Path to the manifest file that caused the error.
    message : str
        Human-readable error description.
    """

    title = "pubspec.yaml read failure"

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class GithubApiError(VersionTagError):
    """Raised when the GitHub REST API rejects or fails a request."""

    title = "GitHub API Error"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TagCreationError(VersionTagError):
    """Raised when GitHub refuses to create the annotated tag object."""

    title = "Tag Creation Failure"


class ReferenceCreationError(VersionTagError):
    """Raised when the tag object exists but its reference could not be created.

    The tag object is left in place; ``tag_sha`` identifies it so it can be
    cleaned up or referenced manually.
    """

    title = "Reference Creation Failure"

    def __init__(self, tag_name: str, tag_sha: str, detail: str) -> None:
        message = (
            f"Failed to create reference refs/tags/{tag_name}: {detail} "
            f"(tag object {tag_sha} was created and is now unreferenced)"
        )
        super().__init__(message)
        self.tag_name = tag_name
        self.tag_sha = tag_sha

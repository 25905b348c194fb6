"""Action inputs and runtime context for the version tagging step.

Everything the core needs from the invoking environment is gathered here once,
at the process boundary, into frozen dataclasses. The tagging, changelog and
pipeline modules only ever receive these objects and never consult
``os.environ`` themselves.
"""

from __future__ import annotations

import dataclasses
import typing as typ
from pathlib import Path

from .errors import ConfigurationError

if typ.TYPE_CHECKING:
    from collections import abc as cabc

__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_CHANGELOG_HEAD",
    "DEFAULT_CHANGELOG_STRUCTURE",
    "DEFAULT_PACKAGE_ROOT",
    "ActionInputs",
    "Repository",
    "RuntimeContext",
    "load_runtime_context",
    "parse_repository",
]

DEFAULT_PACKAGE_ROOT = "./"
DEFAULT_CHANGELOG_STRUCTURE = "**{{message}}** {{sha}})\n"
DEFAULT_API_URL = "https://api.github.com"
# Changelogs are always compared against this branch, not the triggering ref.
DEFAULT_CHANGELOG_HEAD = "main"


@dataclasses.dataclass(frozen=True, slots=True)
class Repository:
    """Owner and name of the repository receiving the tag."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        """Return the ``owner/name`` form used by the GitHub API."""
        return f"{self.owner}/{self.name}"


@dataclasses.dataclass(frozen=True, slots=True)
class ActionInputs:
    """Normalised workflow inputs.

    Attributes
    ----------
    package_root : str
        Directory, relative to the workspace, that holds ``pubspec.yaml``.
    tag_prefix : str
        Text prepended to the version when naming the tag.
    tag_suffix : str
        Text appended to the version when naming the tag.
    tag_message : str
        Explicit annotation. Empty means "generate a changelog".
    changelog_structure : str
        Per-commit template rendered by :func:`version_tag.templates.format_commit`.
    """

    package_root: str = DEFAULT_PACKAGE_ROOT
    tag_prefix: str = ""
    tag_suffix: str = ""
    tag_message: str = ""
    changelog_structure: str = DEFAULT_CHANGELOG_STRUCTURE

    @classmethod
    def from_raw(
        cls,
        *,
        package_root: str | None = None,
        tag_prefix: str | None = None,
        tag_suffix: str | None = None,
        tag_message: str | None = None,
        changelog_structure: str | None = None,
    ) -> ActionInputs:
        """Build inputs from raw workflow strings, applying defaults for blanks."""
        return cls(
            package_root=package_root or DEFAULT_PACKAGE_ROOT,
            tag_prefix=tag_prefix or "",
            tag_suffix=tag_suffix or "",
            tag_message=(tag_message or "").strip(),
            changelog_structure=changelog_structure or DEFAULT_CHANGELOG_STRUCTURE,
        )

    def tag_name(self, version: str) -> str:
        """Return the candidate tag name for ``version``."""
        return f"{self.tag_prefix}{version}{self.tag_suffix}"


@dataclasses.dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Values supplied by the GitHub Actions runner."""

    token: str = dataclasses.field(repr=False)
    workspace: Path
    sha: str
    repository: Repository
    api_url: str = DEFAULT_API_URL
    changelog_head: str = DEFAULT_CHANGELOG_HEAD


def parse_repository(full_name: str) -> Repository:
    """Split ``owner/repo`` into a :class:`Repository`.

    Raises
    ------
    ConfigurationError
        If ``full_name`` is not exactly two non-empty components.
    """
    parts = full_name.strip().split("/")
    if len(parts) != 2 or not all(parts):
        msg = f"Repository '{full_name}' must be in owner/repo form."
        raise ConfigurationError(msg)
    return Repository(owner=parts[0], name=parts[1])


def _require(environ: cabc.Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        msg = f"{name} is not set"
        raise ConfigurationError(msg)
    return value


def load_runtime_context(
    environ: cabc.Mapping[str, str], *, token: str | None = None
) -> RuntimeContext:
    """Read the runner-provided context from ``environ``.

    Parameters
    ----------
    environ
        Environment mapping, normally ``os.environ``.
    token
        Token passed through the ``github_token`` input. ``GITHUB_TOKEN`` in
        ``environ`` takes precedence when both are present.

    Returns
    -------
    RuntimeContext
        Frozen context passed to the tagging pipeline.

    Raises
    ------
    ConfigurationError
        If the token, workspace, commit sha or repository is unavailable.
    """
    resolved_token = environ.get("GITHUB_TOKEN") or token
    if not resolved_token:
        msg = "GITHUB_TOKEN is required"
        raise ConfigurationError(msg)

    workspace = _require(environ, "GITHUB_WORKSPACE")
    sha = _require(environ, "GITHUB_SHA")
    repository = parse_repository(_require(environ, "GITHUB_REPOSITORY"))
    api_url = environ.get("GITHUB_API_URL") or DEFAULT_API_URL

    return RuntimeContext(
        token=resolved_token,
        workspace=Path(workspace),
        sha=sha,
        repository=repository,
        api_url=api_url.rstrip("/"),
    )

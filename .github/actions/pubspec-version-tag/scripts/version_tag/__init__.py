"""Version tagging helper package.

This package reads the version from a ``pubspec.yaml`` manifest and creates a
matching annotated tag through the GitHub REST API, optionally annotating it
with a changelog rendered from the commits since the previous tag.
"""

from __future__ import annotations

from .changelog import resolve_tag_message
from .config import ActionInputs, RuntimeContext, load_runtime_context
from .errors import (
    ConfigurationError,
    ManifestError,
    ReferenceCreationError,
    TagCreationError,
    VersionTagError,
)
from .github import GithubClient
from .manifest import read_pubspec_version
from .output import ActionOutputs, emit_error, write_action_outputs
from .pipeline import create_version_tag
from .tagging import tag_exists
from .templates import Commit, format_commit

__all__ = [
    "ActionInputs",
    "ActionOutputs",
    "Commit",
    "ConfigurationError",
    "GithubClient",
    "ManifestError",
    "ReferenceCreationError",
    "RuntimeContext",
    "TagCreationError",
    "VersionTagError",
    "create_version_tag",
    "emit_error",
    "format_commit",
    "load_runtime_context",
    "read_pubspec_version",
    "resolve_tag_message",
    "tag_exists",
    "write_action_outputs",
]

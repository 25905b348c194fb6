"""Read the package version from a ``pubspec.yaml`` manifest."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .errors import ManifestError

__all__ = ["MANIFEST_NAME", "manifest_path", "read_pubspec_version"]

MANIFEST_NAME = "pubspec.yaml"

logger = logging.getLogger(__name__)


def manifest_path(workspace: Path, package_root: str) -> Path:
    """Return the manifest location for ``package_root`` inside ``workspace``."""
    return Path(workspace) / package_root / MANIFEST_NAME


def read_pubspec_version(workspace: Path, package_root: str) -> str:
    """Load ``pubspec.yaml`` and return its top-level ``version`` string.

    Parameters
    ----------
    workspace
        Checkout root supplied by ``GITHUB_WORKSPACE``.
    package_root
        Directory, relative to ``workspace``, containing the manifest.

    Returns
    -------
    str
        The version exactly as written in the manifest.

    Raises
    ------
    ManifestError
        If the file is missing or unreadable, is not UTF-8 YAML, or lacks a
        non-empty string ``version`` field.

    Examples
    --------
    >>> read_pubspec_version(Path("/work"), "packages/app")  # doctest: +SKIP
    '2.3.4'
    """
    path = manifest_path(workspace, package_root)
    logger.debug("::debug::Looking for pubspec.yaml at: %s", path)

    if not path.is_file():
        msg = f"pubspec.yaml does not exist at {path}"
        raise ManifestError(path, msg)

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Unable to read pubspec.yaml: {exc}"
        raise ManifestError(path, msg) from exc

    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in pubspec.yaml: {exc}"
        raise ManifestError(path, msg) from exc

    if not isinstance(parsed, dict) or "version" not in parsed:
        msg = "Invalid pubspec.yaml: missing version field"
        raise ManifestError(path, msg)

    version = parsed["version"]
    if not isinstance(version, str) or not version:
        msg = "Invalid pubspec.yaml: version must be a non-empty string"
        raise ManifestError(path, msg)

    return version

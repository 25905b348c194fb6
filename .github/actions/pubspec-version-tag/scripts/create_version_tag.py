#!/usr/bin/env -S uv run --script
# fmt: off
# /// script
# requires-python = ">=3.12"
# dependencies = [
#   "cyclopts>=3.24,<4.0",
#   "httpx>=0.28,<0.29",
#   "pyyaml>=6.0",
#   "syspath-hack>=0.4.0,<0.5.0",
#   "tenacity>=8.2,<9.0",
# ]
# ///
# fmt: on

"""Create an annotated Git tag for the version declared in ``pubspec.yaml``.

The script reads ``<package_root>/pubspec.yaml`` from the workspace, derives
the tag name ``<tag_prefix><version><tag_suffix>`` and, when no tag of that
name exists, creates the tag object and its ``refs/tags`` reference through
the GitHub REST API. Without an explicit ``tag_message`` the annotation is a
changelog of the commits since the latest existing tag.

Environment Variables
---------------------
GITHUB_TOKEN / INPUT_GITHUB_TOKEN : str
    Token with ``contents:write`` permission.
GITHUB_WORKSPACE, GITHUB_SHA, GITHUB_REPOSITORY : str
    Provided by the runner.
INPUT_PACKAGE_ROOT, INPUT_TAG_PREFIX, INPUT_TAG_SUFFIX : str, optional
    Manifest location and tag naming.
INPUT_TAG_MESSAGE, INPUT_CHANGELOG_STRUCTURE : str, optional
    Explicit annotation or the per-commit changelog template.

Examples
--------
Tag the current checkout locally::

    export GITHUB_WORKSPACE="$(pwd)" GITHUB_SHA="$(git rev-parse HEAD)"
    GITHUB_REPOSITORY=owner/repo GITHUB_TOKEN=ghp_... INPUT_TAG_PREFIX=v \
        uv run create_version_tag.py
"""

from __future__ import annotations

import logging
import os
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from syspath_hack import prepend_to_syspath

# Add script directory to path for version_tag import
_SCRIPT_DIR = Path(__file__).resolve().parent
prepend_to_syspath(_SCRIPT_DIR)

from version_tag import (
    ActionInputs,
    ActionOutputs,
    GithubClient,
    VersionTagError,
    create_version_tag,
    emit_error,
    load_runtime_context,
    read_pubspec_version,
    write_action_outputs,
)
from version_tag.config import DEFAULT_CHANGELOG_STRUCTURE, DEFAULT_PACKAGE_ROOT

app: App = App(
    help="Create a version tag from pubspec.yaml.",
    config=cyclopts.config.Env("INPUT_", command=False),
)

logger = logging.getLogger("version_tag")


def _configure_logging() -> None:
    """Send log records to stderr, at debug level when the runner asks for it."""
    level = logging.DEBUG if os.environ.get("RUNNER_DEBUG") == "1" else logging.INFO
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)
    logger.setLevel(level)


def _github_output_path() -> Path | None:
    output_path = os.environ.get("GITHUB_OUTPUT")
    return Path(output_path) if output_path else None


def _publish(outputs: ActionOutputs) -> None:
    if not write_action_outputs(_github_output_path(), outputs):
        logger.debug("::debug::GITHUB_OUTPUT is not set; outputs were not written")


def run(inputs: ActionInputs, *, github_token: str | None = None) -> int:
    """Run the tagging workflow and publish its outputs.

    Parameters
    ----------
    inputs
        Normalised action inputs.
    github_token
        Token supplied through the ``github_token`` input.

    Returns
    -------
    int
        ``0`` when a tag was created or already existed, ``1`` on failure.
    """
    version = ""
    try:
        context = load_runtime_context(os.environ, token=github_token)
        version = read_pubspec_version(context.workspace, inputs.package_root)
        logger.info("Detected version: %s", version)
        with GithubClient(context.token, api_url=context.api_url) as client:
            outputs = create_version_tag(client, context, inputs, version)
    except VersionTagError as exc:
        emit_error(exc.title, str(exc))
        _publish(ActionOutputs(version=version))
        return 1

    _publish(outputs)
    return 0


@app.default
def main(
    *,
    package_root: str = DEFAULT_PACKAGE_ROOT,
    tag_prefix: str = "",
    tag_suffix: str = "",
    tag_message: str = "",
    changelog_structure: str = DEFAULT_CHANGELOG_STRUCTURE,
    github_token: typ.Annotated[str | None, Parameter(show=False)] = None,
) -> None:
    """Create the version tag for the package at ``package_root``.

    Parameters
    ----------
    package_root
        Directory, relative to the workspace, containing ``pubspec.yaml``.
    tag_prefix
        Text prepended to the version, for example ``v``.
    tag_suffix
        Text appended to the version.
    tag_message
        Explicit tag annotation; blank to generate a changelog.
    changelog_structure
        Template applied to each commit in the changelog.
    github_token
        Token used when ``GITHUB_TOKEN`` is not set.

    Raises
    ------
    SystemExit
        Exits with code 1 when configuration is invalid or GitHub rejects the
        tag or reference creation.
    """
    _configure_logging()
    inputs = ActionInputs.from_raw(
        package_root=package_root,
        tag_prefix=tag_prefix,
        tag_suffix=tag_suffix,
        tag_message=tag_message,
        changelog_structure=changelog_structure,
    )
    exit_code = run(inputs, github_token=github_token)
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    app()

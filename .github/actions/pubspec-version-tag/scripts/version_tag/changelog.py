"""Changelog generation and tag message resolution."""

from __future__ import annotations

import dataclasses
import logging
import typing as typ

from .config import DEFAULT_CHANGELOG_HEAD
from .errors import GithubApiError
from .templates import Commit, format_commit

if typ.TYPE_CHECKING:
    from collections import abc as cabc

    from .config import Repository
    from .github import ExistingTag

__all__ = [
    "ChangelogFailed",
    "ChangelogGenerated",
    "ChangelogOutcome",
    "CompareClient",
    "default_tag_message",
    "generate_changelog",
    "render_changelog",
    "resolve_tag_message",
]

logger = logging.getLogger(__name__)


class CompareClient(typ.Protocol):
    """Subset of :class:`version_tag.github.GithubClient` used for changelogs."""

    def compare_commits(
        self, repository: Repository, base: str, head: str
    ) -> list[Commit]:
        """Return the commits between ``base`` and ``head``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class ChangelogGenerated:
    """Changelog text rendered from the compared commits (may be empty)."""

    text: str


@dataclasses.dataclass(frozen=True, slots=True)
class ChangelogFailed:
    """The commit comparison could not be performed."""

    reason: str


ChangelogOutcome: typ.TypeAlias = ChangelogGenerated | ChangelogFailed


def default_tag_message(version: str) -> str:
    """Return the fallback annotation for ``version``."""
    return f"Version {version}"


def render_changelog(commits: cabc.Iterable[Commit], template: str) -> str:
    """Format each commit with ``template`` and join them with newlines."""
    return "\n".join(format_commit(commit, template) for commit in commits)


def generate_changelog(
    client: CompareClient,
    repository: Repository,
    *,
    base: str,
    head: str,
    template: str,
) -> ChangelogOutcome:
    """Render the commits between ``base`` and ``head`` through ``template``.

    The comparison is attempted once. Commits keep the order the API returns
    them in.
    """
    try:
        commits = client.compare_commits(repository, base, head)
    except GithubApiError as exc:
        return ChangelogFailed(reason=str(exc))
    return ChangelogGenerated(text=render_changelog(commits, template))


def resolve_tag_message(  # noqa: PLR0913
    client: CompareClient,
    repository: Repository,
    *,
    explicit_message: str,
    existing_tags: cabc.Sequence[ExistingTag],
    template: str,
    version: str,
    head: str = DEFAULT_CHANGELOG_HEAD,
) -> str:
    """Decide the annotation for the new tag.

    Parameters
    ----------
    client
        Client used for the commit comparison.
    repository
        Repository that owns the tags.
    explicit_message
        Message supplied through the workflow input. Used verbatim when it is
        not blank.
    existing_tags
        Tags already present, newest first. The first entry is the changelog
        base.
    template
        Per-commit changelog template.
    version
        Version read from the manifest.
    head
        Reference the changelog is compared up to.

    Returns
    -------
    str
        A non-empty message. ``"Version <version>"`` is used whenever no
        explicit message or changelog text is available.
    """
    if explicit_message.strip():
        return explicit_message

    fallback = default_tag_message(version)
    if not existing_tags:
        return fallback

    outcome = generate_changelog(
        client,
        repository,
        base=existing_tags[0].name,
        head=head,
        template=template,
    )
    match outcome:
        case ChangelogGenerated(text=text):
            return text or fallback
        case ChangelogFailed(reason=reason):
            logger.warning("::warning::Failed to generate changelog: %s", reason)
            return fallback

"""Look up existing tags and create the annotated tag plus its reference."""

from __future__ import annotations

import dataclasses
import logging
import typing as typ

from .errors import GithubApiError, ReferenceCreationError, TagCreationError

if typ.TYPE_CHECKING:
    from collections import abc as cabc

    from .config import Repository
    from .github import CreatedReference, CreatedTagObject, ExistingTag

__all__ = [
    "TAG_REF_PREFIX",
    "CreatedTag",
    "TagClient",
    "TagListing",
    "create_tag_reference",
    "fetch_existing_tags",
    "tag_exists",
]

TAG_REF_PREFIX = "refs/tags/"

logger = logging.getLogger(__name__)


class TagClient(typ.Protocol):
    """Subset of :class:`version_tag.github.GithubClient` used for tagging."""

    def list_tags(self, repository: Repository) -> list[ExistingTag]:
        """Return the tags present in ``repository``."""
        ...

    def create_tag(
        self, repository: Repository, *, tag: str, message: str, target_sha: str
    ) -> CreatedTagObject:
        """Create an annotated tag object."""
        ...

    def create_ref(
        self, repository: Repository, *, ref: str, sha: str
    ) -> CreatedReference:
        """Create a git reference."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class TagListing:
    """Result of the tag lookup.

    ``error`` holds the failure reason when the lookup did not succeed, in
    which case ``tags`` is empty.
    """

    tags: tuple[ExistingTag, ...] = ()
    error: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class CreatedTag:
    """The tag object and reference produced by :func:`create_tag_reference`."""

    name: str
    sha: str
    ref: str
    url: str
    message: str


def fetch_existing_tags(client: TagClient, repository: Repository) -> TagListing:
    """Return the repository's tags, or an empty listing if the lookup fails."""
    try:
        tags = client.list_tags(repository)
    except GithubApiError as exc:
        return TagListing(error=str(exc))
    return TagListing(tags=tuple(tags))


def tag_exists(tags: cabc.Iterable[ExistingTag], tag_name: str) -> bool:
    """Return True if a tag named exactly ``tag_name`` is present.

    Examples
    --------
    >>> from version_tag.github import ExistingTag
    >>> tag_exists([ExistingTag("v1.0.0")], "V1.0.0")
    False
    """
    return any(tag.name == tag_name for tag in tags)


def create_tag_reference(
    client: TagClient,
    repository: Repository,
    *,
    tag_name: str,
    message: str,
    target_sha: str,
) -> CreatedTag:
    """Create an annotated tag object for ``target_sha`` and then its reference.

    Parameters
    ----------
    client
        Client used for both mutations.
    repository
        Repository receiving the tag.
    tag_name
        Name of the tag; the reference becomes ``refs/tags/<tag_name>``.
    message
        Annotation stored on the tag object.
    target_sha
        Commit the tag points at.

    Returns
    -------
    CreatedTag
        Identifiers of the new tag object and reference.

    Raises
    ------
    TagCreationError
        If the tag object cannot be created. No reference is attempted.
    ReferenceCreationError
        If the reference cannot be created. The tag object already exists and
        is not removed.
    """
    try:
        tag_object = client.create_tag(
            repository, tag=tag_name, message=message, target_sha=target_sha
        )
    except GithubApiError as exc:
        msg = f"Failed to create tag {tag_name}: {exc}"
        raise TagCreationError(msg) from exc
    logger.info("Created tag object: %s", tag_object.tag)

    try:
        reference = client.create_ref(
            repository, ref=f"{TAG_REF_PREFIX}{tag_name}", sha=tag_object.sha
        )
    except GithubApiError as exc:
        raise ReferenceCreationError(tag_name, tag_object.sha, str(exc)) from exc
    logger.info("Created reference: %s at %s", reference.ref, reference.url)

    return CreatedTag(
        name=tag_name,
        sha=tag_object.sha,
        ref=reference.ref,
        url=reference.url,
        message=message,
    )

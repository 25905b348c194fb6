"""Sequence the tag lookup, message resolution and tag creation."""

from __future__ import annotations

import logging
import typing as typ

from .changelog import CompareClient, resolve_tag_message
from .output import ActionOutputs
from .tagging import TagClient, create_tag_reference, fetch_existing_tags, tag_exists

if typ.TYPE_CHECKING:
    from .config import ActionInputs, RuntimeContext

__all__ = ["VersionTagClient", "create_version_tag"]

logger = logging.getLogger(__name__)


class VersionTagClient(TagClient, CompareClient, typ.Protocol):
    """Every client operation the pipeline relies on."""


def create_version_tag(
    client: VersionTagClient,
    context: RuntimeContext,
    inputs: ActionInputs,
    version: str,
) -> ActionOutputs:
    """Create the tag for ``version`` unless it already exists.

    Parameters
    ----------
    client
        GitHub client providing tag listing, comparison and creation.
    context
        Runner-provided repository, commit sha and changelog head.
    inputs
        Normalised action inputs.
    version
        Version read from ``pubspec.yaml``.

    Returns
    -------
    ActionOutputs
        Outputs for the created tag, or outputs with an empty ``tagname`` when
        the tag already exists.

    Raises
    ------
    TagCreationError
        If the tag object cannot be created.
    ReferenceCreationError
        If the reference to the new tag object cannot be created.
    """
    repository = context.repository
    logger.debug("::debug::Repository: %s", repository.full_name)

    listing = fetch_existing_tags(client, repository)
    if listing.error is not None:
        logger.debug("::debug::No tags found: %s", listing.error)
    tag_name = inputs.tag_name(version)

    if tag_exists(listing.tags, tag_name):
        logger.warning(
            '::warning::Tag "%s" already exists. Skipping tag creation.', tag_name
        )
        return ActionOutputs(version=version)

    message = resolve_tag_message(
        client,
        repository,
        explicit_message=inputs.tag_message,
        existing_tags=listing.tags,
        template=inputs.changelog_structure,
        version=version,
        head=context.changelog_head,
    )

    created = create_tag_reference(
        client,
        repository,
        tag_name=tag_name,
        message=message,
        target_sha=context.sha,
    )
    logger.info("Successfully created tag: %s", created.name)

    return ActionOutputs(
        version=version,
        tagname=created.name,
        tagsha=created.sha,
        taguri=created.url,
        tagmessage=created.message,
        tagref=created.ref,
    )

"""Render changelog lines from commit metadata.

Templates may contain the placeholders ``{{message}}``, ``{{messageHeadline}}``,
``{{author}}`` and ``{{sha}}``. Anything else, including unknown
``{{...}}`` tokens, is copied through untouched.
"""

from __future__ import annotations

import dataclasses
import re
import typing as typ

if typ.TYPE_CHECKING:
    from collections import abc as cabc

__all__ = ["TOKEN_RESOLVERS", "Commit", "format_commit"]


@dataclasses.dataclass(frozen=True, slots=True)
class Commit:
    """A commit returned by the compare endpoint.

    ``author_login`` is ``None`` when the commit email is not linked to a
    GitHub account.
    """

    sha: str
    message: str
    author_login: str | None = None


def _headline(commit: Commit) -> str:
    return commit.message.partition("\n")[0]


TOKEN_RESOLVERS: dict[str, cabc.Callable[[Commit], str]] = {
    "message": lambda commit: commit.message,
    "messageHeadline": _headline,
    "author": lambda commit: commit.author_login or "",
    "sha": lambda commit: commit.sha,
}

_TOKEN_PATTERN = re.compile(
    r"\{\{(" + "|".join(re.escape(name) for name in TOKEN_RESOLVERS) + r")\}\}"
)


def format_commit(commit: Commit, template: str) -> str:
    """Return ``template`` with every recognised token replaced for ``commit``.

    Substitution happens in a single pass, so placeholder text that appears
    inside a commit message is not expanded again.

    Examples
    --------
    >>> commit = Commit(sha="abc123", message="fix: bug\\n\\nDetails")
    >>> format_commit(commit, "- {{messageHeadline}} ({{sha}})")
    '- fix: bug (abc123)'
    """
    return _TOKEN_PATTERN.sub(
        lambda match: TOKEN_RESOLVERS[match.group(1)](commit), template
    )

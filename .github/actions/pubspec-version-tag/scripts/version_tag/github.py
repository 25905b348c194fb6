"""Minimal GitHub REST client for the tag, compare and git database endpoints."""

from __future__ import annotations

import contextlib
import dataclasses
import typing as typ
from urllib.parse import quote

import httpx
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt
from tenacity.wait import wait_base, wait_exponential_jitter

from .config import DEFAULT_API_URL
from .errors import GithubApiError
from .templates import Commit

if typ.TYPE_CHECKING:
    from types import TracebackType

    from .config import Repository

__all__ = [
    "CreatedReference",
    "CreatedTagObject",
    "ExistingTag",
    "GithubClient",
    "GithubRetryError",
]

_MAX_ATTEMPTS = 5
_BACKOFF_FACTOR = 1.5
_INITIAL_DELAY = 1.0
_JITTER = 0.5
_MAX_BACKOFF_WAIT = 60.0
_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
_ERROR_DETAIL_LIMIT = 1024
_TAGS_PAGE_SIZE = 100
_API_VERSION = "2022-11-28"
_USER_AGENT = "pubspec-version-tag-action"


@dataclasses.dataclass(frozen=True, slots=True)
class ExistingTag:
    """A tag as listed by ``GET /repos/{owner}/{repo}/tags``."""

    name: str
    commit_sha: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class CreatedTagObject:
    """Identifiers returned after creating an annotated tag object."""

    sha: str
    tag: str


@dataclasses.dataclass(frozen=True, slots=True)
class CreatedReference:
    """Identifiers returned after creating a git reference."""

    ref: str
    url: str


class GithubRetryError(GithubApiError):
    """Raised to indicate that a read request should be retried."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.retry_after = retry_after


class _RetryAfterWait(wait_base):
    """Wait for ``Retry-After`` when GitHub sends it, else back off with jitter."""

    def __init__(self, backoff: wait_base) -> None:
        self._backoff = backoff

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        if outcome is not None and outcome.failed:
            exception = outcome.exception()
            if (
                isinstance(exception, GithubRetryError)
                and exception.retry_after is not None
            ):
                return exception.retry_after
        return self._backoff(retry_state)


def _retry_wait_strategy() -> wait_base:
    return _RetryAfterWait(
        wait_exponential_jitter(
            initial=_INITIAL_DELAY,
            max=_MAX_BACKOFF_WAIT,
            exp_base=_BACKOFF_FACTOR,
            jitter=_JITTER,
        )
    )


def _extract_error_detail(response: httpx.Response) -> str:
    """Return GitHub's error message, or the raw body, capped in length."""
    detail = ""
    with contextlib.suppress(ValueError):
        payload = response.json()
        if isinstance(payload, dict) and isinstance(payload.get("message"), str):
            detail = payload["message"]
    if not detail:
        detail = response.text.strip() or response.reason_phrase or ""
    return detail[:_ERROR_DETAIL_LIMIT]


def _parse_retry_after_header(value: str | None) -> float | None:
    """Return the ``Retry-After`` delay in seconds, if GitHub sent one."""
    if value is None or not value.strip().isdigit():
        return None
    seconds = int(value.strip())
    if seconds <= 0:
        return None
    return min(float(seconds), _MAX_BACKOFF_WAIT)


def _path_segment(value: str) -> str:
    return quote(value, safe="")


def _raise_for_status(response: httpx.Response, action: str) -> None:
    """Translate a non-success response into :class:`GithubApiError`."""
    if response.is_success:
        return
    status = response.status_code
    detail = _extract_error_detail(response) or "Unknown error"
    message = f"GitHub API request to {action} failed with status {status}: {detail}"
    retry_after = _parse_retry_after_header(response.headers.get("Retry-After"))
    if status in _RETRYABLE_STATUS_CODES or (
        status == httpx.codes.FORBIDDEN and retry_after is not None
    ):
        raise GithubRetryError(message, status_code=status, retry_after=retry_after)
    raise GithubApiError(message, status_code=status)


T = typ.TypeVar("T")


def _json_payload(
    response: httpx.Response, action: str, expected_type: type[T]
) -> T:
    try:
        payload = response.json()
    except ValueError as exc:
        msg = f"GitHub API returned invalid JSON while trying to {action}"
        raise GithubApiError(msg, status_code=response.status_code) from exc
    if not isinstance(payload, expected_type):
        msg = f"GitHub API returned an unexpected payload while trying to {action}"
        raise GithubApiError(msg, status_code=response.status_code)
    return payload


def _commit_from_payload(item: dict[str, typ.Any]) -> Commit:
    details = item.get("commit") or {}
    author = item.get("author")
    login = author.get("login") if isinstance(author, dict) else None
    return Commit(
        sha=str(item.get("sha", "")),
        message=str(details.get("message", "")),
        author_login=login if isinstance(login, str) and login else None,
    )


class GithubClient:
    """Synchronous wrapper around the handful of REST endpoints the action uses.

    Parameters
    ----------
    token
        Token sent as a bearer credential.
    api_url
        Base URL of the REST API; ``GITHUB_API_URL`` on Enterprise Server.
    transport
        Optional ``httpx`` transport, used by tests to stub the network.
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _API_VERSION,
            "User-Agent": _USER_AGENT,
        }
        self._client = httpx.Client(
            base_url=api_url,
            headers=headers,
            timeout=httpx.Timeout(30.0),
            transport=transport,
        )

    def __enter__(self) -> typ.Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._client.close()

    def _send(
        self, method: str, path: str, action: str, **kwargs: typ.Any
    ) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            msg = f"Failed to reach GitHub API to {action}: {exc!s}"
            raise GithubRetryError(msg) from exc
        except httpx.RequestError as exc:
            msg = f"GitHub API request to {action} failed: {exc!s}"
            raise GithubApiError(msg) from exc
        _raise_for_status(response, action)
        return response

    @retry(
        stop=stop_after_attempt(_MAX_ATTEMPTS),
        wait=_retry_wait_strategy(),
        retry=retry_if_exception_type(GithubRetryError),
        reraise=True,
    )
    def list_tags(self, repository: Repository) -> list[ExistingTag]:
        """Return the first page (up to 100) of tags, newest first.

        Transient failures are retried with backoff before giving up.
        """
        action = "list tags"
        response = self._send(
            "GET",
            f"/repos/{repository.owner}/{repository.name}/tags",
            action,
            params={"per_page": _TAGS_PAGE_SIZE},
        )
        payload = _json_payload(response, action, list)
        tags: list[ExistingTag] = []
        for item in payload:
            if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                continue
            commit = item.get("commit")
            commit_sha = commit.get("sha") if isinstance(commit, dict) else None
            tags.append(ExistingTag(item["name"], commit_sha))
        return tags

    def compare_commits(
        self, repository: Repository, base: str, head: str
    ) -> list[Commit]:
        """Return commits reachable from ``head`` but not ``base``, in API order.

        Both names are percent-encoded, so tags containing ``#``, ``%`` or
        ``/`` stay a single path segment.
        """
        action = f"compare {base}...{head}"
        basehead = f"{_path_segment(base)}...{_path_segment(head)}"
        response = self._send(
            "GET",
            f"/repos/{repository.owner}/{repository.name}/compare/{basehead}",
            action,
        )
        payload = _json_payload(response, action, dict)
        commits = payload.get("commits") or []
        return [
            _commit_from_payload(item) for item in commits if isinstance(item, dict)
        ]

    def create_tag(
        self, repository: Repository, *, tag: str, message: str, target_sha: str
    ) -> CreatedTagObject:
        """Create an annotated tag object pointing at commit ``target_sha``."""
        action = f"create tag object {tag}"
        response = self._send(
            "POST",
            f"/repos/{repository.owner}/{repository.name}/git/tags",
            action,
            json={
                "tag": tag,
                "message": message,
                "object": target_sha,
                "type": "commit",
            },
        )
        payload = _json_payload(response, action, dict)
        sha = payload.get("sha")
        if not isinstance(sha, str) or not sha:
            msg = f"GitHub API response to {action} did not include a tag sha"
            raise GithubApiError(msg, status_code=response.status_code)
        return CreatedTagObject(sha=sha, tag=str(payload.get("tag", tag)))

    def create_ref(
        self, repository: Repository, *, ref: str, sha: str
    ) -> CreatedReference:
        """Create the git reference ``ref`` pointing at object ``sha``."""
        action = f"create reference {ref}"
        response = self._send(
            "POST",
            f"/repos/{repository.owner}/{repository.name}/git/refs",
            action,
            json={"ref": ref, "sha": sha},
        )
        payload = _json_payload(response, action, dict)
        return CreatedReference(
            ref=str(payload.get("ref", ref)), url=str(payload.get("url", ""))
        )

"""Action outputs and workflow command helpers."""

from __future__ import annotations

import dataclasses
import sys
import typing as typ
import uuid

if typ.TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "OUTPUT_KEYS",
    "ActionOutputs",
    "emit_error",
    "escape_workflow_data",
    "format_output",
    "write_action_outputs",
]

OUTPUT_KEYS: tuple[str, ...] = (
    "version",
    "tagname",
    "tagsha",
    "taguri",
    "tagmessage",
    "tagref",
)


@dataclasses.dataclass(frozen=True, slots=True)
class ActionOutputs:
    """The complete set of outputs published by the action.

    Every field defaults to an empty string so failure and no-op paths still
    publish all keys.
    """

    version: str = ""
    tagname: str = ""
    tagsha: str = ""
    taguri: str = ""
    tagmessage: str = ""
    tagref: str = ""

    def as_dict(self) -> dict[str, str]:
        """Return the outputs keyed by their workflow names."""
        return {key: getattr(self, key) for key in OUTPUT_KEYS}


def escape_workflow_data(value: str) -> str:
    """Escape ``value`` for use in a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def emit_error(title: str, message: str, *, stream: typ.TextIO | None = None) -> None:
    """Print an error annotation in the format expected by GitHub Actions."""
    target = stream if stream is not None else sys.stderr
    escaped_title = escape_workflow_data(title).replace(",", "%2C")
    print(
        f"::error title={escaped_title}::{escape_workflow_data(message)}",
        file=target,
    )


def format_output(key: str, value: str) -> str:
    """Format one ``GITHUB_OUTPUT`` entry.

    Multi-line values use the heredoc form with a random delimiter so that
    changelog text cannot terminate the value early.
    """
    if "\n" not in value and "\r" not in value:
        return f"{key}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
    return f"{key}<<{delimiter}\n{value}\n{delimiter}\n"


def write_action_outputs(file: Path | None, outputs: ActionOutputs) -> bool:
    """Append every output in ``outputs`` to the ``GITHUB_OUTPUT`` ``file``.

    Returns
    -------
    bool
        False when ``file`` is None and nothing was written.
    """
    if file is None:
        return False
    file.parent.mkdir(parents=True, exist_ok=True)
    with file.open("a", encoding="utf-8") as handle:
        for key, value in outputs.as_dict().items():
            handle.write(format_output(key, value))
    return True

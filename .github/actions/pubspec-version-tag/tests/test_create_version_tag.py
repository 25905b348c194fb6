"""Tests for the ``create_version_tag`` command-line entry point."""

from __future__ import annotations

import typing as typ

import pytest

from _helpers import TAG_OBJECT_SHA, TEST_TOKEN, FakeGithubClient, read_outputs
from version_tag.config import ActionInputs
from version_tag.errors import GithubApiError
from version_tag.github import ExistingTag

if typ.TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType


@pytest.fixture
def installed_client(
    monkeypatch: pytest.MonkeyPatch,
    script_module: ModuleType,
    fake_client: FakeGithubClient,
) -> list[dict[str, object]]:
    """Route the script's client construction to ``fake_client``."""
    constructed: list[dict[str, object]] = []

    def _factory(token: str, **kwargs: object) -> FakeGithubClient:
        constructed.append({"token": token, **kwargs})
        return fake_client

    monkeypatch.setattr(script_module, "GithubClient", _factory)
    return constructed


@pytest.mark.usefixtures("installed_client")
def test_run_publishes_outputs(
    script_module: ModuleType,
    github_env: Path,
    write_pubspec: typ.Callable[..., Path],
) -> None:
    """A successful run writes every output and returns zero."""
    write_pubspec("name: app\nversion: 2.3.4\n")

    exit_code = script_module.run(ActionInputs.from_raw(tag_prefix="v"))

    assert exit_code == 0
    assert read_outputs(github_env) == {
        "version": "2.3.4",
        "tagname": "v2.3.4",
        "tagsha": TAG_OBJECT_SHA,
        "taguri": "https://api.github.com/repos/octo/app/git/refs/tags/v2.3.4",
        "tagmessage": "Version 2.3.4",
        "tagref": "refs/tags/v2.3.4",
    }


def test_run_uses_runner_token_and_api_url(
    script_module: ModuleType,
    github_env: Path,
    write_pubspec: typ.Callable[..., Path],
    installed_client: list[dict[str, object]],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The client is built from the environment token and API root."""
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
    write_pubspec("version: 1.0.0\n")

    script_module.run(ActionInputs.from_raw(), github_token="input-token")  # noqa: S106

    assert installed_client == [
        {"token": TEST_TOKEN, "api_url": "https://ghe.example.com/api/v3"}
    ]


def test_missing_manifest_fails(
    script_module: ModuleType,
    github_env: Path,
    installed_client: list[dict[str, object]],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A missing manifest reports an error and publishes empty outputs."""
    exit_code = script_module.run(ActionInputs.from_raw())

    assert exit_code == 1
    assert installed_client == []
    outputs = read_outputs(github_env)
    assert set(outputs.values()) == {""}
    assert len(outputs) == 6
    err = capsys.readouterr().err
    assert "::error title=pubspec.yaml read failure::" in err
    assert "pubspec.yaml does not exist at" in err


def test_undecodable_manifest_fails_cleanly(
    script_module: ModuleType,
    github_env: Path,
    tmp_path: Path,
    installed_client: list[dict[str, object]],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A manifest that is not UTF-8 is reported like any other manifest error."""
    (tmp_path / "pubspec.yaml").write_bytes(b"version: \xff\n")

    exit_code = script_module.run(ActionInputs.from_raw())

    assert exit_code == 1
    assert installed_client == []
    outputs = read_outputs(github_env)
    assert outputs == dict.fromkeys(
        ("version", "tagname", "tagsha", "taguri", "tagmessage", "tagref"), ""
    )
    err = capsys.readouterr().err
    assert "::error title=pubspec.yaml read failure::Unable to read" in err


@pytest.mark.usefixtures("installed_client")
def test_existing_tag_succeeds_without_tag_outputs(
    script_module: ModuleType,
    github_env: Path,
    write_pubspec: typ.Callable[..., Path],
    fake_client: FakeGithubClient,
) -> None:
    """An existing tag is not an error."""
    fake_client.tags = [ExistingTag("1.0.0")]
    write_pubspec("version: 1.0.0\n")

    exit_code = script_module.run(ActionInputs.from_raw())

    assert exit_code == 0
    outputs = read_outputs(github_env)
    assert outputs["version"] == "1.0.0"
    assert outputs["tagname"] == ""
    assert fake_client.call_names() == ["list_tags"]


@pytest.mark.usefixtures("installed_client")
def test_tag_creation_failure_keeps_version_output(
    script_module: ModuleType,
    github_env: Path,
    write_pubspec: typ.Callable[..., Path],
    fake_client: FakeGithubClient,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A rejected tag object fails the run but still reports the version."""
    fake_client.create_tag_error = GithubApiError("Forbidden", status_code=403)
    write_pubspec("version: 4.0.0\n")

    exit_code = script_module.run(ActionInputs.from_raw())

    assert exit_code == 1
    outputs = read_outputs(github_env)
    assert outputs["version"] == "4.0.0"
    assert outputs["tagname"] == ""
    assert "::error title=Tag Creation Failure::" in capsys.readouterr().err


@pytest.mark.parametrize(
    "name", ["GITHUB_WORKSPACE", "GITHUB_SHA", "GITHUB_REPOSITORY"]
)
def test_missing_runner_variable_fails(
    script_module: ModuleType,
    github_env: Path,
    installed_client: list[dict[str, object]],
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    name: str,
) -> None:
    """Absent runner context stops the run before any API call."""
    monkeypatch.delenv(name)

    assert script_module.run(ActionInputs.from_raw()) == 1
    assert installed_client == []
    assert f"{name} is not set" in capsys.readouterr().err


@pytest.mark.usefixtures("installed_client")
def test_main_exits_non_zero_on_failure(
    script_module: ModuleType, github_env: Path
) -> None:
    """The entry point raises SystemExit with the failure code."""
    with pytest.raises(SystemExit) as excinfo:
        script_module.main(package_root="missing")

    assert excinfo.value.code == 1


@pytest.mark.usefixtures("installed_client")
def test_app_reads_inputs_from_environment(
    script_module: ModuleType,
    github_env: Path,
    write_pubspec: typ.Callable[..., Path],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Workflow inputs arrive as ``INPUT_*`` environment variables."""
    write_pubspec("version: 5.6.7\n", package_root="packages/app")
    monkeypatch.setenv("INPUT_PACKAGE_ROOT", "packages/app")
    monkeypatch.setenv("INPUT_TAG_PREFIX", "release-")
    monkeypatch.setenv("INPUT_TAG_MESSAGE", "Shipped")

    script_module.app([])

    outputs = read_outputs(github_env)
    assert outputs["tagname"] == "release-5.6.7"
    assert outputs["tagmessage"] == "Shipped"

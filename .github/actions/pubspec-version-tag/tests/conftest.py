"""Shared fixtures for the pubspec-version-tag action tests."""

from __future__ import annotations

import importlib.util
import sys
import typing as typ
from pathlib import Path

import pytest
from syspath_hack import prepend_to_syspath

TESTS_DIR = Path(__file__).resolve().parent
SCRIPTS_DIR = TESTS_DIR.parent / "scripts"
prepend_to_syspath(SCRIPTS_DIR)
prepend_to_syspath(TESTS_DIR)

from _helpers import TARGET_SHA, TEST_TOKEN, FakeGithubClient
from version_tag.config import Repository, RuntimeContext

if typ.TYPE_CHECKING:
    from types import ModuleType


@pytest.fixture(autouse=True)
def _reset_argv(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure Cyclopts parsers do not inherit pytest's CLI arguments."""
    monkeypatch.setattr(sys, "argv", ["uv"])


@pytest.fixture
def repository() -> Repository:
    """Return the repository used throughout the tests."""
    return Repository(owner="octo", name="app")


@pytest.fixture
def runtime_context(tmp_path: Path, repository: Repository) -> RuntimeContext:
    """Return a runtime context rooted at ``tmp_path``."""
    return RuntimeContext(
        token=TEST_TOKEN,
        workspace=tmp_path,
        sha=TARGET_SHA,
        repository=repository,
    )


@pytest.fixture
def fake_client() -> FakeGithubClient:
    """Return a fake client with no tags and no commits."""
    return FakeGithubClient()


@pytest.fixture
def write_pubspec(tmp_path: Path) -> typ.Callable[..., Path]:
    """Return a helper that writes ``pubspec.yaml`` below ``tmp_path``."""

    def _write(content: str, package_root: str = ".") -> Path:
        path = tmp_path / package_root / "pubspec.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def github_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Populate the runner environment and return the ``GITHUB_OUTPUT`` path."""
    output_file = tmp_path / "github.out"
    for name in (
        "INPUT_GITHUB_TOKEN",
        "INPUT_PACKAGE_ROOT",
        "INPUT_TAG_PREFIX",
        "INPUT_TAG_SUFFIX",
        "INPUT_TAG_MESSAGE",
        "INPUT_CHANGELOG_STRUCTURE",
        "GITHUB_API_URL",
        "RUNNER_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GITHUB_TOKEN", TEST_TOKEN)
    monkeypatch.setenv("GITHUB_WORKSPACE", str(tmp_path))
    monkeypatch.setenv("GITHUB_SHA", TARGET_SHA)
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo/app")
    monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))
    return output_file


@pytest.fixture
def script_module() -> ModuleType:
    """Load the ``create_version_tag`` CLI script."""
    script_path = SCRIPTS_DIR / "create_version_tag.py"
    spec = importlib.util.spec_from_file_location(
        "pubspec_version_tag_create_version_tag", script_path
    )
    if spec is None or spec.loader is None:  # pragma: no cover - import failure
        message = f"Unable to load script module from {script_path}"
        raise RuntimeError(message)
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module

"""End-to-end releases against a real git repository and a local bare remote."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cut_release.config import ReleaseConfig
from cut_release.errors import DirtyWorkingTree
from cut_release.git import GitGateway
from cut_release.pipeline import ReleasePipeline

from .conftest import read_version, write_manifest

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A clone-like working copy at 1.2.3 tracking a bare remote's main."""
    remote = tmp_path / "remote.git"
    work = tmp_path / "work"
    work.mkdir()
    _git(tmp_path, "init", "--bare", str(remote))
    _git(work, "init")
    _git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    for key, value in [
        ("user.name", "Release Bot"),
        ("user.email", "release@example.com"),
        ("commit.gpgsign", "false"),
        ("tag.gpgsign", "false"),
    ]:
        _git(work, "config", key, value)
    write_manifest(work / "package.json", "1.2.3")
    _git(work, "add", "package.json")
    _git(work, "commit", "-m", "Initial commit")
    _git(work, "remote", "add", "origin", str(remote))
    _git(work, "push", "-u", "origin", "main")
    monkeypatch.chdir(work)
    return work


def _pipeline(root: Path, runner: MagicMock) -> ReleasePipeline:
    return ReleasePipeline.create(
        None, config=ReleaseConfig(), root=root, scm=GitGateway(), runner=runner
    )


@patch("cut_release.git.gh")
def test_resume_from_untracked_snapshot(
    mock_gh: MagicMock, repo: Path, runner: MagicMock
) -> None:
    """A snapshot file left in the project root does not make the tree dirty."""
    mock_gh.return_value = "[]"
    (repo / ".cut-release").write_text(json.dumps({"increment": "minor"}))
    pipeline = _pipeline(repo, runner)

    pipeline.run()

    assert pipeline.completed[-1] == "report_success"
    assert read_version(repo / "package.json") == "1.3.0"
    assert not (repo / ".cut-release").exists()
    remote = repo.parent / "remote.git"
    assert _git(remote, "tag", "--list") == "v1.3.0"
    assert _git(remote, "log", "-1", "--format=%s", "main") == "v1.3.0"


def test_tracked_changes_still_block(repo: Path, runner: MagicMock) -> None:
    (repo / ".cut-release").write_text(json.dumps({"increment": "patch"}))
    write_manifest(repo / "package.json", "1.2.3", description="edited")
    pipeline = _pipeline(repo, runner)

    with pytest.raises(DirtyWorkingTree, match="package.json"):
        pipeline.run()

    assert pipeline.failed_step == "ensure_clean"
    assert (repo / ".cut-release").exists()

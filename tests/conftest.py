"""Shared test fixtures."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from cut_release.config import ReleaseConfig
from cut_release.git import GitGateway
from cut_release.runner import ProcessRunner


def write_manifest(path: Path, version: str | None, **extra: object) -> Path:
    """Write a JSON manifest, optionally with a version field."""
    data: dict[str, object] = {"name": "demo", **extra}
    if version is not None:
        data["version"] = version
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


def read_version(path: Path) -> str:
    return json.loads(path.read_text())["version"]


@pytest.fixture
def config() -> ReleaseConfig:
    return ReleaseConfig()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project directory with bower.json and package.json at 1.2.3."""
    write_manifest(tmp_path / "bower.json", "1.2.3", main="demo.js")
    write_manifest(tmp_path / "package.json", "1.2.3", scripts={"test": "mocha"})
    return tmp_path


@pytest.fixture
def scm() -> MagicMock:
    """A GitGateway double whose operations all succeed."""
    gateway = MagicMock(spec=GitGateway)
    gateway.origin_name.return_value = "origin"
    gateway.find_first_commit.return_value = "abc123"
    gateway.commit_time.return_value = datetime(2024, 1, 2, tzinfo=timezone.utc)
    gateway.find_changes.return_value = []
    return gateway


@pytest.fixture
def runner() -> MagicMock:
    """A ProcessRunner double: commands exit 0, no version hook registered."""
    process_runner = MagicMock(spec=ProcessRunner)
    process_runner.spawn.return_value = 0
    process_runner.has_task.return_value = False
    return process_runner

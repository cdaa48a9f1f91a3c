"""Tests for cut_release.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import ANY, MagicMock, patch

import pytest
from click.testing import CliRunner

from cut_release.cli import cli
from cut_release.config import ReleaseConfig
from cut_release.errors import DirtyWorkingTree, InvalidArgument

from .conftest import read_version


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


@patch("cut_release.cli.run_release")
def test_passes_increment_and_flags(mock_run: MagicMock, tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["minor", "--skip-tests"])

    assert result.exit_code == 0, result.output
    mock_run.assert_called_once_with(
        "minor", None, skip_tests=True, config=ReleaseConfig(), root=tmp_path
    )


@patch("cut_release.cli.run_release")
def test_custom_version_argument(mock_run: MagicMock) -> None:
    result = CliRunner().invoke(cli, ["custom", "2.0.0-beta.1"])

    assert result.exit_code == 0, result.output
    mock_run.assert_called_once_with(
        "custom", "2.0.0-beta.1", skip_tests=False, config=ANY, root=ANY
    )


@patch("cut_release.cli.run_release")
def test_no_arguments_resumes(mock_run: MagicMock) -> None:
    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 0, result.output
    mock_run.assert_called_once_with(None, None, skip_tests=False, config=ANY, root=ANY)


@patch("cut_release.cli.run_release")
def test_release_error_is_single_line(mock_run: MagicMock) -> None:
    mock_run.side_effect = DirtyWorkingTree("Working tree has uncommitted changes: a.js")

    result = CliRunner().invoke(cli, ["patch"])

    assert result.exit_code == 1
    assert result.output == "Error: Working tree has uncommitted changes: a.js\n"


@patch("cut_release.cli.run_release")
def test_reads_project_config(mock_run: MagicMock, tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[tool.cut-release]\ntag_prefix = "r"\n')

    result = CliRunner().invoke(cli, ["patch"])

    assert result.exit_code == 0, result.output
    assert mock_run.call_args.kwargs["config"].tag_prefix == "r"


@patch("cut_release.cli.run_release")
def test_invalid_config_is_reported(mock_run: MagicMock, tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[tool.cut-release]\nbogus = 1\n')

    result = CliRunner().invoke(cli, ["patch"])

    assert result.exit_code == 1
    assert "Invalid [tool.cut-release] settings" in result.output
    mock_run.assert_not_called()


def test_missing_increment_without_snapshot() -> None:
    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 1
    assert "Missing increment" in result.output


def test_unknown_increment() -> None:
    result = CliRunner().invoke(cli, ["huge"])

    assert result.exit_code == 1
    assert '"huge" must be one of' in result.output


def test_invalid_argument_message_has_no_traceback() -> None:
    result = CliRunner().invoke(cli, ["custom", "nope"])

    assert result.exit_code == 1
    assert "Traceback" not in result.output
    assert isinstance(result.exception, SystemExit)
    assert InvalidArgument.__name__ not in result.output


def test_custom_without_version_names_missing_argument() -> None:
    result = CliRunner().invoke(cli, ["custom"])

    assert result.exit_code == 1
    assert "Custom increment requires a VERSION argument" in result.output
    assert "None" not in result.output


def test_write_failure_is_reported_without_traceback(
    project: Path, scm: MagicMock, runner: MagicMock
) -> None:
    with (
        patch("cut_release.pipeline.GitGateway", return_value=scm),
        patch("cut_release.pipeline.ProcessRunner", return_value=runner),
        patch.object(Path, "write_text", side_effect=PermissionError("denied")),
    ):
        result = CliRunner().invoke(cli, ["minor"])

    errors = [line for line in result.output.splitlines() if line.startswith("Error:")]
    assert result.exit_code == 1
    assert errors == ["Error: Could not write .cut-release: denied"]
    assert "Traceback" not in result.output
    assert isinstance(result.exception, SystemExit)
    assert read_version(project / "package.json") == "1.2.3"
    scm.add_commit.assert_not_called()

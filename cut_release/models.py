"""Data models for cut-release.

These Pydantic models represent the state threaded through the release
pipeline and the records it collects along the way.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .versions import strip_prefix

IncrementKind = Literal["major", "minor", "patch", "prerelease", "custom"]


class VersionBump(BaseModel):
    """Records a version change written to the manifests.

    Attributes:
        old: The version before bumping.
        new: The version after bumping.
    """

    old: str
    new: str


class ChangeRequest(BaseModel):
    """A pull request merged since the previous release."""

    number: int
    title: str
    url: str = ""
    merged_at: datetime | None = None


class Manifest(BaseModel):
    """A JSON version manifest loaded from disk.

    Attributes:
        name: File name as configured (e.g. "bower.json").
        path: Location of the file.
        data: Parsed JSON object; key order is preserved on write.
    """

    name: str
    path: Path
    data: dict[str, Any]

    @property
    def version(self) -> str | None:
        """The manifest's version field without any "v" prefix."""
        value = self.data.get("version")
        if not isinstance(value, str) or not value:
            return None
        return strip_prefix(value)


class RunState(BaseModel):
    """Mutable state shared by every pipeline step.

    increment and skip_tests are fixed when the run is constructed; every
    other field is filled in by the step that discovers it.
    """

    model_config = ConfigDict(validate_assignment=True)

    increment: IncrementKind = Field(frozen=True)
    skip_tests: bool = Field(default=False, frozen=True)
    requested_version: str | None = None
    pending: VersionBump | None = None

    prior_version: str | None = None
    next_version: str | None = None
    first_commit_ref: str | None = None
    first_commit: str | None = None
    commit_time: datetime | None = None
    remote: str | None = None
    changes: list[ChangeRequest] = Field(default_factory=list)
    manifests: list[Manifest] = Field(default_factory=list)
    modified_manifest_paths: list[str] = Field(default_factory=list)

    def record_modified(self, path: str) -> None:
        """Append path to modified_manifest_paths, keeping it duplicate-free."""
        if path not in self.modified_manifest_paths:
            self.modified_manifest_paths.append(path)

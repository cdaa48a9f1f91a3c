"""Resumable snapshot of the options a release was started with.

The snapshot is a small JSON file in the project root. It is written before
a run (by hand or by another tool) and read when cut-release is invoked
without arguments, so a failed release can be retried after fixing the
problem. It is deleted once a release has been pushed.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ValidationError

from .errors import InvalidArgument, StorageError
from .models import VersionBump


class ResumeOptions(BaseModel):
    """Persisted release options.

    Attributes:
        increment: Increment kind chosen for the release.
        version: Explicit version for custom increments.
        pending: Manifest bump already written by a previous attempt, so a
                 retry does not bump a second time.
    """

    increment: str
    version: str | None = None
    pending: VersionBump | None = None


class Snapshot:
    """Reads, updates and deletes the snapshot file at path."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> ResumeOptions | None:
        """Return the stored options, or None if there is no snapshot.

        Raises:
            InvalidArgument: If the snapshot exists but cannot be parsed.
        """
        if not self.exists():
            return None
        try:
            text = self.path.read_text(encoding="utf-8")
            return ResumeOptions.model_validate_json(text)
        except (OSError, UnicodeError, ValidationError) as exc:
            raise InvalidArgument(
                f"Unreadable release options in {self.path.name}"
            ) from exc

    def save(self, options: ResumeOptions) -> None:
        text = json.dumps(options.model_dump(exclude_none=True), indent=2) + "\n"
        try:
            self.path.write_text(text, encoding="utf-8")
        except (OSError, UnicodeError) as exc:
            raise StorageError(
                f"Could not write {self.path.name}: {exc}", exc
            ) from exc

    def delete(self) -> bool:
        """Remove the snapshot. Returns True if a file was removed."""
        if not self.exists():
            return False
        try:
            self.path.unlink()
        except OSError as exc:
            raise StorageError(
                f"Could not remove {self.path.name}: {exc}", exc
            ) from exc
        return True

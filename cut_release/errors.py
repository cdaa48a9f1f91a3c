"""Error kinds raised by the release pipeline.

Every error is fatal for the current invocation. The CLI turns any
ReleaseError into a single diagnostic line and a non-zero exit status.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base exception for all release errors."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class InvalidArgument(ReleaseError):
    """Missing or unrecognised command-line / snapshot arguments."""


class InvalidVersion(ReleaseError):
    """A version string is absent or not a valid semantic version."""


class DirtyWorkingTree(ReleaseError):
    """The working tree has uncommitted changes."""


class OutOfSync(ReleaseError):
    """The local branch is behind its upstream."""


class TestFailure(ReleaseError):
    """The project's test command exited non-zero."""

    __test__ = False


class ProcessError(ReleaseError):
    """An external command could not be started."""


class NoManifestsWritten(ReleaseError):
    """No version manifest existed to update."""


class HookFailure(ReleaseError):
    """The project version hook exited non-zero."""


class SourceControlError(ReleaseError):
    """A git or gh command failed."""


class StorageError(ReleaseError):
    """A manifest or the snapshot file could not be written or removed."""

"""Source control gateway backed by the git and gh command line tools.

Every failing git/gh command surfaces as a SourceControlError carrying the
tool's stderr, so the pipeline can report it as a single line.
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Sequence
from datetime import datetime

from .errors import DirtyWorkingTree, OutOfSync, SourceControlError
from .models import ChangeRequest
from .shell import gh, git, warn


def _describe(exc: subprocess.CalledProcessError) -> str:
    cmd = " ".join(str(part) for part in exc.cmd[:3])
    detail = (exc.stderr or "").strip().splitlines()
    return f"{cmd} failed: {detail[-1]}" if detail else f"{cmd} failed (exit {exc.returncode})"


class GitGateway:
    """git/gh operations needed by a release, run in the current directory."""

    def _git(self, *args: str) -> str:
        try:
            return git(*args)
        except subprocess.CalledProcessError as exc:
            raise SourceControlError(_describe(exc), exc) from exc
        except OSError as exc:
            raise SourceControlError(f"Could not run git: {exc}", exc) from exc

    def ensure_clean(self) -> None:
        """Raise DirtyWorkingTree if tracked files are modified or staged.

        Untracked files (such as the snapshot file) do not block a release.
        """
        status = self._git("status", "--porcelain", "--untracked-files=no")
        if status:
            files = [line[2:].strip() for line in status.splitlines()]
            raise DirtyWorkingTree(
                "Working tree has uncommitted changes: " + ", ".join(files)
            )
        print("  Working tree clean")

    def ensure_fetched(self) -> None:
        """Fetch and raise OutOfSync if the branch is behind its upstream."""
        self._git("fetch")
        upstream = git(
            "rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}", check=False
        )
        if not upstream:
            warn("Current branch has no upstream; skipping sync check")
            return
        behind = int(self._git("rev-list", "--count", "HEAD..@{u}") or 0)
        if behind:
            raise OutOfSync(
                f"Local branch is {behind} commit(s) behind {upstream}. Pull before releasing."
            )
        print(f"  Up to date with {upstream}")

    def origin_name(self) -> str:
        """Name of the remote to push to: "origin" if present, else the first one."""
        remotes = self._git("remote").splitlines()
        if not remotes:
            raise SourceControlError("No git remote configured")
        return "origin" if "origin" in remotes else remotes[0]

    def find_first_commit(self, ref: str | None) -> str:
        """Resolve ref to a commit id, falling back to the repository's root commit.

        The fallback covers first releases and previous tags that no longer
        exist locally.
        """
        if ref:
            sha = git("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}", check=False)
            if sha:
                return sha
            warn(f"{ref} not found; listing changes since the first commit")
        roots = self._git("rev-list", "--max-parents=0", "HEAD").splitlines()
        return roots[0]

    def commit_time(self, ref: str) -> datetime:
        """Committer timestamp of ref."""
        return datetime.fromisoformat(self._git("log", "-1", "--format=%cI", ref))

    def find_changes(self, since: datetime | None) -> list[ChangeRequest]:
        """Pull requests merged after since, oldest first.

        Returns an empty list if the gh CLI is not installed.
        """
        try:
            output = gh(
                "pr", "list", "--state", "merged", "--limit", "100",
                "--json", "number,title,url,mergedAt",
            )
        except subprocess.CalledProcessError as exc:
            raise SourceControlError(_describe(exc), exc) from exc
        except OSError:
            warn("gh CLI not available; skipping pull request discovery")
            return []

        try:
            raw = json.loads(output) if output else []
        except json.JSONDecodeError as exc:
            raise SourceControlError("Could not parse pull request list", exc) from exc

        changes: list[ChangeRequest] = []
        for item in raw:
            merged_at = item.get("mergedAt")
            change = ChangeRequest(
                number=item["number"],
                title=item.get("title", ""),
                url=item.get("url", ""),
                merged_at=merged_at or None,
            )
            if since and change.merged_at and change.merged_at <= since:
                continue
            changes.append(change)
        changes.sort(key=lambda c: (c.merged_at is None, c.merged_at, c.number))
        return changes

    def add_commit(self, files: Sequence[str], message: str) -> None:
        """Stage files and commit them with message."""
        self._git("add", "--", *files)
        staged = self._git("diff", "--cached", "--name-only")
        if not staged:
            print("  No changes to commit")
            return
        self._git("commit", "-m", message)
        print(f"  Committed {message}")

    def tag(self, label: str) -> None:
        """Create an annotated tag at HEAD."""
        self._git("tag", "-a", label, "-m", label)
        print(f"  {label}")

    def push(self, remote: str, tag: str) -> None:
        """Push the current branch and the release tag to remote."""
        self._git("push", remote, "HEAD")
        self._git("push", remote, tag)
        print(f"  Pushed to {remote}")

    def ping_pull_requests(self, changes: Sequence[ChangeRequest], label: str) -> None:
        """Comment on each pull request that it shipped in label.

        Every pull request is attempted; failures are collected and raised
        together afterwards.
        """
        failures: list[str] = []
        for change in changes:
            try:
                gh("pr", "comment", str(change.number), "--body", f"Released in {label}")
                print(f"  #{change.number} notified")
            except subprocess.CalledProcessError as exc:
                failures.append(f"#{change.number} ({_describe(exc)})")
            except OSError as exc:
                failures.append(f"#{change.number} ({exc})")
        if failures:
            raise SourceControlError("Could not notify " + ", ".join(failures))

"""Release pipeline: check → test → bump → hook → commit → tag → push.

This module orchestrates a single release:
1. Make sure the working tree is clean and up to date with its upstream
2. Run the project's tests
3. Read the current version from the manifests and compute the next one
4. Collect the pull requests merged since the previous release
5. Write the new version into every manifest and run the project hook
6. Commit, tag and push
7. Tell the merged pull requests which release they shipped in

Steps run strictly in order and the first failure stops the run. The
snapshot file is only removed after a successful push, so a failed release
can be retried by running cut-release again without arguments.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from .config import ReleaseConfig
from .errors import (
    HookFailure,
    InvalidArgument,
    NoManifestsWritten,
    ReleaseError,
    TestFailure,
)
from .git import GitGateway
from .manifests import ManifestStore
from .models import RunState, VersionBump
from .options import ResumeOptions, Snapshot
from .runner import ProcessRunner
from .shell import step, warn
from .versions import (
    INCREMENT_KINDS,
    SENTINEL_VERSION,
    compute_next,
    is_valid_version,
    strip_prefix,
)

KINDS_HELP = "{" + ", ".join(INCREMENT_KINDS) + "}"


def build_run_state(
    increment: str | None,
    version: str | None,
    *,
    skip_tests: bool = False,
    snapshot: Snapshot | None = None,
) -> RunState:
    """Validate the requested release and create its RunState.

    Explicit arguments win. Without an increment the snapshot is consulted,
    and only then is a bump recorded by an earlier attempt carried over.

    Raises:
        InvalidArgument: If no increment is available, it is not one of the
            recognised kinds, or a custom version is missing or invalid.
    """
    pending: VersionBump | None = None
    if not increment and snapshot is not None:
        options = snapshot.load()
        if options is not None:
            increment, version, pending = options.increment, options.version, options.pending

    if not increment:
        raise InvalidArgument(f"Missing increment. Must be one of {KINDS_HELP}")
    if increment not in INCREMENT_KINDS:
        raise InvalidArgument(f'"{increment}" must be one of {KINDS_HELP}')
    if increment == "custom":
        if not version:
            raise InvalidArgument("Custom increment requires a VERSION argument")
        if not is_valid_version(version):
            raise InvalidArgument(f'Custom version "{version}" is invalid')
        version = strip_prefix(version)

    return RunState(
        increment=increment,
        requested_version=version if increment == "custom" else None,
        skip_tests=skip_tests,
        pending=pending,
    )


class ReleasePipeline:
    """Runs the release steps over a shared RunState.

    Args:
        state: Validated run state (see build_run_state).
        config: Project settings.
        root: Project directory holding the manifests and snapshot.
        scm: Source control gateway.
        runner: Process runner for tests and the version hook.
    """

    def __init__(
        self,
        state: RunState,
        *,
        config: ReleaseConfig,
        root: Path,
        scm: GitGateway | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.state = state
        self.config = config
        self.root = root
        self.scm = scm or GitGateway()
        self.runner = runner or ProcessRunner()
        self.store = ManifestStore(root, config.manifest_names)
        self.snapshot = Snapshot(root / config.snapshot_file)
        self.completed: list[str] = []
        self.failed_step: str | None = None

    @classmethod
    def create(
        cls,
        increment: str | None,
        version: str | None = None,
        *,
        skip_tests: bool = False,
        config: ReleaseConfig,
        root: Path,
        scm: GitGateway | None = None,
        runner: ProcessRunner | None = None,
    ) -> ReleasePipeline:
        """Construct a pipeline from arguments or, failing that, the snapshot."""
        snapshot = Snapshot(root / config.snapshot_file)
        state = build_run_state(increment, version, skip_tests=skip_tests, snapshot=snapshot)
        return cls(state, config=config, root=root, scm=scm, runner=runner)

    @property
    def label(self) -> str:
        return self.config.label(self.state.next_version or "")

    def run(self) -> None:
        """Execute every step in order, stopping at the first failure."""
        for name, func in STEPS:
            try:
                func(self)
            except ReleaseError:
                self.failed_step = name
                raise
            self.completed.append(name)


# Steps -----------------------------------------------------------------------


def ensure_clean(p: ReleasePipeline) -> None:
    step("Checking working tree")
    p.scm.ensure_clean()


def ensure_fetched(p: ReleasePipeline) -> None:
    step("Checking upstream")
    p.scm.ensure_fetched()


def run_tests(p: ReleasePipeline) -> None:
    """Run the test command unless disabled or there is no package manifest."""
    if p.state.skip_tests or not p.store.exists(p.config.package_manifest):
        return
    step("Running tests")
    command, *args = p.config.test_command
    if p.runner.spawn(command, args):
        raise TestFailure("Tests failed")


def read_versions(p: ReleasePipeline) -> None:
    """Load the manifests; the first one found holds the current version."""
    p.state.manifests = p.store.load()
    p.state.prior_version = p.state.manifests[0].version if p.state.manifests else None


def compute_version(p: ReleasePipeline) -> None:
    """Work out the new version and the tag the changelog window starts from."""
    state = p.state
    pending = state.pending
    if pending is not None and pending.new == state.prior_version:
        # A previous attempt already wrote this bump to the manifests
        state.prior_version = pending.old
        state.next_version = pending.new
    else:
        state.next_version = compute_next(
            state.prior_version,
            state.increment,
            state.requested_version,
            prerelease_token=p.config.prerelease_token,
        )
    if state.prior_version and state.prior_version != SENTINEL_VERSION:
        state.first_commit_ref = p.config.label(state.prior_version)


def discover_changes(p: ReleasePipeline) -> None:
    """Collect pull requests merged since the previous release."""
    step("Finding changes since last release")
    state = p.state
    state.remote = p.scm.origin_name()
    state.first_commit = p.scm.find_first_commit(state.first_commit_ref)
    state.commit_time = p.scm.commit_time(state.first_commit)
    state.changes = p.scm.find_changes(state.commit_time)
    if not state.changes:
        print("  <none>")
    for change in state.changes:
        print(f"  #{change.number} {change.title}")


def increment_version(p: ReleasePipeline) -> None:
    """Write the new version into every loaded manifest."""
    state = p.state
    if not state.manifests:
        raise NoManifestsWritten("No config files written")

    step(f"Incrementing {state.prior_version} to {state.next_version}")
    # Record the bump first so a retry from the snapshot does not repeat it
    bump = VersionBump(old=state.prior_version or SENTINEL_VERSION, new=state.next_version)
    p.snapshot.save(
        ResumeOptions(
            increment=state.increment, version=state.requested_version, pending=bump
        )
    )
    for manifest in state.manifests:
        state.record_modified(p.store.write_version(manifest, state.next_version))
        print(f"  {manifest.name}")


def project_hook(p: ReleasePipeline) -> None:
    """Run the project's version task, if it defines one."""
    if not p.runner.has_task(p.config.hook_list_command, p.config.hook_task):
        return
    step(f"Running project {p.config.hook_task} task")
    command, *args = p.config.hook_command
    flag = p.config.hook_version_flag.format(version=p.state.next_version)
    if p.runner.spawn(command, [*args, flag]):
        raise HookFailure("Version update failed")


def commit(p: ReleasePipeline) -> None:
    step("Committing")
    if not p.state.modified_manifest_paths:
        raise NoManifestsWritten("No config files written")
    p.scm.add_commit(p.state.modified_manifest_paths, p.label)


def tag(p: ReleasePipeline) -> None:
    step("Tagging release")
    p.scm.tag(p.label)


def push(p: ReleasePipeline) -> None:
    step("Pushing")
    p.scm.push(p.state.remote or p.scm.origin_name(), p.label)


def notify_change_requests(p: ReleasePipeline) -> None:
    """Tell merged pull requests about the release; failures only warn."""
    if not p.state.changes:
        return
    step("Notifying pull requests")
    try:
        p.scm.ping_pull_requests(p.state.changes, p.label)
    except ReleaseError as exc:
        warn(exc.message)


def cleanup(p: ReleasePipeline) -> None:
    p.snapshot.delete()


def report_success(p: ReleasePipeline) -> None:
    print(f"\nSuccessfully pushed {p.label}. {p.config.publish_hint}")


Step = Callable[[ReleasePipeline], None]

STEPS: tuple[tuple[str, Step], ...] = (
    ("ensure_clean", ensure_clean),
    ("ensure_fetched", ensure_fetched),
    ("run_tests", run_tests),
    ("read_versions", read_versions),
    ("compute_version", compute_version),
    ("discover_changes", discover_changes),
    ("increment_version", increment_version),
    ("project_hook", project_hook),
    ("commit", commit),
    ("tag", tag),
    ("push", push),
    ("notify_change_requests", notify_change_requests),
    ("cleanup", cleanup),
    ("report_success", report_success),
)


def run_release(
    increment: str | None,
    version: str | None = None,
    *,
    skip_tests: bool = False,
    config: ReleaseConfig | None = None,
    root: Path | None = None,
) -> ReleasePipeline:
    """Construct and run a release in root (default: current directory)."""
    root = root or Path.cwd()
    pipeline = ReleasePipeline.create(
        increment,
        version,
        skip_tests=skip_tests,
        config=config or ReleaseConfig(),
        root=root,
    )
    pipeline.run()
    return pipeline

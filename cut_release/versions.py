"""Version parsing and bumping utilities.

Thin layer over the semver library: strips an optional "v" prefix and maps
increment kinds onto semver's own increment rules.
"""

from __future__ import annotations

import semver

from .errors import InvalidVersion

INCREMENT_KINDS = ("major", "minor", "patch", "prerelease", "custom")
SENTINEL_VERSION = "0.0.0"


def strip_prefix(version_str: str) -> str:
    """Drop a leading "v" ("v1.2.3" → "1.2.3")."""
    version_str = version_str.strip()
    if version_str[:1] in ("v", "V"):
        return version_str[1:]
    return version_str


def is_valid_version(version_str: str | None) -> bool:
    """Return True if version_str is a full semantic version."""
    if not version_str:
        return False
    return semver.Version.is_valid(strip_prefix(version_str))


def parse_version(version_str: str | None) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Raises:
        InvalidVersion: If the version is missing or malformed.
    """
    if not version_str:
        raise InvalidVersion("No current version found to increment")
    try:
        return semver.Version.parse(strip_prefix(version_str))
    except ValueError as exc:
        raise InvalidVersion(f'Version "{version_str}" is invalid', exc) from exc


def compute_next(
    prior: str | None,
    kind: str,
    explicit: str | None = None,
    *,
    prerelease_token: str = "rc",
) -> str:
    """Compute the version that follows prior for the given increment kind.

    Examples:
        compute_next("1.2.3", "minor") → "1.3.0"
        compute_next("1.2.3", "prerelease") → "1.2.4-rc.1"
        compute_next("1.2.4-rc.1", "prerelease") → "1.2.4-rc.2"
        compute_next(None, "custom", "v2.0.0-beta.1") → "2.0.0-beta.1"

    Raises:
        InvalidVersion: If the explicit version (custom) or the prior version
            (every other kind) is missing or malformed.
    """
    if kind == "custom":
        if not is_valid_version(explicit):
            raise InvalidVersion(f'Custom version "{explicit}" is invalid')
        return strip_prefix(explicit)

    if kind not in INCREMENT_KINDS:
        raise InvalidVersion(f'Unknown increment "{kind}"')

    current = parse_version(prior)
    return str(current.next_version(part=kind, prerelease_token=prerelease_token))

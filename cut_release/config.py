"""Release configuration.

Defaults describe a JavaScript project with a bower.json library manifest,
a package.json package manifest, `npm test` and an optional grunt `version`
task. Any of them can be overridden from the project's pyproject.toml:

    [tool.cut-release]
    test_command = ["make", "test"]
    tag_prefix = "release-"
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import ParseError

from .errors import InvalidArgument

CONFIG_TABLE = "cut-release"


class ReleaseConfig(BaseModel):
    """Project-level settings for a release run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    library_manifest: str = "bower.json"
    package_manifest: str = "package.json"
    snapshot_file: str = ".cut-release"
    test_command: list[str] = Field(
        default_factory=lambda: ["npm", "test"], min_length=1
    )
    hook_list_command: list[str] = Field(
        default_factory=lambda: ["grunt", "--help", "--no-color"]
    )
    hook_task: str = "version"
    hook_command: list[str] = Field(
        default_factory=lambda: ["grunt", "version"], min_length=1
    )
    hook_version_flag: str = "--ver={version}"
    tag_prefix: str = "v"
    prerelease_token: str = "rc"
    publish_hint: str = (
        "If this is an npm package then `npm publish` now needs to be run."
    )

    @property
    def manifest_names(self) -> list[str]:
        """Manifest file names in precedence order (library first)."""
        return [self.library_manifest, self.package_manifest]

    def label(self, version: str) -> str:
        """Commit and tag label for a version ("1.3.0" → "v1.3.0")."""
        return f"{self.tag_prefix}{version}"


def _read_table(pyproject: Path) -> dict[str, Any]:
    """Return [tool.cut-release] from pyproject as plain Python values."""
    try:
        doc = tomlkit.parse(pyproject.read_text(encoding="utf-8")).unwrap()
    except ParseError as exc:
        raise InvalidArgument(f"Could not parse {pyproject.name}: {exc}", exc) from exc
    return doc.get("tool", {}).get(CONFIG_TABLE, {})


def load_config(root: Path | None = None) -> ReleaseConfig:
    """Load settings from [tool.cut-release] in root/pyproject.toml.

    A missing file or table means defaults.

    Raises:
        InvalidArgument: If the file cannot be parsed or holds unknown or
            mistyped settings.
    """
    root = root or Path.cwd()
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return ReleaseConfig()

    try:
        return ReleaseConfig.model_validate(_read_table(pyproject))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise InvalidArgument(
            f"Invalid [tool.{CONFIG_TABLE}] settings: {problems}", exc
        ) from exc

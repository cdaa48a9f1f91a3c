"""JSON version manifest reading and writing.

A project carries up to two manifests (by default bower.json for the
library and package.json for the package). Both are plain JSON objects with
an optional "version" field; they are rewritten pretty-printed with a
trailing newline so diffs stay small.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from .errors import StorageError
from .models import Manifest
from .shell import warn


def load_manifest(path: Path) -> Manifest:
    """Load and parse a single manifest.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a JSON object.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} does not contain a JSON object")
    return Manifest(name=path.name, path=path, data=data)


def save_manifest(manifest: Manifest) -> None:
    """Write a manifest back to disk using two-space indentation.

    Raises:
        StorageError: If the file cannot be written.
    """
    text = json.dumps(manifest.data, indent=2, ensure_ascii=False) + "\n"
    try:
        manifest.path.write_text(text, encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        raise StorageError(f"Could not write {manifest.name}: {exc}", exc) from exc


class ManifestStore:
    """The set of version manifests present in a project directory.

    Args:
        root: Project directory.
        names: Manifest file names in precedence order.
    """

    def __init__(self, root: Path, names: Sequence[str]) -> None:
        self.root = root
        self.names = list(names)

    def path(self, name: str) -> Path:
        return self.root / name

    def exists(self, name: str) -> bool:
        """True if the named manifest is present on disk."""
        return self.path(name).is_file()

    def load(self) -> list[Manifest]:
        """Load every manifest that exists and parses, in precedence order.

        Missing manifests are skipped silently; unreadable ones are skipped
        with a warning so that a single valid manifest still allows a release.
        """
        manifests: list[Manifest] = []
        for name in self.names:
            path = self.path(name)
            if not path.is_file():
                continue
            try:
                manifests.append(load_manifest(path))
            except (OSError, ValueError) as exc:
                warn(f"Ignoring {name}: {exc}")
        return manifests

    def write_version(self, manifest: Manifest, version: str) -> str:
        """Set the manifest's version field, save it and return its relative path."""
        manifest.data["version"] = version
        save_manifest(manifest)
        try:
            return str(manifest.path.relative_to(self.root))
        except ValueError:
            return str(manifest.path)

"""Package manifest reading and version bumping.

Uses tomlkit to preserve formatting and comments when rewriting
pyproject.toml files, so the bump commit only touches the version line.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .errors import ManifestParseError
from .models import VersionBump
from .versions import bump_patch


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file.

    Returns a TOMLDocument that preserves formatting when modified and dumped.

    Raises:
        ManifestParseError: If the file cannot be read or is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except (OSError, TOMLKitError) as exc:
        raise ManifestParseError(f"Cannot read manifest {path}: {exc}") from exc


def dump_manifest(doc: tomlkit.TOMLDocument) -> str:
    return tomlkit.dumps(doc)


def get_manifest_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract [project].version.

    Raises:
        ManifestParseError: If the field is absent or not a string.
    """
    version = doc.get("project", {}).get("version")
    if not isinstance(version, str) or not version.strip():
        raise ManifestParseError("No [project].version found in manifest")
    return str(version)


def bump_manifest(
    doc: tomlkit.TOMLDocument,
) -> tuple[tomlkit.TOMLDocument, VersionBump]:
    """Return a copy of the manifest with its patch version incremented.

    The input document is left untouched. Major and minor components never
    change, whatever the size of the diff being released.
    """
    old = get_manifest_version(doc)
    bump = VersionBump(old=old, new=bump_patch(old))
    # Round-trip through text to get an independent, format-preserving copy
    bumped = tomlkit.parse(tomlkit.dumps(doc))
    bumped["project"]["version"] = bump.new
    return bumped, bump

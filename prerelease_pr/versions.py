"""Patch-release version arithmetic.

A pre-release PR always proposes the next patch release: major and minor
are owned by humans and never touched here. Manifest versions may be
written short ("2.14" means 2.14.0) but never carry more than
major.minor.patch, since dropping a component would change the manifest
beyond its patch field.
"""

from __future__ import annotations

import semver

from .errors import ManifestParseError


def parse_version(version_str: str) -> semver.Version:
    """Read a manifest version as major.minor.patch.

    Missing minor/patch components count as zero. More than three
    components, or a non-numeric one, raise ManifestParseError.
    """
    parts = str(version_str).strip().split(".")
    if len(parts) > 3:
        raise ManifestParseError(
            f"Invalid version {version_str!r}: expected at most major.minor.patch"
        )
    parts += ["0"] * (3 - len(parts))
    try:
        return semver.Version.parse(".".join(parts))
    except (TypeError, ValueError) as exc:
        raise ManifestParseError(f"Invalid version {version_str!r}: {exc}") from exc


def bump_patch(version_str: str) -> str:
    """Return the next patch release, e.g. "2.14.3" → "2.14.4", "1.0" → "1.0.1"."""
    return str(parse_version(version_str).bump_patch())

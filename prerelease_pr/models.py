"""Data models for prerelease-pr.

These Pydantic models represent the core data structures passed between
the diff engine, the version bumper and the pull request reconciler.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

README_FILE = "README.md"
LICENSE_FILE = "LICENSE.md"
MANIFEST_FILE = "pyproject.toml"
PACKAGES_DIR = "packages"


class VersionBump(BaseModel):
    """Records a version change for a package.

    Attributes:
        old: The version before bumping (the one the pull request releases).
        new: The version after bumping (committed for the next release).
    """

    old: str
    new: str


class PackageRelease(BaseModel):
    """A package published from the repository's ``packages`` folder.

    Attributes:
        name: Package name on the index (e.g. "browser-specs").
        folder: Folder name under ``packages/``.
        current_version: Version read from the repository manifest.
        bumped_version: ``current_version`` with the patch component incremented.
    """

    name: str
    folder: str
    current_version: str
    bumped_version: str

    @property
    def manifest_path(self) -> str:
        return manifest_path(self.folder)

    @property
    def branch_prefix(self) -> str:
        return branch_prefix(self.name)


def package_dir(folder: str) -> str:
    return f"{PACKAGES_DIR}/{folder}"


def manifest_path(folder: str) -> str:
    """Repository-relative path of a package manifest."""
    return f"{package_dir(folder)}/{MANIFEST_FILE}"


def branch_prefix(name: str) -> str:
    """Head branch prefix shared by every pre-release PR of a package."""
    return f"release-{name}-"


class DiffResult(BaseModel):
    """Normalized differences between the published package and the repo.

    Attributes:
        content: Inline unified diff of files present on both sides.
        added_files: Repo files not yet in the released package.
        deleted_files: Released files that no longer exist in the repo.
        readme_changed: Whether README.md differs.
        license_changed: Whether LICENSE.md differs.
        released_version: Version of the published artifact that was compared.
    """

    content: str = ""
    added_files: list[str] = Field(default_factory=list)
    deleted_files: list[str] = Field(default_factory=list)
    readme_changed: bool = False
    license_changed: bool = False
    released_version: str = ""

    @property
    def text(self) -> str:
        """Full rendered diff: static files, added, deleted, then inline diff."""
        sections: list[str] = []
        if self.readme_changed or self.license_changed:
            static = [
                f"+ {f}"
                for f, changed in (
                    (README_FILE, self.readme_changed),
                    (LICENSE_FILE, self.license_changed),
                )
                if changed
            ]
            sections.append("Static file(s) changed:\n" + "\n".join(static))
        if self.added_files:
            sections.append(
                "New repo files that are not yet in the released package:\n"
                + "\n".join(f"+ {f}" for f in self.added_files)
            )
        if self.deleted_files:
            sections.append(
                "Released package files that no longer exist in the repo:\n"
                + "\n".join(f"- {f}" for f in self.deleted_files)
            )
        if self.content:
            sections.append(self.content)
        return "\n\n".join(sections)

    @property
    def is_empty(self) -> bool:
        return not self.text


class PendingPR(BaseModel):
    """An open pre-release pull request, the only persisted release state."""

    number: int
    title: str
    body: str
    head_ref: str

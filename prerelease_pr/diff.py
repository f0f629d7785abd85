"""Diff engine: published package vs. repository ``packages`` folder.

The published source distribution is fetched into a throwaway sandbox so
the comparison reflects exactly what is live on the index, then compared
with ``packages/<folder>`` using GNU diff. The output is normalized so that
two runs over identical content produce byte-identical text, which is what
lets the reconciler detect "nothing changed" by plain string comparison.
"""

from __future__ import annotations

import re
import shutil
import sys
import tarfile
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from packaging.metadata import Metadata

from .errors import DiffError, InstallError
from .models import LICENSE_FILE, MANIFEST_FILE, README_FILE, DiffResult, package_dir
from .shell import capture, warn

PLACEHOLDER = "package"

# Registry/build-injected files and files reported separately
EXCLUDED = (MANIFEST_FILE, "PKG-INFO", "*.egg-info", README_FILE, LICENSE_FILE)

DIFF_OPTIONS = ("--recursive", "--unified=3", "--ignore-trailing-space")


@contextmanager
def sandbox(prefix: str = "package-") -> Iterator[Path]:
    """Create a temporary directory and remove it on exit.

    Removal happens on both success and failure. A removal failure is
    reported as a warning and does not fail the run.
    """
    tmp = Path(tempfile.mkdtemp(prefix=prefix))
    try:
        yield tmp
    finally:
        try:
            shutil.rmtree(tmp)
        except OSError as exc:
            warn(f"Could not remove temporary folder {tmp}: {exc}")


def install_published(name: str, dest: Path) -> Path:
    """Fetch and unpack the currently published sdist of ``name`` into ``dest``.

    Returns:
        Path to the unpacked package root (the sdist's top-level folder).

    Raises:
        InstallError: If the download or extraction fails.
    """
    download_dir = dest / "dist"
    result = capture(
        sys.executable,
        "-m",
        "pip",
        "download",
        "--no-deps",
        "--no-binary",
        ":all:",
        "--no-cache-dir",
        "--disable-pip-version-check",
        "--dest",
        str(download_dir),
        name,
    )
    if result.returncode != 0:
        raise InstallError(f"Failed to fetch {name}: {result.stderr.strip()}")

    archives = sorted(download_dir.glob("*.tar.gz"))
    if not archives:
        raise InstallError(f"No source distribution found for {name}")

    unpack_dir = dest / "unpacked"
    try:
        with tarfile.open(archives[0]) as tar:
            tar.extractall(unpack_dir, filter="data")
    except (OSError, tarfile.TarError) as exc:
        raise InstallError(f"Cannot unpack {archives[0].name}: {exc}") from exc

    roots = [p for p in unpack_dir.iterdir() if p.is_dir()]
    if len(roots) != 1:
        raise InstallError(f"Unexpected layout in {archives[0].name}")
    return roots[0]


def read_released_version(installed: Path) -> str:
    """Read the version of an unpacked sdist from its PKG-INFO."""
    pkg_info = installed / "PKG-INFO"
    try:
        metadata = Metadata.from_email(pkg_info.read_text(), validate=False)
        # Fields are validated lazily; a missing version raises here
        return str(metadata.version)
    except (OSError, ValueError) as exc:
        raise InstallError(f"Cannot read version from {pkg_info}: {exc}") from exc


# setuptools appends this section to the setup.cfg of every sdist it builds
EGG_INFO_SECTION = re.compile(r"^\[egg_info\](?:\n|$)(?:[^\[\n].*(?:\n|$)|\n)*", re.M)


def strip_build_tags(installed: Path) -> None:
    """Drop the ``[egg_info]`` section setuptools injects into a published setup.cfg.

    The file is removed when nothing else is left in it, so an sdist whose
    project has no setup.cfg compares equal to its repository folder.
    """
    setup_cfg = installed / "setup.cfg"
    if not setup_cfg.is_file():
        return
    text = EGG_INFO_SECTION.sub("", setup_cfg.read_text())
    if text.strip():
        setup_cfg.write_text(text)
    else:
        setup_cfg.unlink()


def run_diff(*args: str, cwd: Path) -> str:
    """Run GNU diff and return its output.

    Exit code 1 only means differences were found; 2 means trouble.
    """
    result = capture("diff", *args, cwd=cwd)
    if result.returncode > 1:
        raise DiffError(f"diff failed: {result.stderr.strip()}")
    return result.stdout


def extract_only_in(diff: str, side: str) -> tuple[list[str], str]:
    """Pull "Only in <side>[/sub]: <file>" lines out of a recursive diff.

    Returns:
        Tuple of (relative file paths, diff with those lines removed).
    """
    pattern = re.compile(rf"^Only in {re.escape(side)}(?:/([^\n]*?))?: (.+)$", re.M)
    files = [f"{sub}/{name}" if sub else name for sub, name in pattern.findall(diff)]
    return files, pattern.sub("", diff)


def normalize(diff: str, installed: str, repo_dir: str) -> str:
    """Replace volatile paths and timestamps with stable text.

    The sandbox path becomes ``package``, and the modification times GNU diff
    appends to ``---``/``+++`` headers are dropped.
    """
    diff = diff.replace(installed, PLACEHOLDER)
    diff = re.sub(rf'^(--- "?{PLACEHOLDER}[^\t"]*"?)\t.*$', r"\1", diff, flags=re.M)
    diff = re.sub(
        rf'^(\+\+\+ "?{re.escape(repo_dir)}[^\t"]*"?)\t.*$', r"\1", diff, flags=re.M
    )
    # Removed "Only in" lines leave gaps; keep one blank line between files
    diff = re.sub(rf"\n+(diff {DIFF_OPTIONS[0]} )", r"\n\n\1", diff)
    return diff.strip()


def _static_file_changed(installed: Path, root: Path, repo_dir: str, name: str) -> bool:
    if not (installed / name).exists() and not (root / repo_dir / name).exists():
        return False
    return bool(
        run_diff(
            *DIFF_OPTIONS[1:],
            "--new-file",
            str(installed / name),
            f"{repo_dir}/{name}",
            cwd=root,
        )
    )


def compute_diff(name: str, folder: str, root: Path | None = None) -> DiffResult:
    """Compute the diff between the published package and ``packages/<folder>``.

    Args:
        name: Package name on the index (e.g. "browser-specs").
        folder: Folder name under ``packages/`` in the repository.
        root: Repository root. Defaults to the current directory.

    Returns:
        The normalized DiffResult; empty when contents match.
    """
    root = root or Path.cwd()
    repo_dir = package_dir(folder)
    if not (root / repo_dir).is_dir():
        raise DiffError(f"No such package folder: {repo_dir}")

    with sandbox() as tmp:
        installed = install_published(name, tmp)
        released_version = read_released_version(installed)
        strip_build_tags(installed)

        excludes = [f"--exclude={pattern}" for pattern in EXCLUDED]
        raw = run_diff(*DIFF_OPTIONS, *excludes, str(installed), repo_dir, cwd=root)
        readme_changed = _static_file_changed(installed, root, repo_dir, README_FILE)
        license_changed = _static_file_changed(installed, root, repo_dir, LICENSE_FILE)

        added, raw = extract_only_in(raw, repo_dir)
        deleted, raw = extract_only_in(raw, str(installed))
        content = normalize(raw, str(installed), repo_dir)

    return DiffResult(
        content=content,
        added_files=added,
        deleted_files=deleted,
        readme_changed=readme_changed,
        license_changed=license_changed,
        released_version=released_version,
    )

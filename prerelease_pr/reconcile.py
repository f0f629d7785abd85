"""Pre-release pipeline: diff → bump → reconcile the pending pull request.

This module keeps a single "next release" pull request per package in sync
with the repository:
1. Find the commit the release would be based on
2. Look for an open pre-release PR (head branch ``release-<name>-*``)
3. Diff the published package against ``packages/<folder>``
4. Bump the manifest's patch version
5. Render the PR title and body
6. Close, create, refresh or leave the PR alone

The PR itself is the only state. A refresh force-moves the existing PR
branch to a freshly built commit so that the PR keeps its number and
reviews while showing only the new version bump.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from .diff import compute_diff
from .gateway import GitHubGateway
from .manifest import bump_manifest, dump_manifest, load_manifest
from .models import PackageRelease, PendingPR, branch_prefix, manifest_path
from .shell import detail, git, step
from .templates import (
    CLOSED_BODY,
    is_truncated,
    render_body,
    render_diff,
    render_title,
)


class Action(str, Enum):
    """What to do with the pre-release PR."""

    NOTHING = "nothing"
    CLOSE = "close"
    CREATE = "create"
    UP_TO_DATE = "up-to-date"
    REFRESH = "refresh"


def decide_action(has_pending_pr: bool, has_diff: bool, diff_changed: bool) -> Action:
    """Map the current state to an action.

    Args:
        has_pending_pr: An open pre-release PR exists for the package.
        has_diff: The published package differs from the repository.
        diff_changed: The pending PR's title or body differ from fresh ones.
            Ignored when there is no pending PR or no diff.
    """
    if not has_diff:
        return Action.CLOSE if has_pending_pr else Action.NOTHING
    if not has_pending_pr:
        return Action.CREATE
    return Action.REFRESH if diff_changed else Action.UP_TO_DATE


def latest_commit() -> str:
    return git("log", "-n", "1", "--pretty=format:%H")


def release_uid() -> str:
    """Reasonably unique branch suffix: UTC time down to milliseconds."""
    return datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")[:-3]


def prepare_release(name: str, folder: str, root: Path) -> tuple[PackageRelease, str]:
    """Read the package manifest and compute its bumped contents.

    Returns:
        Tuple of (PackageRelease, bumped manifest text).
    """
    doc = load_manifest(root / manifest_path(folder))
    bumped_doc, bump = bump_manifest(doc)
    release = PackageRelease(
        name=name, folder=folder, current_version=bump.old, bumped_version=bump.new
    )
    return release, dump_manifest(bumped_doc)


def _commit_bump(
    gateway: GitHubGateway,
    release: PackageRelease,
    manifest_text: str,
    *,
    branch: str,
    base_sha: str,
    dry_run: bool,
) -> str | None:
    """Commit the bumped manifest on ``branch``; returns the new commit sha."""
    detail(f"Bump version to {release.bumped_version}")
    _, file_sha = gateway.get_file(release.manifest_path, ref=base_sha)
    if dry_run:
        detail("(dry run) skip commit")
        return None
    commit_sha = gateway.update_file(
        release.manifest_path,
        branch=branch,
        message=(
            f"Bump {release.name} version from {release.current_version} "
            f"to {release.bumped_version}"
        ),
        content=manifest_text,
        sha=file_sha,
    )
    detail(f"Bumped version commit is {commit_sha}")
    return commit_sha


def reconcile(
    gateway: GitHubGateway,
    name: str,
    folder: str,
    *,
    dry_run: bool = False,
    root: Path | None = None,
) -> Action:
    """Create, refresh or close the pre-release PR of a package.

    Args:
        gateway: Access to the hosted repository.
        name: Package name on the index (e.g. "browser-specs").
        folder: Folder name under ``packages/``.
        dry_run: Perform every read and report decisions, but skip all
                 ref, commit and PR mutations.
        root: Repository root. Defaults to the current directory.

    Returns:
        The action that was decided (and, unless dry_run, executed).
    """
    root = root or Path.cwd()

    step("Get latest commit on current branch")
    commit_sha = latest_commit()
    detail(f"Current branch is at {commit_sha}")

    step("Look for a pending pre-release PR")
    pending = gateway.find_pending_pr(branch_prefix(name))
    if pending:
        detail(f"Found pending pre-release PR: {pending.title} (#{pending.number})")
    else:
        detail("No pending pre-release PR")

    step("Compute diff between package and repo contents")
    diff = compute_diff(name, folder, root)
    full_diff = diff.text
    detail(f"Diff length: {len(full_diff)}")
    if diff.is_empty:
        action = decide_action(pending is not None, False, False)
        if action is Action.CLOSE:
            detail("No release needed, close pending pre-release PR")
            if dry_run:
                detail("(dry run) skip closing")
            else:
                gateway.update_pr(pending.number, body=CLOSED_BODY, state="closed")
        detail("No diff found, return")
        return action

    if is_truncated(full_diff):
        detail("Diff is too long, dump it to the console and truncate")
        print("\n----- DIFF BEGINS -----")
        print(full_diff)
        print("----- DIFF ENDS -----")

    step("Extract and bump version number")
    release, manifest_text = prepare_release(name, folder, root)
    detail(f"Version to release: {release.current_version}")
    detail(f"Bumped version: {release.bumped_version}")

    step("Prepare pre-release PR title and body")
    title = render_title(name, release.current_version)
    body = render_body(
        name=name,
        version=release.current_version,
        bumped_version=release.bumped_version,
        released_version=diff.released_version,
        diff=render_diff(full_diff),
        commit_sha=commit_sha,
        manifest_path=release.manifest_path,
    )
    detail(f"title: {title}")

    changed = pending is not None and (pending.title != title or pending.body != body)
    action = decide_action(pending is not None, True, changed)
    if action is Action.UP_TO_DATE:
        step("Pre-release PR is up to date")
        detail(f"Nothing to change in #{pending.number}")
        return action

    if action is Action.CREATE:
        _create_pr(gateway, release, manifest_text, title, body, commit_sha, dry_run)
    else:
        _refresh_pr(
            gateway, pending, release, manifest_text, title, body, commit_sha, dry_run
        )
    return action


def _create_branch(gateway: GitHubGateway, branch: str, sha: str, dry_run: bool) -> None:
    step("Prepare branch for pre-release PR")
    detail(f"Create new branch {branch} for the PR")
    if dry_run:
        detail("(dry run) skip branch creation")
    else:
        gateway.create_ref(branch, sha)


def _create_pr(
    gateway: GitHubGateway,
    release: PackageRelease,
    manifest_text: str,
    title: str,
    body: str,
    commit_sha: str,
    dry_run: bool,
) -> None:
    pr_ref = f"{release.branch_prefix}{release_uid()}"
    _create_branch(gateway, pr_ref, commit_sha, dry_run)

    step("Commit bumped version to PR branch")
    _commit_bump(
        gateway,
        release,
        manifest_text,
        branch=pr_ref,
        base_sha=commit_sha,
        dry_run=dry_run,
    )

    step("Create pre-release PR")
    base = gateway.default_branch()
    detail(f"Open PR from {pr_ref} against {base}")
    if dry_run:
        detail("(dry run) skip PR creation")
        return
    pr = gateway.create_pr(head=pr_ref, base=base, title=title, body=body)
    detail(f"Created pre-release PR #{pr.number}")


def _refresh_pr(
    gateway: GitHubGateway,
    pending: PendingPR,
    release: PackageRelease,
    manifest_text: str,
    title: str,
    body: str,
    commit_sha: str,
    dry_run: bool,
) -> None:
    # Rebuilding on the PR branch itself would first reset it to the base
    # commit, leaving the PR with no commit, which GitHub treats as closed.
    scratch_ref = f"{release.branch_prefix}{release_uid()}"
    _create_branch(gateway, scratch_ref, commit_sha, dry_run)

    step("Commit bumped version to PR branch")
    bumped_sha = _commit_bump(
        gateway,
        release,
        manifest_text,
        branch=scratch_ref,
        base_sha=commit_sha,
        dry_run=dry_run,
    )
    detail(
        f"Force update PR branch {pending.head_ref} to target {scratch_ref} branch commit"
    )
    detail(f"Delete now useless {scratch_ref} branch")
    if dry_run:
        detail("(dry run) skip branch update and deletion")
    else:
        gateway.force_update_ref(pending.head_ref, bumped_sha)
        gateway.delete_ref(scratch_ref)

    step("Update pre-release PR")
    detail(f"Update title and body of #{pending.number}")
    if dry_run:
        detail("(dry run) skip PR update")
    else:
        gateway.update_pr(pending.number, title=title, body=body)

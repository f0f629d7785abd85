"""Pre-release pull request text.

Title and body are pure functions of their inputs. The reconciler relies on
that: a pending PR whose title and body equal freshly rendered ones is up
to date.
"""

from __future__ import annotations

MAX_DIFF_LENGTH = 60000

CLOSED_BODY = "This pull request is no longer needed. No more diff to release."

BODY_TEMPLATE = """
**⚠ NEVER add commits to this pull request.**

🤖 This pull request was automatically created to facilitate human review of `{name}` changes based on the repository contents at {commit_sha}.

🧐 Please review the diff below and version numbers. If all looks good, merge this pull request to release the changes.

📦 Latest released `{name}` package was **v{released_version}**. Merging this pull request will release **v{version}**. Make sure that the bump is the right one for the changes.

✍ If any change needs to be made before release, **do not add a commit** to this pull request. Changes should rather be handled in a separate pull request and pushed to the main branch. You may leave this pull request open in the meantime, or close it. The pre-release job will automatically update this pull request or create a new one once the updates have made their way to the main branch.

🛈 The actual change introduced by this pull request is a version bump to **v{bumped_version}** in `{manifest_path}`. You do not need to review that change. The bumped version is not the version that will be released when this pull request is merged, but rather the version that will be released next time.

```diff
{diff}
```"""


def is_truncated(diff: str) -> bool:
    return len(diff) > MAX_DIFF_LENGTH


def render_diff(diff: str) -> str:
    """Cap a diff to what fits in a PR description, with a notice when cut."""
    if not is_truncated(diff):
        return diff
    return f"""IMPORTANT:
- Diff is too long to render in a PR description: {len(diff)} characters
- First {MAX_DIFF_LENGTH} characters shown below
- Check the action log for the full diff

{diff[:MAX_DIFF_LENGTH]}"""


def render_title(name: str, version: str) -> str:
    return f"📦 Release {name}@{version}"


def render_body(
    *,
    name: str,
    version: str,
    bumped_version: str,
    released_version: str,
    diff: str,
    commit_sha: str,
    manifest_path: str,
) -> str:
    """Render the PR description; ``diff`` is expected already capped."""
    return BODY_TEMPLATE.format(
        name=name,
        version=version,
        bumped_version=bumped_version,
        released_version=released_version,
        diff=diff,
        commit_sha=commit_sha,
        manifest_path=manifest_path,
    )

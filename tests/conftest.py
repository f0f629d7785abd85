"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from prerelease_pr.models import PendingPR

MANIFEST = """\
# Generated by the packages build
[project]
name = "browser-specs"
version = "2.14.3"
description = "Curated list of technical Web specifications"

[project.urls]
Homepage = "https://github.com/w3c/browser-specs"
"""


@pytest.fixture
def tmp_manifest(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml manifest."""
    manifest = tmp_path / "pyproject.toml"
    manifest.write_text(MANIFEST)
    return manifest


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """Create a repository root with a packages/browser-specs folder."""
    folder = tmp_path / "repo" / "packages" / "browser-specs"
    folder.mkdir(parents=True)
    (folder / "pyproject.toml").write_text(MANIFEST)
    (folder / "index.json").write_text('[\n  "https://example.org/spec"\n]\n')
    (folder / "README.md").write_text("# browser-specs\n")
    (folder / "LICENSE.md").write_text("MIT\n")
    return tmp_path / "repo"


class FakeGateway:
    """In-memory gateway recording every call.

    Mutating calls change the fake's state so that successive runs observe
    the result of previous ones, like they would on GitHub.
    """

    MUTATING = {
        "update_pr",
        "create_ref",
        "force_update_ref",
        "delete_ref",
        "update_file",
        "create_pr",
    }

    def __init__(self, open_prs: list[PendingPR] | None = None):
        self.open_prs: dict[int, PendingPR] = {
            pr.number: pr.model_copy() for pr in open_prs or []
        }
        self.refs: dict[str, str] = {pr.head_ref: "0" * 40 for pr in open_prs or []}
        self.calls: list[tuple] = []
        self._next_number = 100
        self._next_commit = 0

    @property
    def mutating_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in self.MUTATING]

    def find_pending_pr(self, branch_prefix: str) -> PendingPR | None:
        self.calls.append(("find_pending_pr", branch_prefix))
        for pr in self.open_prs.values():
            if pr.head_ref.startswith(branch_prefix):
                return pr.model_copy()
        return None

    def get_pr(self, number: int) -> PendingPR:
        self.calls.append(("get_pr", number))
        return self.open_prs[number].model_copy()

    def update_pr(self, number, *, title=None, body=None, state=None) -> None:
        self.calls.append(("update_pr", number, title, body, state))
        pr = self.open_prs[number]
        if title is not None:
            pr.title = title
        if body is not None:
            pr.body = body
        if state == "closed":
            del self.open_prs[number]

    def create_ref(self, branch: str, sha: str) -> None:
        self.calls.append(("create_ref", branch, sha))
        self.refs[branch] = sha

    def force_update_ref(self, branch: str, sha: str) -> None:
        self.calls.append(("force_update_ref", branch, sha))
        self.refs[branch] = sha

    def delete_ref(self, branch: str) -> None:
        self.calls.append(("delete_ref", branch))
        del self.refs[branch]

    def get_file(self, path: str, ref: str) -> tuple[str, str]:
        self.calls.append(("get_file", path, ref))
        return "", "blob-sha"

    def update_file(self, path, *, branch, message, content, sha) -> str:
        self.calls.append(("update_file", path, branch, message, content, sha))
        self._next_commit += 1
        commit = f"{self._next_commit:040d}"
        self.refs[branch] = commit
        return commit

    def default_branch(self) -> str:
        self.calls.append(("default_branch",))
        return "main"

    def create_pr(self, *, head, base, title, body) -> PendingPR:
        self.calls.append(("create_pr", head, base, title, body))
        pr = PendingPR(number=self._next_number, title=title, body=body, head_ref=head)
        self._next_number += 1
        self.open_prs[pr.number] = pr
        return pr


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()

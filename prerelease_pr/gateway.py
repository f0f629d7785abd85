"""GitHub API gateway using PyGithub.

Exposes the pull request, git ref and file content operations the
reconciler needs, translated to the package's own models. Any API failure
is raised as GatewayError; nothing is retried here. Request pacing is left
to PyGithub's built-in throttling.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from github import Auth, Github, GithubException
from github.PullRequest import PullRequest
from requests.exceptions import RequestException

from .errors import GatewayError
from .models import PendingPR

T = TypeVar("T")

# Errors reported by GitHub and transport failures reaching it
API_ERRORS = (GithubException, RequestException)


def _wrap_errors(func: Callable[..., T]) -> Callable[..., T]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except API_ERRORS as exc:
            raise GatewayError(f"{func.__name__} failed: {exc}") from exc

    return wrapper


def _to_pending(pr: PullRequest) -> PendingPR:
    return PendingPR(
        number=pr.number,
        title=pr.title or "",
        body=pr.body or "",
        head_ref=pr.head.ref,
    )


class GitHubGateway:
    """Thin wrapper around one GitHub repository."""

    def __init__(self, token: str, repo_full_name: str, client: Github | None = None):
        self.repo_full_name = repo_full_name
        self.github = client or Github(auth=Auth.Token(token))
        self._repo = None

    @property
    def repo(self):
        if self._repo is None:
            try:
                self._repo = self.github.get_repo(self.repo_full_name)
            except API_ERRORS as exc:
                raise GatewayError(
                    f"Cannot access repository {self.repo_full_name}: {exc}"
                ) from exc
        return self._repo

    @_wrap_errors
    def find_pending_pr(self, branch_prefix: str) -> PendingPR | None:
        """Return the open PR whose head branch starts with ``branch_prefix``."""
        query = f"repo:{self.repo_full_name} type:pr state:open head:{branch_prefix}"
        found = next(iter(self.github.search_issues(query)), None)
        if found is None:
            return None
        return self.get_pr(found.number)

    @_wrap_errors
    def get_pr(self, number: int) -> PendingPR:
        return _to_pending(self.repo.get_pull(number))

    @_wrap_errors
    def update_pr(
        self,
        number: int,
        *,
        title: str | None = None,
        body: str | None = None,
        state: str | None = None,
    ) -> None:
        changes = {"title": title, "body": body, "state": state}
        self.repo.get_pull(number).edit(
            **{k: v for k, v in changes.items() if v is not None}
        )

    @_wrap_errors
    def create_ref(self, branch: str, sha: str) -> None:
        self.repo.create_git_ref(ref=f"refs/heads/{branch}", sha=sha)

    @_wrap_errors
    def force_update_ref(self, branch: str, sha: str) -> None:
        self.repo.get_git_ref(f"heads/{branch}").edit(sha=sha, force=True)

    @_wrap_errors
    def delete_ref(self, branch: str) -> None:
        self.repo.get_git_ref(f"heads/{branch}").delete()

    @_wrap_errors
    def get_file(self, path: str, ref: str) -> tuple[str, str]:
        """Return (decoded text, blob sha) of a file at ``ref``."""
        content = self.repo.get_contents(path, ref=ref)
        if isinstance(content, list):
            raise GatewayError(f"{path} is a directory")
        return content.decoded_content.decode("utf-8"), content.sha

    @_wrap_errors
    def update_file(
        self, path: str, *, branch: str, message: str, content: str, sha: str
    ) -> str:
        """Commit new file content on ``branch`` and return the commit sha."""
        result = self.repo.update_file(path, message, content, sha, branch=branch)
        return result["commit"].sha

    @_wrap_errors
    def default_branch(self) -> str:
        return self.repo.default_branch

    @_wrap_errors
    def create_pr(self, *, head: str, base: str, title: str, body: str) -> PendingPR:
        pr = self.repo.create_pull(base=base, head=head, title=title, body=body)
        return _to_pending(pr)

"""CLI entry point for prerelease-pr."""

from __future__ import annotations

import os
from pathlib import Path

import click

from .config import DEFAULT_REPOSITORY, load_token
from .errors import ReleaseError
from .gateway import GitHubGateway
from .reconcile import reconcile

WORKFLOWS_DIR = Path(__file__).parent / "workflows"
DEFAULT_PACKAGE = "browser-specs"


@click.group()
@click.version_option(package_name="prerelease-pr")
def cli() -> None:
    """Keep a pre-release pull request in sync with unreleased package changes."""


@cli.command()
@click.option(
    "--workflow-dir",
    type=click.Path(),
    default=".github/workflows",
    show_default=True,
    help="Directory to write the workflow file.",
)
def init(workflow_dir: str) -> None:
    """Scaffold the GitHub Actions workflow into your repo."""
    root = Path.cwd()

    # Sanity checks
    if not (root / ".git").exists():
        raise click.ClickException("Not a git repository. Run from the repo root.")

    if not (root / "packages").is_dir():
        raise click.ClickException("No packages folder found in current directory.")

    dest_dir = root / workflow_dir
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest = dest_dir / "prepare-release.yml"

    template = WORKFLOWS_DIR / "prepare-release.yml"
    dest.write_text(template.read_text())

    click.echo(f"✓ Wrote workflow to {dest.relative_to(root)}")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Edit the package names in the workflow matrix")
    click.echo("  2. Commit and push the workflow file")


@cli.command()
@click.argument("name", default=DEFAULT_PACKAGE)
@click.argument("folder", required=False)
@click.option(
    "--repo",
    default=lambda: os.getenv("GITHUB_REPOSITORY") or DEFAULT_REPOSITORY,
    show_default="$GITHUB_REPOSITORY or " + DEFAULT_REPOSITORY,
    help="GitHub repository (owner/name) hosting the pre-release PRs.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Compute everything and report decisions without changing anything.",
)
def run(name: str, folder: str | None, repo: str, dry_run: bool) -> None:
    """Create, update or close the pre-release PR of package NAME.

    FOLDER is the package folder under packages/ and defaults to NAME.
    """
    try:
        gateway = GitHubGateway(load_token(), repo)
        reconcile(gateway, name, folder or name, dry_run=dry_run)
    except ReleaseError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo()
    click.echo("== The end ==")

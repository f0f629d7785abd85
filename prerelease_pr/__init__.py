"""Keep a pre-release pull request in sync with unreleased package changes."""

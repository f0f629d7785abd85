"""Process-level configuration loaders."""

from __future__ import annotations

import json
import os
from pathlib import Path

from .errors import ConfigurationError

TOKEN_NAME = "GH_TOKEN"
CONFIG_FILE = "config.json"
DEFAULT_REPOSITORY = "w3c/browser-specs"


def _token_from_file(path: Path) -> str:
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError):
        return ""
    if not isinstance(data, dict):
        return ""
    return str(data.get(TOKEN_NAME) or "")


def load_token(config_path: Path | None = None) -> str:
    """Return the GitHub token from config.json, falling back to the environment.

    Raises:
        ConfigurationError: If neither source provides a non-blank token.
    """
    path = config_path if config_path is not None else Path.cwd() / CONFIG_FILE
    token = _token_from_file(path) or os.getenv(TOKEN_NAME, "")
    if not token.strip():
        raise ConfigurationError(
            f"{TOKEN_NAME} must be set to some personal access token as an env "
            f"variable or in a {CONFIG_FILE} file"
        )
    return token.strip()

"""Error definitions.

Every error is fatal: the run aborts and the CLI exits non-zero so the
calling automation flags it. Re-running is safe since the pending pull
request is reconciled from scratch each time.
"""

from __future__ import annotations


class ReleaseError(RuntimeError):
    """Base class for errors that abort a pre-release run."""


class ConfigurationError(ReleaseError):
    """Raised when the authentication token is missing."""


class InstallError(ReleaseError):
    """Raised when the published package cannot be fetched into the sandbox."""


class DiffError(ReleaseError):
    """Raised when the package trees cannot be compared."""


class GatewayError(ReleaseError):
    """Raised when a call to the hosted repository API fails."""


class ManifestParseError(ReleaseError):
    """Raised when a package manifest or its version cannot be parsed."""

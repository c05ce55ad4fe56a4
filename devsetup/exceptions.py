"""Provisioning exceptions.

Every fatal condition raised by the pipeline derives from :class:`SetupError`.
Non-fatal conditions (service start, model pulls, reachability) are never
raised; they are recorded as warnings on the pipeline state.
"""

from typing import Optional


class SetupError(Exception):
    """Base exception for a failure that halts provisioning."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class MissingToolError(SetupError):
    """Raised when a mandatory tool cannot be resolved on PATH."""

    def __init__(self, tool: str, hint: Optional[str] = None):
        super().__init__(f"{tool} not found", hint)
        self.tool = tool


class UnsupportedPlatformError(SetupError):
    """Raised when the local runtime cannot be installed automatically on this host."""

    pass


class InstallFailedError(SetupError):
    """Raised when the automated install path exits non-zero."""

    pass


class MissingCredentialError(SetupError):
    """Raised when no API key was found in the environment or entered at the prompt."""

    pass


class DependencyInstallError(SetupError):
    """Raised when the front-end or backend dependency install fails."""

    pass


class ConfigInvariantError(SetupError):
    """Raised when an enabled provider is missing its URL or credential."""

    pass

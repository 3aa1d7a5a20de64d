# OWSYNC Exceptions
# Error taxonomy for configuration, build and remote failures

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from pathlib import Path

    from owsync.sync.results import ActionResult


class OwsyncError(Exception):
    """Base exception for all owsync errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(OwsyncError):
    """Raised when configuration is missing, malformed or points nowhere."""


class BuildError(OwsyncError):
    """Raised when the build step for an action directory fails."""

    def __init__(
        self,
        message: str,
        directory: Optional[Path] = None,
        returncode: int = 1,
        stderr: str = "",
    ):
        self.directory = directory
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class RemoteCallError(OwsyncError):
    """Raised when a call to the remote platform fails."""

    def __init__(
        self,
        message: str,
        operation: str = "",
        status_code: Optional[int] = None,
        body: str = "",
    ):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class RemoteNotFoundError(RemoteCallError):
    """Raised when the remote entity does not exist (HTTP 404)."""


class SyncAbortedError(OwsyncError):
    """
    Raised when a fatal error interrupts a deployment.

    Carries the action and step that failed plus the results of the
    actions that had already converged before the failure.
    """

    def __init__(
        self,
        action: Optional[str],
        step: str,
        cause: Exception,
        completed: Optional[list[ActionResult]] = None,
    ):
        self.action = action
        self.step = step
        self.cause = cause
        self.completed = completed or []
        if action:
            super().__init__(f"Deployment aborted at action '{action}' ({step}): {cause}")
        else:
            super().__init__(f"Deployment aborted ({step}): {cause}")

"""
Provisioning error taxonomy.

``UnsupportedPlatform`` is fatal to a run and is caught by the
pipeline before any stage executes. The ``ProvisioningError``
subclasses are raised inside a single stage and caught at the stage
boundary, where they become a failed StepResult. ``RegistryError`` is a
configuration error in the tool table and is never caught.
"""

from __future__ import annotations

from collections.abc import Sequence

from devsetup.core.models.result import ErrorKind


class UnsupportedPlatform(Exception):
    """Raised when the host platform cannot be identified."""


class RegistryError(Exception):
    """Raised when the tool table is invalid, incomplete, or missing."""


class ProvisioningError(Exception):
    """Base class for failures recovered at the stage boundary."""

    error_kind: ErrorKind


class MissingPrerequisite(ProvisioningError):
    """A stage needs a tool or executable that is not available."""

    error_kind = ErrorKind.MISSING_PREREQUISITE

    def __init__(self, missing: str, *, detail: str = "") -> None:
        self.missing = missing
        message = f"missing dependency: {missing}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ExternalCommandFailure(ProvisioningError):
    """An external installer exited abnormally."""

    error_kind = ErrorKind.EXTERNAL_COMMAND_FAILURE

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        message = f"command failed (exit {returncode}): {' '.join(self.argv)}"
        if stderr:
            message = f"{message}\n{stderr}"
        super().__init__(message)


class VerificationFailure(ProvisioningError):
    """A post-install check found the tool or package still absent."""

    error_kind = ErrorKind.VERIFICATION_FAILURE

"""
L4 Execution — Run one install action.

Needs check → commands in order → extend search path → verify.
Actions whose commands use ``{tmpdir}`` get a fresh private directory
that is removed when the action ends, whatever the outcome.
The first problem stops the action; nothing is retried. Failures are
raised internally as ProvisioningError subclasses and converted into a
failed StepResult at the step boundary.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import time

from devsetup.adapters.base import HostAdapter
from devsetup.core.errors import (
    ExternalCommandFailure,
    MissingPrerequisite,
    ProvisioningError,
    VerificationFailure,
)
from devsetup.core.models.result import StepResult
from devsetup.core.models.tool import WORKDIR_PLACEHOLDER, Command, InstallAction

logger = logging.getLogger(__name__)


class StepRunner:
    """Execute a single InstallAction against the host.

    Holds no state between calls; all host mutation goes through the
    adapter.
    """

    def __init__(self, host: HostAdapter):
        self._host = host

    def run(self, action: InstallAction) -> StepResult:
        start = time.monotonic()
        workdir: str | None = None
        try:
            self._check_needs(action)
            if action.uses_workdir:
                # mkdtemp creates the directory 0700.
                workdir = tempfile.mkdtemp(prefix=f"devsetup-{action.tool}-")
                logger.debug("%s work directory: %s", action.tool, workdir)
            for command in action.commands:
                if workdir:
                    command = command.with_variables({WORKDIR_PLACEHOLDER: workdir})
                self._run_command(command)
            if action.post_path:
                self._host.extend_path(action.post_path)
            self._verify(action)
        except ProvisioningError as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.error("%s failed: %s", action.tool, e)
            return StepResult.failure(
                action.tool, str(e), e.error_kind, duration_ms=elapsed_ms,
            )
        finally:
            if workdir:
                shutil.rmtree(workdir, ignore_errors=True)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return StepResult.installed(action.tool, duration_ms=elapsed_ms)

    def _check_needs(self, action: InstallAction) -> None:
        # Never start a partial install when the platform's package
        # manager (or another needed binary) is absent.
        for exe in action.needs:
            if not self._host.is_available(exe):
                raise MissingPrerequisite(exe, detail=f"required to install {action.tool}")

    def _run_command(self, command: Command) -> None:
        result = self._host.run(command)
        if not result.ok:
            raise ExternalCommandFailure(command.argv, result.returncode, result.error_tail())

    def _verify(self, action: InstallAction) -> None:
        if not action.executables:
            return
        if not any(self._host.is_available(exe) for exe in action.executables):
            raise VerificationFailure(
                f"{action.tool} still not found after install "
                f"(looked for: {', '.join(action.executables)})"
            )

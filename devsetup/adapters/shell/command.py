"""
Shell host adapter — run installers on the real machine.

This is the SINGLE PLACE where ``subprocess.run`` is called for
provisioning. Sudo prefixing, environment overrides, and error capture
are all centralised here.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from collections.abc import Iterable

from devsetup.adapters.base import CommandResult, HostAdapter, expand_dir
from devsetup.core.models.tool import Command

logger = logging.getLogger(__name__)


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class ShellHostAdapter(HostAdapter):
    """Locate executables with ``shutil.which`` and run commands with
    ``subprocess.run``.

    No timeout is imposed: package managers own their own timeouts, and
    a run blocks until each command finishes.
    """

    @property
    def name(self) -> str:
        return "shell"

    def which(self, executable: str) -> str | None:
        return shutil.which(executable, path=self.search_path())

    def find_in(self, executable: str, dirs: Iterable[str]) -> str | None:
        path = os.pathsep.join(expand_dir(d) for d in dirs)
        if not path:
            return None
        return shutil.which(executable, path=path)

    def run(self, command: Command) -> CommandResult:
        argv = list(command.argv)

        # Root needs no prefix. Windows recipes never set needs_sudo.
        if command.needs_sudo and not _is_root():
            argv = ["sudo", *argv]

        env = os.environ.copy()
        env["PATH"] = self.search_path()
        for key, value in command.env.items():
            env[key] = os.path.expandvars(value)

        logger.info("CMD %s", " ".join(argv))
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                env=env,
            )
        except FileNotFoundError as e:
            return CommandResult.failure(
                argv, stderr=f"executable not found: {e.filename or argv[0]}",
                returncode=127,
            )
        except OSError as e:
            logger.exception("Subprocess error: %s", argv)
            return CommandResult.failure(argv, stderr=str(e), returncode=126)

        elapsed_ms = int((time.monotonic() - start) * 1000)

        if result.stdout:
            logger.debug("STDOUT %s", result.stdout.strip()[-2000:])
        if result.stderr:
            logger.debug("STDERR %s", result.stderr.strip()[-2000:])

        return CommandResult(
            argv=argv,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            duration_ms=elapsed_ms,
        )

"""
Host adapter base — the contract between provisioning and the machine.

Everything that touches the host goes through a HostAdapter: looking
executables up on the search path and running external commands.
The rest of the code base is pure logic over explicit inputs, which is
what lets the pipeline be exercised against a MockHostAdapter.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from devsetup.core.models.tool import Command


class CommandResult(BaseModel):
    """Outcome of one external command.

    Adapters NEVER raise for a failing command; the failure is
    captured here and interpreted by the caller.
    """

    argv: list[str]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def error_tail(self, limit: int = 2000) -> str:
        """Last ``limit`` characters of stderr (stdout if stderr is empty)."""
        text = (self.stderr or self.stdout or "").strip()
        return text[-limit:]

    @classmethod
    def success(cls, argv: list[str], stdout: str = "", **kwargs: Any) -> CommandResult:
        return cls(argv=argv, returncode=0, stdout=stdout, **kwargs)

    @classmethod
    def failure(
        cls,
        argv: list[str],
        stderr: str = "",
        returncode: int = 1,
        **kwargs: Any,
    ) -> CommandResult:
        return cls(argv=argv, returncode=returncode, stderr=stderr, **kwargs)


def expand_dir(path: str) -> str:
    """Expand ``~`` and environment variables in a table directory."""
    return os.path.expandvars(os.path.expanduser(path))


class HostAdapter(ABC):
    """Abstract base class for host access.

    Subclasses implement ``which`` and ``run``. The search path is
    kept on the adapter so that directories added after an install
    (e.g. ``~/miniconda3/bin``) are visible to later stages without
    mutating the process environment.
    """

    def __init__(self) -> None:
        self._extra_paths: list[str] = []

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def which(self, executable: str) -> str | None:
        """Return the resolved path of ``executable``, or None.

        Must be fast, read-only, and never raise.
        """

    @abstractmethod
    def run(self, command: Command) -> CommandResult:
        """Run a command to completion and return its result.

        MUST never raise for a failing or missing program.
        """

    @abstractmethod
    def find_in(self, executable: str, dirs: Iterable[str]) -> str | None:
        """Look ``executable`` up in ``dirs`` only, ignoring the search path.

        Directories are expanded with ``expand_dir``. Never raises.
        """

    @property
    def extra_paths(self) -> list[str]:
        return list(self._extra_paths)

    def extend_path(self, dirs: Iterable[str]) -> None:
        """Prepend directories to the adapter's search path."""
        for d in dirs:
            expanded = expand_dir(d)
            if expanded not in self._extra_paths:
                self._extra_paths.insert(0, expanded)

    def search_path(self) -> str:
        parts = [*self._extra_paths, os.environ.get("PATH", "")]
        return os.pathsep.join(p for p in parts if p)

    def is_available(self, executable: str) -> bool:
        return self.which(executable) is not None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"

"""
Mock host adapter — scriptable test double for the machine.

Simulates executables on the search path and external commands
without touching the host. By default every command succeeds with
empty output; responses can be scripted per command fragment, and a
successful command can be made to "install" executables.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

from devsetup.adapters.base import CommandResult, HostAdapter, expand_dir
from devsetup.core.models.tool import Command


class MockHostAdapter(HostAdapter):
    """Universal mock adapter for testing.

    Commands are matched by substring against their space-joined argv;
    the first scripted fragment that matches wins.
    """

    def __init__(
        self,
        present: set[str] | list[str] | tuple[str, ...] = (),
        adapter_name: str = "mock",
    ):
        super().__init__()
        self._name = adapter_name
        self._present: set[str] = set(present)
        self._responses: dict[str, CommandResult] = {}
        self._installs: dict[str, list[str]] = {}
        self._call_log: list[Command] = []
        self._placed: dict[str, set[str]] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[Command]:
        """All commands this mock has been asked to run."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def present(self) -> set[str]:
        return set(self._present)

    def make_present(self, *executables: str) -> None:
        self._present.update(executables)

    def make_absent(self, *executables: str) -> None:
        self._present.difference_update(executables)

    def place(self, directory: str, *executables: str) -> None:
        """Put ``executables`` in ``directory`` without putting them on the search path."""
        self._placed.setdefault(expand_dir(directory), set()).update(executables)

    def set_response(self, fragment: str, result: CommandResult) -> None:
        """Return ``result`` for any command containing ``fragment``."""
        self._responses[fragment] = result

    def set_output(self, fragment: str, stdout: str) -> None:
        self._responses[fragment] = CommandResult.success([fragment], stdout=stdout)

    def set_failure(self, fragment: str, stderr: str = "Mock failure", returncode: int = 1) -> None:
        """Configure commands containing ``fragment`` to fail."""
        self._responses[fragment] = CommandResult.failure(
            [fragment], stderr=stderr, returncode=returncode,
        )

    def set_installs(self, fragment: str, *executables: str) -> None:
        """A successful command containing ``fragment`` makes ``executables`` present."""
        self._installs.setdefault(fragment, []).extend(executables)

    def ran(self, fragment: str) -> bool:
        """Whether any logged command contains ``fragment``."""
        return any(fragment in " ".join(c.argv) for c in self._call_log)

    def which(self, executable: str) -> str | None:
        if executable in self._present:
            return f"/mock/bin/{executable}"
        return self.find_in(executable, self._extra_paths)

    def find_in(self, executable: str, dirs: Iterable[str]) -> str | None:
        for d in dirs:
            expanded = expand_dir(d)
            if executable in self._placed.get(expanded, ()):
                return os.path.join(expanded, executable)
        return None

    def run(self, command: Command) -> CommandResult:
        self._call_log.append(command)
        joined = " ".join(command.argv)

        result = CommandResult.success(list(command.argv))
        for fragment, scripted in self._responses.items():
            if fragment in joined:
                result = scripted.model_copy(update={"argv": list(command.argv)})
                break

        if result.ok:
            for fragment, executables in self._installs.items():
                if fragment in joined:
                    self._present.update(executables)

        return result

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._responses.clear()
        self._installs.clear()
        self._placed.clear()

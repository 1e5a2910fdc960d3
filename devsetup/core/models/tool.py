"""
Tool models — the declarative install table.

A ToolSpec describes one tool across every platform: which executable
proves it is present, and what to do to install it. The table is data;
nothing in here runs anything.

    ToolSpec ──install[platform key]──▶ PlatformInstall
                                          ├─ commands → InstallAction
                                          └─ unsupported → Unsupported
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Filled per action with a fresh private directory by the step runner.
WORKDIR_PLACEHOLDER = "tmpdir"


class ToolKind(StrEnum):
    """How a tool stage is carried out."""

    PACKAGE = "package"          # run install commands (StepRunner)
    ENVIRONMENT = "environment"  # recreate the conda env (EnvironmentProvisioner)


class Command(BaseModel):
    """One external command. ``argv`` is never passed through a shell
    unless the command itself is ``sh -c`` / ``bash -c``."""

    model_config = ConfigDict(frozen=True)

    argv: list[str]
    needs_sudo: bool = False
    env: dict[str, str] = Field(default_factory=dict)

    def display(self) -> str:
        prefix = "sudo " if self.needs_sudo else ""
        return prefix + " ".join(self.argv)

    def references(self, placeholder: str) -> bool:
        token = "{" + placeholder + "}"
        return any(token in arg for arg in self.argv)

    def with_variables(self, variables: Mapping[str, str]) -> Command:
        """Copy with ``{name}`` placeholders in argv replaced.

        Placeholders without a value are left as they are.
        """
        argv: list[str] = []
        for arg in self.argv:
            for name, value in variables.items():
                arg = arg.replace("{" + name + "}", value)
            argv.append(arg)
        return self.model_copy(update={"argv": argv, "env": dict(self.env)})


class PlatformInstall(BaseModel):
    """Raw table entry for one (tool, platform) pair."""

    unsupported: str | None = None    # reason; mutually exclusive with commands
    commands: list[Command] = Field(default_factory=list)
    requires: list[str] = Field(default_factory=list)   # prerequisite tool stages
    needs: list[str] = Field(default_factory=list)      # executables needed up front
    post_path: list[str] = Field(default_factory=list)  # dirs added to PATH afterwards

    @model_validator(mode="after")
    def _unsupported_has_no_commands(self) -> PlatformInstall:
        if self.unsupported is not None and self.commands:
            raise ValueError("an unsupported entry cannot declare commands")
        return self

    @property
    def is_supported(self) -> bool:
        return self.unsupported is None


class ToolSpec(BaseModel):
    """One row of the tool table."""

    name: str
    label: str = ""
    kind: ToolKind = ToolKind.PACKAGE
    prerequisite: bool = False   # failure is fatal to the whole run
    cli: list[str] = Field(default_factory=list)
    cli_overrides: dict[str, list[str]] = Field(default_factory=dict)
    install: dict[str, PlatformInstall] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.label or self.name

    def executables_for(self, platform_key: str) -> list[str]:
        """Executables whose presence means the tool is usable.

        Any one of them is enough (e.g. ``dnf`` or ``yum``).
        """
        return self.cli_overrides.get(platform_key, self.cli)


class InstallAction(BaseModel):
    """A resolved, platform-specific install recipe for one tool."""

    model_config = ConfigDict(frozen=True)

    tool: str
    kind: ToolKind = ToolKind.PACKAGE
    commands: list[Command] = Field(default_factory=list)
    requires: list[str] = Field(default_factory=list)
    needs: list[str] = Field(default_factory=list)
    post_path: list[str] = Field(default_factory=list)
    executables: list[str] = Field(default_factory=list)

    @property
    def uses_workdir(self) -> bool:
        """Whether any command needs a private ``{tmpdir}``."""
        return any(c.references(WORKDIR_PLACEHOLDER) for c in self.commands)


class Unsupported(BaseModel):
    """Explicit "this tool has no install action on this platform"."""

    model_config = ConfigDict(frozen=True)

    tool: str
    reason: str = ""

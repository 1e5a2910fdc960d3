"""
L2 Resolver — Tool registry.

Turns the static tool table plus a PlatformId into concrete install
actions. All platform variance lives in the table; this module only
looks things up and fills in placeholders.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path

from devsetup.core.config.registry_loader import load_tools
from devsetup.core.errors import RegistryError, UnsupportedPlatform
from devsetup.core.models.platform import PlatformId
from devsetup.core.models.tool import (
    InstallAction,
    ToolSpec,
    Unsupported,
)

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Read-only lookup over the tool table.

    The table is validated when it is loaded; the registry itself is
    never mutated.
    """

    def __init__(self, tools: Mapping[str, ToolSpec]):
        self._tools: dict[str, ToolSpec] = dict(tools)

    @classmethod
    def load(cls, path: Path | None = None) -> ToolRegistry:
        """Build a registry from the packaged (or overridden) tool table."""
        return cls(load_tools(path))

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, tool_name: str) -> ToolSpec:
        spec = self._tools.get(tool_name)
        if spec is None:
            raise RegistryError(f"Unknown tool: {tool_name}")
        return spec

    def require(self, tool_names: list[str] | tuple[str, ...]) -> None:
        """Raise RegistryError unless every name is in the table."""
        missing = [n for n in tool_names if n not in self._tools]
        if missing:
            raise RegistryError(f"Tool table is missing stage(s): {', '.join(missing)}")

    def executables(self, tool_name: str, platform: PlatformId) -> list[str]:
        """Executables that prove a tool is present on a platform."""
        key = platform.key
        if key is None:
            return []
        return self.get(tool_name).executables_for(key)

    def install_dirs(self, tool_name: str, platform: PlatformId) -> list[str]:
        """Directories an install on this platform adds to the search path.

        Unexpanded (``~``, ``%VAR%``); the adapter expands them.
        """
        key = platform.key
        if key is None:
            return []
        entry = self.get(tool_name).install.get(key)
        return list(entry.post_path) if entry else []

    def resolve(self, tool_name: str, platform: PlatformId) -> InstallAction | Unsupported:
        """Resolve the install action for one tool on one platform.

        Raises:
            UnsupportedPlatform: If the platform is unknown.
            RegistryError: If the tool is unknown or the table lacks
                an entry for this platform.
        """
        key = platform.key
        if key is None:
            raise UnsupportedPlatform(f"Unsupported operating system: {platform.os.value}")

        spec = self.get(tool_name)
        entry = spec.install.get(key)
        if entry is None:
            raise RegistryError(f"Tool '{tool_name}' has no entry for platform '{key}'")

        if not entry.is_supported:
            return Unsupported(tool=tool_name, reason=entry.unsupported or "")

        # {tmpdir} is left for the step runner.
        variables = {"arch": platform.arch}
        commands = [c.with_variables(variables) for c in entry.commands]
        return InstallAction(
            tool=tool_name,
            kind=spec.kind,
            commands=commands,
            requires=list(entry.requires),
            needs=list(entry.needs),
            post_path=list(entry.post_path),
            executables=spec.executables_for(key),
        )

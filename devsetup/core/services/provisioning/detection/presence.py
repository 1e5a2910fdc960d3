"""
L3 Detection — Tool presence.

The idempotency gate: a tool whose executable already resolves on the
search path, or sits in the directory its own install would add to the
path (a user-level install from an earlier run in another shell), is
skipped. Only existence and runnability are checked;
version strings are never inspected.
"""

from __future__ import annotations

import logging

from devsetup.adapters.base import HostAdapter
from devsetup.core.models.platform import PlatformId
from devsetup.core.services.provisioning.resolver.registry import ToolRegistry

logger = logging.getLogger(__name__)


class PresenceChecker:
    """Answer "is this tool already usable here?" without touching the host."""

    def __init__(self, registry: ToolRegistry, platform: PlatformId, host: HostAdapter):
        self._registry = registry
        self._platform = platform
        self._host = host

    def find(self, tool_name: str) -> str | None:
        """Path of the first executable that proves the tool is present.

        A hit in the tool's install directories puts them on the
        adapter's search path for the rest of the run.
        """
        executables = self._registry.executables(tool_name, self._platform)
        for exe in executables:
            path = self._host.which(exe)
            if path:
                return path

        dirs = self._registry.install_dirs(tool_name, self._platform)
        if not dirs:
            return None
        for exe in executables:
            path = self._host.find_in(exe, dirs)
            if path:
                logger.info("%s found outside PATH at %s", tool_name, path)
                self._host.extend_path(dirs)
                return path
        return None

    def is_present(self, tool_name: str) -> bool:
        path = self.find(tool_name)
        if path:
            logger.debug("%s present at %s", tool_name, path)
        return path is not None

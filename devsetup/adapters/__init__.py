"""
Host adapters — the side-effect boundary.

    HostAdapter        abstract contract (which / run / search path)
    ShellHostAdapter   real machine via shutil.which + subprocess.run
    MockHostAdapter    scriptable double for tests
"""

from devsetup.adapters.base import CommandResult, HostAdapter
from devsetup.adapters.mock import MockHostAdapter
from devsetup.adapters.shell.command import ShellHostAdapter

__all__ = ["CommandResult", "HostAdapter", "MockHostAdapter", "ShellHostAdapter"]

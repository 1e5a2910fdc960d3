"""
Domain models — Pydantic types for provisioning.

All models are re-exported here for convenient access:

    from devsetup.core.models import PlatformId, ToolSpec, StepResult, RunReport
"""

from devsetup.core.models.environment import CondaEnvSpec
from devsetup.core.models.platform import (
    PLATFORM_KEYS,
    LinuxDistro,
    OsFamily,
    PlatformId,
)
from devsetup.core.models.result import (
    ErrorKind,
    RunOutcome,
    RunReport,
    StepOutcome,
    StepResult,
)
from devsetup.core.models.tool import (
    Command,
    InstallAction,
    PlatformInstall,
    ToolKind,
    ToolSpec,
    Unsupported,
)

__all__ = [
    # environment.py
    "CondaEnvSpec",
    # platform.py
    "LinuxDistro",
    "OsFamily",
    "PLATFORM_KEYS",
    "PlatformId",
    # result.py
    "ErrorKind",
    "RunOutcome",
    "RunReport",
    "StepOutcome",
    "StepResult",
    # tool.py
    "Command",
    "InstallAction",
    "PlatformInstall",
    "ToolKind",
    "ToolSpec",
    "Unsupported",
]

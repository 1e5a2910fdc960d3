"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

# Fixed stage order. Later stages assume earlier ones succeeded
# (e.g. the environment needs Miniconda, Miniconda needs curl).
STAGE_ORDER: tuple[str, ...] = (
    "package-manager",
    "curl",
    "wget",
    "miniconda",
    "vscode",
    "git",
    "gcc",
    "environment",
)

ENVIRONMENT_STAGE = "environment"

# Machine-name normalization to the spelling Miniconda installers use.
# Linux assets say aarch64; macOS assets say arm64.
_LINUX_ARCH_MAP: dict[str, str] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}

_MACOS_ARCH_MAP: dict[str, str] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

OS_RELEASE_PATH = "/etc/os-release"

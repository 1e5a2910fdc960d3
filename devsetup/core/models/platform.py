"""
Platform model — where are we running?

A PlatformId is created exactly once per provisioning run by the
detector and never changes afterwards. Everything platform-specific
downstream is keyed by ``PlatformId.key``.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class OsFamily(StrEnum):
    """Operating system families."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class LinuxDistro(StrEnum):
    """Linux distributions the tool table knows about."""

    UBUNTU = "ubuntu"
    DEBIAN = "debian"
    CENTOS = "centos"
    RHEL = "rhel"
    FEDORA = "fedora"
    ARCH = "arch"
    UNKNOWN = "unknown"


# Every key a tool table must cover.
PLATFORM_KEYS: tuple[str, ...] = (
    "ubuntu",
    "debian",
    "centos",
    "rhel",
    "fedora",
    "arch",
    "linux-unknown",
    "macos",
    "windows",
)


class PlatformId(BaseModel):
    """Normalized platform identifier.

    ``distro`` is only meaningful for Linux; it is ``None`` elsewhere.
    ``arch`` is the machine name in the spelling Miniconda installers use.
    """

    model_config = ConfigDict(frozen=True)

    os: OsFamily
    distro: LinuxDistro | None = None
    arch: str = "x86_64"

    @property
    def is_known(self) -> bool:
        return self.os != OsFamily.UNKNOWN

    @property
    def key(self) -> str | None:
        """Tool-table key, or None for an unknown OS."""
        if self.os == OsFamily.LINUX:
            distro = self.distro or LinuxDistro.UNKNOWN
            if distro == LinuxDistro.UNKNOWN:
                return "linux-unknown"
            return distro.value
        if self.os == OsFamily.UNKNOWN:
            return None
        return self.os.value

    def __str__(self) -> str:
        if self.os == OsFamily.LINUX:
            return f"linux/{(self.distro or LinuxDistro.UNKNOWN).value} ({self.arch})"
        return f"{self.os.value} ({self.arch})"

    @classmethod
    def linux(cls, distro: LinuxDistro | str, arch: str = "x86_64") -> PlatformId:
        return cls(os=OsFamily.LINUX, distro=LinuxDistro(distro), arch=arch)

    @classmethod
    def macos(cls, arch: str = "x86_64") -> PlatformId:
        return cls(os=OsFamily.MACOS, arch=arch)

    @classmethod
    def windows(cls, arch: str = "x86_64") -> PlatformId:
        return cls(os=OsFamily.WINDOWS, arch=arch)

    @classmethod
    def unknown(cls) -> PlatformId:
        return cls(os=OsFamily.UNKNOWN)

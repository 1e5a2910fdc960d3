"""
L3 Detection — Platform identification.

Read-only: looks at the OS identification string, /etc/os-release,
and (as a fallback) ``lsb_release -si``. Every signal can be injected,
so detection is a pure function of its inputs in tests.
"""

from __future__ import annotations

import logging
import platform
import shutil
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

from devsetup.core.models.platform import LinuxDistro, OsFamily, PlatformId
from devsetup.core.services.provisioning.data.constants import (
    _LINUX_ARCH_MAP,
    _MACOS_ARCH_MAP,
    OS_RELEASE_PATH,
)

logger = logging.getLogger(__name__)

# Raw distro identifiers → normalized distro.
_DISTRO_ALIASES: dict[str, LinuxDistro] = {
    "ubuntu": LinuxDistro.UBUNTU,
    "debian": LinuxDistro.DEBIAN,
    "centos": LinuxDistro.CENTOS,
    "rhel": LinuxDistro.RHEL,
    "redhat": LinuxDistro.RHEL,
    "redhatenterprise": LinuxDistro.RHEL,
    "redhatenterpriseserver": LinuxDistro.RHEL,
    "redhatenterpriseworkstation": LinuxDistro.RHEL,
    "fedora": LinuxDistro.FEDORA,
    "arch": LinuxDistro.ARCH,
    "archlinux": LinuxDistro.ARCH,
}


def os_family(system: str) -> OsFamily:
    """Map an OS identification string (``sys.platform`` style) to a family."""
    s = system.lower()
    if s.startswith("linux"):
        return OsFamily.LINUX
    if s.startswith("darwin"):
        return OsFamily.MACOS
    if s in ("win32", "cygwin", "msys") or s.startswith("windows"):
        return OsFamily.WINDOWS
    return OsFamily.UNKNOWN


def normalize_distro(raw: str | None) -> LinuxDistro:
    """Normalize a distro identifier (``ID`` field or lsb_release output)."""
    if not raw:
        return LinuxDistro.UNKNOWN
    key = raw.strip().strip('"').strip("'").lower().replace(" ", "")
    return _DISTRO_ALIASES.get(key, LinuxDistro.UNKNOWN)


def normalize_arch(family: OsFamily, machine: str) -> str:
    m = machine.strip()
    lookup = _MACOS_ARCH_MAP if family == OsFamily.MACOS else _LINUX_ARCH_MAP
    return lookup.get(m.lower(), m or "x86_64")


def read_os_release(path: Path) -> dict[str, str]:
    """Parse an os-release file into a dict. Missing file → empty dict."""
    fields: dict[str, str] = {}
    try:
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                fields[key.strip()] = value.strip().strip('"').strip("'")
    except (FileNotFoundError, OSError):
        return {}
    return fields


def _lsb_release_id() -> str | None:
    """Output of ``lsb_release -si``, lower-cased, or None."""
    if not shutil.which("lsb_release"):
        return None
    try:
        r = subprocess.run(
            ["lsb_release", "-si"],
            capture_output=True, text=True, timeout=10,
        )
    except (subprocess.TimeoutExpired, OSError):
        return None
    if r.returncode != 0:
        return None
    return r.stdout.strip().lower() or None


def distro_from_os_release(fields: dict[str, str]) -> LinuxDistro:
    """Resolve the distro from ``ID``, then the ``ID_LIKE`` chain."""
    distro = normalize_distro(fields.get("ID"))
    if distro != LinuxDistro.UNKNOWN:
        return distro
    for candidate in fields.get("ID_LIKE", "").split():
        distro = normalize_distro(candidate)
        if distro != LinuxDistro.UNKNOWN:
            return distro
    return LinuxDistro.UNKNOWN


class PlatformDetector:
    """Determine the normalized PlatformId of the host.

    Args:
        system: OS identification string (default: ``sys.platform``).
        os_release_path: Release-info file (primary distro signal).
        machine: Machine name (default: ``platform.machine()``).
        lsb_release: Callable returning the distro-query tool's output
            (fallback distro signal; default runs ``lsb_release -si``).
    """

    def __init__(
        self,
        *,
        system: str | None = None,
        os_release_path: str | Path = OS_RELEASE_PATH,
        machine: str | None = None,
        lsb_release: Callable[[], str | None] | None = None,
    ):
        self._system = system if system is not None else sys.platform
        self._os_release_path = Path(os_release_path)
        self._machine = machine if machine is not None else platform.machine()
        self._lsb_release = lsb_release or _lsb_release_id

    def detect(self) -> PlatformId:
        family = os_family(self._system)
        if family == OsFamily.UNKNOWN:
            logger.info("Unrecognized operating system: %s", self._system)
            return PlatformId.unknown()

        arch = normalize_arch(family, self._machine)

        if family != OsFamily.LINUX:
            return PlatformId(os=family, arch=arch)

        return PlatformId(os=family, distro=self._detect_distro(), arch=arch)

    def _detect_distro(self) -> LinuxDistro:
        fields = read_os_release(self._os_release_path)
        if fields:
            distro = distro_from_os_release(fields)
            logger.debug(
                "os-release ID=%s ID_LIKE=%s → %s",
                fields.get("ID"), fields.get("ID_LIKE"), distro.value,
            )
            return distro

        raw = self._lsb_release()
        distro = normalize_distro(raw)
        logger.debug("lsb_release → %s (%s)", raw, distro.value)
        return distro


def detect_platform() -> PlatformId:
    """Detect the current host platform."""
    return PlatformDetector().detect()

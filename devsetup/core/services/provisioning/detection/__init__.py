"""
L3 Detection — ``__init__.py`` re-exports all detection functions.

These functions READ system state but never WRITE.
"""

from devsetup.core.services.provisioning.detection.platform import (  # noqa: F401
    PlatformDetector,
    detect_platform,
    distro_from_os_release,
    normalize_arch,
    normalize_distro,
    os_family,
    read_os_release,
)
from devsetup.core.services.provisioning.detection.presence import (  # noqa: F401
    PresenceChecker,
)

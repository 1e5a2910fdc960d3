"""
L0 Data — stage order, normalization maps, and the packaged tool table.
"""

from devsetup.core.services.provisioning.data.constants import (  # noqa: F401
    ENVIRONMENT_STAGE,
    OS_RELEASE_PATH,
    STAGE_ORDER,
)

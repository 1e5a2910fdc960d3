"""
Provisioning service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate layer (data → resolver → detection → execution →
orchestration)::

    from devsetup.core.services.provisioning import ProvisioningPipeline
"""

# ── L0: Data ──
from devsetup.core.services.provisioning.data.constants import (  # noqa: F401
    ENVIRONMENT_STAGE,
    STAGE_ORDER,
)

# ── L2: Resolver ──
from devsetup.core.services.provisioning.resolver.registry import (  # noqa: F401
    ToolRegistry,
)

# ── L3: Detection ──
from devsetup.core.services.provisioning.detection.platform import (  # noqa: F401
    PlatformDetector,
    detect_platform,
)
from devsetup.core.services.provisioning.detection.presence import (  # noqa: F401
    PresenceChecker,
)

# ── L4: Execution ──
from devsetup.core.services.provisioning.execution.conda_env import (  # noqa: F401
    EnvironmentProvisioner,
)
from devsetup.core.services.provisioning.execution.step_runner import (  # noqa: F401
    StepRunner,
)

# ── L5: Orchestration ──
from devsetup.core.services.provisioning.orchestration.pipeline import (  # noqa: F401
    PlannedStep,
    ProvisioningPipeline,
)

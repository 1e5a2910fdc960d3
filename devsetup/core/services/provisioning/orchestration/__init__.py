"""
L5 Orchestration — the provisioning pipeline.
"""

from devsetup.core.services.provisioning.orchestration.pipeline import (  # noqa: F401
    PlannedStep,
    ProvisioningPipeline,
)

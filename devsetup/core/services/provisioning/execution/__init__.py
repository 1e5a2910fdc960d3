"""
L4 Execution — everything that mutates the host.
"""

from devsetup.core.services.provisioning.execution.conda_env import (  # noqa: F401
    EnvironmentProvisioner,
    parse_env_names,
    parse_pip_list,
)
from devsetup.core.services.provisioning.execution.step_runner import (  # noqa: F401
    StepRunner,
)

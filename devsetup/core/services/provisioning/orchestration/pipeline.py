"""
L5 Orchestration — The provisioning pipeline.

Flow (strictly sequential):

    detect platform (once)
      → for each stage in STAGE_ORDER:
            resolve → prerequisite gate → presence → unsupported?
            → StepRunner / EnvironmentProvisioner
      → RunReport

Failures are recorded and the run continues; only an unknown platform
stops it before the first stage. Dependents of a failed prerequisite
are short-circuited without touching the host. A short-circuit makes
the run fatal only when the chain it hangs off is fatal; an optional
tool that could not be installed leaves the run partial.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from devsetup.adapters.base import HostAdapter
from devsetup.adapters.shell.command import ShellHostAdapter
from devsetup.core.models.environment import CondaEnvSpec
from devsetup.core.models.platform import PlatformId
from devsetup.core.models.result import ErrorKind, RunReport, StepOutcome, StepResult
from devsetup.core.models.tool import InstallAction, ToolKind, Unsupported
from devsetup.core.services.provisioning.data.constants import STAGE_ORDER
from devsetup.core.services.provisioning.detection.platform import PlatformDetector
from devsetup.core.services.provisioning.detection.presence import PresenceChecker
from devsetup.core.services.provisioning.execution.conda_env import EnvironmentProvisioner
from devsetup.core.services.provisioning.execution.step_runner import StepRunner
from devsetup.core.services.provisioning.resolver.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class PlannedStep:
    """What a stage would do on this host, without doing it."""

    tool: str
    label: str
    supported: bool
    present: bool
    requires: list[str] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "tool": self.tool,
            "label": self.label,
            "supported": self.supported,
            "present": self.present,
            "requires": self.requires,
            "commands": self.commands,
            "reason": self.reason,
        }


class ProvisioningPipeline:
    """Orchestrate one provisioning run.

    Every collaborator can be injected; by default the pipeline works
    on the real host through a ShellHostAdapter.
    """

    def __init__(
        self,
        *,
        host: HostAdapter | None = None,
        registry: ToolRegistry | None = None,
        detector: PlatformDetector | None = None,
        runner: StepRunner | None = None,
        env_provisioner: EnvironmentProvisioner | None = None,
        env_spec: CondaEnvSpec | None = None,
        stages: tuple[str, ...] = STAGE_ORDER,
    ):
        self._host = host or ShellHostAdapter()
        self._registry = registry or ToolRegistry.load()
        self._detector = detector or PlatformDetector()
        self._runner = runner or StepRunner(self._host)
        self._env_provisioner = env_provisioner or EnvironmentProvisioner(self._host)
        self._env_spec = env_spec or CondaEnvSpec()
        self._stages = stages
        self._registry.require(stages)

    @property
    def stages(self) -> tuple[str, ...]:
        return self._stages

    def run(self) -> RunReport:
        """Execute every stage in order and return the report."""
        report = RunReport()

        platform = self._detector.detect()
        report.platform = platform
        logger.info("Detected platform: %s", platform)

        if not platform.is_known:
            report.fatal_reason = "Unsupported operating system"
            logger.error("%s, no steps were run", report.fatal_reason)
            return report

        presence = PresenceChecker(self._registry, platform, self._host)

        for stage in self._stages:
            spec = self._registry.get(stage)
            logger.info("── %s ──", spec.display_name)
            result = self._run_stage(stage, platform, presence, report)
            if spec.prerequisite:
                result = result.model_copy(update={"prerequisite": True})
            report.add(result)
            _log_result(result)

        logger.info(
            "Provisioning %s: %d installed, %d already present, %d failed, %d unsupported",
            report.outcome.value, report.installed, report.already_present,
            report.failed, report.unsupported,
        )
        return report

    def _run_stage(
        self,
        stage: str,
        platform: PlatformId,
        presence: PresenceChecker,
        report: RunReport,
    ) -> StepResult:
        spec = self._registry.get(stage)
        action = self._registry.resolve(stage, platform)

        # The gate comes first: a dependent of a failed prerequisite is
        # failed even if the host happens to have it.
        if isinstance(action, InstallAction):
            unmet = _unmet_prerequisites(action.requires, report)
            if unmet:
                return StepResult.failure(
                    stage,
                    f"missing dependency: {', '.join(unmet)}",
                    ErrorKind.MISSING_PREREQUISITE,
                    breaks_chain=_blocked_by_fatal(unmet, report),
                )

        if spec.kind == ToolKind.ENVIRONMENT:
            if isinstance(action, Unsupported):
                return StepResult.unsupported(stage, action.reason)
            return self._env_provisioner.provision(self._env_spec)

        if presence.is_present(stage):
            return StepResult.present(stage)

        if isinstance(action, Unsupported):
            return StepResult.unsupported(stage, action.reason)

        logger.info("Installing %s...", spec.display_name)
        return self._runner.run(action)

    def plan(self) -> tuple[PlatformId, list[PlannedStep]]:
        """Resolve every stage and check presence; execute nothing."""
        platform = self._detector.detect()
        if not platform.is_known:
            return platform, []

        presence = PresenceChecker(self._registry, platform, self._host)
        planned: list[PlannedStep] = []
        for stage in self._stages:
            spec = self._registry.get(stage)
            action = self._registry.resolve(stage, platform)
            is_env = spec.kind == ToolKind.ENVIRONMENT
            if isinstance(action, Unsupported):
                planned.append(PlannedStep(
                    tool=stage,
                    label=spec.display_name,
                    supported=False,
                    present=False if is_env else presence.is_present(stage),
                    reason=action.reason,
                ))
                continue
            commands = [c.display() for c in action.commands]
            if is_env:
                commands = [
                    f"conda create -n {self._env_spec.name} "
                    f"python={self._env_spec.python_version} -y",
                    f"pip install --upgrade {' '.join(self._env_spec.packages)}",
                ]
            planned.append(PlannedStep(
                tool=stage,
                label=spec.display_name,
                supported=True,
                present=False if is_env else presence.is_present(stage),
                requires=list(action.requires),
                commands=commands,
            ))
        return platform, planned


def _unmet_prerequisites(requires: list[str], report: RunReport) -> list[str]:
    unmet: list[str] = []
    for dep in requires:
        prior = report.get(dep)
        if prior is None or not prior.ok:
            unmet.append(dep)
    return unmet


def _blocked_by_fatal(unmet: list[str], report: RunReport) -> bool:
    for dep in unmet:
        prior = report.get(dep)
        if prior is not None and prior.is_fatal:
            return True
    return False


def _log_result(result: StepResult) -> None:
    if result.outcome == StepOutcome.ALREADY_PRESENT:
        logger.info("%s is already installed", result.tool)
    elif result.outcome == StepOutcome.INSTALLED:
        logger.info("%s installed", result.tool)
    elif result.outcome == StepOutcome.UNSUPPORTED:
        logger.warning("%s skipped: %s", result.tool, result.diagnostic or "unsupported on this platform")
    else:
        logger.error("%s failed: %s", result.tool, result.diagnostic)

"""
StepResult and RunReport — the provisioning contract.

Every stage of a run produces exactly one StepResult. Results are
immutable; the pipeline collects them in order into a RunReport,
which is the only thing callers (CLI, tests) look at.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from devsetup.core.models.platform import PlatformId


class StepOutcome(StrEnum):
    """What happened to a single stage."""

    ALREADY_PRESENT = "already_present"
    INSTALLED = "installed"
    FAILED = "failed"
    UNSUPPORTED = "unsupported_on_platform"


class ErrorKind(StrEnum):
    """Why a stage failed."""

    MISSING_PREREQUISITE = "missing_prerequisite"
    EXTERNAL_COMMAND_FAILURE = "external_command_failure"
    VERIFICATION_FAILURE = "verification_failure"


class RunOutcome(StrEnum):
    """Overall verdict of a provisioning run."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FATAL = "fatal"


class StepResult(BaseModel):
    """Result of one provisioning stage."""

    model_config = ConfigDict(frozen=True)

    tool: str
    outcome: StepOutcome
    diagnostic: str | None = None
    error_kind: ErrorKind | None = None
    prerequisite: bool = False
    breaks_chain: bool = False
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome in (StepOutcome.ALREADY_PRESENT, StepOutcome.INSTALLED)

    @property
    def failed(self) -> bool:
        return self.outcome == StepOutcome.FAILED

    @property
    def is_fatal(self) -> bool:
        """A failure that breaks the prerequisite chain.

        Either the stage is itself a prerequisite, or it was blocked by
        one (``breaks_chain``). Optional tools failing for any reason,
        missing dependencies included, only make a run partial.
        """
        return self.failed and (self.prerequisite or self.breaks_chain)

    @classmethod
    def present(cls, tool: str, **kwargs: Any) -> StepResult:
        return cls(tool=tool, outcome=StepOutcome.ALREADY_PRESENT, **kwargs)

    @classmethod
    def installed(cls, tool: str, **kwargs: Any) -> StepResult:
        return cls(tool=tool, outcome=StepOutcome.INSTALLED, **kwargs)

    @classmethod
    def unsupported(cls, tool: str, reason: str = "", **kwargs: Any) -> StepResult:
        return cls(
            tool=tool,
            outcome=StepOutcome.UNSUPPORTED,
            diagnostic=reason or None,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        tool: str,
        diagnostic: str,
        error_kind: ErrorKind,
        **kwargs: Any,
    ) -> StepResult:
        return cls(
            tool=tool,
            outcome=StepOutcome.FAILED,
            diagnostic=diagnostic,
            error_kind=error_kind,
            **kwargs,
        )


@dataclass
class RunReport:
    """Ordered results of one provisioning run."""

    platform: PlatformId | None = None
    results: list[StepResult] = field(default_factory=list)
    fatal_reason: str | None = None

    def add(self, result: StepResult) -> None:
        self.results.append(result)

    def get(self, tool: str) -> StepResult | None:
        for r in self.results:
            if r.tool == tool:
                return r
        return None

    def _count(self, outcome: StepOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def already_present(self) -> int:
        return self._count(StepOutcome.ALREADY_PRESENT)

    @property
    def installed(self) -> int:
        return self._count(StepOutcome.INSTALLED)

    @property
    def failed(self) -> int:
        return self._count(StepOutcome.FAILED)

    @property
    def unsupported(self) -> int:
        return self._count(StepOutcome.UNSUPPORTED)

    @property
    def outcome(self) -> RunOutcome:
        if self.fatal_reason or any(r.is_fatal for r in self.results):
            return RunOutcome.FATAL
        if self.failed:
            return RunOutcome.PARTIAL
        return RunOutcome.SUCCESS

    @property
    def exit_code(self) -> int:
        # Partial success still exits 0; only a broken chain is an error.
        return 1 if self.outcome == RunOutcome.FATAL else 0

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.model_dump(mode="json") if self.platform else None,
            "outcome": self.outcome.value,
            "exit_code": self.exit_code,
            "fatal_reason": self.fatal_reason,
            "already_present": self.already_present,
            "installed": self.installed,
            "failed": self.failed,
            "unsupported": self.unsupported,
            "results": [r.model_dump(mode="json") for r in self.results],
        }

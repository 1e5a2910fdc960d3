"""
L4 Execution — Conda environment provisioning.

The managed environment is always destroyed and recreated, never
upgraded in place:

    conda present? → config → env list → [env remove] → create
                   → pip install (one batch) → pip list → verify
"""

from __future__ import annotations

import json
import logging
import time

from devsetup.adapters.base import CommandResult, HostAdapter
from devsetup.core.errors import (
    ExternalCommandFailure,
    MissingPrerequisite,
    ProvisioningError,
    VerificationFailure,
)
from devsetup.core.models.environment import CondaEnvSpec
from devsetup.core.models.result import StepResult
from devsetup.core.models.tool import Command
from devsetup.core.services.provisioning.data.constants import ENVIRONMENT_STAGE

logger = logging.getLogger(__name__)


def parse_env_names(env_list_output: str) -> set[str]:
    """Environment names from ``conda env list`` output.

    Lines look like ``J   *  /home/u/miniconda3/envs/J``; comment lines
    start with ``#`` and unnamed (path-only) environments are ignored.
    """
    names: set[str] = set()
    for line in env_list_output.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        first = line.split()[0]
        if first.startswith(("/", "\\")) or ":" in first:
            continue
        names.add(first)
    return names


def parse_pip_list(pip_list_json: str) -> set[str]:
    """Package names from ``pip list --format=json`` output."""
    try:
        data = json.loads(pip_list_json or "[]")
    except json.JSONDecodeError as e:
        raise VerificationFailure(f"could not parse installed package list: {e}") from e
    if not isinstance(data, list):
        raise VerificationFailure("installed package list is not a JSON array")
    return {str(item.get("name", "")) for item in data if isinstance(item, dict)}


class EnvironmentProvisioner:
    """Recreate a named conda environment and install its package set."""

    def __init__(self, host: HostAdapter):
        self._host = host

    def provision(self, spec: CondaEnvSpec) -> StepResult:
        start = time.monotonic()
        try:
            self._provision(spec)
        except ProvisioningError as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.error("Environment '%s' failed: %s", spec.name, e)
            return StepResult.failure(
                ENVIRONMENT_STAGE, str(e), e.error_kind,
                duration_ms=elapsed_ms,
                # No conda means the Miniconda chain is broken.
                breaks_chain=isinstance(e, MissingPrerequisite),
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return StepResult.installed(
            ENVIRONMENT_STAGE,
            diagnostic=(
                f"environment '{spec.name}' (python {spec.python_version}) "
                f"with {', '.join(spec.packages)}"
            ),
            duration_ms=elapsed_ms,
        )

    def _provision(self, spec: CondaEnvSpec) -> None:
        conda = self._host.which("conda")
        if conda is None:
            raise MissingPrerequisite("conda", detail="Miniconda must be installed first")

        self._run([conda, "config", "--set", "auto_activate_base", "false"])

        existing = parse_env_names(self._run([conda, "env", "list"]).stdout)
        if spec.name in existing:
            logger.warning("Environment '%s' already exists, removing it first", spec.name)
            self._run([conda, "env", "remove", "-n", spec.name, "-y"])

        logger.info("Creating conda environment '%s' with Python %s", spec.name, spec.python_version)
        self._run([conda, "create", "-n", spec.name, f"python={spec.python_version}", "-y"])

        logger.info("Installing packages into '%s': %s", spec.name, " ".join(spec.packages))
        self._run([
            conda, "run", "-n", spec.name,
            "python", "-m", "pip", "install", "--upgrade", *spec.packages,
        ])

        listing = self._run([
            conda, "run", "-n", spec.name,
            "python", "-m", "pip", "list", "--format=json",
        ])
        missing = spec.missing_from(parse_pip_list(listing.stdout))
        if missing:
            raise VerificationFailure(
                f"environment '{spec.name}' is missing package(s): {', '.join(missing)}"
            )

    def _run(self, argv: list[str]) -> CommandResult:
        result = self._host.run(Command(argv=argv))
        if not result.ok:
            raise ExternalCommandFailure(argv, result.returncode, result.error_tail())
        return result

"""
Tool table loader — reads tools.yml into validated ToolSpecs.

The packaged table lives next to the provisioning service. An
alternative table with the same schema can be selected with the
DEVSETUP_TOOLS_FILE environment variable.

Validation happens here, once, at load time: every tool must cover
every platform key and every ``requires`` must name a known tool.
A broken table raises RegistryError — it is never half-loaded.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from devsetup.core.errors import RegistryError
from devsetup.core.models.platform import PLATFORM_KEYS
from devsetup.core.models.tool import ToolKind, ToolSpec

logger = logging.getLogger(__name__)

TOOLS_FILE_ENV = "DEVSETUP_TOOLS_FILE"

DEFAULT_TOOLS_FILE = (
    Path(__file__).resolve().parent.parent
    / "services" / "provisioning" / "data" / "tools.yml"
)


def tools_file_path() -> Path:
    """Resolve the tool table path (env override, else packaged)."""
    override = os.environ.get(TOOLS_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_TOOLS_FILE


def validate_tool(spec: ToolSpec, known: set[str]) -> list[str]:
    """Check one tool for platform coverage and consistency.

    Returns:
        List of error strings (empty = valid).
    """
    errors: list[str] = []

    missing = [k for k in PLATFORM_KEYS if k not in spec.install]
    if missing:
        errors.append(f"no install behavior for platform(s): {', '.join(missing)}")

    extra = sorted(set(spec.install) - set(PLATFORM_KEYS))
    if extra:
        errors.append(f"unknown platform key(s): {', '.join(extra)}")

    extra_cli = sorted(set(spec.cli_overrides) - set(PLATFORM_KEYS))
    if extra_cli:
        errors.append(f"unknown cli_overrides key(s): {', '.join(extra_cli)}")

    for key, entry in spec.install.items():
        if spec.kind == ToolKind.PACKAGE and entry.is_supported and not entry.commands:
            errors.append(f"{key}: supported entry has no commands")
        if spec.kind == ToolKind.ENVIRONMENT and entry.commands:
            errors.append(f"{key}: environment entries cannot declare commands")
        for dep in entry.requires:
            if dep == spec.name:
                errors.append(f"{key}: tool requires itself")
            elif dep not in known:
                errors.append(f"{key}: requires unknown tool '{dep}'")

    return errors


def parse_tools(data: object, source: str = "<memory>") -> dict[str, ToolSpec]:
    """Validate raw table data and return ToolSpecs keyed by name, in order.

    Raises:
        RegistryError: If the data is malformed or any tool is incomplete.
    """
    if not isinstance(data, dict) or not isinstance(data.get("tools"), list):
        raise RegistryError(f"Expected a mapping with a 'tools' list in {source}")

    specs: dict[str, ToolSpec] = {}
    for i, raw in enumerate(data["tools"]):
        try:
            spec = ToolSpec.model_validate(raw)
        except ValidationError as e:
            raise RegistryError(f"Invalid tool entry #{i} in {source}: {e}") from e
        if spec.name in specs:
            raise RegistryError(f"Duplicate tool '{spec.name}' in {source}")
        specs[spec.name] = spec

    problems: list[str] = []
    for name, spec in specs.items():
        for err in validate_tool(spec, set(specs)):
            problems.append(f"{name}: {err}")
    if problems:
        raise RegistryError(
            f"Invalid tool table {source}:\n  " + "\n  ".join(problems)
        )

    return specs


def load_tools(path: Path | None = None) -> dict[str, ToolSpec]:
    """Load and validate the tool table.

    Args:
        path: Explicit table path. If None, uses DEVSETUP_TOOLS_FILE or
            the packaged table.

    Raises:
        RegistryError: If the file is missing, unreadable, or invalid.
    """
    if path is None:
        path = tools_file_path()

    if not path.is_file():
        raise RegistryError(f"Tool table not found: {path}")

    logger.debug("Loading tool table from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RegistryError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise RegistryError(f"Invalid YAML in {path}: {e}") from e

    specs = parse_tools(data, source=str(path))
    logger.debug("Loaded %d tools: %s", len(specs), list(specs))
    return specs

"""
devsetup — CLI entrypoint.

Usage:
    devsetup              # provision this machine
    devsetup --json       # provision, print the run report as JSON
    devsetup detect       # show the detected platform
    devsetup plan         # show what would be done, do nothing
"""

from __future__ import annotations

import json
import os
import sys

import click

from devsetup import __version__
from devsetup.core.errors import RegistryError
from devsetup.core.models.result import RunOutcome, RunReport, StepOutcome
from devsetup.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    LOG_LEVEL_ENV,
    resolve_level,
    setup_logging,
)


def _build_pipeline():
    from devsetup.core.services.provisioning.orchestration.pipeline import (
        ProvisioningPipeline,
    )

    return ProvisioningPipeline()


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="devsetup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the run report as JSON.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    as_json: bool,
) -> None:
    """devsetup — bootstrap a development workstation.

    Without a sub-command, installs the toolchain (curl, wget, Miniconda,
    VS Code, git, gcc) and recreates the conda environment.
    """
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(
            verbose=verbose, quiet=quiet, debug=debug,
            env_level=os.environ.get(LOG_LEVEL_ENV),
        ),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )

    if ctx.invoked_subcommand is None:
        _provision(as_json=as_json, quiet=quiet)


def _provision(*, as_json: bool, quiet: bool) -> None:
    try:
        report = _build_pipeline().run()
    except RegistryError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_summary(report, quiet=quiet)

    sys.exit(report.exit_code)


_OUTCOME_STYLE = {
    StepOutcome.ALREADY_PRESENT: ("•", "cyan"),
    StepOutcome.INSTALLED: ("✓", "green"),
    StepOutcome.FAILED: ("✗", "red"),
    StepOutcome.UNSUPPORTED: ("–", "yellow"),
}


def _print_summary(report: RunReport, *, quiet: bool) -> None:
    click.echo()
    if report.fatal_reason:
        click.secho(f"❌ {report.fatal_reason}", fg="red", bold=True)
        if report.platform is not None:
            click.echo(f"   Platform: {report.platform}")
        click.echo()
        return

    if not quiet:
        click.secho(f"🖥  {report.platform}", fg="cyan", bold=True)
        for r in report.results:
            symbol, color = _OUTCOME_STYLE[r.outcome]
            click.secho(f"   {symbol} {r.tool:<16}", fg=color, nl=False)
            click.echo(f" {r.outcome.value}")
            if r.failed and r.diagnostic:
                for line in r.diagnostic.splitlines()[:5]:
                    click.echo(f"       {line}")
        click.echo()

    click.echo(
        f"   Already present: {report.already_present}   "
        f"Installed: {report.installed}   "
        f"Failed: {report.failed}   "
        f"Unsupported: {report.unsupported}"
    )

    outcome = report.outcome
    if outcome == RunOutcome.SUCCESS:
        click.secho("✅ Environment ready", fg="green", bold=True)
    elif outcome == RunOutcome.PARTIAL:
        click.secho("⚠️  Finished with failures", fg="yellow", bold=True)
    else:
        click.secho("❌ A prerequisite could not be installed", fg="red", bold=True)
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def detect(as_json: bool) -> None:
    """Show the detected platform."""
    from devsetup.core.services.provisioning.detection.platform import detect_platform

    platform = detect_platform()

    if as_json:
        data = platform.model_dump(mode="json")
        data["key"] = platform.key
        click.echo(json.dumps(data, indent=2))
        sys.exit(0 if platform.is_known else 1)
        return

    if not platform.is_known:
        click.secho("❌ Unsupported operating system", fg="red")
        sys.exit(1)

    click.secho(f"🖥  {platform}", fg="cyan", bold=True)
    click.echo(f"   Tool table key: {platform.key}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def plan(as_json: bool) -> None:
    """Show what provisioning would do. Nothing is executed."""
    try:
        platform, steps = _build_pipeline().plan()
    except RegistryError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({
            "platform": platform.model_dump(mode="json"),
            "steps": [s.to_dict() for s in steps],
        }, indent=2))
        sys.exit(0 if platform.is_known else 1)
        return

    if not platform.is_known:
        click.secho("❌ Unsupported operating system", fg="red")
        sys.exit(1)

    click.secho(f"\n📋 Plan for {platform}", fg="cyan", bold=True)
    for step in steps:
        if not step.supported:
            state, color = "unsupported", "yellow"
        elif step.present:
            state, color = "already present", "cyan"
        else:
            state, color = "install", "green"
        click.secho(f"   • {step.label:<20}", nl=False, bold=True)
        click.secho(f" {state}", fg=color)
        if step.reason:
            click.echo(f"       {step.reason}")
        if step.supported and not step.present:
            if step.requires:
                click.echo(f"       requires: {', '.join(step.requires)}")
            for command in step.commands:
                click.echo(f"       $ {command}")
    click.echo()


if __name__ == "__main__":
    cli()

"""Vulnerability-gated install and scan workflows.

Both workflows build a candidate list, query the oracle once, render the
report and derive a single Verdict. Only an install-mode PROCEED verdict
reaches ``npm install``; scan mode never installs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from npm_vetter.installer.base import PackageInstallerPort
from npm_vetter.manifest.reader import MANIFEST_NAME, aread_manifest
from npm_vetter.models import Decision, InstallResult, Mode, PackageRef, Report
from npm_vetter.oracle.base import VulnerabilityOraclePort
from npm_vetter.registry.base import VersionResolverPort
from npm_vetter.report.decision import build_report, decide
from npm_vetter.report.prompt import PrompterPort
from npm_vetter.report.render import render_report
from npm_vetter.report.writer import write_report
from npm_vetter.settings import Settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True, slots=True)
class Services:
    """Adapters injected into the workflows -- the CLI is the composition root."""

    resolver: VersionResolverPort
    oracle: VulnerabilityOraclePort
    installer: PackageInstallerPort
    prompter: PrompterPort
    console: Console
    settings: Settings = field(default_factory=Settings)


@dataclass(frozen=True, slots=True)
class Options:
    verbose: bool = False
    fail_closed: bool = False
    directory: Path | None = None


async def run_install(packages: list[str], options: Options, services: Services) -> int:
    """Check, then (unless aborted) install ``packages`` -- or the whole manifest if empty."""
    console = services.console
    is_default_install = not packages

    if is_default_install:
        with console.status(f"Reading {MANIFEST_NAME}..."):
            candidates = await aread_manifest(options.directory)
    else:
        candidates = await _resolve(packages, services)
    console.print(f"[blue]✔ Prepared list of {len(candidates)} packages.[/blue]")

    report = await _check(candidates, options, services)
    verdict = decide(
        report,
        Mode.INSTALL,
        services.prompter,
        fail_closed=options.fail_closed or services.settings.fail_closed,
    )

    if verdict.decision == Decision.ABORT:
        console.print("\n[bold red]🛑 Aborting due to security risks.[/bold red]")
        return EXIT_FAILURE

    console.print("[dim]\n--- Handing over to npm ---[/dim]")
    names = () if is_default_install else tuple(c.name for c in candidates)
    result = await services.installer.install(list(packages), packages=names)
    _render_install_result(result, console)
    return EXIT_OK if result.success else EXIT_FAILURE


async def run_scan(options: Options, services: Services) -> int:
    """Check the manifest's dependencies; optionally uninstall the vulnerable ones."""
    console = services.console

    with console.status(f"Reading {MANIFEST_NAME}..."):
        candidates = await aread_manifest(options.directory)
    if not candidates:
        console.print(f"[red]✖ No packages found in {MANIFEST_NAME} or file missing.[/red]")
        return EXIT_OK
    console.print(f"[blue]✔ Prepared list of {len(candidates)} packages.[/blue]")

    report = await _check(candidates, options, services)
    verdict = decide(
        report,
        Mode.SCAN,
        services.prompter,
        fail_closed=options.fail_closed or services.settings.fail_closed,
    )

    if verdict.decision == Decision.UNINSTALL:
        result = await services.installer.uninstall(list(verdict.packages))
        if result.success:
            console.print(f"[green]✔ {escape(result.message)}[/green]")
            return EXIT_OK
        console.print(f"[red]✖ {escape(result.message)}[/red]")
        return EXIT_FAILURE

    if verdict.decision == Decision.ABORT:
        console.print("\n[bold red]🛑 Vulnerability status could not be verified.[/bold red]")
        return EXIT_FAILURE

    console.print("[dim]\nScan complete.[/dim]")
    return EXIT_OK


# ── Steps ────────────────────────────────────────────────────


async def _resolve(packages: list[str], services: Services) -> tuple[PackageRef, ...]:
    console = services.console
    with console.status(f"Fetching versions for {len(packages)} packages..."):
        slots = await services.resolver.resolve_slots(packages)

    for slot in slots:
        if not slot.resolved:
            console.print(
                f"[yellow]⚠ Could not resolve '{escape(slot.reference)}'; "
                "it will not be checked.[/yellow]"
            )
    return tuple(slot.package for slot in slots if slot.package is not None)


async def _check(
    candidates: tuple[PackageRef, ...],
    options: Options,
    services: Services,
) -> Report:
    with services.console.status("Checking for security vulnerabilities..."):
        results = await services.oracle.query(candidates)

    report = build_report(results)
    render_report(report, services.console)
    if options.verbose:
        _dump_report(report, candidates, options, services)
    return report


def _dump_report(
    report: Report,
    candidates: tuple[PackageRef, ...],
    options: Options,
    services: Services,
) -> None:
    directory = options.directory or Path.cwd()
    try:
        path = write_report(report, candidates, directory / services.settings.report_file)
    except OSError as exc:
        logger.warning("Could not write vulnerability report: %s", exc)
        services.console.print(f"[yellow]⚠ Could not write vulnerability report: {exc}[/yellow]")
        return
    services.console.print(f"[dim]Vulnerability report written to {path}[/dim]")


def _render_install_result(result: InstallResult, console: Console) -> None:
    if result.success:
        console.print(
            f"\n[black on green] SUCCESS [/black on green] [green]{escape(result.message)}[/green]"
        )
        if result.packages:
            console.print(f"[dim]Packages: {escape(', '.join(result.packages))}[/dim]")
        return

    console.print(f"\n[white on red] FAILED [/white on red] [red]{escape(result.message)}[/red]")
    if result.missing_package:
        console.print(
            f"Could not find package: [bold yellow]{escape(result.missing_package)}[/bold yellow]"
        )

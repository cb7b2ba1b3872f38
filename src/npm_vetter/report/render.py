"""Render a vulnerability report to the terminal."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from npm_vetter.models import CheckStatus, Report, Severity

_BADGE_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "bold white on red",
    Severity.HIGH: "red",
    Severity.MODERATE: "yellow",
    Severity.LOW: "blue",
    Severity.UNKNOWN: "white",
}

NO_SUMMARY = "No summary available"


def severity_badge(severity: Severity) -> str:
    """Return the rich markup badge for a severity. Total over Severity."""
    style = _BADGE_STYLES.get(severity, _BADGE_STYLES[Severity.UNKNOWN])
    return f"[{style}]{severity.value}[/{style}]"


def render_report(report: Report, console: Console) -> None:
    if report.status == CheckStatus.UNKNOWN:
        console.print("[red]✖ Failed to check vulnerabilities (API error).[/red]")
        return

    if report.status == CheckStatus.CLEAN:
        console.print("[green]✔ No known vulnerabilities found.[/green]")
        return

    console.print(
        f"[bold yellow]⚠ Found vulnerabilities in {len(report.flagged)} packages![/bold yellow]"
    )
    for result in report.flagged:
        name = escape(result.package.name)
        console.print(f"\n[bold underline]📦 Package: {name}[/bold underline]")
        for vuln in result.vulns:
            summary = escape(vuln.summary or NO_SUMMARY)
            console.print(f"   • \\[{severity_badge(vuln.severity)}] {summary}")
            console.print(f"[dim]     ID: {escape(vuln.id)}[/dim]")

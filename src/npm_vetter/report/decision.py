"""Classify oracle results and turn them into one Verdict per invocation.

State machine (single pass, terminal after one decision)::

    query -> None            -> UNKNOWN     -> PROCEED (fail-open) / ABORT (fail-closed)
          -> nothing flagged -> CLEAN       -> PROCEED
          -> flagged         -> VULNS_FOUND -> scan:    UNINSTALL | IGNORE
                                            -> install: ABORT | PROCEED
"""

from __future__ import annotations

import logging

from npm_vetter.models import CheckStatus, Choice, Decision, Mode, Report, Verdict, VulnResult
from npm_vetter.report.prompt import Option, PrompterPort

logger = logging.getLogger(__name__)

SCAN_MESSAGE = "Vulnerabilities found during scan. How do you want to proceed?"
INSTALL_MESSAGE = "Vulnerabilities found. How do you want to proceed?"

SCAN_OPTIONS = [
    Option(
        Choice.UNINSTALL,
        "Uninstall vulnerable package(s)",
        "Remove these packages from your project",
    ),
    Option(Choice.IGNORE, "Ignore & exit", "Do nothing"),
]
INSTALL_OPTIONS = [
    Option(Choice.ABORT, "Abort installation (recommended)"),
    Option(Choice.IGNORE, "Ignore & install (risky)"),
]

# Used when no operator is attached to stdin.
NON_INTERACTIVE_DEFAULTS: dict[Mode, Choice] = {
    Mode.INSTALL: Choice.ABORT,
    Mode.SCAN: Choice.IGNORE,
}


def build_report(results: tuple[VulnResult, ...] | None) -> Report:
    """Classify the oracle's answer. None means the status is unknown, never clean."""
    if results is None:
        return Report(status=CheckStatus.UNKNOWN)

    flagged = tuple(r for r in results if r.is_vulnerable)
    if not flagged:
        return Report(status=CheckStatus.CLEAN, results=results)
    return Report(status=CheckStatus.VULNS_FOUND, results=results, flagged=flagged)


def decide(
    report: Report,
    mode: Mode,
    prompter: PrompterPort,
    *,
    fail_closed: bool = False,
) -> Verdict:
    """Derive the invocation's verdict, prompting only when vulnerabilities were found."""
    if report.status == CheckStatus.UNKNOWN:
        if fail_closed:
            logger.info("Vulnerability status unknown; failing closed")
            return Verdict(Decision.ABORT)
        return Verdict(Decision.PROCEED)

    if report.status == CheckStatus.CLEAN:
        return Verdict(Decision.PROCEED)

    if mode == Mode.SCAN:
        choice = prompter.choose(SCAN_MESSAGE, SCAN_OPTIONS, default=Choice.IGNORE)
        if choice == Choice.UNINSTALL:
            return Verdict(Decision.UNINSTALL, packages=report.flagged_names)
        return Verdict(Decision.IGNORE)

    choice = prompter.choose(INSTALL_MESSAGE, INSTALL_OPTIONS, default=Choice.ABORT)
    if choice == Choice.IGNORE:
        return Verdict(Decision.PROCEED)
    return Verdict(Decision.ABORT)

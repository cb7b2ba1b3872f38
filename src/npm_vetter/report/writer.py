"""Write the vulnerability report to a JSON file (``--verbose``)."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from npm_vetter import __version__
from npm_vetter.models import PackageRef, Report

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    """Return current UTC time as an ISO 8601 string with Z suffix."""
    return datetime.now(tz=UTC).isoformat().replace("+00:00", "Z")


def report_to_dict(report: Report, candidates: tuple[PackageRef, ...]) -> dict[str, object]:
    results: list[dict[str, object]] | None = None
    if report.results is not None:
        results = [
            {
                "name": r.package.name,
                "version": r.package.version,
                "vulns": [
                    {"id": v.id, "summary": v.summary, "severity": v.severity.value}
                    for v in r.vulns
                ],
            }
            for r in report.results
        ]

    return {
        "generated_by": f"npm-vetter@{__version__}",
        "generated_at": _now_iso(),
        "status": report.status.value,
        "candidates": [{"name": c.name, "version": c.version} for c in candidates],
        "results": results,
        "flagged": list(report.flagged_names),
    }


def write_report(
    report: Report,
    candidates: tuple[PackageRef, ...],
    path: Path | str,
) -> Path:
    """Serialize the report to ``path``. Returns the path written."""
    target = Path(path)
    target.write_text(
        json.dumps(report_to_dict(report, candidates), indent=2) + "\n",
        encoding="utf-8",
    )
    logger.debug("Wrote vulnerability report to %s", target)
    return target

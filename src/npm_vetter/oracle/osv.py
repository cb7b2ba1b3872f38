"""HTTP client for the OSV batch query API.

API docs: https://google.github.io/osv.dev/post-v1-querybatch/
Endpoint: https://api.osv.dev/v1/querybatch

The response ``results`` array is positionally aligned with the request's
``queries`` array. Any failure -- transport, status, or shape -- is a
total failure for the batch: ``query`` returns None, never a partial list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from npm_vetter.errors import OracleError
from npm_vetter.models import PackageRef, Severity, VulnRecord, VulnResult
from npm_vetter.settings import DEFAULT_OSV_URL

logger = logging.getLogger(__name__)


@dataclass
class OsvClient:
    """Async client for the OSV ``querybatch`` endpoint."""

    http: httpx.AsyncClient
    url: str = DEFAULT_OSV_URL
    ecosystem: str = "npm"

    async def query(self, candidates: tuple[PackageRef, ...]) -> tuple[VulnResult, ...] | None:
        """Look up all candidates in one request.

        Returns:
            One VulnResult per candidate in the same order, ``()`` for an
            empty candidate list (no request is made), or None when the
            vulnerability status could not be determined.
        """
        if not candidates:
            return ()

        try:
            response = await self.http.post(self.url, json=self.build_payload(candidates))
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            logger.warning("OSV query failed: %s", exc)
            return None
        except ValueError as exc:
            logger.warning("OSV returned a non-JSON body: %s", exc)
            return None

        try:
            return self._parse_results(data, candidates)
        except OracleError as exc:
            logger.warning("OSV returned an unusable response: %s", exc)
            return None

    def build_payload(self, candidates: tuple[PackageRef, ...]) -> dict[str, object]:
        return {
            "queries": [
                {
                    "version": pkg.query_version,
                    "package": {"name": pkg.name, "ecosystem": self.ecosystem},
                }
                for pkg in candidates
            ]
        }

    # ── Parsing helpers ──────────────────────────────────────────

    def _parse_results(
        self,
        data: object,
        candidates: tuple[PackageRef, ...],
    ) -> tuple[VulnResult, ...]:
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise OracleError("response has no 'results' array")

        results = data["results"]
        if len(results) != len(candidates):
            raise OracleError(
                f"expected {len(candidates)} results, got {len(results)}"
            )

        return tuple(
            VulnResult(package=pkg, vulns=self._parse_vulns(entry))
            for pkg, entry in zip(candidates, results, strict=True)
        )

    def _parse_vulns(self, entry: object) -> tuple[VulnRecord, ...]:
        """Parse one ``results[i]`` object. A missing ``vulns`` key means clean."""
        if not isinstance(entry, dict):
            raise OracleError(f"result entry is not an object: {entry!r}")

        raw_vulns = entry.get("vulns")
        if raw_vulns is None:
            return ()
        if not isinstance(raw_vulns, list):
            raise OracleError("'vulns' is not a list")
        return tuple(self._parse_vuln(raw) for raw in raw_vulns)

    def _parse_vuln(self, raw: object) -> VulnRecord:
        if not isinstance(raw, dict):
            raise OracleError(f"vulnerability is not an object: {raw!r}")

        vuln_id = raw.get("id")
        if not isinstance(vuln_id, str) or not vuln_id:
            raise OracleError("vulnerability has no 'id'")

        summary = raw.get("summary")
        db_specific = raw.get("database_specific")
        severity = db_specific.get("severity") if isinstance(db_specific, dict) else None

        return VulnRecord(
            id=vuln_id,
            summary=summary if isinstance(summary, str) and summary else None,
            severity=Severity.from_oracle(severity),
        )

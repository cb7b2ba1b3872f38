"""Port: vulnerability oracle client."""

from __future__ import annotations

from typing import Protocol

from npm_vetter.models import PackageRef, VulnResult


class VulnerabilityOraclePort(Protocol):
    """Port for batch vulnerability lookups."""

    async def query(self, candidates: tuple[PackageRef, ...]) -> tuple[VulnResult, ...] | None:
        """Return one result per candidate (same order), or None if the lookup failed."""
        ...

"""Resolve package references (``name``, ``name@1.2.3``, ``name@tag``) via ``npm view``."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass

from npm_vetter.errors import ResolveError
from npm_vetter.installer.subprocess import run_command
from npm_vetter.models import PackageRef, Resolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NpmVersionResolver:
    """Asks the npm registry for the canonical ``{name, version}`` of each reference.

    Every reference is looked up concurrently and independently: one
    failure never affects the others, and failures are never raised.
    """

    executable: str = "npm"
    timeout: float = 60.0

    async def resolve(self, refs: list[str]) -> tuple[PackageRef, ...]:
        slots = await self.resolve_slots(refs)
        return tuple(slot.package for slot in slots if slot.package is not None)

    async def resolve_slots(self, refs: list[str]) -> tuple[Resolution, ...]:
        packages = await asyncio.gather(*(self._resolve_one(ref) for ref in refs))
        return tuple(
            Resolution(reference=ref, package=package)
            for ref, package in zip(refs, packages, strict=True)
        )

    async def _resolve_one(self, ref: str) -> PackageRef | None:
        try:
            returncode, stdout, stderr = await run_command(
                [self.executable, "view", ref, "name", "version", "--json"],
                timeout=self.timeout,
            )
            if returncode != 0:
                raise ResolveError(f"npm view exited {returncode}: {stderr.strip()}")
            return parse_view_output(stdout)
        except ResolveError as exc:
            logger.debug("Could not resolve '%s': %s", ref, exc)
            return None


def parse_view_output(stdout: str) -> PackageRef:
    """Parse ``npm view <ref> name version --json`` output into a PackageRef.

    A range that matches several versions makes npm print a list; the last
    (highest) entry wins.

    Raises:
        ResolveError: If the output is not a usable ``{name, version}`` object.
    """
    try:
        info = json.loads(stdout)
    except ValueError as exc:
        raise ResolveError(f"Malformed registry response: {exc}") from exc

    if isinstance(info, list):
        if not info:
            raise ResolveError("Registry returned no matching versions")
        info = info[-1]

    if not isinstance(info, dict):
        raise ResolveError("Registry response is not an object")

    name = info.get("name")
    version = info.get("version")
    if not isinstance(name, str) or not name or not isinstance(version, str) or not version:
        raise ResolveError("Registry response is missing name or version")
    return PackageRef(name=name, version=version)

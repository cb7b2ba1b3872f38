"""Port: package registry version resolver."""

from __future__ import annotations

from typing import Protocol

from npm_vetter.models import PackageRef, Resolution


class VersionResolverPort(Protocol):
    """Port for resolving operator-typed package references to concrete versions."""

    async def resolve(self, refs: list[str]) -> tuple[PackageRef, ...]:
        """Resolve references, dropping the ones that fail (input order kept)."""
        ...

    async def resolve_slots(self, refs: list[str]) -> tuple[Resolution, ...]:
        """Resolve references, keeping one slot per input."""
        ...

"""Port: package-manager install/uninstall invoker."""

from __future__ import annotations

from typing import Protocol

from npm_vetter.models import InstallResult


class PackageInstallerPort(Protocol):
    """Port for handing an install or uninstall over to the package manager."""

    async def install(self, args: list[str], packages: tuple[str, ...] = ()) -> InstallResult:
        """Run ``<pm> install <...args>``. Returns a result even on failure (never raises)."""
        ...

    async def uninstall(self, names: list[str]) -> InstallResult:
        """Run ``<pm> uninstall <...names>``. Returns a result even on failure."""
        ...

"""npm install/uninstall invoker."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace

from npm_vetter.errors import InstallError
from npm_vetter.installer.subprocess import LAUNCH_FAILED, stream_command
from npm_vetter.models import InstallResult

logger = logging.getLogger(__name__)

_NOT_IN_REGISTRY_RE = re.compile(r"'(.+?)'\s+is not in this registry")

def find_missing_package(stderr: str) -> str | None:
    """Extract the package name from npm's "is not in this registry" error, if present."""
    match = _NOT_IN_REGISTRY_RE.search(stderr)
    return match.group(1) if match else None


@dataclass(frozen=True, slots=True)
class NpmInstaller:
    """Delegates installs and uninstalls to the npm CLI, streaming its output."""

    executable: str = "npm"

    async def install(self, args: list[str], packages: tuple[str, ...] = ()) -> InstallResult:
        """Run ``npm install <...args>``.

        ``packages`` are the resolved names being installed; they are only
        listed in the success message for explicit installs.
        """
        result = await self._run("install", args)
        if result.message:
            return replace(result, packages=packages)

        if result.success:
            message = "Installed successfully!"
        else:
            message = "Installation failed."
        return replace(result, message=message, packages=packages)

    async def uninstall(self, names: list[str]) -> InstallResult:
        result = await self._run("uninstall", names)
        if result.message:
            return replace(result, packages=tuple(names))

        joined = ", ".join(names)
        if result.success:
            message = f"Successfully uninstalled: {joined}"
        else:
            message = "Failed to uninstall packages."
        return replace(result, message=message, packages=tuple(names))

    async def _run(self, verb: str, args: list[str]) -> InstallResult:
        """Run one npm verb. Only a launch failure fills in ``message``."""
        cmd = [self.executable, verb, *args]
        try:
            returncode, stderr = await stream_command(cmd)
        except InstallError as exc:
            logger.warning("%s", exc)
            return InstallResult(
                success=False,
                command=tuple(cmd),
                exit_code=LAUNCH_FAILED,
                message=str(exc),
            )

        return InstallResult(
            success=returncode == 0,
            command=tuple(cmd),
            exit_code=returncode,
            message="",
            missing_package=None if returncode == 0 else find_missing_package(stderr),
            stderr=stderr,
        )

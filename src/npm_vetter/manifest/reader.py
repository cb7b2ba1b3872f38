"""Read the declared dependency set from a project's package.json.

Both ``dependencies`` and ``devDependencies`` are merged into one mapping;
on a name collision the dev group wins. Any failure to read or parse the
file yields an empty candidate list -- a missing manifest is a normal
default-install scenario, not an error.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from npm_vetter.models import PackageRef

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
_DEPENDENCY_GROUPS = ("dependencies", "devDependencies")


def read_manifest(directory: Path | str | None = None) -> tuple[PackageRef, ...]:
    """Return declared dependencies of the package.json in ``directory`` (default: cwd)."""
    path = Path(directory or Path.cwd()) / MANIFEST_NAME
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.debug("Could not read manifest %s", path, exc_info=True)
        return ()

    if not isinstance(data, dict):
        logger.debug("Manifest %s is not a JSON object", path)
        return ()

    merged: dict[str, str] = {}
    for group in _DEPENDENCY_GROUPS:
        deps = data.get(group)
        if not isinstance(deps, dict):
            continue
        for name, version in deps.items():
            if not name or not isinstance(version, str):
                logger.debug("Skipping malformed %s entry %r in %s", group, name, path)
                continue
            merged[name] = version

    return tuple(PackageRef(name=name, version=version) for name, version in merged.items())


async def aread_manifest(directory: Path | str | None = None) -> tuple[PackageRef, ...]:
    """Async version of read_manifest. Use from async code to avoid blocking the event loop."""
    return await asyncio.to_thread(read_manifest, directory)

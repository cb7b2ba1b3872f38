"""Package-manager child processes.

Two shapes are needed: ``run_command`` for short lookups whose output is
parsed (``npm view``), and ``stream_command`` for installs the operator
watches live. Neither goes through a shell.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from typing import TextIO

from npm_vetter.errors import InstallError

logger = logging.getLogger(__name__)

LAUNCH_FAILED = 127
TIMED_OUT = -1

_MAX_CAPTURE = 2000
_READ_SIZE = 4096


async def _spawn(cmd: list[str], **kwargs) -> asyncio.subprocess.Process:
    """Start ``cmd``. Any OS-level launch failure becomes an InstallError."""
    try:
        return await asyncio.create_subprocess_exec(*cmd, **kwargs)
    except OSError as exc:
        # missing binary, no execute bit, not a valid executable, ...
        logger.debug("Failed to launch %s", cmd[0], exc_info=True)
        raise InstallError(f"Could not start {cmd[0]}: {exc.strerror or exc}") from exc


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    try:
        os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
    except OSError:
        proc.kill()


async def run_command(
    cmd: list[str],
    env: dict[str, str] | None = None,
    timeout: float = 60.0,
) -> tuple[int, str, str]:
    """Run ``cmd`` to completion and return ``(returncode, stdout, stderr)``.

    Never raises for process problems. A command that cannot be started
    yields LAUNCH_FAILED with the reason in stderr; one that outlives
    ``timeout`` is killed with its whole session and yields TIMED_OUT.
    Captured text is cut to the first 2000 characters.
    """
    try:
        proc = await _spawn(
            cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
            start_new_session=True,
        )
    except InstallError as exc:
        return (LAUNCH_FAILED, "", str(exc))

    try:
        out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        _kill_group(proc)
        await proc.wait()
        return (TIMED_OUT, "", f"Command timed out after {timeout}s")

    return (
        proc.returncode or 0,
        out.decode(errors="replace")[:_MAX_CAPTURE],
        err.decode(errors="replace")[:_MAX_CAPTURE],
    )


async def stream_command(
    cmd: list[str],
    *,
    echo: TextIO | None = None,
) -> tuple[int, str]:
    """Run ``cmd`` on the operator's terminal; return ``(returncode, stderr text)``.

    The child inherits stdin and stdout. Its stderr is copied to ``echo``
    (sys.stderr by default) chunk by chunk and also returned, so callers
    can look for npm error patterns afterwards. There is no timeout.

    Raises:
        InstallError: If the command cannot be started.
    """
    sink = echo if echo is not None else sys.stderr
    proc = await _spawn(cmd, stdin=None, stdout=None, stderr=asyncio.subprocess.PIPE)

    assert proc.stderr is not None
    parts: list[str] = []
    while True:
        chunk = await proc.stderr.read(_READ_SIZE)
        if not chunk:
            break
        text = chunk.decode(errors="replace")
        parts.append(text)
        sink.write(text)
        sink.flush()

    returncode = await proc.wait()
    logger.debug("%s exited with %s", " ".join(cmd), returncode)
    return (returncode or 0, "".join(parts))

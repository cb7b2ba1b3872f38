"""npm-vetter: check npm packages against OSV before they are installed."""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version(__name__.replace("_", "-"))
except importlib.metadata.PackageNotFoundError:
    # running from a source checkout that was never installed
    __version__ = "0.0.0+local"


def main() -> None:
    """Console-script entry: ``npm-vetter install|scan``."""
    from npm_vetter.cli import run_cli

    raise SystemExit(run_cli())

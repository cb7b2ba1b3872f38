"""Command-line front-end: ``npm-vetter install [pkgs...]`` and ``npm-vetter scan``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

import httpx
from rich.console import Console
from rich.logging import RichHandler

from npm_vetter import __version__
from npm_vetter.errors import NpmVetterError
from npm_vetter.installer.npm import NpmInstaller
from npm_vetter.models import Choice, Mode
from npm_vetter.oracle.osv import OsvClient
from npm_vetter.registry.resolver import NpmVersionResolver
from npm_vetter.report.decision import NON_INTERACTIVE_DEFAULTS
from npm_vetter.report.prompt import PrompterPort, RichPrompter, StaticPrompter
from npm_vetter.settings import Settings, load_settings
from npm_vetter.workflow import EXIT_FAILURE, Options, Services, run_install, run_scan

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "NPM_VETTER_LOG_LEVEL"


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr through rich. Default level is WARNING."""
    name = (level or os.environ.get(LOG_LEVEL_ENV_VAR) or "WARNING").upper()
    logging.basicConfig(
        level=logging.getLevelNamesMapping().get(name, logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="npm-vetter",
        description="Check npm packages against the OSV vulnerability database before installing.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose",
        action="store_true",
        help="Write the vulnerability report to a JSON file in the working directory.",
    )
    common.add_argument(
        "--yes",
        choices=[c.value for c in Choice],
        default=None,
        metavar="CHOICE",
        help="Answer the vulnerability prompt non-interactively (abort, ignore, uninstall).",
    )
    common.add_argument(
        "--fail-closed",
        action="store_true",
        help="Abort when vulnerability status cannot be verified (default: continue).",
    )
    common.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: ${LOG_LEVEL_ENV_VAR} or WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    install = subparsers.add_parser(
        "install",
        parents=[common],
        help="Check packages for vulnerabilities, then install them with npm.",
    )
    install.add_argument(
        "pkgs",
        nargs="*",
        help="Packages to install. Without any, package.json dependencies are checked.",
    )
    install.add_argument(
        "--scan",
        action="store_true",
        help="Scan package.json for vulnerabilities without installing.",
    )

    subparsers.add_parser(
        "scan",
        parents=[common],
        help="Scan package.json for vulnerabilities without installing (same as install --scan).",
    )
    return parser.parse_args(argv)


def _build_prompter(args: argparse.Namespace, mode: Mode, console: Console) -> PrompterPort:
    if args.yes is not None:
        return StaticPrompter(Choice(args.yes))
    if not sys.stdin.isatty():
        logger.info("stdin is not a terminal; defaulting to '%s'", NON_INTERACTIVE_DEFAULTS[mode])
        return StaticPrompter(NON_INTERACTIVE_DEFAULTS[mode])
    return RichPrompter(console)


async def _run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    mode = Mode.SCAN if args.command == "scan" or getattr(args, "scan", False) else Mode.INSTALL
    options = Options(verbose=args.verbose, fail_closed=args.fail_closed)

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout, connect=10.0),
        follow_redirects=True,
        transport=httpx.AsyncHTTPTransport(retries=0),
    ) as http_client:
        services = Services(
            resolver=NpmVersionResolver(
                executable=settings.package_manager,
                timeout=settings.resolve_timeout,
            ),
            oracle=OsvClient(http_client, url=settings.osv_url, ecosystem=settings.ecosystem),
            installer=NpmInstaller(executable=settings.package_manager),
            prompter=_build_prompter(args, mode, console),
            console=console,
            settings=settings,
        )
        if mode == Mode.SCAN:
            return await run_scan(options, services)
        return await run_install(list(args.pkgs), options, services)


def run_cli(argv: list[str] | None = None, console: Console | None = None) -> int:
    """CLI runner. Returns the process exit code."""
    args = _parse_args(argv)
    configure_logging(args.log_level)
    console = console or Console()

    try:
        settings = load_settings(Path.cwd())
        return asyncio.run(_run(args, settings, console))
    except NpmVetterError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return EXIT_FAILURE
    except (KeyboardInterrupt, EOFError):
        console.print("\n[red]Interrupted.[/red]")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(run_cli())

"""Exception hierarchy for npm-vetter.

All exceptions inherit from NpmVetterError (single catch point).
Adapters convert these into fallback values at their boundary; only
configuration errors reach the CLI.
"""

from __future__ import annotations


class NpmVetterError(Exception):
    """Base exception for all npm-vetter errors."""


class ConfigError(NpmVetterError):
    """Invalid or unreadable npm-vetter configuration."""


class OracleError(NpmVetterError):
    """The vulnerability oracle returned an unusable response."""


class ResolveError(NpmVetterError):
    """A package reference could not be resolved against the registry."""


class InstallError(NpmVetterError):
    """The package manager could not be started."""

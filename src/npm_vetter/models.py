"""Domain models for npm-vetter. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

# ─── Enumerations ─────────────────────────────────────────────


class Severity(StrEnum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    LOW = "LOW"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_oracle(cls, value: object) -> Severity:
        """Map the oracle's severity string, case-sensitively, falling back to UNKNOWN."""
        if isinstance(value, str) and value in cls.__members__:
            return cls(value)
        return cls.UNKNOWN


class Mode(StrEnum):
    INSTALL = "install"
    SCAN = "scan"


class CheckStatus(StrEnum):
    CLEAN = "clean"
    VULNS_FOUND = "vulns_found"
    UNKNOWN = "unknown"


class Decision(StrEnum):
    PROCEED = "proceed"
    ABORT = "abort"
    UNINSTALL = "uninstall"
    IGNORE = "ignore"


class Choice(StrEnum):
    """An answer the operator can give at the vulnerability prompt."""

    ABORT = "abort"
    IGNORE = "ignore"
    UNINSTALL = "uninstall"


# ─── Package Models ───────────────────────────────────────────

_RANGE_QUALIFIERS = "^~"


@dataclass(frozen=True, slots=True)
class PackageRef:
    """A package name with its declared or resolved version."""

    name: str
    version: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("PackageRef.name must be non-empty")

    @property
    def query_version(self) -> str:
        """Version with leading range qualifiers (``^``, ``~``) stripped."""
        return self.version.lstrip(_RANGE_QUALIFIERS)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving one operator-typed reference. ``package`` is None on failure."""

    reference: str
    package: PackageRef | None = None

    @property
    def resolved(self) -> bool:
        return self.package is not None


# ─── Vulnerability Models ─────────────────────────────────────


@dataclass(frozen=True, slots=True)
class VulnRecord:
    """A single known vulnerability reported by the oracle."""

    id: str
    summary: str | None = None
    severity: Severity = Severity.UNKNOWN


@dataclass(frozen=True, slots=True)
class VulnResult:
    """Vulnerabilities for one candidate, positionally aligned with the candidate list."""

    package: PackageRef
    vulns: tuple[VulnRecord, ...] = ()

    @property
    def is_vulnerable(self) -> bool:
        return len(self.vulns) > 0


@dataclass(frozen=True, slots=True)
class Report:
    """Classified oracle response. ``results`` is None when the oracle call failed."""

    status: CheckStatus
    results: tuple[VulnResult, ...] | None = None
    flagged: tuple[VulnResult, ...] = ()

    @property
    def flagged_names(self) -> tuple[str, ...]:
        return tuple(r.package.name for r in self.flagged)


@dataclass(frozen=True, slots=True)
class Verdict:
    """The single decision produced per invocation."""

    decision: Decision
    packages: tuple[str, ...] = field(default_factory=tuple)


# ─── Installer Models ─────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class InstallResult:
    success: bool
    command: tuple[str, ...]
    exit_code: int
    message: str
    packages: tuple[str, ...] = ()
    missing_package: str | None = None
    stderr: str = ""

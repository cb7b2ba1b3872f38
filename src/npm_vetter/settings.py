"""Load npm-vetter settings from defaults, an optional YAML file, and the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from npm_vetter.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_OSV_URL = "https://api.osv.dev/v1/querybatch"
CONFIG_FILENAMES = (".npm-vetter.yaml", ".npm-vetter.yml")
CONFIG_ENV_VAR = "NPM_VETTER_CONFIG"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})

# env var -> settings field
_ENV_OVERRIDES = {
    "NPM_VETTER_OSV_URL": "osv_url",
    "NPM_VETTER_PACKAGE_MANAGER": "package_manager",
    "NPM_VETTER_HTTP_TIMEOUT": "http_timeout",
    "NPM_VETTER_FAIL_CLOSED": "fail_closed",
}


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings. Later sources override earlier ones."""

    osv_url: str = DEFAULT_OSV_URL
    ecosystem: str = "npm"
    package_manager: str = "npm"
    http_timeout: float = 30.0
    resolve_timeout: float = 60.0
    fail_closed: bool = False
    report_file: str = "npm-vetter-report.json"


def load_settings(
    directory: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build Settings from defaults, then the YAML config file, then env vars.

    Raises:
        ConfigError: If the config file exists but cannot be parsed or
            holds values of the wrong type.
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    path = _find_config_file(Path(directory) if directory else Path.cwd(), env)
    if path is not None:
        settings = _apply(settings, _load_yaml(path), source=str(path))

    overrides = {field_name: env[var] for var, field_name in _ENV_OVERRIDES.items() if var in env}
    if overrides:
        settings = _apply(settings, overrides, source="environment")

    return settings


def _find_config_file(directory: Path, env: Mapping[str, str]) -> Path | None:
    explicit = env.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path} (from ${CONFIG_ENV_VAR})")
        return path

    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to parse config file '{path}': {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config format in {path}: expected a YAML mapping.")
    return data


def _apply(settings: Settings, values: dict[str, object], source: str) -> Settings:
    """Return a copy of settings with known keys coerced and replaced."""
    known = {f.name: f.type for f in fields(Settings)}
    changes: dict[str, object] = {}
    for key, raw in values.items():
        key = str(key).replace("-", "_")
        if key not in known:
            logger.debug("Ignoring unknown setting '%s' from %s", key, source)
            continue
        changes[key] = _coerce(key, known[key], raw, source)
    return replace(settings, **changes)


def _coerce(key: str, type_name: object, raw: object, source: str) -> object:
    # annotations are strings under `from __future__ import annotations`
    kind = str(type_name)
    try:
        if kind == "bool":
            if isinstance(raw, bool):
                return raw
            text = str(raw).strip().lower()
            if text in _TRUTHY:
                return True
            if text in _FALSY:
                return False
            raise ValueError(f"not a boolean: {raw!r}")
        if kind == "float":
            if isinstance(raw, bool):
                raise ValueError(f"not a number: {raw!r}")
            return float(raw)  # type: ignore[arg-type]
        if raw is None or isinstance(raw, (dict, list)):
            raise ValueError(f"not a string: {raw!r}")
        return str(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for '{key}' in {source}: {exc}") from exc

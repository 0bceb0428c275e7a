"""Locate, read and validate ``.jetwatch.yaml``.

String values may reference the environment as ``${VAR}`` or
``${VAR:-default}``. When no file exists in the working directory or any of
its parents, the built-in service and tab registries are used unchanged.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from jetwatch.config.models import WatchConfig

CONFIG_FILENAME = ".jetwatch.yaml"

_ENV_REF = re.compile(r"\$\{\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*(?::-(?P<default>[^}]*))?\}")

# Keyed sections whose entries are named in validation messages.
_ENTRY_LABELS = {"services": "service", "fallbacks": "fallback rule", "tabs": "tab"}

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """A config file exists but does not describe usable registries."""


def _env_value(match: re.Match[str]) -> str:
    value = os.environ.get(match["name"])
    if value is not None:
        return value
    default = match["default"]
    return match.group(0) if default is None else default


def expand_env(node: Any) -> Any:
    """Substitute environment references in every string of a parsed document.

    An unset variable without a default is left as written.
    """
    if isinstance(node, str):
        return _ENV_REF.sub(_env_value, node)
    if isinstance(node, dict):
        return {key: expand_env(value) for key, value in node.items()}
    if isinstance(node, list):
        return [expand_env(item) for item in node]
    return node


def _problems(exc: ValidationError) -> list[str]:
    lines = []
    for err in exc.errors():
        loc = [str(part) for part in err["loc"]]
        if len(loc) >= 2 and loc[0] in _ENTRY_LABELS:
            where = f'{_ENTRY_LABELS[loc[0]]} "{loc[1]}"'
            field = ".".join(loc[2:])
        else:
            where = loc[0] if loc else "config"
            field = ".".join(loc[1:])
        lines.append(f"{where} {field}: {err['msg']}" if field else f"{where}: {err['msg']}")
    return lines


def _read(path: Path) -> WatchConfig:
    if not path.is_file():
        raise FileNotFoundError(
            f"No config at {path}. Copy .jetwatch.yaml.example there, "
            "or omit the path to use the built-in registries."
        )
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path} is not valid YAML: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"{path} must be a mapping of sections (probe, services, fallbacks, tabs, chat), "
            f"got {type(raw).__name__}"
        )
    try:
        return WatchConfig.model_validate(expand_env(raw))
    except ValidationError as exc:
        details = "\n".join(f"  - {line}" for line in _problems(exc))
        raise ConfigError(f"{path} has invalid registry entries:\n{details}") from exc


def resolve_config(path: Path | None = None, start: Path | None = None) -> WatchConfig:
    """Return the active configuration.

    With an explicit *path* that file must exist. Otherwise the nearest
    ``.jetwatch.yaml`` at or above *start* (default: cwd) is read, and with
    none found the built-in registries apply.

    Raises FileNotFoundError for a missing explicit path and ConfigError for
    a file that cannot be parsed or validated.
    """
    if path is None:
        here = (start or Path.cwd()).resolve()
        path = next(
            (folder / CONFIG_FILENAME for folder in (here, *here.parents) if (folder / CONFIG_FILENAME).is_file()),
            None,
        )
        if path is None:
            logger.debug("No %s at or above %s, using built-in registries", CONFIG_FILENAME, here)
            return WatchConfig()
    logger.info("Loading registries from %s", path)
    return _read(path)

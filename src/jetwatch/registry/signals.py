"""Local signal providers used by the status fallback heuristic."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class LocalSignalProvider(Protocol):
    """Read-only key/value flags left behind by earlier successful activity."""

    def get(self, key: str) -> str | None: ...


class MappingSignals:
    """Signals backed by an in-memory mapping. Implements LocalSignalProvider."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)


class JsonFileSignals:
    """Signals read from a flat JSON object on disk. Implements LocalSignalProvider.

    The file is re-read on every lookup so flags written by another process
    are picked up. A missing file means no signals.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    def get(self, key: str) -> str | None:
        if not self._path.exists():
            return None
        with self._path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"Signal file {self._path} must contain a JSON object")
        value = data.get(key)
        if value is None or isinstance(value, str):
            return value
        # JSON scalars keep their JSON spelling, so true reads as "true"
        return json.dumps(value)


def signals_from_path(path: str) -> LocalSignalProvider:
    """Build the provider named by a ``signals_file`` config value."""
    if not path:
        return MappingSignals()
    return JsonFileSignals(Path(path))

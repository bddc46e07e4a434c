from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from lsprotocol import types

log = logging.getLogger(__name__)

BUILTINS_PATH = Path(__file__).resolve().parent / "data" / "builtins.json"


class BuiltinTableError(ValueError):
    """Raised when the packaged builtin table cannot be loaded."""


@dataclass(frozen=True)
class BuiltinEntry:
    name: str
    text: str
    brief: str = ""
    parameters: Tuple[str, ...] = ()
    detail: str = ""

    @property
    def signature(self) -> types.SignatureInformation:
        return types.SignatureInformation(
            label=self.text,
            documentation=self.brief or None,
            parameters=[types.ParameterInformation(label=param) for param in self.parameters],
        )

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "BuiltinEntry":
        name = data.get("name")
        text = data.get("text")
        if not isinstance(name, str) or not name or not isinstance(text, str):
            raise ValueError("builtin entry needs string 'name' and 'text'")
        signature = data.get("signature") or {}
        if not isinstance(signature, Mapping):
            raise ValueError(f"builtin {name}: 'signature' must be an object")
        params = []
        raw_params = signature.get("parameters") or []
        if not isinstance(raw_params, list):
            raise ValueError(f"builtin {name}: 'parameters' must be a list")
        for param in raw_params:
            label = param.get("label") if isinstance(param, Mapping) else param
            if not isinstance(label, str):
                raise ValueError(f"builtin {name}: parameter labels must be strings")
            params.append(label)
        return cls(
            name=name,
            text=text,
            brief=str(data.get("brief") or ""),
            parameters=tuple(params),
            detail=str(data.get("detail") or ""),
        )


class BuiltinRegistry(Mapping[str, BuiltinEntry]):
    """Read-only name lookup over the builtin function table."""

    def __init__(self, entries: Iterable[BuiltinEntry] = ()):
        self._entries: Dict[str, BuiltinEntry] = {}
        for entry in entries:
            self._entries[entry.name] = entry

    def __getitem__(self, name: str) -> BuiltinEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, name: str | None) -> Optional[BuiltinEntry]:
        if not name:
            return None
        return self._entries.get(name)

    def merged(self, entries: Iterable[BuiltinEntry]) -> "BuiltinRegistry":
        """Return a new registry where ``entries`` override existing names."""
        return BuiltinRegistry([*self._entries.values(), *entries])


def parse_builtin_table(data: Any, origin: str = BUILTINS_PATH.name) -> List[BuiltinEntry]:
    if not isinstance(data, list):
        raise BuiltinTableError(f"{origin}: expected a list of builtin entries")
    entries: list[BuiltinEntry] = []
    for idx, item in enumerate(data):
        if not isinstance(item, Mapping):
            log.warning("Skipping builtin #%d in %s: not an object", idx, origin)
            continue
        try:
            entries.append(BuiltinEntry.from_data(item))
        except ValueError as exc:
            log.warning("Skipping builtin #%d in %s: %s", idx, origin, exc)
    return entries


def load_builtins(extra_files: Iterable[Path] = ()) -> BuiltinRegistry:
    """Load the packaged builtin table, layering any extra table files on top."""
    try:
        data = json.loads(BUILTINS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise BuiltinTableError(f"failed to load {BUILTINS_PATH}: {exc}") from exc

    registry = extend_builtins(BuiltinRegistry(parse_builtin_table(data)), extra_files)
    log.info("Loaded %d builtin functions", len(registry))
    return registry


def extend_builtins(registry: BuiltinRegistry, extra_files: Iterable[Path]) -> BuiltinRegistry:
    for path in extra_files:
        extra = _read_json_file(path)
        if extra is None:
            continue
        try:
            registry = registry.merged(parse_builtin_table(extra, str(path)))
        except BuiltinTableError as exc:
            log.warning("Ignoring builtin file %s", exc)
    return registry


def _read_json_file(path: Path) -> Any | None:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        log.warning("Builtin file not found: %s", path)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("Failed to read builtin file %s: %s", path, exc)
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        log.warning("Failed to parse builtin file %s: %s", path, exc)
        return None

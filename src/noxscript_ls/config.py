from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .completions import KEYWORDS

log = logging.getLogger(__name__)

CONFIG_FILENAME = ".noxscript-ls.json"

ENV_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


class _MissingEnv(Exception):
    def __init__(self, names: List[str]):
        super().__init__(", ".join(names))
        self.names = names


@dataclass(frozen=True)
class SignatureHelpSettings:
    clamp_active_parameter: bool = True


@dataclass(frozen=True)
class HoverSettings:
    language: str = "ns"


@dataclass(frozen=True)
class NoxScriptLSConfig:
    workspace_root: Path
    builtin_files: Tuple[Path, ...] = ()
    keywords: Tuple[str, ...] = KEYWORDS
    signature_help: SignatureHelpSettings = field(default_factory=SignatureHelpSettings)
    hover: HoverSettings = field(default_factory=HoverSettings)

    @classmethod
    def default(cls, workspace_root: Path) -> "NoxScriptLSConfig":
        return cls(workspace_root=workspace_root)


def load_config(workspace_root: Path) -> Tuple[NoxScriptLSConfig, List[str]]:
    """Read ``.noxscript-ls.json`` from the workspace root.

    Problems are returned as warnings; the affected settings keep their
    defaults.
    """
    warnings: list[str] = []
    path = workspace_root / CONFIG_FILENAME
    if not path.exists():
        return NoxScriptLSConfig.default(workspace_root), warnings

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        warnings.append(f"Failed to read {path}: {exc}")
        return NoxScriptLSConfig.default(workspace_root), warnings

    if not isinstance(raw, dict):
        warnings.append(f"{path}: expected a JSON object at the top level")
        return NoxScriptLSConfig.default(workspace_root), warnings

    env = {"workspaceRoot": str(workspace_root), **os.environ}
    defaults = NoxScriptLSConfig.default(workspace_root)

    builtin_files: list[Path] = []
    for entry in _list_setting(raw, "builtinFiles", warnings):
        value = _expand(entry, "builtinFiles", env, warnings)
        if value is None:
            continue
        file_path = Path(value)
        if not file_path.is_absolute():
            file_path = workspace_root / file_path
        builtin_files.append(file_path)

    keywords = defaults.keywords
    if "keywords" in raw:
        values = [_expand(k, "keywords", env, warnings) for k in _list_setting(raw, "keywords", warnings)]
        keywords = tuple(v for v in values if v)

    sig_raw = _dict_setting(raw, "signatureHelp", warnings)
    clamp = sig_raw.get("clampActiveParameter", defaults.signature_help.clamp_active_parameter)
    if not isinstance(clamp, bool):
        warnings.append("signatureHelp.clampActiveParameter must be a boolean")
        clamp = defaults.signature_help.clamp_active_parameter

    hover_raw = _dict_setting(raw, "hover", warnings)
    language = defaults.hover.language
    if "language" in hover_raw:
        language = _expand(hover_raw["language"], "hover.language", env, warnings) or language

    cfg = NoxScriptLSConfig(
        workspace_root=workspace_root,
        builtin_files=tuple(builtin_files),
        keywords=keywords,
        signature_help=SignatureHelpSettings(clamp_active_parameter=clamp),
        hover=HoverSettings(language=language),
    )
    return cfg, warnings


def _list_setting(raw: Dict[str, Any], key: str, warnings: List[str]) -> List[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        warnings.append(f"{key} must be a list")
        return []
    return value


def _dict_setting(raw: Dict[str, Any], key: str, warnings: List[str]) -> Dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        warnings.append(f"{key} must be an object")
        return {}
    return value


def _expand(value: Any, key: str, env: Dict[str, str], warnings: List[str]) -> str | None:
    if not isinstance(value, str):
        warnings.append(f"{key}: expected a string, got {type(value).__name__}")
        return None
    try:
        return _substitute(value, env)
    except _MissingEnv as exc:
        for name in exc.names:
            warnings.append(f"{key}: environment variable {name} is not set")
        return None


def _substitute(value: str, env: Dict[str, str]) -> str:
    missing: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        if name not in env:
            missing.append(name)
            return match.group(0)
        return env[name]

    result = ENV_VAR_RE.sub(_replace, value)
    if missing:
        raise _MissingEnv(missing)
    return result

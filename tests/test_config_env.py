import json
from pathlib import Path

import pytest

from noxscript_ls.completions import KEYWORDS
from noxscript_ls.config import CONFIG_FILENAME, NoxScriptLSConfig, load_config


def _write_config(tmp_path: Path, data) -> Path:
    config_path = tmp_path / CONFIG_FILENAME
    config_path.write_text(json.dumps(data))
    return config_path


def test_missing_config_uses_defaults(tmp_path: Path):
    cfg, warnings = load_config(tmp_path)

    assert warnings == []
    assert cfg == NoxScriptLSConfig.default(tmp_path)
    assert cfg.keywords == KEYWORDS
    assert cfg.signature_help.clamp_active_parameter is True
    assert cfg.hover.language == "ns"


def test_load_config_env_substitution(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("NOX_BUILTINS", "/opt/nox/builtins.json")
    monkeypatch.setenv("NOX_LANG", "noxscript")
    _write_config(
        tmp_path,
        {
            "builtinFiles": ["${NOX_BUILTINS}"],
            "hover": {"language": "$NOX_LANG"},
        },
    )

    cfg, warnings = load_config(tmp_path)

    assert warnings == []
    assert cfg.builtin_files == (Path("/opt/nox/builtins.json"),)
    assert cfg.hover.language == "noxscript"


def test_load_config_workspace_root_substitution(tmp_path: Path):
    _write_config(
        tmp_path,
        {
            "builtinFiles": ["${workspaceRoot}/extra.json", "relative/more.json"],
        },
    )

    cfg, warnings = load_config(tmp_path)

    assert warnings == []
    assert cfg.builtin_files == (tmp_path / "extra.json", tmp_path / "relative" / "more.json")


def test_load_config_missing_env_warns(tmp_path: Path):
    _write_config(
        tmp_path,
        {
            "builtinFiles": ["${MISSING_NOX_BUILTINS}"],
            "hover": {"language": "$MISSING_NOX_LANG"},
        },
    )

    cfg, warnings = load_config(tmp_path)

    assert any("MISSING_NOX_BUILTINS" in warning for warning in warnings)
    assert any("MISSING_NOX_LANG" in warning for warning in warnings)
    assert cfg.builtin_files == ()
    assert cfg.hover.language == "ns"


def test_load_config_signature_and_keywords(tmp_path: Path):
    _write_config(
        tmp_path,
        {
            "keywords": ["if", "while", "goto"],
            "signatureHelp": {"clampActiveParameter": False},
        },
    )

    cfg, warnings = load_config(tmp_path)

    assert warnings == []
    assert cfg.keywords == ("if", "while", "goto")
    assert cfg.signature_help.clamp_active_parameter is False


@pytest.mark.parametrize(
    ("data", "needle"),
    [
        ({"builtinFiles": "extra.json"}, "builtinFiles"),
        ({"signatureHelp": {"clampActiveParameter": "yes"}}, "clampActiveParameter"),
        ({"hover": []}, "hover"),
        ({"keywords": [1, "if"]}, "keywords"),
        (["not", "an", "object"], "top level"),
    ],
)
def test_load_config_bad_values_warn(tmp_path: Path, data, needle: str):
    _write_config(tmp_path, data)

    cfg, warnings = load_config(tmp_path)

    assert any(needle in warning for warning in warnings)
    assert cfg.signature_help.clamp_active_parameter is True


def test_load_config_invalid_json_warns(tmp_path: Path):
    (tmp_path / CONFIG_FILENAME).write_text("{oops")

    cfg, warnings = load_config(tmp_path)

    assert len(warnings) == 1
    assert cfg == NoxScriptLSConfig.default(tmp_path)


def test_load_config_invalid_utf8_warns(tmp_path: Path):
    (tmp_path / CONFIG_FILENAME).write_bytes(b'{"keywords": ["\xff"]}')

    cfg, warnings = load_config(tmp_path)

    assert len(warnings) == 1
    assert cfg == NoxScriptLSConfig.default(tmp_path)

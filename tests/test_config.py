from __future__ import annotations

import json
from pathlib import Path

import pytest

from headless_render.config import (
    DEFAULT_BROWSER_ARGS,
    BrowserConfig,
    ConfigError,
    DocumentOptions,
    Viewport,
    browser_config_from_mapping,
    load_config,
    merge,
)


def test_merge_caller_value_wins() -> None:
    defaults = DocumentOptions()
    merged = merge(defaults, format="letter", orientation=None)
    assert merged.format == "letter"
    assert merged.orientation == "portrait"
    assert defaults.format == "a4"


def test_merge_without_overrides_returns_defaults() -> None:
    defaults = BrowserConfig()
    assert merge(defaults, headless=None) is defaults


def test_merge_keeps_false_values() -> None:
    assert merge(BrowserConfig(), headless=False).headless is False


def test_merge_rejects_unknown_fields() -> None:
    with pytest.raises(TypeError, match="colour"):
        merge(BrowserConfig(), colour="red")


def test_browser_config_defaults() -> None:
    config = BrowserConfig()
    assert config.args == DEFAULT_BROWSER_ARGS
    assert "--headless" in config.args
    assert config.viewport is None
    assert config.pdf_format == "A4"


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_config_resolves_paths(tmp_path: Path) -> None:
    config_file = _write(
        tmp_path / "custom.json",
        {"output_dir": "./exports", "pdf_format": "Letter"},
    )
    loaded = load_config(str(config_file))
    assert loaded["output_dir"] == str(tmp_path / "exports")
    assert loaded["pdf_format"] == "Letter"


def test_load_config_env_override(tmp_path: Path, monkeypatch) -> None:
    config_file = _write(tmp_path / "env.json", {"headless": False})
    monkeypatch.setenv("HEADLESS_RENDER_CONFIG", str(config_file))
    assert load_config() == {"headless": False}


def test_load_config_default_name_in_cwd(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path / "headless.json", {"timeout_ms": 1000})
    monkeypatch.delenv("HEADLESS_RENDER_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    assert load_config() == {"timeout_ms": 1000}


def test_load_config_missing(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("HEADLESS_RENDER_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError):
        load_config()
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "absent.json"))


def test_load_config_invalid_json(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_config(str(bad))


def test_browser_config_from_mapping() -> None:
    config = browser_config_from_mapping(
        {
            "headless": False,
            "browser_args": ["--no-sandbox"],
            "viewport": {"width": "1280", "height": 720},
            "timeout_ms": "2500",
        }
    )
    assert config.headless is False
    assert config.args == ("--no-sandbox",)
    assert config.viewport == Viewport(1280, 720)
    assert config.timeout_ms == 2500
    assert config.pdf_format == "A4"


@pytest.mark.parametrize(
    "mapping",
    [
        {"viewport": [1280, 720]},
        {"viewport": {"width": 0, "height": 720}},
        {"viewport": {"width": 1280}},
        {"browser_args": "--no-sandbox"},
        {"browser_args": ["--no-sandbox", 42]},
        {"timeout_ms": "abc"},
        {"timeout_ms": -1},
        {"timeout_ms": True},
    ],
)
def test_browser_config_from_mapping_rejects_bad_values(mapping) -> None:
    with pytest.raises(ConfigError):
        browser_config_from_mapping(mapping)

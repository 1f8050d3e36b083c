"""Default option tables and helpers for loading runtime configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, TypeVar

from .errors import HeadlessError

DEFAULT_CONFIG_NAME = "headless.json"
CONFIG_ENV_VAR = "HEADLESS_RENDER_CONFIG"

DEFAULT_BROWSER_ARGS: tuple[str, ...] = (
    # disable undesired features
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-default-apps",
    "--disable-extensions",
    "--disable-hang-monitor",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
    "--disable-sync",
    "--disable-translate",
    "--metrics-recording-only",
    "--no-first-run",
    "--safebrowsing-disable-auto-update",
    # password settings
    "--password-store=basic",
    "--use-mock-keychain",  # macOS only
    # headless mode
    "--headless",
    "--disable-gpu",
    "--incognito",
    "--font-render-hinting=none",
    "--hide-scrollbars",
    "--mute-audio",
)

OptionsT = TypeVar("OptionsT")


class ConfigError(HeadlessError):
    """Raised when runtime configuration cannot be loaded."""


@dataclass(frozen=True, slots=True)
class Viewport:
    """Page viewport size in CSS pixels."""

    width: int
    height: int

    def as_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


MAXIMIZED_VIEWPORT = Viewport(width=1600, height=1200)


@dataclass(frozen=True, slots=True)
class BrowserConfig:
    """Launch and export defaults for a browser session.

    ``viewport=None`` leaves the page without a fixed viewport so the
    window size governs layout.
    """

    headless: bool = True
    args: tuple[str, ...] = DEFAULT_BROWSER_ARGS
    viewport: Optional[Viewport] = None
    executable_path: Optional[str] = None
    pdf_format: str = "A4"
    full_page: bool = True
    timeout_ms: Optional[int] = None


@dataclass(frozen=True, slots=True)
class DocumentOptions:
    """Defaults applied to a composed PDF document."""

    format: str = "a4"
    orientation: str = "portrait"
    unit: str = "mm"
    compress: bool = False


def merge(defaults: OptionsT, **overrides: Any) -> OptionsT:
    """Return a copy of ``defaults`` with every non-``None`` override applied.

    The caller value wins whenever it is not ``None``; otherwise the default
    is kept. Unknown names raise ``TypeError``.
    """

    known = {item.name for item in fields(defaults)}  # type: ignore[arg-type]
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise TypeError(
            f"Unknown option(s) for {type(defaults).__name__}: "
            + ", ".join(unknown)
        )
    changes = {
        name: value for name, value in overrides.items() if value is not None
    }
    if not changes:
        return defaults
    return replace(defaults, **changes)  # type: ignore[type-var]


def _resolve_config_path(path: Optional[str]) -> str:
    """Return the absolute config path, honoring overrides and defaults."""
    env_override = os.environ.get(CONFIG_ENV_VAR)
    candidate = path or env_override or DEFAULT_CONFIG_NAME
    expanded = os.path.expanduser(candidate)
    if os.path.isabs(expanded):
        if os.path.isfile(expanded):
            return expanded
        raise ConfigError(f"Configuration file not found: {candidate}")

    resolved = os.path.abspath(os.path.join(os.getcwd(), expanded))
    if os.path.isfile(resolved):
        return resolved

    raise ConfigError(f"Configuration file not found: {candidate}")


def _resolve_path(value: str, base_dir: str) -> str:
    """Anchor a relative config path at the directory of the config file."""
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = Path(base_dir) / candidate
    return os.path.normpath(candidate)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load a JSON config file and normalize any filesystem paths."""
    config_path = _resolve_config_path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as config_file:
            data = json.load(config_file)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {config_path}")

    base_dir = os.path.dirname(config_path)
    resolved: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str) and key.endswith(("_dir", "_path")):
            resolved[key] = _resolve_path(value, base_dir)
        else:
            resolved[key] = value

    return resolved


def _viewport_from_value(value: Any) -> Optional[Viewport]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ConfigError("viewport must be an object with width and height")
    try:
        width = int(value["width"])
        height = int(value["height"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid viewport configuration: {value}") from exc
    if width <= 0 or height <= 0:
        raise ConfigError(f"Viewport dimensions must be positive: {value}")
    return Viewport(width=width, height=height)


def _timeout_from_value(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"Invalid timeout_ms configuration: {value}")
    try:
        timeout = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid timeout_ms configuration: {value}") from exc
    if timeout < 0:
        raise ConfigError(f"timeout_ms must not be negative: {value}")
    return timeout


def browser_config_from_mapping(
    mapping: Mapping[str, Any],
    *,
    base: Optional[BrowserConfig] = None,
) -> BrowserConfig:
    """Build a ``BrowserConfig`` from a loaded config mapping."""

    browser_args = mapping.get("browser_args")
    if browser_args is not None and not (
        isinstance(browser_args, list)
        and all(isinstance(arg, str) for arg in browser_args)
    ):
        raise ConfigError("browser_args must be a list of strings")

    timeout_ms = _timeout_from_value(mapping.get("timeout_ms"))
    return merge(
        base or BrowserConfig(),
        headless=mapping.get("headless"),
        args=tuple(browser_args) if browser_args is not None else None,
        viewport=_viewport_from_value(mapping.get("viewport")),
        executable_path=mapping.get("executable_path"),
        pdf_format=mapping.get("pdf_format"),
        full_page=mapping.get("full_page"),
        timeout_ms=timeout_ms,
    )


__all__ = [
    "BrowserConfig",
    "ConfigError",
    "DEFAULT_BROWSER_ARGS",
    "DocumentOptions",
    "MAXIMIZED_VIEWPORT",
    "Viewport",
    "browser_config_from_mapping",
    "load_config",
    "merge",
]

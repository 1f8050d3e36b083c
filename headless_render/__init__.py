"""Headless browser sessions and PDF composition helpers."""

from .browser import Browser, normalize_url
from .config import (
    DEFAULT_BROWSER_ARGS,
    BrowserConfig,
    ConfigError,
    DocumentOptions,
    Viewport,
    merge,
)
from .document import Document
from .errors import (
    HeadlessError,
    SessionClosedError,
    UnsupportedOperationError,
)

__all__ = [
    "Browser",
    "BrowserConfig",
    "ConfigError",
    "DEFAULT_BROWSER_ARGS",
    "Document",
    "DocumentOptions",
    "HeadlessError",
    "SessionClosedError",
    "UnsupportedOperationError",
    "Viewport",
    "merge",
    "normalize_url",
]

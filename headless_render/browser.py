"""Headless Chromium session facade built on Playwright's sync API."""

from __future__ import annotations

import logging
import math
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Optional

try:
    from playwright.sync_api import (  # type: ignore[import-not-found]
        Browser as PlaywrightBrowser,
        Page,
        Playwright,
        sync_playwright,
    )
except ImportError as exc:  # pragma: no cover - surfacing missing dependency
    raise SystemExit(
        "Missing dependency 'playwright'. Install with pip install playwright "
        "&& playwright install"
    ) from exc

from .config import MAXIMIZED_VIEWPORT, BrowserConfig, Viewport, merge
from .errors import SessionClosedError
from .extract import html_to_markdown, html_to_text
from .paths import ScopedTempDir, output_path, resolve_output_dir

logger = logging.getLogger(__name__)

BLANK_URL = "about:blank"
DEFAULT_SCHEME = "https://"


def normalize_url(url: str) -> str:
    """Prefix ``https://`` unless the URL already names http or https."""

    if "http://" not in url and "https://" not in url:
        return DEFAULT_SCHEME + url
    return url


def _viewport_from_size(size: Optional[dict[str, Any]]) -> Optional[Viewport]:
    if not size:
        return None
    return Viewport(width=int(size["width"]), height=int(size["height"]))


class Browser:
    """One Chromium process, one page and one scoped temporary directory.

    Navigation and geometry methods return the session so calls chain;
    exports return the written path. Use ``Browser.launch`` to create a
    session and ``quit()`` (or a ``with`` block) to release it.
    """

    def __init__(
        self,
        output_dir: Optional[str | Path],
        playwright: Playwright,
        browser: PlaywrightBrowser,
        page: Page,
        *,
        config: BrowserConfig,
    ) -> None:
        self._tmp_dir = ScopedTempDir()
        self._output_dir = resolve_output_dir(output_dir, self._tmp_dir.path)
        self._playwright = playwright
        self._browser = browser
        self._page = page
        self._closed = False
        self.config = config
        self.url: Optional[str] = None
        self.initial_viewport = _viewport_from_size(page.viewport_size)

    @classmethod
    def launch(
        cls,
        output_dir: Optional[str | Path] = "",
        config: Optional[BrowserConfig] = None,
        **overrides: Any,
    ) -> "Browser":
        """Start Chromium and open a page; ``overrides`` win over ``config``."""

        resolved = merge(config or BrowserConfig(), **overrides)
        launch_options: dict[str, Any] = {
            "headless": resolved.headless,
            "args": list(resolved.args),
        }
        if resolved.executable_path:
            launch_options["executable_path"] = resolved.executable_path

        with ExitStack() as stack:
            playwright = sync_playwright().start()
            stack.callback(playwright.stop)
            browser = playwright.chromium.launch(**launch_options)
            stack.callback(browser.close)
            if resolved.viewport is None:
                page = browser.new_page(no_viewport=True)
            else:
                page = browser.new_page(viewport=resolved.viewport.as_dict())
            if resolved.timeout_ms is not None:
                page.set_default_timeout(resolved.timeout_ms)
            session = cls(output_dir, playwright, browser, page, config=resolved)
            stack.pop_all()

        logger.info("Launched headless browser (output: %s)", session.output_dir)
        return session

    @property
    def tmp_dir(self) -> Path:
        return self._tmp_dir.path

    @property
    def output_dir(self) -> str:
        return self._output_dir

    @property
    def console_output(self) -> str:
        return self._output_dir

    @property
    def closed(self) -> bool:
        return self._closed

    def _require_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Browser session has been closed")

    @property
    def page(self) -> Page:
        self._require_open()
        return self._page

    def version(self) -> str:
        """Return the Chromium version string."""

        self._require_open()
        return self._browser.version

    def viewport(self) -> Optional[Viewport]:
        """Return the current page viewport, or None when unconstrained."""

        return _viewport_from_size(self.page.viewport_size)

    def visit(self, url: str) -> "Browser":
        """Browse to ``url``, assuming https when no scheme is given."""

        url = normalize_url(url)
        self.url = url
        logger.debug("Navigating to %s", url)
        self.page.goto(url)
        return self

    def blank(self) -> "Browser":
        """Navigate to the empty ``about:blank`` page."""

        self.page.goto(BLANK_URL)
        return self

    def refresh(self) -> "Browser":
        """Reload the current page."""

        self.page.reload()
        return self

    def back(self) -> "Browser":
        """Navigate to the previous page in history."""

        self.page.go_back()
        return self

    def forward(self) -> "Browser":
        """Navigate to the next page in history."""

        self.page.go_forward()
        return self

    def maximize(self) -> "Browser":
        """Set the viewport to 1600x1200 pixels."""

        return self.resize(MAXIMIZED_VIEWPORT.width, MAXIMIZED_VIEWPORT.height)

    def resize(self, width: int, height: int) -> "Browser":
        """Set the page viewport to ``width`` x ``height`` pixels."""

        if width <= 0 or height <= 0:
            raise ValueError(
                f"Viewport dimensions must be positive, got {width}x{height}"
            )
        self.page.set_viewport_size({"width": int(width), "height": int(height)})
        return self

    def fit_content(self) -> "Browser":
        """Grow or shrink the viewport to the body's bounding box."""

        body = self.page.query_selector("body")
        if body is None:
            return self
        box = body.bounding_box()
        if not box:
            return self
        width = max(1, math.ceil(box["width"]))
        height = max(1, math.ceil(box["height"]))
        logger.debug("Fitting viewport to content: %sx%s", width, height)
        return self.resize(width, height)

    def title(self) -> str:
        """Return the page title."""

        return self.page.title()

    def content(self) -> str:
        """Return the serialized HTML of the page."""

        return self.page.content()

    def html(self, markup: str) -> "Browser":
        """Replace the page document with ``markup``."""

        self.page.set_content(markup)
        return self

    def text(self) -> str:
        """Return the visible text of the current page."""

        return html_to_text(self.content())

    def markdown(self) -> str:
        """Return the current page converted to Markdown."""

        return html_to_markdown(self.content())

    def pdf(self, file: str = "download.pdf", format: Optional[str] = None) -> str:
        """Print the page to ``<output_dir>/<file>`` and return that path."""

        target = output_path(self._output_dir, file)
        self.page.pdf(path=target, format=format or self.config.pdf_format)
        logger.info("PDF written: %s", target)
        return target

    def screenshot(
        self, file: str = "screenshot.png", full_page: Optional[bool] = None
    ) -> str:
        """Capture the page to ``<output_dir>/<file>`` and return that path."""

        target = output_path(self._output_dir, file)
        self.page.screenshot(
            path=target,
            full_page=self.config.full_page if full_page is None else full_page,
        )
        logger.info("Screenshot written: %s", target)
        return target

    def quit(self) -> None:
        """Close the browser and remove the temporary directory.

        Safe to call more than once. The temporary directory is removed even
        when shutting down the browser raises.
        """

        if self._closed:
            return
        self._closed = True
        try:
            try:
                self._browser.close()
            finally:
                self._playwright.stop()
        finally:
            self._tmp_dir.cleanup()
        logger.info("Closed headless browser")

    close = quit

    def __enter__(self) -> "Browser":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.quit()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Browser {state} url={self.url!r} output={self._output_dir!r}>"


__all__ = ["BLANK_URL", "Browser", "normalize_url"]

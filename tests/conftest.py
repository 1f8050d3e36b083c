"""Fake Playwright objects standing in for a real Chromium process."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest

from headless_render import browser as browser_module


class FakeElement:
    def __init__(self, box: Optional[dict[str, float]]) -> None:
        self._box = box

    def bounding_box(self) -> Optional[dict[str, float]]:
        return self._box


class FakePage:
    def __init__(self, viewport: Optional[dict[str, int]]) -> None:
        self.viewport_size = viewport
        self.calls: list[tuple[str, Any]] = []
        self.markup = "<html><head><title>Fake</title></head><body></body></html>"
        self.body_box: Optional[dict[str, float]] = {
            "x": 0,
            "y": 0,
            "width": 800,
            "height": 2400,
        }
        self.default_timeout: Optional[int] = None

    def goto(self, url: str) -> None:
        self.calls.append(("goto", url))

    def reload(self) -> None:
        self.calls.append(("reload", None))

    def go_back(self) -> None:
        self.calls.append(("go_back", None))

    def go_forward(self) -> None:
        self.calls.append(("go_forward", None))

    def set_viewport_size(self, size: dict[str, int]) -> None:
        self.calls.append(("set_viewport_size", size))
        self.viewport_size = dict(size)

    def set_default_timeout(self, timeout: int) -> None:
        self.default_timeout = timeout

    def query_selector(self, selector: str) -> Optional[FakeElement]:
        if selector == "body" and self.body_box is not None:
            return FakeElement(self.body_box)
        return None

    def title(self) -> str:
        return "Fake"

    def content(self) -> str:
        return self.markup

    def set_content(self, html: str) -> None:
        self.calls.append(("set_content", html))
        self.markup = html

    def pdf(self, *, path: str, format: str) -> bytes:
        self.calls.append(("pdf", {"path": path, "format": format}))
        Path(path).write_bytes(b"%PDF-1.4 fake")
        return b"%PDF-1.4 fake"

    def screenshot(self, *, path: str, full_page: bool) -> bytes:
        self.calls.append(("screenshot", {"path": path, "full_page": full_page}))
        Path(path).write_bytes(b"\x89PNG fake")
        return b"\x89PNG fake"


class FakeBrowser:
    version = "120.0.6099.28"

    def __init__(self) -> None:
        self.closed = False
        self.page: Optional[FakePage] = None
        self.page_options: dict[str, Any] = {}
        self.close_error: Optional[Exception] = None
        self.new_page_error: Optional[Exception] = None

    def new_page(self, **options: Any) -> FakePage:
        self.page_options = options
        if self.new_page_error is not None:
            raise self.new_page_error
        viewport = None if options.get("no_viewport") else options.get("viewport")
        self.page = FakePage(viewport)
        return self.page

    def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class FakeChromium:
    def __init__(self, engine: "FakePlaywright") -> None:
        self._engine = engine

    def launch(self, **options: Any) -> FakeBrowser:
        self._engine.launch_options = options
        if self._engine.launch_error is not None:
            raise self._engine.launch_error
        self._engine.browser = FakeBrowser()
        self._engine.browser.new_page_error = self._engine.new_page_error
        return self._engine.browser


class FakePlaywright:
    def __init__(self) -> None:
        self.launch_options: dict[str, Any] = {}
        self.launch_error: Optional[Exception] = None
        self.new_page_error: Optional[Exception] = None
        self.browser: Optional[FakeBrowser] = None
        self.stopped = False
        self.chromium = FakeChromium(self)

    def stop(self) -> None:
        self.stopped = True


class FakeContextManager:
    def __init__(self, engine: FakePlaywright) -> None:
        self._engine = engine

    def start(self) -> FakePlaywright:
        return self._engine


@pytest.fixture
def engine(monkeypatch: pytest.MonkeyPatch) -> FakePlaywright:
    fake = FakePlaywright()
    monkeypatch.setattr(
        browser_module, "sync_playwright", lambda: FakeContextManager(fake)
    )
    return fake

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from playwright.async_api import Error as PlaywrightError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake-image-data"


class FakeElement:
    def __init__(self, text: str | None) -> None:
        self._text = text

    async def text_content(self) -> str | None:
        return self._text


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str) -> None:
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    def _check(self) -> None:
        if self.selector not in self.page.elements:
            raise PlaywrightError(f"Timeout 30000ms exceeded waiting for locator('{self.selector}')")

    async def click(self) -> None:
        self._check()
        self.page.clicked.append(self.selector)

    async def press_sequentially(self, text: str) -> None:
        self._check()
        self.page.typed.append((self.selector, text))


class FakePage:
    def __init__(self, engine: "FakePlaywright") -> None:
        self.engine = engine
        self.url = "about:blank"
        self.viewport: dict | None = None
        self.gotos: list[tuple[str, str, int]] = []
        self.clicked: list[str] = []
        self.typed: list[tuple[str, str]] = []
        self.screenshots: list[tuple[str, bool]] = []

    @property
    def elements(self) -> dict[str, str | None]:
        return self.engine.elements

    async def set_viewport_size(self, size: dict) -> None:
        self.viewport = size

    async def goto(self, url: str, wait_until: str = "load", timeout: int = 0) -> None:
        self.gotos.append((url, wait_until, timeout))
        if url in self.engine.unreachable:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.url = url

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def query_selector(self, selector: str) -> FakeElement | None:
        if selector not in self.elements:
            return None
        return FakeElement(self.elements[selector])

    async def screenshot(self, path: str, full_page: bool = False) -> None:
        Path(path).write_bytes(PNG_BYTES)
        self.screenshots.append((path, full_page))


class FakeBrowser:
    def __init__(self, engine: "FakePlaywright", headless: bool) -> None:
        self.engine = engine
        self.headless = headless
        self.closed = False
        self.pages: list[FakePage] = []

    async def new_page(self) -> FakePage:
        page = FakePage(self.engine)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True


class FakeChromium:
    def __init__(self, engine: "FakePlaywright") -> None:
        self.engine = engine

    async def launch(self, headless: bool = True, args: list[str] | None = None) -> FakeBrowser:
        if self.engine.launch_error:
            raise PlaywrightError(self.engine.launch_error)
        browser = FakeBrowser(self.engine, headless)
        self.engine.browsers.append(browser)
        return browser


class FakeDriver:
    def __init__(self, engine: "FakePlaywright") -> None:
        self.chromium = FakeChromium(engine)
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class FakePlaywright:
    """Stands in for ``async_playwright``: calling it returns the starter."""

    def __init__(self) -> None:
        self.drivers: list[FakeDriver] = []
        self.browsers: list[FakeBrowser] = []
        self.elements: dict[str, str | None] = {":focus": ""}
        self.unreachable: set[str] = set()
        self.launch_error: str | None = None

    def __call__(self) -> "FakePlaywright":
        return self

    async def start(self) -> FakeDriver:
        driver = FakeDriver(self)
        self.drivers.append(driver)
        return driver

    @property
    def open_browsers(self) -> list[FakeBrowser]:
        return [b for b in self.browsers if not b.closed]


@pytest.fixture
def fake_playwright() -> FakePlaywright:
    return FakePlaywright()

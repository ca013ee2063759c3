"""
BrowserSession: the one Chromium browser/page pair shared by every tool call.

Lifecycle
---------
* ``open()`` always starts from a clean slate: an already-open browser is
  closed before the new one is launched, so at most one browser exists.
* ``close()`` tears down page, browser and the Playwright driver and is safe to
  call repeatedly.
* Every other action needs an open page and raises NoActiveSessionError
  otherwise.

Playwright errors are re-raised as BrowserToolError with the engine's message.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .errors import BrowserToolError, NoActiveSessionError

log = logging.getLogger("webpilot.browser")

_LAUNCH_ARGS = ["--start-maximized"]


class BrowserSession:
    def __init__(
        self,
        *,
        viewport: tuple[int, int] = (1920, 1080),
        navigation_timeout_ms: int = 30000,
        driver_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.viewport = {"width": viewport[0], "height": viewport[1]}
        self.navigation_timeout_ms = navigation_timeout_ms
        self._driver_factory = driver_factory
        self._driver: Any = None
        self._browser: Any = None
        self._page: Any = None

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    @property
    def has_page(self) -> bool:
        return self._page is not None

    @property
    def current_url(self) -> str | None:
        return self._page.url if self._page is not None else None

    def _require_page(self) -> Any:
        if self._page is None:
            raise NoActiveSessionError()
        return self._page

    async def open(self, url: str, *, headless: bool = False) -> None:
        await self.close()
        try:
            self._driver = await self._driver_factory().start()
            self._browser = await self._driver.chromium.launch(headless=headless, args=_LAUNCH_ARGS)
            self._page = await self._browser.new_page()
            await self._page.set_viewport_size(self.viewport)
        except PlaywrightError as exc:
            await self._discard()
            raise BrowserToolError(f"Could not launch browser: {exc.message}") from exc
        except Exception:
            await self._discard()
            raise
        log.info("browser launched (headless=%s)", headless)
        # A failed first navigation leaves the browser open for another attempt.
        await self._goto(url)

    async def navigate(self, url: str) -> None:
        self._require_page()
        await self._goto(url)

    async def _goto(self, url: str) -> None:
        page = self._require_page()
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)
        except PlaywrightError as exc:
            raise BrowserToolError(f"Navigation to {url} failed: {exc.message}") from exc

    async def click(self, selector: str) -> None:
        page = self._require_page()
        try:
            await page.locator(selector).first.click()
        except PlaywrightError as exc:
            raise BrowserToolError(f"Click on {selector} failed: {exc.message}") from exc

    async def type(self, selector: str, text: str) -> None:
        page = self._require_page()
        try:
            await page.locator(selector).first.press_sequentially(text)
        except PlaywrightError as exc:
            raise BrowserToolError(f"Typing into {selector} failed: {exc.message}") from exc

    async def screenshot(self, path: str, *, full_page: bool = False) -> str:
        page = self._require_page()
        target = Path(path).expanduser()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(target), full_page=full_page)
        except OSError as exc:
            raise BrowserToolError(f"Could not write screenshot to {target}: {exc}") from exc
        except PlaywrightError as exc:
            raise BrowserToolError(f"Screenshot failed: {exc.message}") from exc
        return str(target)

    async def get_text(self, selector: str) -> str:
        page = self._require_page()
        try:
            element = await page.query_selector(selector)
            if element is None:
                raise BrowserToolError(f"No element matches selector: {selector}")
            return await element.text_content() or ""
        except PlaywrightError as exc:
            raise BrowserToolError(f"Reading text of {selector} failed: {exc.message}") from exc

    async def close(self) -> bool:
        """Close the browser if one is open. Returns True when something was closed."""
        if self._browser is None and self._driver is None:
            return False
        await self._discard()
        log.info("browser closed")
        return True

    async def _discard(self) -> None:
        browser, driver = self._browser, self._driver
        self._page = None
        self._browser = None
        self._driver = None
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as exc:
                log.warning("browser did not close cleanly: %s", exc.message)
        if driver is not None:
            try:
                await driver.stop()
            except PlaywrightError as exc:
                log.warning("playwright driver did not stop cleanly: %s", exc.message)

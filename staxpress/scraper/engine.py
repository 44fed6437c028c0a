"""Shared headless browser used for table-of-contents discovery."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from ..exceptions import EngineLaunchError

logger = logging.getLogger(__name__)

# Chromium flags needed when running inside containers.
LAUNCH_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")

Launcher = Callable[[], Awaitable[Any]]


def _disconnected(launch: asyncio.Future[Any]) -> bool:
    """Whether ``launch`` produced a browser that is no longer connected."""

    if not launch.done() or launch.cancelled() or launch.exception():
        return False
    return not launch.result().is_connected()


class EngineManager:
    """Own a single lazily launched browser shared by all jobs.

    Concurrent callers of :meth:`acquire` during startup await the same
    launch. Each navigation gets its own browser context through
    :meth:`page`, closed again whatever the outcome.

    Args:
        headless: Run Chromium without a window.
        launcher: Coroutine function returning a browser; replaces the
            Playwright launch, mainly for tests.
    """

    def __init__(
        self, *, headless: bool = True, launcher: Launcher | None = None
    ) -> None:
        self.headless = headless
        self._launcher = launcher or self._launch_chromium
        self._launch: asyncio.Future[Any] | None = None
        self._playwright: Playwright | None = None

    async def _launch_chromium(self) -> Browser:
        """Start Playwright and launch Chromium."""

        # The driver is stopped again when Chromium fails to start.
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=self.headless, args=list(LAUNCH_ARGS)
            )
        except BaseException:
            await playwright.stop()
            raise
        self._playwright = playwright
        logger.info("Browser launched")
        return browser

    @property
    def launched(self) -> bool:
        """Whether a launch has been started and not released."""

        return self._launch is not None

    async def acquire(self) -> Any:  # noqa: ANN401
        """Return the shared browser, launching it on first use.

        Raises:
            EngineLaunchError: When the browser cannot be started. The failed
                launch is forgotten so a later call tries again.
        """

        # A browser that crashed or was closed underneath us is dropped.
        stale = None
        if self._launch is not None and _disconnected(self._launch):
            logger.warning("Browser disconnected; launching a new one")
            self._launch = None
            stale, self._playwright = self._playwright, None

        # The first caller starts the launch; later ones await it.
        if self._launch is None:
            self._launch = asyncio.ensure_future(self._launcher())
        launch = self._launch

        if stale is not None:
            await stale.stop()

        try:
            # Shielded so a cancelled caller does not abort the shared launch.
            return await asyncio.shield(launch)
        except (PlaywrightError, OSError) as exc:
            if self._launch is launch:
                self._launch = None
            raise EngineLaunchError(f"Cannot launch browser: {exc}") from exc

    async def release(self) -> None:
        """Close the browser and stop Playwright; no-op when not launched."""

        # Forget the launch first so new callers start a fresh one.
        launch, self._launch = self._launch, None
        if launch is not None:
            try:
                browser = await launch
            except (PlaywrightError, OSError):
                logger.debug("Browser never started; nothing to close")
            else:
                try:
                    await browser.close()
                except PlaywrightError as exc:
                    logger.warning("Error while closing browser: %s", exc)
                logger.info("Browser released")

        # The driver outlives the browser and is stopped last.
        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            await playwright.stop()

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Yield a page inside a fresh browser context.

        The context, and with it the page, is closed on exit even when the
        navigation failed.
        """

        # A context per page keeps cookies and storage apart.
        browser = await self.acquire()
        context = await browser.new_context()
        try:
            yield await context.new_page()
        finally:
            try:
                await context.close()
            except PlaywrightError as exc:
                logger.warning("Error while closing browser context: %s", exc)

    async def __aenter__(self) -> EngineManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.release()

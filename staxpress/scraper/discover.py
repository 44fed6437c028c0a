"""Retrieve the table of contents from a rendered book page."""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..exceptions import DiscoveryNavigationError, DiscoveryTimeout
from .engine import EngineManager

logger = logging.getLogger(__name__)

# Button that opens the table-of-contents sidebar.
SHOW_TOC_SELECTOR = ".show-toc"
TOC_SELECTOR = ".table-of-contents"

DISCOVERY_TIMEOUT = 60.0


async def get_table_of_contents(
    url: str, engine: EngineManager, timeout: float = DISCOVERY_TIMEOUT
) -> str:
    """Open ``url``, reveal the table of contents and return its markup.

    Args:
        url: Any page of the book.
        engine: Manager providing the shared browser.
        timeout: Ceiling in seconds for navigation and for each wait.

    Returns:
        Outer HTML of the table-of-contents element.

    Raises:
        DiscoveryTimeout: When the page or an element did not show up in time.
        DiscoveryNavigationError: When the browser failed to open a context
            or to load the page.
        EngineLaunchError: When the browser could not be started.
    """

    timeout_ms = timeout * 1000

    # Context and page creation fail like navigation on a dead browser.
    try:
        async with engine.page() as page:
            logger.info("Opening %s", url)
            await page.goto(
                url, wait_until="domcontentloaded", timeout=timeout_ms
            )

            # The sidebar is collapsed until its toggle is clicked.
            await page.wait_for_selector(
                SHOW_TOC_SELECTOR, state="visible", timeout=timeout_ms
            )
            await page.click(SHOW_TOC_SELECTOR, timeout=timeout_ms)
            await page.wait_for_selector(
                TOC_SELECTOR, state="visible", timeout=timeout_ms
            )

            return await page.eval_on_selector(
                TOC_SELECTOR, "el => el.outerHTML"
            )
    except PlaywrightTimeoutError as exc:
        raise DiscoveryTimeout(
            f"Table of contents not ready after {timeout:g}s: {url}"
        ) from exc
    except PlaywrightError as exc:
        raise DiscoveryNavigationError(f"Cannot load {url}: {exc}") from exc

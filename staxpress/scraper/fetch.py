"""Retrieve and restructure individual subsection pages."""

from __future__ import annotations

import asyncio
import logging

import aiohttp
from attrs import define, evolve

from ..allow_list import AllowList
from ..exceptions import (
    SubsectionError,
    SubsectionFetchError,
    SubsectionFetchTimeout,
    SubsectionTransformError,
)
from ..parser.subsection import Subsection
from ..transform import Attribution, transform_content

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 10.0


@define(slots=True, frozen=True)
class SubsectionResult:
    """Outcome of loading one subsection.

    Exactly one of ``content`` and ``error`` is set.
    """

    subsection: Subsection
    content: str | None = None
    error: SubsectionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def collapse(self) -> Subsection:
        """Return the subsection carrying its content, or ``""`` on error."""

        return evolve(self.subsection, content=self.content or "")


async def fetch_subsection(
    session: aiohttp.ClientSession,
    url: str,
    timeout: float = FETCH_TIMEOUT,
) -> str:
    """Download the page at ``url``.

    Args:
        session: Client session used for the request.
        url: Absolute page URL.
        timeout: Total time in seconds allowed for the response.

    Returns:
        Decoded response body.

    Raises:
        SubsectionFetchTimeout: When the deadline elapsed. The request is
            cancelled.
        SubsectionFetchError: On an error status or a client failure.
    """

    # The deadline covers connecting and reading the whole body.
    try:
        async with session.get(
            url, timeout=aiohttp.ClientTimeout(total=timeout)
        ) as response:
            # Error pages are never passed on to the transform.
            if response.status >= 400:
                raise SubsectionFetchError(url, f"HTTP {response.status}")
            return await response.text(errors="replace")
    except asyncio.TimeoutError as exc:
        raise SubsectionFetchTimeout(
            url, f"no response within {timeout:g}s"
        ) from exc
    except aiohttp.ClientError as exc:
        reason = str(exc) or type(exc).__name__
        raise SubsectionFetchError(url, reason) from exc


async def load_subsection(
    session: aiohttp.ClientSession,
    subsection: Subsection,
    allow_list: AllowList,
    attribution: Attribution,
    timeout: float = FETCH_TIMEOUT,
) -> SubsectionResult:
    """Fetch and transform one subsection without raising for its failures.

    Returns:
        Result holding the transformed content or the subsection error.
    """

    # Entries without a link fail without a request.
    if not subsection.url:
        return SubsectionResult(
            subsection,
            error=SubsectionFetchError("", f"no link in {subsection.title!r}"),
        )

    # Download and transform failures stay local to this subsection.
    try:
        html = await fetch_subsection(session, subsection.url, timeout)
    except SubsectionError as exc:
        return SubsectionResult(subsection, error=exc)

    try:
        content = transform_content(html, subsection, allow_list, attribution)
    except SubsectionError as exc:
        return SubsectionResult(subsection, error=exc)
    except Exception as exc:  # noqa: BLE001
        # Malformed pages must not abort the rest of the book.
        logger.debug("Transform failed for %s", subsection.url, exc_info=True)
        return SubsectionResult(
            subsection,
            error=SubsectionTransformError(subsection.url, str(exc)),
        )

    return SubsectionResult(subsection, content=content)

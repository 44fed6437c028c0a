"""Run one textbook through discovery, loading and export."""

from __future__ import annotations

import asyncio
import logging

import aiohttp
from attrs import evolve

from ..allow_list import AllowList
from ..config import Settings
from ..export import build_pressbooks_xml
from ..parser import (
    Book,
    Part,
    book_landing_url,
    book_metadata_from_url,
    parse_toc,
)
from ..transform import Attribution
from .discover import get_table_of_contents
from .engine import EngineManager
from .fetch import load_subsection
from .governor import ConcurrencyGovernor

logger = logging.getLogger(__name__)


async def _load_part(
    part: Part,
    session: aiohttp.ClientSession,
    governor: ConcurrencyGovernor,
    allow_list: AllowList,
    attribution: Attribution,
    timeout: float,
) -> Part:
    """Load every subsection of ``part`` through the task gate."""

    # Each load waits for a slot of the task gate shared by all jobs.
    results = await asyncio.gather(
        *(
            governor.run_task(
                load_subsection(
                    session, subsection, allow_list, attribution, timeout
                )
            )
            for subsection in part.subsections
        )
    )

    # Failed subsections are reported and kept with empty content.
    for result in results:
        if result.error is not None:
            logger.warning(
                "Subsection %r left empty: %s",
                result.subsection.title,
                result.error,
            )

    return evolve(part, subsections=[result.collapse() for result in results])


async def scrape_book(
    url: str,
    *,
    engine: EngineManager,
    governor: ConcurrencyGovernor,
    allow_list: AllowList,
    settings: Settings,
    title: str | None = None,
) -> Book:
    """Discover the table of contents at ``url`` and load every subsection.

    Subsections that fail to load keep empty content; any other failure
    aborts the job.

    Args:
        url: Table-of-contents page of the book.
        engine: Browser manager used for discovery.
        governor: Limiter whose task gate bounds subsection loading.
        allow_list: Class and id names kept in transformed content.
        settings: Timeouts and attribution details.
        title: Book title overriding the one derived from ``url``.

    Returns:
        Book with parts and subsections in discovery order.
    """

    # Render the book page and read its table of contents.
    toc_html = await get_table_of_contents(
        url, engine, timeout=settings.discovery_timeout
    )
    parts = parse_toc(toc_html, base_url=url)
    logger.info(
        "Discovered %d parts, %d subsections",
        len(parts),
        sum(len(part.subsections) for part in parts),
    )

    # Attribution points at the landing page of the book.
    derived_title, slug = book_metadata_from_url(url)
    book_title = title or derived_title
    attribution = Attribution(
        book_title=book_title,
        book_url=book_landing_url(url),
        publisher=settings.publisher,
        license_url=settings.license_url,
        license_name=settings.license_name,
    )

    # Parts load concurrently; one session serves every request.
    async with aiohttp.ClientSession() as session:
        loaded = await asyncio.gather(
            *(
                _load_part(
                    part,
                    session,
                    governor,
                    allow_list,
                    attribution,
                    settings.fetch_timeout,
                )
                for part in parts
            )
        )

    return Book(title=book_title, slug=slug, parts=list(loaded))


async def run_job(
    url: str,
    *,
    engine: EngineManager,
    governor: ConcurrencyGovernor,
    allow_list: AllowList,
    settings: Settings,
    title: str | None = None,
) -> str:
    """Scrape the book at ``url`` under a job slot and export it.

    Returns:
        Pressbooks WXR document.

    Raises:
        JobRejected: When every job slot is taken.
    """

    # Rejected at once when every job slot is taken.
    async with governor.admit_job():
        book = await scrape_book(
            url,
            engine=engine,
            governor=governor,
            allow_list=allow_list,
            settings=settings,
            title=title,
        )

    # Export runs after the job slot has been released.
    return build_pressbooks_xml(book, site_url=settings.site_url)

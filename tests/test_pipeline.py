"""End-to-end tests for a scrape job with faked network and browser."""

from __future__ import annotations

import asyncio

import pytest
from conftest import PAGE_HTML, TOC_HTML, TOC_URL
from lxml import etree  # type: ignore[import-untyped]

from staxpress.allow_list import AllowList
from staxpress.config import Settings
from staxpress.exceptions import (
    DiscoveryTimeout,
    JobRejected,
    SubsectionFetchError,
    SubsectionFetchTimeout,
)
from staxpress.export import CONTENT_NS, WP_NS
from staxpress.parser import Book
from staxpress.scraper import ConcurrencyGovernor, fetch, pipeline

MISSING = "https://openstax.org/books/college-physics-2e/pages/1-2-units"


@pytest.fixture
def fake_network(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Serve the sample table of contents and pages; one page is missing."""

    fetched: list[str] = []

    # Discovery returns the sample markup without a browser.
    async def fake_toc(url: str, engine: object, timeout: float) -> str:
        return TOC_HTML

    # Every page resolves except the second subsection of part one.
    async def fake_fetch(session: object, url: str, timeout: float) -> str:
        fetched.append(url)
        if url == MISSING:
            raise SubsectionFetchError(url, "HTTP 404")
        return PAGE_HTML

    monkeypatch.setattr(pipeline, "get_table_of_contents", fake_toc)
    monkeypatch.setattr(fetch, "fetch_subsection", fake_fetch)
    return fetched


def _scrape(allow_list: AllowList, **kwargs: object) -> Book:
    # Discovery is faked, so no engine is needed.
    async def scenario() -> Book:
        return await pipeline.scrape_book(
            TOC_URL,
            engine=None,
            governor=ConcurrencyGovernor(),
            allow_list=allow_list,
            settings=Settings(),
            **kwargs,
        )

    return asyncio.run(scenario())


def test_scrape_book_assembles_parts(
    fake_network: list[str], allow_list: AllowList
) -> None:
    """Parts keep their order and failed subsections become empty."""

    book = _scrape(allow_list)

    assert book.title == "College Physics 2e"
    assert book.slug == "college-physics-2e"
    # The missing page is requested once like the others.
    assert [len(part.subsections) for part in book.parts] == [2, 1]
    assert len(fake_network) == 3

    # Loaded pages are transformed; the failed one is empty.
    physics, units = book.parts[0].subsections
    (displacement,) = book.parts[1].subsections
    assert "[latex]x^{2}[/latex]" in physics.content
    assert "1.1 Physics" in physics.content
    assert units.content == ""
    assert displacement.content.startswith("<main")


def test_scrape_book_title_override(
    fake_network: list[str], allow_list: AllowList
) -> None:
    """A caller supplied title replaces the derived one."""

    book = _scrape(allow_list, title="Physics for Everyone")

    assert book.title == "Physics for Everyone"
    assert "Physics for Everyone" in book.parts[0].subsections[0].content


def test_scrape_book_timeout_yields_empty_content(
    monkeypatch: pytest.MonkeyPatch,
    fake_network: list[str],
    allow_list: AllowList,
) -> None:
    """A subsection whose fetch times out keeps empty content."""

    async def slow_fetch(session: object, url: str, timeout: float) -> str:
        raise SubsectionFetchTimeout(url, f"no response within {timeout}s")

    # Every download runs out of time.
    monkeypatch.setattr(fetch, "fetch_subsection", slow_fetch)

    book = _scrape(allow_list)

    contents = [s.content for p in book.parts for s in p.subsections]
    assert contents == ["", "", ""]


def test_discovery_failure_aborts_job(
    monkeypatch: pytest.MonkeyPatch, allow_list: AllowList
) -> None:
    """Failures before any subsection is loaded propagate."""

    async def fake_toc(url: str, engine: object, timeout: float) -> str:
        raise DiscoveryTimeout("Table of contents not ready")

    # Discovery fails before any page is fetched.
    monkeypatch.setattr(pipeline, "get_table_of_contents", fake_toc)

    with pytest.raises(DiscoveryTimeout):
        _scrape(allow_list)


def test_run_job_exports_document(
    fake_network: list[str], allow_list: AllowList
) -> None:
    """The job produces a WXR document with parented chapters."""

    async def scenario() -> str:
        return await pipeline.run_job(
            TOC_URL,
            engine=None,
            governor=ConcurrencyGovernor(),
            allow_list=allow_list,
            settings=Settings(),
        )

    # Parse the document to inspect its items.
    rss = etree.fromstring(asyncio.run(scenario()).encode("utf-8"))
    items = rss.find("channel").findall("item")

    def wp(item: etree._Element, name: str) -> str:
        return item.findtext(f"{{{WP_NS}}}{name}")

    # Each part is followed by its chapters.
    assert [wp(i, "post_type") for i in items] == [
        "part",
        "chapter",
        "chapter",
        "part",
        "chapter",
    ]
    assert [wp(i, "post_id") for i in items] == [
        "100",
        "101",
        "102",
        "200",
        "201",
    ]
    assert [wp(i, "post_parent") for i in items] == [
        "0",
        "100",
        "100",
        "0",
        "200",
    ]
    # The failed subsection is exported with empty content.
    assert items[2].findtext(f"{{{CONTENT_NS}}}encoded") == ""
    assert "[latex]" in items[1].findtext(f"{{{CONTENT_NS}}}encoded")


def test_run_job_rejected_when_busy(allow_list: AllowList) -> None:
    """Jobs beyond capacity are refused before any work starts."""

    async def scenario() -> str:
        return await pipeline.run_job(
            TOC_URL,
            engine=None,
            # No job slot can ever be taken.
            governor=ConcurrencyGovernor(job_capacity=0),
            allow_list=allow_list,
            settings=Settings(),
        )

    with pytest.raises(JobRejected):
        asyncio.run(scenario())

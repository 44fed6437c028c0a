"""Tests for the Pressbooks WXR document builder."""

from datetime import datetime, timezone

from lxml import etree  # type: ignore[import-untyped]

from staxpress.export import CONTENT_NS, DC_NS, WP_NS, build_pressbooks_xml
from staxpress.parser import Book, Part, Subsection

NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
SITE = "https://example.pressbooks.pub/"


def _book() -> Book:
    # Two parts; the second has no title and no chapters.
    intro = Part(
        id=100,
        number="1",
        title="Introduction",
        slug="1",
        order=0,
        subsections=[
            Subsection(
                id=101,
                title="1.1 Physics",
                url="https://x/1-1-physics",
                slug="1-1-physics",
                order=0,
                content="<main><p>Physics</p></main>",
            ),
            Subsection(
                id=102,
                title="1.2 Units",
                url="https://x/1-2-units",
                slug="1-2-units",
                order=1,
            ),
        ],
    )
    preface = Part(
        id=200, number="Preface", title=None, slug="preface", order=1
    )
    return Book(
        title="College Physics 2e", slug="physics", parts=[intro, preface]
    )


def _parse(xml: str) -> etree._Element:
    return etree.fromstring(xml.encode("utf-8"))


def _wp(item: etree._Element, name: str) -> str:
    return item.findtext(f"{{{WP_NS}}}{name}")


def test_document_root_and_channel() -> None:
    """The feed declares the WXR namespaces and channel metadata."""

    xml = build_pressbooks_xml(_book(), site_url=SITE, now=NOW)
    rss = _parse(xml)

    assert xml.startswith("<?xml version='1.0' encoding='UTF-8'?>")
    assert rss.tag == "rss"
    assert rss.get("version") == "2.0"
    assert set(rss.nsmap) == {"excerpt", "content", "dc", "wp"}

    # Channel metadata describes the book.
    channel = rss.find("channel")
    assert channel.findtext("title") == "College Physics 2e"
    assert channel.findtext("link") == "https://example.pressbooks.pub/physics"
    assert channel.findtext("description") == (
        "Imported version of College Physics 2e"
    )
    assert channel.findtext("language") == "en-US"
    assert _wp(channel, "wxr_version") == "1.2"
    assert _wp(channel, "base_site_url") == SITE

    # A single chapter-type term is declared.
    term = channel.find(f"{{{WP_NS}}}term")
    assert _wp(term, "term_id") == "1"
    assert _wp(term, "term_taxonomy") == "chapter-type"
    assert _wp(term, "term_slug") == "standard"
    assert _wp(term, "term_name") == "Standard"


def test_parts_are_followed_by_their_chapters() -> None:
    """Each part item precedes the chapter items parented to it."""

    channel = _parse(
        build_pressbooks_xml(_book(), site_url=SITE, now=NOW)
    ).find("channel")
    items = channel.findall("item")

    # Parts come first, then their chapters.
    assert [_wp(i, "post_type") for i in items] == [
        "part",
        "chapter",
        "chapter",
        "part",
    ]
    assert [_wp(i, "post_id") for i in items] == ["100", "101", "102", "200"]
    assert [_wp(i, "post_parent") for i in items] == ["0", "100", "100", "0"]
    assert [_wp(i, "menu_order") for i in items] == ["0", "0", "1", "1"]
    assert [_wp(i, "status") for i in items] == [
        "publish",
        "web-only",
        "web-only",
        "publish",
    ]


def test_item_fields() -> None:
    """Chapters carry links, dates, content and their category."""

    xml = build_pressbooks_xml(_book(), site_url=SITE, now=NOW)
    part, chapter, empty, preface = _parse(xml).find("channel").findall(
        "item"
    )

    assert part.findtext("link") == (
        "https://example.pressbooks.pub/physics/part/1/"
    )
    assert chapter.findtext("title") == "1.1 Physics"
    assert chapter.findtext("link") == (
        "https://example.pressbooks.pub/physics/chapter/1-1-physics/"
    )
    assert chapter.findtext("pubDate") == "Thu, 02 Jan 2025 03:04:05 GMT"
    assert chapter.findtext(f"{{{DC_NS}}}creator") == "admin"
    guid = chapter.find("guid")
    assert guid.get("isPermaLink") == "false"
    assert guid.text == "https://example.pressbooks.pub/physics/?p=101"
    assert chapter.findtext(f"{{{CONTENT_NS}}}encoded") == (
        "<main><p>Physics</p></main>"
    )
    assert _wp(chapter, "post_date") == "2025-01-02 03:04:05"
    assert _wp(chapter, "post_date_gmt") == "2025-01-02 03:04:05"
    assert _wp(chapter, "post_name") == "1-1-physics"
    assert _wp(chapter, "is_sticky") == "0"

    # Only chapters are categorized.
    category = chapter.find("category")
    assert category.get("domain") == "chapter-type"
    assert category.get("nicename") == "standard"
    assert category.text == "Standard"
    assert part.find("category") is None

    # Chapters without content and parts without title.
    assert empty.findtext(f"{{{CONTENT_NS}}}encoded") == ""
    assert preface.findtext("title") == "Preface"


def test_content_is_wrapped_in_cdata() -> None:
    """Markup payloads are emitted as CDATA sections."""

    xml = build_pressbooks_xml(_book(), site_url=SITE, now=NOW)

    assert "<![CDATA[<main><p>Physics</p></main>]]>" in xml
    assert "<title><![CDATA[1.1 Physics]]></title>" in xml


def test_unsafe_text_survives() -> None:
    """CDATA terminators are escaped and illegal characters dropped."""

    chapter = Subsection(
        id=101,
        title="Odd\x0b title",
        url="https://x/odd",
        slug="odd",
        order=0,
        content="<p>a]]>b</p>",
    )
    part = Part(
        id=100, number="1", title="P", slug="1", order=0, subsections=[chapter]
    )
    book = Book(title="B", slug="b", parts=[part])

    items = _parse(build_pressbooks_xml(book, site_url=SITE, now=NOW)).find(
        "channel"
    ).findall("item")

    # The vertical tab is not allowed in XML.
    assert items[1].findtext("title") == "Odd title"
    assert items[1].findtext(f"{{{CONTENT_NS}}}encoded") == "<p>a]]>b</p>"

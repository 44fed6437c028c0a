"""Build the Pressbooks WXR import document for a book."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import format_datetime

from lxml import etree  # type: ignore[import-untyped]

from .parser.book import Book
from .parser.part import Part
from .parser.subsection import Subsection

WXR_VERSION = "1.2"

EXCERPT_NS = "http://wordpress.org/export/1.2/excerpt/"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
DC_NS = "http://purl.org/dc/elements/1.1/"
WP_NS = "http://wordpress.org/export/1.2/"

NSMAP = {
    "excerpt": EXCERPT_NS,
    "content": CONTENT_NS,
    "dc": DC_NS,
    "wp": WP_NS,
}

# Taxonomy term every chapter is filed under.
CHAPTER_TYPE_TAXONOMY = "chapter-type"
CHAPTER_TYPE_SLUG = "standard"
CHAPTER_TYPE_NAME = "Standard"

# Characters outside the XML 1.0 ``Char`` production.
_ILLEGAL_XML = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


def _clean(text: str) -> str:
    return _ILLEGAL_XML.sub("", text)


def _sub(
    parent: etree._Element, tag: str, text: object = None, **attrib: str
) -> etree._Element:
    """Append a child element with optional text."""

    child = etree.SubElement(parent, tag, attrib)
    if text is not None:
        child.text = _clean(str(text))
    return child


def _cdata(parent: etree._Element, tag: str, text: str) -> etree._Element:
    """Append a child element whose text is wrapped in a CDATA section."""

    child = etree.SubElement(parent, tag)
    text = _clean(text)

    # CDATA cannot contain its own terminator; plain text escaping is
    # equivalent for the importer.
    child.text = text if "]]>" in text else etree.CDATA(text)
    return child


def _wp(name: str) -> str:
    return f"{{{WP_NS}}}{name}"


def _add_item(
    channel: etree._Element,
    *,
    title: str,
    link: str,
    guid: str,
    post_id: int,
    slug: str,
    content: str,
    status: str,
    parent_id: int,
    order: int,
    post_type: str,
    pub_date: str,
    post_date: str,
) -> etree._Element:
    """Append one WXR ``item`` carrying the common post fields."""

    item = _sub(channel, "item")
    _cdata(item, "title", title)
    _sub(item, "link", link)
    _sub(item, "pubDate", pub_date)
    _sub(item, f"{{{DC_NS}}}creator", "admin")
    _sub(item, "guid", guid, isPermaLink="false")
    _sub(item, "description", "")
    _cdata(item, f"{{{CONTENT_NS}}}encoded", content)
    _cdata(item, f"{{{EXCERPT_NS}}}encoded", "")
    _sub(item, _wp("post_id"), post_id)
    _sub(item, _wp("post_date"), post_date)
    _sub(item, _wp("post_date_gmt"), post_date)
    _sub(item, _wp("post_name"), slug)
    _sub(item, _wp("status"), status)
    _sub(item, _wp("post_parent"), parent_id)
    _sub(item, _wp("menu_order"), order)
    _sub(item, _wp("post_type"), post_type)
    _sub(item, _wp("is_sticky"), 0)
    return item


def _add_part(
    channel: etree._Element,
    book_url: str,
    part: Part,
    pub_date: str,
    post_date: str,
) -> None:
    _add_item(
        channel,
        title=part.title or part.number,
        link=f"{book_url}/part/{part.slug}/",
        guid=f"{book_url}/?p={part.id}",
        post_id=part.id,
        slug=part.slug,
        content="",
        status="publish",
        parent_id=0,
        order=part.order,
        post_type="part",
        pub_date=pub_date,
        post_date=post_date,
    )


def _add_chapter(
    channel: etree._Element,
    book_url: str,
    part: Part,
    chapter: Subsection,
    pub_date: str,
    post_date: str,
) -> None:
    item = _add_item(
        channel,
        title=chapter.title,
        link=f"{book_url}/chapter/{chapter.slug}/",
        guid=f"{book_url}/?p={chapter.id}",
        post_id=chapter.id,
        slug=chapter.slug,
        content=chapter.content,
        status="web-only",
        parent_id=part.id,
        order=chapter.order,
        post_type="chapter",
        pub_date=pub_date,
        post_date=post_date,
    )
    _sub(
        item,
        "category",
        CHAPTER_TYPE_NAME,
        domain=CHAPTER_TYPE_TAXONOMY,
        nicename=CHAPTER_TYPE_SLUG,
    )


def build_pressbooks_xml(
    book: Book, *, site_url: str, now: datetime | None = None
) -> str:
    """Serialize ``book`` as a Pressbooks WXR import document.

    Each part becomes a ``part`` item immediately followed by a ``chapter``
    item for each of its subsections, parented to the part by id.

    Args:
        book: Fully assembled book.
        site_url: Base URL of the destination Pressbooks network.
        now: Timestamp used for publication dates; defaults to the current
            UTC time.

    Returns:
        Pretty printed XML document with declaration.
    """

    now = now or datetime.now(timezone.utc)
    pub_date = format_datetime(now.astimezone(timezone.utc), usegmt=True)
    post_date = now.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    site_url = site_url.rstrip("/")
    book_url = f"{site_url}/{book.slug}"

    rss = etree.Element("rss", nsmap=NSMAP, version="2.0")
    channel = _sub(rss, "channel")
    _sub(channel, "title", book.title)
    _sub(channel, "link", book_url)
    _sub(channel, "description", f"Imported version of {book.title}")
    _sub(channel, "language", "en-US")
    _sub(channel, _wp("wxr_version"), WXR_VERSION)
    _sub(channel, _wp("base_site_url"), f"{site_url}/")
    _sub(channel, _wp("base_blog_url"), book_url)

    term = _sub(channel, _wp("term"))
    _sub(term, _wp("term_id"), 1)
    _sub(term, _wp("term_taxonomy"), CHAPTER_TYPE_TAXONOMY)
    _sub(term, _wp("term_slug"), CHAPTER_TYPE_SLUG)
    _sub(term, _wp("term_name"), CHAPTER_TYPE_NAME)

    for part in book.parts:
        _add_part(channel, book_url, part, pub_date, post_date)
        for chapter in part.subsections:
            _add_chapter(
                channel, book_url, part, chapter, pub_date, post_date
            )

    return etree.tostring(
        rss, xml_declaration=True, encoding="UTF-8", pretty_print=True
    ).decode("utf-8")

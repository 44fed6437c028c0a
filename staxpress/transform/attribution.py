"""Attribution injection pass."""

from __future__ import annotations

from attrs import define
from bs4 import BeautifulSoup, Tag


@define(slots=True, frozen=True)
class Attribution:
    """Fixed parts of the attribution block appended to each page.

    Attributes:
        book_title: Title of the source book.
        book_url: Landing page of the source book.
        publisher: Name of the original publisher.
        license_url: Link to the content license.
        license_name: Human readable license name.
    """

    book_title: str
    book_url: str
    publisher: str
    license_url: str
    license_name: str


def _link(soup: BeautifulSoup, href: str, text: str) -> Tag:
    anchor = soup.new_tag("a", href=href)
    anchor.string = text
    return anchor


def inject_attribution(
    soup: BeautifulSoup,
    main: Tag,
    page_url: str,
    page_title: str,
    attribution: Attribution,
) -> None:
    """Append a separator and a license attribution for the page."""

    main.append(soup.new_tag("hr"))

    block = soup.new_tag("div")
    block.append('"')
    block.append(_link(soup, page_url, page_title))
    block.append('" from ')
    block.append(_link(soup, attribution.book_url, attribution.book_title))
    block.append(f" by {attribution.publisher} is licensed under a ")
    block.append(
        _link(soup, attribution.license_url, attribution.license_name)
    )
    block.append(".")
    main.append(block)

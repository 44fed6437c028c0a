"""Figure restructuring pass."""

from __future__ import annotations

from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from .markup import ClassList, set_inner_html


def _absolute(src: str, base_url: str) -> str:
    """Return ``src`` unchanged when absolute, otherwise resolved."""

    if urlparse(src).scheme in {"http", "https"}:
        return src
    return urljoin(base_url, src)


def restructure_figures(soup: BeautifulSoup, main: Tag, base_url: str) -> None:
    """Turn OpenStax figures into Pressbooks captioned figures.

    Lazy-loaded image sources become absolute ``src`` attributes, the figure
    gains the ``wp-caption aligncenter`` classes, and the caption container is
    replaced by a trailing ``figcaption.wp-caption-text``.

    Args:
        soup: Document owning ``main``.
        main: Main content region, modified in place.
        base_url: URL of the subsection page, used for relative sources.
    """

    for figure in main.select(".os-figure"):
        img = figure.find("img")
        if img is not None:
            src = img.get("data-lazy-src") or img.get("src")
            if src:
                img["src"] = _absolute(src, base_url)

        ClassList(figure).add("wp-caption", "aligncenter")

        caption = figure.select_one(".os-caption-container")
        if caption is None:
            continue

        figcaption = soup.new_tag("figcaption")
        ClassList(figcaption).add("wp-caption-text")
        set_inner_html(
            figcaption, caption.decode_contents().replace("\n", "").strip()
        )
        figure.append(figcaption)
        caption.decompose()

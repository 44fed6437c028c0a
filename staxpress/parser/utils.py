"""Utility functions for parsing table-of-contents structures."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

# Number of consecutive ids reserved for each part and its subsections.
ID_BLOCK_SIZE = 100

_NON_ALNUM = re.compile(r"[^a-z0-9]+", re.IGNORECASE)


def slugify(text: str) -> str:
    """Return a lowercase slug with non-alphanumeric runs collapsed to ``-``.

    Leading and trailing separators are dropped so the result is stable when
    applied to its own output.

    Args:
        text: Arbitrary label or path segment.

    Returns:
        Slug containing only ``a-z``, ``0-9`` and single hyphens.
    """

    return _NON_ALNUM.sub("-", text).strip("-").lower()


def slug_from_url(url: str) -> str:
    """Return the slug of the final path segment of ``url``."""

    # Ignore query and fragment, then take the last non-empty segment.
    path = urlparse(url).path.rstrip("/")
    return slugify(path.rsplit("/", 1)[-1])


def next_sibling_with_class(tag: Any, class_name: str) -> Any:  # noqa: ANN401
    """Return the first following sibling element carrying ``class_name``.

    Args:
        tag: Element to scan forward from.
        class_name: CSS class required on the sibling.

    Returns:
        The matching sibling or ``None`` when there is none.
    """

    # ``find_next_sibling`` skips text nodes and intervening elements.
    return tag.find_next_sibling(class_=class_name)


def book_metadata_from_url(url: str) -> tuple[str, str]:
    """Derive the book title and slug from an OpenStax page URL.

    ``https://openstax.org/books/college-physics-2e/pages/1-intro`` yields
    ``("College Physics 2e", "college-physics-2e")``. URLs without a
    ``/books/<slug>`` segment fall back to the host name.

    Args:
        url: Any page URL belonging to the book.

    Returns:
        Tuple of title and slug.
    """

    parsed = urlparse(url)
    segments = [s for s in parsed.path.split("/") if s]

    # Use the segment following ``books`` when present.
    if "books" in segments and segments.index("books") + 1 < len(segments):
        raw = segments[segments.index("books") + 1]
    else:
        raw = parsed.hostname or "book"

    slug = slugify(raw) or "book"

    # Capitalise words but keep edition markers such as ``2e`` untouched.
    title = " ".join(
        word if word[0].isdigit() else word.capitalize()
        for word in slug.split("-")
    )
    return title, slug


def book_landing_url(url: str) -> str:
    """Return the landing page URL of the book that ``url`` belongs to.

    ``https://openstax.org/books/college-physics-2e/pages/1-intro`` yields
    ``https://openstax.org/books/college-physics-2e/``. Without a
    ``/books/<slug>`` segment the site root is returned.
    """

    parsed = urlparse(url)
    segments = [s for s in parsed.path.split("/") if s]
    root = f"{parsed.scheme}://{parsed.netloc}"
    if "books" in segments and segments.index("books") + 1 < len(segments):
        return f"{root}/books/{segments[segments.index('books') + 1]}/"
    return f"{root}/"


def text_content(tag: Any) -> str:  # noqa: ANN401
    """Return the text of ``tag`` with whitespace runs collapsed.

    Text split across nested elements keeps the spaces between them, so
    ``<span>1.1</span> <span>Units</span>`` reads ``1.1 Units``.
    """

    return " ".join(tag.get_text().split())

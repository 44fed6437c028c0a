"""Parse table-of-contents markup into parts and subsections."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..exceptions import TocCapacityError
from .part import Part
from .subsection import Subsection
from .types import PartList, SubsectionList
from .utils import (
    ID_BLOCK_SIZE,
    next_sibling_with_class,
    slug_from_url,
    slugify,
    text_content,
)

logger = logging.getLogger(__name__)


def _parse_subsections(
    list_tag: Any,  # noqa: ANN401
    part_id: int,
    base_url: str | None,
) -> SubsectionList:
    """Create subsections from the items of a part's subsection list.

    Args:
        list_tag: ``ul`` element holding the subsection entries.
        part_id: Base of the id block reserved for the parent part.
        base_url: URL used to resolve relative links.

    Returns:
        Subsections in discovery order.
    """

    items = list_tag.find_all("li")

    # The id block has room for the part itself plus 99 subsections.
    if len(items) >= ID_BLOCK_SIZE:
        raise TocCapacityError(
            f"Part {part_id} lists {len(items)} subsections; "
            f"at most {ID_BLOCK_SIZE - 1} fit in one id block"
        )

    subsections: SubsectionList = []
    for order, item in enumerate(items):
        anchor = item.find("a")
        href = anchor.get("href", "") if anchor else ""
        url = urljoin(base_url, href) if base_url and href else href

        subsections.append(
            Subsection(
                id=part_id + order + 1,
                title=text_content(item),
                url=url,
                slug=slug_from_url(url),
                order=order,
            )
        )

    return subsections


def parse_toc(html: str, base_url: str | None = None) -> PartList:
    """Parse table-of-contents markup into the book hierarchy.

    Each ``.os-number`` marker directly under ``.table-of-contents`` starts a
    part. Its title and subsection list are the first following siblings
    with the ``os-text`` and ``no-bullets`` classes respectively.

    Args:
        html: Serialized table-of-contents element.
        base_url: Page URL used to resolve relative subsection links.

    Returns:
        Parts in discovery order with ids allocated in blocks of 100.
    """

    soup = BeautifulSoup(html, "html.parser")

    parts: PartList = []
    markers = soup.select(".table-of-contents > .os-number")
    for order, marker in enumerate(markers):
        part_id = (order + 1) * ID_BLOCK_SIZE
        number = text_content(marker)

        # Absent titles are tolerated; the export falls back to the number.
        title_tag = next_sibling_with_class(marker, "os-text")
        title = text_content(title_tag) if title_tag else None

        list_tag = next_sibling_with_class(marker, "no-bullets")
        subsections = (
            _parse_subsections(list_tag, part_id, base_url)
            if list_tag
            else []
        )

        if title is None or list_tag is None:
            logger.debug("Part %r is missing its title or list", number)

        parts.append(
            Part(
                id=part_id,
                number=number,
                title=title,
                slug=slugify(number),
                order=order,
                subsections=subsections,
            )
        )

    return parts

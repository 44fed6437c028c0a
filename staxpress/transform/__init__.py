"""Restructure a fetched subsection page for Pressbooks.

Each pass takes the parsed document and its main content region and mutates
the tree in place. :func:`transform_content` runs them in their required
order; the passes are importable on their own for testing.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from ..allow_list import AllowList
from ..exceptions import SubsectionTransformError
from ..parser.subsection import Subsection
from .attribution import Attribution, inject_attribution
from .equations import convert_math
from .figures import restructure_figures
from .markup import ClassList
from .sanitize import sanitize_attributes
from .textboxes import (
    restructure_check_understanding,
    restructure_learning_objectives,
    restructure_notes,
)

MAIN_SELECTOR = "main.page-content"

# Leading and trailing runs of whitespace and non-breaking spaces.
_EDGE_BLANKS = re.compile(r"^(?:&nbsp;|\s)+|(?:&nbsp;|\s)+$")


def transform_content(
    html: str,
    subsection: Subsection,
    allow_list: AllowList,
    attribution: Attribution,
) -> str:
    """Restructure a subsection page and return its main content markup.

    Args:
        html: Full page markup as fetched.
        subsection: Subsection the page belongs to.
        allow_list: Class and id names allowed to survive.
        attribution: Book and license details for the attribution block.

    Returns:
        Serialized main content region.

    Raises:
        SubsectionTransformError: When the page has no main content region.
    """

    soup = BeautifulSoup(html, "html.parser")
    main = soup.select_one(MAIN_SELECTOR)
    if main is None:
        raise SubsectionTransformError(
            subsection.url, f"no {MAIN_SELECTOR} element"
        )

    restructure_figures(soup, main, subsection.url)
    restructure_learning_objectives(soup, main)
    restructure_check_understanding(soup, main)
    restructure_notes(soup, main)
    inject_attribution(
        soup, main, subsection.url, subsection.title, attribution
    )
    sanitize_attributes(main, allow_list)
    convert_math(soup, main)

    return _EDGE_BLANKS.sub("", str(main))


__all__ = [
    "Attribution",
    "ClassList",
    "convert_math",
    "inject_attribution",
    "restructure_check_understanding",
    "restructure_figures",
    "restructure_learning_objectives",
    "restructure_notes",
    "sanitize_attributes",
    "transform_content",
]

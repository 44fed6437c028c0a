"""Math conversion pass."""

from __future__ import annotations

import copy

from bs4 import BeautifulSoup, Tag

from ..mathml import mathml_to_latex


def convert_math(soup: BeautifulSoup, main: Tag) -> None:
    """Replace each ``math`` element with ``<span>[latex]…[/latex]</span>``.
    """

    for math in main.find_all("math"):
        clone = copy.copy(math)

        # Content annotations would repeat the formula in the output.
        for annotation in clone.find_all("annotation-xml"):
            annotation.decompose()

        span = soup.new_tag("span")
        span.string = f"[latex]{mathml_to_latex(str(clone))}[/latex]"
        math.replace_with(span)

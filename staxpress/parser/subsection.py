"""Subsection page belonging to a part of the book."""

from __future__ import annotations

from attrs import define, field


@define(slots=True, frozen=True)
class Subsection:
    """Subsection page belonging to a part of the book.

    Attributes:
        id: Post identifier allocated inside the parent part's id block.
        title: Link text of the subsection in the table of contents.
        url: Absolute location of the rendered subsection page.
        slug: URL-safe name derived from the last path segment of ``url``.
        order: Zero-based position of the subsection within its part.
        content: Restructured markup; empty when retrieval failed.
    """

    id: int
    title: str
    url: str
    slug: str
    order: int
    content: str = field(default="", repr=False)

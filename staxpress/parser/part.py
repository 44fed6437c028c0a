"""Top-level division of the book."""

from __future__ import annotations

from attrs import define, field

from .types import SubsectionList


@define(slots=True, frozen=True)
class Part:
    """Top-level division of the book.

    Attributes:
        id: Base of the id block reserved for the part.
        number: Display label such as "1" or "Preface".
        title: Part title; ``None`` when the table of contents lacks one.
        slug: URL-safe name derived from ``number``.
        order: Zero-based position of the part in the book.
        subsections: Ordered subsections listed under the part.
    """

    id: int
    number: str
    title: str | None
    slug: str
    order: int
    subsections: SubsectionList = field(factory=list, repr=False)
